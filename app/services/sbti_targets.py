"""
Science Based Targets initiative (SBTi) target setting and tracking.

Targets are derived from a pathway's fixed annual reduction rate, compounded
over the baseline-to-target span. Progress is compared against a straight-line
expectation with a 20% tolerance band, which is a reporting convention of this
service rather than an SBTi rule.
"""

import logging
from datetime import datetime, timezone
from types import MappingProxyType
from typing import List, Optional

from app.schemas.carbon import EmissionTotals
from app.schemas.sbti import (
    Milestone,
    NetZeroPathway,
    NetZeroRecommendation,
    SBTiProgressEntry,
    SBTiTarget,
    TargetCalculation,
    TargetInput,
)
from app.services.errors import TargetValidationError, UnknownPathwayError
from app.services.utils import round_half_up

logger = logging.getLogger(__name__)

TARGET_TYPES = MappingProxyType(
    {
        "absolute": "Absolute emissions reduction",
        "intensity": "Emissions intensity reduction",
        "renewable": "Renewable energy procurement",
    }
)

PATHWAYS = MappingProxyType(
    {
        "1.5C": MappingProxyType(
            {
                "name": "1.5°C pathway",
                "annual_reduction": 0.045,
                "description": "Aligned with 1.5°C global warming limit",
            }
        ),
        "2C": MappingProxyType(
            {
                "name": "2°C pathway",
                "annual_reduction": 0.025,
                "description": "Aligned with well-below 2°C global warming limit",
            }
        ),
    }
)

VALID_SCOPES = ("scope1", "scope2", "scope1+2", "scope3")

SECTORS = MappingProxyType(
    {
        "mining": MappingProxyType(
            {"scope1_intensity": 2.5, "scope2_intensity": 1.8, "scope3_intensity": 4.2, "renewable_target": 50}
        ),
        "manufacturing": MappingProxyType(
            {"scope1_intensity": 1.8, "scope2_intensity": 2.1, "scope3_intensity": 3.5, "renewable_target": 60}
        ),
    }
)

MIN_TARGET_SPAN_YEARS = 5
MAX_YEARS_AHEAD = 15
ON_TRACK_TOLERANCE = 0.8

MILESTONE_INTERVAL = 5
MILESTONE_ACTIONS = MappingProxyType(
    {
        5: ("Implement energy efficiency programs", "Begin renewable energy procurement"),
        10: ("Scale renewable energy to 50%", "Electrify mobile equipment"),
        15: ("Achieve 80% renewable energy", "Deploy carbon capture technologies"),
        20: ("Implement nature-based solutions", "Achieve operational carbon neutrality"),
        25: ("Offset remaining emissions", "Achieve net-zero operations"),
    }
)


def _current_year(current_year: Optional[int]) -> int:
    return current_year if current_year is not None else datetime.now().year


def validate_target(params: TargetInput, current_year: Optional[int] = None) -> List[str]:
    """Return every rule the parameters break; an empty list means valid."""
    year = _current_year(current_year)
    errors = []

    if params.baseline_year > year - 1:
        errors.append("Baseline year must be at least 1 year in the past")

    if params.target_year - params.baseline_year < MIN_TARGET_SPAN_YEARS:
        errors.append("Target must be at least 5 years from baseline")

    if params.target_year - year > MAX_YEARS_AHEAD:
        errors.append("Target year cannot be more than 15 years in the future")

    if params.scope not in VALID_SCOPES:
        errors.append("Invalid scope specification")

    if not params.baseline_emissions or params.baseline_emissions <= 0:
        errors.append("Valid baseline emissions required")

    if params.target_type not in TARGET_TYPES:
        errors.append("Invalid target type")

    return errors


def get_annual_reduction(pathway: str) -> float:
    try:
        return PATHWAYS[pathway]["annual_reduction"]
    except KeyError:
        raise UnknownPathwayError(pathway) from None


def calculate_target(
    baseline_emissions: float,
    baseline_year: int,
    target_year: int,
    pathway: str,
) -> TargetCalculation:
    rate = get_annual_reduction(pathway)
    years = target_year - baseline_year

    total_reduction = 1 - (1 - rate) ** years
    target_emissions = baseline_emissions * (1 - total_reduction)

    return TargetCalculation(
        target_emissions=round_half_up(target_emissions),
        reduction_percent=round_half_up(total_reduction * 100, 1),
        annual_reduction_rate=round_half_up(rate * 100, 2),
    )


def create_target(
    params: TargetInput,
    current_year: Optional[int] = None,
    created_at: Optional[datetime] = None,
) -> SBTiTarget:
    """
    Validate the parameters and derive the target. All rule violations are
    reported together in a single TargetValidationError.
    """
    errors = validate_target(params, current_year)
    if errors:
        raise TargetValidationError(errors)

    calculation = calculate_target(
        params.baseline_emissions,
        params.baseline_year,
        params.target_year,
        params.pathway,
    )

    logger.info(
        "Created %s %s target on %s pathway: %s -> %s tCO2e (%s%%)",
        params.target_type,
        params.scope,
        params.pathway,
        params.baseline_emissions,
        calculation.target_emissions,
        calculation.reduction_percent,
    )

    return SBTiTarget(
        target_type=params.target_type,
        scope=params.scope,
        pathway=params.pathway,
        baseline_year=params.baseline_year,
        baseline_emissions=params.baseline_emissions,
        target_year=params.target_year,
        target_emissions=calculation.target_emissions,
        reduction_percent=calculation.reduction_percent,
        annual_reduction_rate=calculation.annual_reduction_rate,
        sector=params.sector,
        created_at=created_at or datetime.now(timezone.utc),
    )


def required_annual_reduction(
    current_emissions: float, target_emissions: float, years_remaining: int
) -> float:
    """
    Share of current emissions that must be cut each year, in equal absolute
    steps, to land on the target. Zero once the target year is reached.
    """
    if years_remaining <= 0 or current_emissions <= 0:
        return 0.0

    annual_reduction = (current_emissions - target_emissions) / years_remaining
    return round_half_up(annual_reduction / current_emissions * 100, 1)


def track_progress(
    target: SBTiTarget,
    current_emissions: float,
    reporting_year: int,
    target_id: Optional[int] = None,
) -> SBTiProgressEntry:
    years_elapsed = reporting_year - target.baseline_year
    total_years = target.target_year - target.baseline_year
    progress_expected = years_elapsed / total_years * 100 if total_years else 100.0

    planned_reduction = target.baseline_emissions - target.target_emissions
    if planned_reduction:
        progress_actual = (target.baseline_emissions - current_emissions) / planned_reduction * 100
    else:
        progress_actual = 100.0 if current_emissions <= target.target_emissions else 0.0

    years_remaining = target.target_year - reporting_year

    return SBTiProgressEntry(
        target_id=target_id,
        reporting_year=reporting_year,
        current_emissions=current_emissions,
        progress_actual=round_half_up(progress_actual, 1),
        progress_expected=round_half_up(progress_expected, 1),
        on_track=progress_actual >= progress_expected * ON_TRACK_TOLERANCE,
        years_remaining=years_remaining,
        required_annual_reduction=required_annual_reduction(
            current_emissions, target.target_emissions, years_remaining
        ),
    )


def milestone_reduction(years_from_now: int, total_years: int) -> float:
    """Front-loaded curve reaching a 95% reduction in the target year."""
    progress = years_from_now / total_years
    return progress ** 0.8 * 0.95


def generate_net_zero_pathway(
    current_emissions: EmissionTotals,
    target_year: int = 2050,
    sector: str = "mining",
    start_year: Optional[int] = None,
) -> NetZeroPathway:
    start = _current_year(start_year)
    years = target_year - start

    milestones = []
    for offset in range(MILESTONE_INTERVAL, years + 1, MILESTONE_INTERVAL):
        reduction = milestone_reduction(offset, years)
        actions = MILESTONE_ACTIONS.get(offset, ("Continue emission reduction efforts",))
        milestones.append(
            Milestone(
                year=start + offset,
                target_emissions=round_half_up(current_emissions.total * (1 - reduction)),
                reduction_percent=round_half_up(reduction * 100),
                key_actions=list(actions),
            )
        )

    return NetZeroPathway(
        target_year=target_year,
        sector=sector,
        current_emissions=current_emissions,
        milestones=milestones,
        recommendations=net_zero_recommendations(current_emissions, sector),
    )


def net_zero_recommendations(emissions: EmissionTotals, sector: str = "mining") -> List[NetZeroRecommendation]:
    sector_data = SECTORS.get(sector, SECTORS["mining"])
    return [
        NetZeroRecommendation(
            category="Energy Transition",
            priority="High",
            action=(
                "Transition to 100% renewable electricity, passing the sector "
                f"benchmark of {sector_data['renewable_target']}% by 2030"
            ),
            impact=f"Could reduce Scope 2 emissions by {emissions.scope2:g} tCO2e",
            timeline="2025-2030",
        ),
        NetZeroRecommendation(
            category="Operational Efficiency",
            priority="High",
            action="Implement comprehensive energy management system",
            impact="Could reduce Scope 1 emissions by 15-25%",
            timeline="2024-2027",
        ),
        NetZeroRecommendation(
            category="Technology Innovation",
            priority="Medium",
            action="Invest in carbon capture and storage technologies",
            impact="Could address hard-to-abate emissions",
            timeline="2028-2035",
        ),
    ]
