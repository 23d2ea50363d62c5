import logging
from typing import Dict, List, Mapping, Optional

from app.schemas.carbon import (
    CarbonFootprint,
    CarbonReport,
    EmissionBreakdown,
    EmissionTrend,
    ScopeEmissions,
)
from app.services.emission_factors import EMISSION_FACTORS, get_emission_factor

logger = logging.getLogger(__name__)

KWH_PER_MWH = 1000.0

GHG_PROTOCOL = {
    "compliant": True,
    "standard": "GHG Protocol Corporate Standard",
    "methodology": "Operational Control Approach",
}


def calculate_scope(
    scope: int,
    consumption_by_type: Mapping[str, float],
    period: Optional[str] = None,
) -> ScopeEmissions:
    """
    Apply the emission factor table to one scope's consumption figures.

    Unknown types contribute zero emissions rather than failing, so partially
    mapped data still produces a total. Scope 2 consumption is given in kWh
    and converted to MWh before the factor is applied.
    """
    if scope not in EMISSION_FACTORS:
        raise ValueError(f"Unknown GHG scope: {scope!r} (expected 1, 2 or 3)")

    total = 0.0
    breakdown: Dict[str, EmissionBreakdown] = {}

    for kind, consumption in consumption_by_type.items():
        factor = get_emission_factor(scope, kind)
        if factor is None:
            logger.debug("No scope %s emission factor for %r; counting as zero", scope, kind)
        rate = factor.factor if factor is not None else 0.0

        activity = consumption / KWH_PER_MWH if scope == 2 else consumption
        emissions = activity * rate
        total += emissions

        breakdown[kind] = EmissionBreakdown(
            consumption=consumption,
            emission_factor=rate,
            emissions=round(emissions, 3),
        )

    return ScopeEmissions(
        scope=scope,
        total_emissions=round(total, 3),
        breakdown=breakdown,
        period=period,
    )


def calculate_total_footprint(scope1: float, scope2: float, scope3: float) -> CarbonFootprint:
    """Plain sum of the three scope totals; no double-counting correction."""
    return CarbonFootprint(
        scope1=round(scope1, 3),
        scope2=round(scope2, 3),
        scope3=round(scope3, 3),
        total=round(scope1 + scope2 + scope3, 3),
    )


def calculate_emission_trend(history: List[float]) -> Optional[EmissionTrend]:
    """
    Compare the two most recent period totals (history is oldest first).
    Returns None when there is nothing to compare against.
    """
    if len(history) < 2:
        return None

    previous, latest = history[-2], history[-1]
    if previous == 0:
        return None

    change = (latest - previous) / previous * 100
    return EmissionTrend(
        change_percent=round(change, 1),
        trend="increasing" if latest > previous else "decreasing",
    )


def carbon_recommendations(footprint: CarbonFootprint) -> List[str]:
    recommendations = []

    if footprint.scope2 > footprint.scope1:
        recommendations.append(
            "Consider renewable energy procurement to reduce Scope 2 emissions"
        )

    if footprint.scope3 > footprint.scope1 + footprint.scope2:
        recommendations.append(
            "Focus on supply chain engagement to address Scope 3 emissions"
        )

    return recommendations


def generate_carbon_report(
    fuel_consumption: Mapping[str, float],
    electricity_consumption: Mapping[str, float],
    activities: Mapping[str, float],
    period: Optional[str] = None,
    history: Optional[List[float]] = None,
    company_id: Optional[str] = None,
) -> CarbonReport:
    """
    Calculate all three scopes for a period and wrap them in a report with
    the period-over-period trend and headline recommendations.
    """
    scopes = {
        "scope1": calculate_scope(1, fuel_consumption, period),
        "scope2": calculate_scope(2, electricity_consumption, period),
        "scope3": calculate_scope(3, activities, period),
    }
    footprint = calculate_total_footprint(
        scopes["scope1"].total_emissions,
        scopes["scope2"].total_emissions,
        scopes["scope3"].total_emissions,
    )

    trend_series = list(history or []) + [footprint.total]

    return CarbonReport(
        company_id=company_id,
        period=period,
        carbon_footprint=footprint,
        scopes=scopes,
        trends=calculate_emission_trend(trend_series),
        recommendations=carbon_recommendations(footprint),
        ghg_protocol=dict(GHG_PROTOCOL),
    )
