import operator
from types import MappingProxyType
from typing import Dict, Iterable, Mapping, Optional, Sequence

from app.config import get_settings
from app.schemas.analytics import (
    MetricBenchmark,
    RiskBreakdown,
    RiskInput,
    RiskScore,
    ScenarioResult,
)
from app.schemas.carbon import EmissionTotals
from app.schemas.esg import BenchmarkEntry
from app.services.esg_calculator import (
    CATEGORY_WEIGHTS,
    SCORING_MODELS,
    get_industry_benchmark,
)
from app.services.utils import round_half_up

# TCFD-style warming scenarios: physical risk scales Scope 1, transition risk
# scales Scope 2.
SCENARIO_MULTIPLIERS = MappingProxyType(
    {
        "1.5C": MappingProxyType({"physical": 1.2, "transition": 2.0}),
        "2C": MappingProxyType({"physical": 1.5, "transition": 1.5}),
        "3C": MappingProxyType({"physical": 2.5, "transition": 1.0}),
    }
)

TIME_HORIZONS = MappingProxyType({"1.5C": "short", "2C": "medium"})

# (indicator, comparison, threshold, risk points)
RISK_RULES = MappingProxyType(
    {
        "environmental": (
            ("scope1_emissions", operator.gt, 10000, 30),
            ("scope2_emissions", operator.gt, 5000, 20),
            ("water_withdrawal", operator.gt, 100000, 25),
            ("waste_generated", operator.gt, 1000, 25),
        ),
        "social": (
            ("lost_time_injury_rate", operator.gt, 5, 40),
            ("female_employees_percentage", operator.lt, 20, 30),
            ("employee_turnover_rate", operator.gt, 20, 30),
        ),
        "governance": (
            ("independent_directors_percentage", operator.lt, 30, 35),
            ("data_breach_incidents", operator.gt, 0, 40),
            ("ethics_training_completion", operator.lt, 80, 25),
        ),
    }
)

HIGH_RISK_THRESHOLD = 70
MEDIUM_RISK_THRESHOLD = 40


# ---------- scenario analysis ----------

def get_scenario_multipliers(scenario: str):
    return SCENARIO_MULTIPLIERS.get(scenario, SCENARIO_MULTIPLIERS["2C"])


def calculate_financial_impact(
    emissions: EmissionTotals, transition_multiplier: float, carbon_price: float
) -> float:
    return (emissions.scope1 + emissions.scope2) * transition_multiplier * carbon_price


def perform_scenario_analysis(
    emissions: EmissionTotals,
    scenarios: Iterable[str] = ("1.5C", "2C", "3C"),
    carbon_price: Optional[float] = None,
) -> Dict[str, ScenarioResult]:
    """
    Stress current emissions under each warming scenario. Unknown scenario
    names are evaluated with the 2C multipliers.
    """
    if carbon_price is None:
        carbon_price = get_settings().carbon_price_usd

    results = {}
    for scenario in scenarios:
        multipliers = get_scenario_multipliers(scenario)
        results[scenario] = ScenarioResult(
            physical_risk=emissions.scope1 * multipliers["physical"],
            transition_risk=emissions.scope2 * multipliers["transition"],
            financial_impact=calculate_financial_impact(
                emissions, multipliers["transition"], carbon_price
            ),
            time_horizon=TIME_HORIZONS.get(scenario, "long"),
        )
    return results


# ---------- peer benchmarking ----------

def metric_direction(metric: str) -> str:
    """Scoring direction of a known ESG metric; anything else is treated as lower_better."""
    for model in SCORING_MODELS.values():
        if metric in model:
            return model[metric].benchmark
    return "lower_better"


def calculate_percentile(value: float, distribution: Sequence[float]) -> Optional[int]:
    """Share of peer values strictly below `value`, as a whole percentage."""
    if not distribution:
        return None
    below = sum(1 for peer in distribution if peer < value)
    return round_half_up(below / len(distribution) * 100)


def benchmark_performance(value: float, entry: BenchmarkEntry, direction: str) -> str:
    if direction == "higher_better":
        if value >= entry.top25:
            return "leading"
        return "average" if value >= entry.median else "lagging"

    if value <= entry.top25:
        return "leading"
    return "average" if value <= entry.median else "lagging"


def benchmark_metrics(
    metrics: Mapping[str, float],
    industry: Optional[str] = None,
    benchmark: Optional[Mapping[str, BenchmarkEntry]] = None,
) -> Dict[str, MetricBenchmark]:
    """
    Compare each reported metric with its sector median and top quartile.
    Metrics without a peer entry are left out.
    """
    if benchmark is None:
        benchmark = get_industry_benchmark(industry)

    results = {}
    for metric, value in metrics.items():
        entry = benchmark.get(metric)
        if entry is None:
            continue
        results[metric] = MetricBenchmark(
            company=value,
            sector_median=entry.median,
            sector_top25=entry.top25,
            percentile=calculate_percentile(value, entry.distribution),
            performance=benchmark_performance(value, entry, metric_direction(metric)),
        )
    return results


# ---------- risk scoring ----------

def assess_category_risk(category: str, data: RiskInput) -> int:
    risk = 0
    for field, compare, threshold, points in RISK_RULES[category]:
        value = getattr(data, field)
        if value is not None and compare(value, threshold):
            risk += points
    return min(100, risk)


def get_risk_level(score: float) -> str:
    if score > HIGH_RISK_THRESHOLD:
        return "high"
    if score > MEDIUM_RISK_THRESHOLD:
        return "medium"
    return "low"


def calculate_risk_score(data: RiskInput) -> RiskScore:
    """0-100 risk per category, combined with the E/S/G weights."""
    breakdown = {category: assess_category_risk(category, data) for category in RISK_RULES}
    overall = sum(score * CATEGORY_WEIGHTS[category] for category, score in breakdown.items())

    return RiskScore(
        overall=round_half_up(overall),
        breakdown=RiskBreakdown(**breakdown),
        level=get_risk_level(overall),
    )
