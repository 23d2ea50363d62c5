import logging
from datetime import datetime, timezone
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional

from app.config import get_settings
from app.schemas.esg import (
    BenchmarkEntry,
    CategoryScore,
    CategoryScores,
    ESGMetrics,
    ESGScoreResult,
    IndustryComparison,
    MetricConfig,
    MetricScore,
    Recommendation,
    RiskItem,
)
from app.services.trend_predictor import get_esg_rating
from app.services.utils import clamp, round_half_up

logger = logging.getLogger(__name__)

CATEGORY_WEIGHTS = MappingProxyType(
    {"environmental": 0.4, "social": 0.3, "governance": 0.3}
)

NEUTRAL_SCORE = 50


def _model(entries: Dict[str, tuple]) -> Mapping[str, MetricConfig]:
    return MappingProxyType(
        {name: MetricConfig(weight=weight, benchmark=direction) for name, (weight, direction) in entries.items()}
    )


SCORING_MODELS: Mapping[str, Mapping[str, MetricConfig]] = MappingProxyType(
    {
        "environmental": _model(
            {
                "ghgEmissions": (0.25, "lower_better"),
                "energyIntensity": (0.20, "lower_better"),
                "waterUsage": (0.15, "lower_better"),
                "wasteGeneration": (0.15, "lower_better"),
                "renewableEnergy": (0.15, "higher_better"),
                "biodiversityImpact": (0.10, "lower_better"),
            }
        ),
        "social": _model(
            {
                "workplaceSafety": (0.25, "lower_better"),
                "employeeDiversity": (0.20, "higher_better"),
                "communityEngagement": (0.20, "higher_better"),
                "humanRights": (0.15, "higher_better"),
                "laborPractices": (0.10, "higher_better"),
                "productSafety": (0.10, "higher_better"),
            }
        ),
        "governance": _model(
            {
                "boardDiversity": (0.25, "higher_better"),
                "executiveCompensation": (0.20, "balanced"),
                "businessEthics": (0.20, "higher_better"),
                "riskManagement": (0.15, "higher_better"),
                "transparency": (0.10, "higher_better"),
                "cybersecurity": (0.10, "higher_better"),
            }
        ),
    }
)


def _benchmarks(entries: Dict[str, tuple]) -> Mapping[str, BenchmarkEntry]:
    return MappingProxyType(
        {name: BenchmarkEntry(median=median, top25=top25, unit=unit) for name, (median, top25, unit) in entries.items()}
    )


INDUSTRY_BENCHMARKS: Mapping[str, Mapping[str, BenchmarkEntry]] = MappingProxyType(
    {
        "mining": _benchmarks(
            {
                "ghgEmissions": (2.5, 1.8, "tCO2e/M$"),
                "workplaceSafety": (3.2, 1.5, "LTIFR"),
                "boardDiversity": (25, 40, "%"),
            }
        ),
        "manufacturing": _benchmarks(
            {
                "ghgEmissions": (1.8, 1.2, "tCO2e/M$"),
                "workplaceSafety": (2.1, 0.8, "LTIFR"),
                "boardDiversity": (30, 45, "%"),
            }
        ),
    }
)


def get_industry_benchmark(industry: Optional[str]) -> Mapping[str, BenchmarkEntry]:
    """Benchmark table for `industry`, falling back to the configured default."""
    default = get_settings().default_industry
    if industry in INDUSTRY_BENCHMARKS:
        return INDUSTRY_BENCHMARKS[industry]
    logger.debug("No benchmark table for industry %r; using %r", industry, default)
    return INDUSTRY_BENCHMARKS.get(default, INDUSTRY_BENCHMARKS["mining"])


def normalize_metric_score(value: float, benchmark: BenchmarkEntry, direction: str) -> int:
    """
    Tier a raw metric against its industry benchmark.
    Always returns one of 90 / 70 / 50 / 30; boundaries are inclusive.
    """
    if direction == "lower_better":
        if value <= benchmark.top25:
            return 90
        if value <= benchmark.median:
            return 70
        if value <= benchmark.median * 1.5:
            return 50
        return 30

    if direction == "higher_better":
        if value >= benchmark.top25:
            return 90
        if value >= benchmark.median:
            return 70
        if value >= benchmark.median * 0.7:
            return 50
        return 30

    if direction == "balanced":
        target = benchmark.median
        if target == 0:
            return 90 if value == 0 else 30
        deviation = abs(value - target) / abs(target)
        if deviation <= 0.1:
            return 90
        if deviation <= 0.2:
            return 70
        if deviation <= 0.3:
            return 50
        return 30

    return NEUTRAL_SCORE


def get_category_performance(score: float) -> str:
    if score >= 75:
        return "Leading"
    if score >= 60:
        return "Above Average"
    if score >= 40:
        return "Average"
    return "Below Average"


def calculate_category_score(
    category: str,
    metrics: Mapping[str, float],
    benchmark: Mapping[str, BenchmarkEntry],
) -> CategoryScore:
    model = SCORING_MODELS[category]
    weighted_sum = 0.0
    metric_scores: Dict[str, MetricScore] = {}

    for metric, config in model.items():
        value = metrics.get(metric) or 0
        entry = benchmark.get(metric)

        if entry is None:
            normalized = NEUTRAL_SCORE
        else:
            normalized = normalize_metric_score(value, entry, config.benchmark)

        contribution = normalized * config.weight
        metric_scores[metric] = MetricScore(
            value=value,
            normalized_score=normalized,
            weight=config.weight,
            contribution=contribution,
        )
        weighted_sum += contribution

    return CategoryScore(
        score=round_half_up(weighted_sum),
        metrics=metric_scores,
        performance=get_category_performance(weighted_sum),
    )


def find_weakest_metric(metrics: Mapping[str, MetricScore]) -> Optional[str]:
    """Lowest normalized score; the first one seen wins a tie."""
    weakest = None
    lowest = None
    for name, score in metrics.items():
        if lowest is None or score.normalized_score < lowest:
            lowest = score.normalized_score
            weakest = name
    return weakest


def generate_recommendations(scores: CategoryScores) -> List[Recommendation]:
    recommendations = []

    if scores.environmental.score < 60:
        weakest = find_weakest_metric(scores.environmental.metrics)
        recommendations.append(
            Recommendation(
                category="Environmental",
                priority="High",
                action=f"Improve {weakest} performance through targeted initiatives",
                impact="Could increase overall ESG score by 5-8 points",
            )
        )

    if scores.social.score < 60:
        recommendations.append(
            Recommendation(
                category="Social",
                priority="Medium",
                action="Enhance workplace safety programs and diversity initiatives",
                impact="Could improve social score by 10-15 points",
            )
        )

    if scores.governance.score < 60:
        recommendations.append(
            Recommendation(
                category="Governance",
                priority="Medium",
                action="Strengthen board diversity and risk management frameworks",
                impact="Could enhance governance score by 8-12 points",
            )
        )

    return recommendations


def assess_esg_risks(scores: CategoryScores) -> List[RiskItem]:
    risks = []

    if scores.environmental.score < 40:
        risks.append(
            RiskItem(
                type="Environmental",
                level="High",
                description="Significant environmental compliance and reputation risks",
                mitigation="Implement comprehensive environmental management system",
            )
        )

    if scores.social.score < 40:
        risks.append(
            RiskItem(
                type="Social",
                level="Medium",
                description="Workforce and community relation challenges",
                mitigation="Enhance stakeholder engagement and safety protocols",
            )
        )

    if scores.governance.score < 40:
        risks.append(
            RiskItem(
                type="Governance",
                level="High",
                description="Corporate governance and oversight deficiencies",
                mitigation="Strengthen board oversight and transparency measures",
            )
        )

    return risks


def generate_industry_comparison(score: float, industry: str) -> IndustryComparison:
    """
    Position against the industry. Without a peer distribution the overall
    score stands in for the percentile, bounded to 5..95.
    """
    percentile = round_half_up(clamp(score, 5, 95))

    if percentile >= 75:
        position = "Top Quartile"
    elif percentile >= 50:
        position = "Above Median"
    elif percentile >= 25:
        position = "Below Median"
    else:
        position = "Bottom Quartile"

    return IndustryComparison(industry=industry, percentile=percentile, position=position)


def calculate_esg_score(
    metrics: ESGMetrics,
    benchmark: Optional[Mapping[str, BenchmarkEntry]] = None,
    industry: Optional[str] = None,
    company_id: Optional[str] = None,
    calculated_at: Optional[datetime] = None,
) -> ESGScoreResult:
    """
    Score one company and period.

    Each metric is tiered against the benchmark (neutral 50 when the metric
    has no benchmark entry), weighted into a 0-100 category score, and the
    categories are combined with the fixed E/S/G weights.
    """
    industry = industry or get_settings().default_industry
    if benchmark is None:
        benchmark = get_industry_benchmark(industry)

    category_scores = CategoryScores(
        environmental=calculate_category_score("environmental", metrics.environmental, benchmark),
        social=calculate_category_score("social", metrics.social, benchmark),
        governance=calculate_category_score("governance", metrics.governance, benchmark),
    )

    overall = round_half_up(
        sum(
            getattr(category_scores, category).score * weight
            for category, weight in CATEGORY_WEIGHTS.items()
        )
    )

    return ESGScoreResult(
        company_id=company_id,
        industry=industry,
        overall_score=overall,
        rating=get_esg_rating(overall),
        category_scores=category_scores,
        industry_comparison=generate_industry_comparison(overall, industry),
        recommendations=generate_recommendations(category_scores),
        risk_assessment=assess_esg_risks(category_scores),
        calculated_at=calculated_at or datetime.now(timezone.utc),
    )
