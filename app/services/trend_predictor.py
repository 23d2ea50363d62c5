from datetime import datetime
from typing import List, NamedTuple, Optional, Sequence

from app.schemas.esg import ScorePrediction, ScoreRecord, ScoreTrendResult
from app.services.utils import clamp, round_half_up


class LinearTrend(NamedTuple):
    slope: float
    intercept: float


def fit_linear_trend(values: Sequence[float]) -> LinearTrend:
    """
    Ordinary least squares of value against its index (0, 1, 2, ...).
    A single point yields a flat line through it.
    """
    n = len(values)
    if n == 0:
        raise ValueError("Cannot fit a trend to an empty series")

    x_mean = (n - 1) / 2
    y_mean = sum(values) / n

    numerator = 0.0
    denominator = 0.0
    for x, y in enumerate(values):
        numerator += (x - x_mean) * (y - y_mean)
        denominator += (x - x_mean) ** 2

    slope = numerator / denominator if denominator else 0.0
    return LinearTrend(slope=slope, intercept=y_mean - slope * x_mean)


def get_esg_rating(score: float) -> str:
    if score >= 80:
        return "AAA"
    if score >= 70:
        return "AA"
    if score >= 60:
        return "A"
    if score >= 50:
        return "BBB"
    if score >= 40:
        return "BB"
    if score >= 30:
        return "B"
    return "CCC"


def projection_confidence(year_offset: int) -> float:
    """Linear decay from 0.9, floored at 0.3."""
    return round(max(0.3, 0.9 - 0.15 * year_offset), 2)


def predict_esg_trends(
    history: List[ScoreRecord],
    years: int = 3,
    base_year: Optional[int] = None,
) -> Optional[ScoreTrendResult]:
    """
    Project the overall ESG score `years` ahead from stored snapshots.

    Returns None when fewer than two snapshots exist; the caller decides how
    to present "not enough history".
    """
    if len(history) < 2:
        return None

    ordered = sorted(history, key=lambda record: record.calculated_at)
    trend = fit_linear_trend([record.overall_score for record in ordered])
    last_index = len(ordered) - 1
    base_year = base_year if base_year is not None else datetime.now().year

    predictions = []
    for offset in range(1, years + 1):
        predicted = clamp(trend.slope * (last_index + offset) + trend.intercept, 0.0, 100.0)
        predictions.append(
            ScorePrediction(
                year=base_year + offset,
                predicted_score=round_half_up(predicted),
                confidence=projection_confidence(offset),
                rating=get_esg_rating(predicted),
            )
        )

    return ScoreTrendResult(
        trend="improving" if trend.slope > 0 else "declining",
        predictions=predictions,
    )
