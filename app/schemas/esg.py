from datetime import datetime, timezone
from typing import Dict, List, Literal, Optional

from pydantic import Field, field_validator

from app.schemas.base import CamelModel, FrozenCamelModel

BenchmarkDirection = Literal["lower_better", "higher_better", "balanced"]
Performance = Literal["Leading", "Above Average", "Average", "Below Average"]
Rating = Literal["AAA", "AA", "A", "BBB", "BB", "B", "CCC"]


class MetricConfig(FrozenCamelModel):
    weight: float
    benchmark: BenchmarkDirection


class BenchmarkEntry(FrozenCamelModel):
    median: float
    top25: float
    unit: str = ""
    # Peer values, used for percentile ranking when present.
    distribution: List[float] = Field(default_factory=list)


class ESGMetrics(CamelModel):
    environmental: Dict[str, float] = Field(default_factory=dict)
    social: Dict[str, float] = Field(default_factory=dict)
    governance: Dict[str, float] = Field(default_factory=dict)


class ESGInput(CamelModel):
    company_id: Optional[str] = Field(None, examples=["GreenBDG Africa"])
    industry: Optional[str] = Field(None, examples=["mining"])
    metrics: ESGMetrics
    # Overrides the built-in industry table when supplied.
    benchmark: Optional[Dict[str, BenchmarkEntry]] = None


class MetricScore(CamelModel):
    value: float
    normalized_score: int
    weight: float
    contribution: float


class CategoryScore(CamelModel):
    score: int = Field(..., ge=0, le=100)
    metrics: Dict[str, MetricScore]
    performance: Performance


class CategoryScores(CamelModel):
    environmental: CategoryScore
    social: CategoryScore
    governance: CategoryScore


class IndustryComparison(CamelModel):
    industry: str
    percentile: int
    position: str


class Recommendation(CamelModel):
    category: str
    priority: str
    action: str
    impact: str


class RiskItem(CamelModel):
    type: str
    level: str
    description: str
    mitigation: str


class ESGScoreResult(CamelModel):
    company_id: Optional[str] = None
    industry: str
    overall_score: int = Field(..., ge=0, le=100)
    rating: Rating
    category_scores: CategoryScores
    industry_comparison: IndustryComparison
    recommendations: List[Recommendation]
    risk_assessment: List[RiskItem]
    calculated_at: datetime


class ScoreRecord(CamelModel):
    """One stored snapshot of an overall score."""

    overall_score: float
    calculated_at: datetime

    @field_validator("calculated_at")
    @classmethod
    def assume_utc(cls, value: datetime) -> datetime:
        # Naive timestamps are taken as UTC.
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value


class TrendInput(CamelModel):
    history: List[ScoreRecord]
    years: int = Field(3, ge=1, le=20)


class ScorePrediction(CamelModel):
    year: int
    predicted_score: int
    confidence: float
    rating: Rating


class ScoreTrendResult(CamelModel):
    trend: Literal["improving", "declining"]
    predictions: List[ScorePrediction]
    confidence: str = "medium"


class ESGInsights(CamelModel):
    overall: str
    environmental: List[str]
    social: List[str]
    governance: List[str]
