from typing import Dict, List, Literal, Optional

from pydantic import Field

from app.schemas.base import CamelModel
from app.schemas.carbon import EmissionTotals
from app.schemas.esg import BenchmarkEntry

RiskLevel = Literal["low", "medium", "high"]


class ScenarioInput(CamelModel):
    emissions: EmissionTotals
    scenarios: List[str] = Field(default_factory=lambda: ["1.5C", "2C", "3C"])


class ScenarioResult(CamelModel):
    physical_risk: float
    transition_risk: float
    financial_impact: float
    time_horizon: Literal["short", "medium", "long"]


class BenchmarkingInput(CamelModel):
    metrics: Dict[str, float] = Field(..., examples=[{"ghgEmissions": 2.2, "boardDiversity": 42}])
    industry: Optional[str] = Field(None, examples=["mining"])
    # Overrides the built-in industry table when supplied.
    benchmark: Optional[Dict[str, BenchmarkEntry]] = None


class MetricBenchmark(CamelModel):
    company: float
    sector_median: float
    sector_top25: float
    percentile: Optional[int] = None
    performance: Literal["leading", "average", "lagging"]


class RiskInput(CamelModel):
    """Operational indicators for risk scoring; unreported ones add no risk."""

    scope1_emissions: Optional[float] = None  # tCO2e
    scope2_emissions: Optional[float] = None  # tCO2e
    water_withdrawal: Optional[float] = None  # m3
    waste_generated: Optional[float] = None  # tonnes
    lost_time_injury_rate: Optional[float] = None
    female_employees_percentage: Optional[float] = None
    employee_turnover_rate: Optional[float] = None  # %
    independent_directors_percentage: Optional[float] = None
    data_breach_incidents: Optional[int] = None
    ethics_training_completion: Optional[float] = None  # %


class RiskBreakdown(CamelModel):
    environmental: int
    social: int
    governance: int


class RiskScore(CamelModel):
    overall: int = Field(..., ge=0, le=100)
    breakdown: RiskBreakdown
    level: RiskLevel
