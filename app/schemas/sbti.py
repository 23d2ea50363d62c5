from datetime import datetime
from typing import List, Literal, Optional

from pydantic import Field

from app.schemas.base import CamelModel, FrozenCamelModel
from app.schemas.carbon import EmissionTotals

TargetStatus = Literal["draft", "active", "achieved"]


class TargetInput(CamelModel):
    target_type: str = Field(..., examples=["absolute"])
    scope: str = Field(..., examples=["scope1+2"])
    pathway: str = Field(..., examples=["1.5C"])
    baseline_year: int = Field(..., examples=[2020])
    baseline_emissions: float = Field(..., examples=[100000.0])
    target_year: int = Field(..., examples=[2030])
    sector: str = "mining"


class TargetCalculation(CamelModel):
    target_emissions: int
    reduction_percent: float
    annual_reduction_rate: float


class SBTiTarget(FrozenCamelModel):
    target_type: str
    scope: str
    pathway: str
    baseline_year: int
    baseline_emissions: float
    target_year: int
    target_emissions: int
    reduction_percent: float
    annual_reduction_rate: float
    sbti_approved: bool = False
    status: TargetStatus = "draft"
    sector: str = "mining"
    created_at: datetime


class ProgressInput(CamelModel):
    target: SBTiTarget
    target_id: Optional[int] = None
    current_emissions: float = Field(..., ge=0)
    reporting_year: int


class SBTiProgressEntry(CamelModel):
    target_id: Optional[int] = None
    reporting_year: int
    current_emissions: float
    progress_actual: float
    progress_expected: float
    on_track: bool
    years_remaining: int
    required_annual_reduction: float


class NetZeroInput(CamelModel):
    current_emissions: EmissionTotals
    target_year: int = 2050
    sector: str = "mining"


class Milestone(CamelModel):
    year: int
    target_emissions: int
    reduction_percent: int
    key_actions: List[str]


class NetZeroRecommendation(CamelModel):
    category: str
    priority: str
    action: str
    impact: str
    timeline: str


class NetZeroPathway(CamelModel):
    target_year: int
    sector: str
    current_emissions: EmissionTotals
    milestones: List[Milestone]
    recommendations: List[NetZeroRecommendation]
