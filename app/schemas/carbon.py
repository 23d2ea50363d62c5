from typing import Any, Dict, List, Literal, Optional

from pydantic import Field

from app.schemas.base import CamelModel, FrozenCamelModel


class EmissionFactor(FrozenCamelModel):
    key: str
    factor: float  # tCO2e per unit
    unit: str


class EmissionBreakdown(CamelModel):
    consumption: float
    emission_factor: float
    emissions: float


class ScopeEmissions(CamelModel):
    scope: Literal[1, 2, 3]
    total_emissions: float
    unit: str = "tCO2e"
    breakdown: Dict[str, EmissionBreakdown]
    period: Optional[str] = None


class EmissionTotals(CamelModel):
    scope1: float = Field(0.0, ge=0)
    scope2: float = Field(0.0, ge=0)
    scope3: float = Field(0.0, ge=0)

    @property
    def total(self) -> float:
        return self.scope1 + self.scope2 + self.scope3


class CarbonFootprint(CamelModel):
    scope1: float
    scope2: float
    scope3: float
    total: float
    ghg_protocol_compliant: bool = True


class EmissionTrend(CamelModel):
    change_percent: float
    trend: Literal["increasing", "decreasing"]


class ScopeInput(CamelModel):
    consumption: Dict[str, float] = Field(default_factory=dict)
    period: Optional[str] = None


class FootprintInput(CamelModel):
    company_id: Optional[str] = None
    period: Optional[str] = Field(None, examples=["2025-Q1"])
    fuel_consumption: Dict[str, float] = Field(default_factory=dict)
    electricity_consumption: Dict[str, float] = Field(default_factory=dict)
    activities: Dict[str, float] = Field(default_factory=dict)
    # Total emissions of earlier periods, oldest first.
    history: List[float] = Field(default_factory=list)


class CarbonReport(CamelModel):
    company_id: Optional[str] = None
    period: Optional[str] = None
    carbon_footprint: CarbonFootprint
    scopes: Dict[str, ScopeEmissions]
    trends: Optional[EmissionTrend] = None
    recommendations: List[str]
    ghg_protocol: Dict[str, Any]
