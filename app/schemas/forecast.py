from typing import Dict, List, Optional, Union

from pydantic import Field

from app.schemas.base import CamelModel


class ForecastInput(CamelModel):
    # Nulls are tolerated and dropped before forecasting.
    historical_series: List[Optional[float]] = Field(
        ..., examples=[[10, 12, 11, 13, 14, 13, 15]]
    )
    periods: Optional[int] = Field(None, ge=1, le=120)
    method: str = Field("holt-winters", examples=["exponential"])


class BatchForecastInput(CamelModel):
    series: Dict[str, List[Optional[float]]]
    periods: Optional[int] = Field(None, ge=1, le=120)
    method: str = "holt-winters"


class ForecastPoint(CamelModel):
    period: int
    value: float
    lower: float
    upper: float
    confidence: float
    # Prophet-style components
    trend: Optional[float] = None
    seasonal: Optional[float] = None


class Seasonality(CamelModel):
    has_seasonality: bool
    pattern: Optional[List[float]] = None
    strength: Optional[float] = None


class Changepoint(CamelModel):
    index: int
    magnitude: float


class ForecastResult(CamelModel):
    forecasts: List[ForecastPoint]
    method: str
    accuracy: float
    trend: str
    mape: float
    rmse: float
    seasonality: Optional[Seasonality] = None
    changepoints: Optional[List[Changepoint]] = None
    aic: Optional[float] = None


class ForecastError(CamelModel):
    error: str


BatchForecastResult = Dict[str, Union[ForecastResult, ForecastError]]
