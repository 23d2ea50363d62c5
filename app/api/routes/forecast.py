from fastapi import APIRouter

from app.schemas.forecast import BatchForecastInput, BatchForecastResult, ForecastInput, ForecastResult
from app.services.forecasting import forecast, forecast_many

router = APIRouter()


@router.post("", response_model=ForecastResult, response_model_exclude_none=True)
def forecast_series(payload: ForecastInput):
    """
    Forecast a metric series with confidence intervals.
    """
    return forecast(payload.historical_series, payload.periods, payload.method)


@router.post("/batch", response_model=BatchForecastResult, response_model_exclude_none=True)
def forecast_batch(payload: BatchForecastInput):
    """
    Forecast several metrics at once; series that are too short report an error.
    """
    return forecast_many(payload.series, payload.periods, payload.method)
