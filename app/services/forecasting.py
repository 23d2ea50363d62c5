"""
Multi-period forecasting for ESG metric series.

The four methods are lightweight heuristics named after the techniques they
resemble. None of them estimates parameters from the data:

- "holt-winters": level/trend/seasonal-index projection (no smoothing passes).
- "arima": differencing plus fixed-decay AR and MA terms, not a fitted ARIMA.
- "prophet": OLS trend plus a repeating seasonal array, not Prophet's model.
- "exponential": single-parameter recursive trend update.

Every method widens its 95% interval with the horizon and lowers its
confidence (except "exponential", which holds both constant).

The accuracy, MAPE and RMSE figures describe how well a naive three-point
moving average fits the history. They are not backtests of the selected
method.
"""

import logging
import math
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Sequence

from app.config import get_settings
from app.schemas.forecast import (
    BatchForecastResult,
    Changepoint,
    ForecastError,
    ForecastPoint,
    ForecastResult,
    Seasonality,
)
from app.services.errors import InsufficientDataError
from app.services.trend_predictor import fit_linear_trend
from app.services.utils import clamp

logger = logging.getLogger(__name__)

MIN_POINTS = 3
Z_95 = 1.96
BASE_CONFIDENCE = 0.95
MAX_SEASON_LENGTH = 12
DEFAULT_MAPE = 0.15
BACKTEST_WINDOW = 3

DEFAULT_METHOD = "holt-winters"


# ---------- helpers ----------

def _mean(data: Sequence[float]) -> float:
    return sum(data) / len(data)


def calculate_std_dev(data: Sequence[float]) -> float:
    """Population standard deviation."""
    mean = _mean(data)
    return math.sqrt(sum((value - mean) ** 2 for value in data) / len(data))


def clean_series(series: Iterable[Any]) -> List[float]:
    """
    Coerce a raw series to floats. Accepts numbers, numeric strings and
    {"value": x} records; anything non-numeric or NaN is dropped.
    """
    values = []
    for item in series:
        if isinstance(item, Mapping):
            item = item.get("value")
        if item is None or isinstance(item, bool):
            continue
        try:
            value = float(item)
        except (TypeError, ValueError):
            continue
        if math.isnan(value) or math.isinf(value):
            continue
        values.append(value)
    return values


def season_length(n: int) -> int:
    return min(MAX_SEASON_LENGTH, n // 2)


def initialize_seasonal(data: Sequence[float], length: int) -> List[float]:
    """
    Seasonal index per phase: mean of the observations in that phase divided
    by the overall mean. Falls back to all ones when there are fewer than two
    full seasons or the mean is zero.
    """
    seasonal = [1.0] * length
    if length == 0 or len(data) < length * 2:
        return seasonal

    overall = _mean(data)
    if overall == 0:
        return seasonal

    for phase in range(length):
        phase_values = data[phase::length]
        seasonal[phase] = _mean(phase_values) / overall
    return seasonal


def difference(data: Sequence[float], order: int) -> List[float]:
    result = list(data)
    for _ in range(order):
        result = [current - previous for previous, current in zip(result, result[1:])]
    return result


def auto_regression(p: int) -> List[float]:
    return [0.5 / (lag + 1) for lag in range(p)]


def moving_average_component(differenced: Sequence[float], q: int) -> List[float]:
    return [differenced[-1 - lag] * 0.3 for lag in range(q)]


def _trend_label(slope: float) -> str:
    if slope > 0:
        return "increasing"
    if slope < 0:
        return "decreasing"
    return "stable"


def detect_trend(data: Sequence[float]) -> str:
    return _trend_label(fit_linear_trend(data).slope)


def detect_changepoints(data: Sequence[float]) -> List[Changepoint]:
    """
    Indices where the mean of the following window differs from the mean of
    the preceding window by more than 20%. Informational only.
    """
    window = max(3, len(data) // 10)
    changepoints = []

    for index in range(window, len(data) - window):
        before = _mean(data[index - window:index])
        after = _mean(data[index:index + window])
        if before == 0:
            continue
        if abs(after - before) / abs(before) > 0.2:
            changepoints.append(Changepoint(index=index, magnitude=after - before))

    return changepoints


def _naive_backtest(data: Sequence[float]) -> List[tuple]:
    """(actual, predicted) pairs where each point is predicted by the mean of the previous three."""
    return [
        (data[i], _mean(data[i - BACKTEST_WINDOW:i]))
        for i in range(BACKTEST_WINDOW, len(data))
    ]


def calculate_mape(data: Sequence[float]) -> float:
    if len(data) < BACKTEST_WINDOW + 1:
        return DEFAULT_MAPE

    errors = [
        abs((actual - predicted) / actual)
        for actual, predicted in _naive_backtest(data)
        if actual != 0
    ]
    return _mean(errors) if errors else DEFAULT_MAPE


def calculate_rmse(data: Sequence[float]) -> float:
    if len(data) < BACKTEST_WINDOW + 1:
        return calculate_std_dev(data)

    squared = [(actual - predicted) ** 2 for actual, predicted in _naive_backtest(data)]
    return math.sqrt(_mean(squared))


def calculate_accuracy(data: Sequence[float]) -> float:
    return clamp(1 - calculate_mape(data), 0.5, 0.99)


def calculate_aic(data: Sequence[float], k: int) -> Optional[float]:
    n = len(data)
    rss = calculate_rmse(data) * n
    if rss <= 0:
        return None
    return 2 * k + n * math.log(rss / n)


def detect_seasonality(data: Sequence[float]) -> Seasonality:
    """Compare quarterly phase means (index mod 4) against the overall mean."""
    if len(data) < 12:
        return Seasonality(has_seasonality=False)

    buckets = [data[phase::4] for phase in range(4)]
    pattern = [_mean(bucket) for bucket in buckets]
    overall = _mean(data)
    variance = sum((avg - overall) ** 2 for avg in pattern) / 4

    return Seasonality(
        has_seasonality=variance > overall * 0.1,
        pattern=pattern,
        strength=variance / overall if overall else None,
    )


def _point(
    step: int,
    forecast: float,
    margin: float,
    confidence: float,
    **components: float,
) -> ForecastPoint:
    # Width is always 2 * margin; a floored lower bound shifts the interval up.
    lower = max(0.0, forecast - margin)
    return ForecastPoint(
        period=step + 1,
        value=max(0.0, forecast),
        lower=lower,
        upper=lower + 2 * margin,
        confidence=max(0.0, confidence),
        **components,
    )


def _diagnostics(data: Sequence[float]) -> Dict[str, float]:
    return {
        "accuracy": calculate_accuracy(data),
        "mape": calculate_mape(data),
        "rmse": calculate_rmse(data),
    }


# ---------- methods ----------

def holt_winters(data: Sequence[float], periods: int) -> ForecastResult:
    n = len(data)
    level = data[0]
    trend = (data[-1] - data[0]) / n
    length = season_length(n)
    seasonal = initialize_seasonal(data, length)
    std_dev = calculate_std_dev(data)

    forecasts = []
    for step in range(periods):
        forecast = (level + trend * (step + 1)) * seasonal[step % length]
        margin = Z_95 * std_dev * math.sqrt(1 + step * 0.1)
        forecasts.append(_point(step, forecast, margin, BASE_CONFIDENCE - step * 0.01))

    return ForecastResult(
        forecasts=forecasts,
        method="Holt-Winters Triple Exponential Smoothing",
        trend=_trend_label(trend),
        seasonality=detect_seasonality(data),
        **_diagnostics(data),
    )


def arima_forecast(data: Sequence[float], periods: int, p: int = 1, d: int = 1, q: int = 1) -> ForecastResult:
    differenced = difference(data, d)
    if len(differenced) < max(1, q):
        raise InsufficientDataError(
            f"ARIMA({p},{d},{q}) needs at least {max(1, q)} points after differencing"
        )

    ar = auto_regression(p)
    ma = moving_average_component(differenced, q)
    std_dev = calculate_std_dev(data)

    # The AR term reads the observed differences, so it is the same every step.
    ar_component = sum(
        coefficient * differenced[-min(lag + 1, len(differenced))]
        for lag, coefficient in enumerate(ar)
    )

    forecasts = []
    last_value = data[-1]
    for step in range(periods):
        forecast = last_value + ar_component + (ma[step % len(ma)] if ma else 0.0)
        margin = Z_95 * std_dev * math.sqrt(1 + step * 0.15)
        forecasts.append(_point(step, forecast, margin, BASE_CONFIDENCE - step * 0.015))
        last_value = forecast

    return ForecastResult(
        forecasts=forecasts,
        method=f"ARIMA({p},{d},{q})",
        trend=detect_trend(data),
        aic=calculate_aic(data, p + q),
        **_diagnostics(data),
    )


def prophet_style(data: Sequence[float], periods: int) -> ForecastResult:
    n = len(data)
    trend = fit_linear_trend(data)
    seasonal = initialize_seasonal(data, season_length(n))
    std_dev = calculate_std_dev(data)

    forecasts = []
    for step in range(periods):
        trend_value = trend.slope * (n + step) + trend.intercept
        seasonal_value = seasonal[step % len(seasonal)]
        forecast = trend_value + seasonal_value
        margin = Z_95 * std_dev * (1 + step * 0.08)
        forecasts.append(
            _point(
                step,
                forecast,
                margin,
                BASE_CONFIDENCE - step * 0.012,
                trend=trend_value,
                seasonal=seasonal_value,
            )
        )

    return ForecastResult(
        forecasts=forecasts,
        method="Prophet-Style Decomposition",
        trend="increasing" if trend.slope > 0 else "decreasing",
        seasonality=detect_seasonality(data),
        changepoints=detect_changepoints(data),
        **_diagnostics(data),
    )


def exponential_smoothing(data: Sequence[float], periods: int, alpha: float = 0.3) -> ForecastResult:
    last_value = data[-1]
    trend = (data[-1] - data[0]) / len(data)
    recent_change = data[-1] - data[-2]
    margin = Z_95 * calculate_std_dev(data)

    forecasts = []
    for step in range(periods):
        forecast = last_value + trend
        forecasts.append(_point(step, forecast, margin, BASE_CONFIDENCE))
        last_value = forecast
        trend = alpha * trend + (1 - alpha) * recent_change

    return ForecastResult(
        forecasts=forecasts,
        method="Single Exponential Smoothing",
        trend=_trend_label(trend),
        **_diagnostics(data),
    )


def moving_average(data: Sequence[float], periods: int, window: int = 3) -> ForecastResult:
    window = min(window, len(data))
    recent_avg = _mean(data[-window:])
    trend = (data[-1] - data[-window]) / window
    margin = Z_95 * calculate_std_dev(data)

    forecasts = [
        _point(step, recent_avg + trend * (step + 1), margin, BASE_CONFIDENCE)
        for step in range(periods)
    ]

    return ForecastResult(
        forecasts=forecasts,
        method="Moving Average",
        trend=_trend_label(trend),
        **_diagnostics(data),
    )


METHODS: Mapping[str, Callable[..., ForecastResult]] = {
    "holt-winters": holt_winters,
    "arima": arima_forecast,
    "prophet": prophet_style,
    "exponential": exponential_smoothing,
    "moving-average": moving_average,
}


def forecast(
    series: Iterable[Any],
    periods: Optional[int] = None,
    method: str = DEFAULT_METHOD,
    **params: Any,
) -> ForecastResult:
    """
    Forecast `periods` steps past the end of `series`.

    Raises InsufficientDataError with fewer than three usable points. An
    unrecognised method falls back to Holt-Winters.
    """
    values = clean_series(series)
    if len(values) < MIN_POINTS:
        raise InsufficientDataError(
            "Insufficient data for forecasting (minimum 3 data points required)"
        )

    if periods is None:
        periods = get_settings().default_forecast_periods
    if periods < 1:
        raise ValueError("periods must be at least 1")

    handler = METHODS.get(method)
    if handler is None:
        logger.warning("Unknown forecasting method %r; using %s", method, DEFAULT_METHOD)
        handler = METHODS[DEFAULT_METHOD]

    return handler(values, periods, **params)


def forecast_many(
    series_by_metric: Mapping[str, Iterable[Any]],
    periods: Optional[int] = None,
    method: str = DEFAULT_METHOD,
) -> BatchForecastResult:
    """Forecast several metrics; a metric that cannot be forecast carries its error instead."""
    results: BatchForecastResult = {}
    for metric, series in series_by_metric.items():
        try:
            results[metric] = forecast(series, periods, method)
        except InsufficientDataError as exc:
            results[metric] = ForecastError(error=str(exc))
    return results
