"""Trend + smoothing blend forecaster with a widening confidence band.

For a history of n points and step i = 1..horizon:

    trend        = OLS fit over index 0..n-1 (slope, intercept)
    level        = smoothed value at the last observed index
    base(i)      = level + slope * i
    half_width   = base(i) * interval_width * sqrt(i)
    [low, high]  = [base - half_width, base + half_width], clamped at 0

The band broadens with sqrt(step) to reflect compounding uncertainty.

The level comes from one of two modes:

    "detrended"  level = fitted(n-1) + EWMA(series - fitted)[n-1]
    "raw"        level = EWMA(series)[n-1]

An EWMA of a trending series lags the trend by about
slope * (1 - alpha) / alpha, which the slope term would then carry into
every forecast step. Smoothing the residuals around the fitted line
removes that lag while still damping noise, so "detrended" is the default.

``seasonal_forecast`` removes a seasonal index before forecasting and
re-applies it per step; it needs two full cycles and otherwise falls back
to the plain forecast. ``Forecaster`` uses it when ``forecast.seasonal``
is set.
Note:
    The smoothing factor (0.3) and the 10% interval width are heuristics
    inherited from the dashboard, not statistically derived. Both can be
    overridden through the ``forecast`` config section.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from typing import Any

import numpy as np

from energy_analytics.analysis.seasonality import ADDITIVE, MULTIPLICATIVE, decompose
from energy_analytics.analysis.smoothing import exponential_smoothing
from energy_analytics.analysis.trend import FLAT_BAND_PERCENT, analyze_trend
from energy_analytics.data.preprocessing import SeriesLike, as_series_array
from energy_analytics.errors import InsufficientHistoryError, InvalidParameterError

logger = logging.getLogger(__name__)

SMOOTHING_ALPHA = 0.3
INTERVAL_WIDTH = 0.10

LEVEL_DETRENDED = "detrended"
LEVEL_RAW = "raw"
LEVEL_MODES = (LEVEL_DETRENDED, LEVEL_RAW)

MIN_HISTORY = 2
SEASONAL_PERIOD = 12


@dataclass(frozen=True)
class ForecastPoint:
    """One future step with its confidence band.

    Invariant: ``0 <= low <= value <= high``.
    """

    step_index: int
    value: float
    low: float
    high: float

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def _smoothed_level(
    values: np.ndarray,
    slope: float,
    intercept: float,
    alpha: float,
    level_mode: str,
) -> float:
    if level_mode == LEVEL_RAW:
        return float(exponential_smoothing(values, alpha)[-1])
    fitted = intercept + slope * np.arange(len(values))
    residual_level = exponential_smoothing(values - fitted, alpha)[-1]
    return float(fitted[-1] + residual_level)


def forecast(
    series: SeriesLike,
    horizon: int,
    smoothing_alpha: float = SMOOTHING_ALPHA,
    interval_width: float = INTERVAL_WIDTH,
    level_mode: str = LEVEL_DETRENDED,
    flat_band_percent: float = FLAT_BAND_PERCENT,
) -> list[ForecastPoint]:
    """Forecast ``horizon`` future points.

    Args:
        series: Ordered history with at least two values.
        horizon: Number of future steps, >= 1.
        smoothing_alpha: Exponential smoothing factor in (0, 1].
        interval_width: Relative half-width of the band at step 1.
        level_mode: "detrended" (default) or "raw".
        flat_band_percent: Passed through to the trend classifier.

    Returns:
        ``horizon`` forecast points with ``step_index`` 1..horizon.

    Raises:
        InvalidParameterError: On ``horizon < 1``, a negative interval
            width, an unknown level mode or an invalid smoothing factor.
        InsufficientHistoryError: With fewer than two history points.
    """
    if horizon < 1:
        raise InvalidParameterError(f"horizon must be >= 1, got {horizon}")
    if interval_width < 0:
        raise InvalidParameterError(f"interval_width must be >= 0, got {interval_width}")
    if level_mode not in LEVEL_MODES:
        raise InvalidParameterError(
            f"Unknown level_mode '{level_mode}'. Supported: {list(LEVEL_MODES)}"
        )
    values = as_series_array(series)
    if len(values) < MIN_HISTORY:
        raise InsufficientHistoryError(
            f"Forecasting needs at least {MIN_HISTORY} points, got {len(values)}"
        )

    trend = analyze_trend(values, flat_band_percent=flat_band_percent)
    level = _smoothed_level(values, trend.slope, trend.intercept, smoothing_alpha, level_mode)

    points = []
    for step in range(1, horizon + 1):
        value = max(level + trend.slope * step, 0.0)
        half_width = value * interval_width * np.sqrt(step)
        points.append(ForecastPoint(
            step_index=step,
            value=value,
            low=max(value - half_width, 0.0),
            high=value + half_width,
        ))

    logger.debug(
        f"Forecast {horizon} steps from {len(values)} points "
        f"(level={level:.2f}, slope={trend.slope:.4f}, mode={level_mode})"
    )
    return points


def seasonal_forecast(
    series: SeriesLike,
    horizon: int,
    period: int = SEASONAL_PERIOD,
    **forecast_kwargs,
) -> list[ForecastPoint]:
    """Forecast with a seasonal index applied on top of the trend forecast.

    The series is decomposed (multiplicative when every value is positive,
    additive otherwise), the seasonal component is removed, the adjusted
    series is forecast with :func:`forecast`, and each step is scaled by
    (or shifted by) the index of its slot ``(n + step - 1) mod period``.

    With fewer than two full cycles there is nothing to estimate the
    indices from, and the plain :func:`forecast` is returned instead.

    Args:
        series: Ordered history.
        horizon: Number of future steps, >= 1.
        period: Season length in steps (12 for monthly data).
        **forecast_kwargs: Settings passed to :func:`forecast`.
    """
    values = as_series_array(series)
    n = len(values)
    if n < 2 * period:
        logger.info(
            f"Seasonal forecast needs {2 * period} points, got {n}; using the plain forecast"
        )
        return forecast(values, horizon, **forecast_kwargs)

    model = MULTIPLICATIVE if np.all(values > 0) else ADDITIVE
    decomposition = decompose(values, period=period, model=model)
    indices = decomposition.seasonal_indices
    if model == MULTIPLICATIVE:
        adjusted = values / decomposition.seasonal_component()
    else:
        adjusted = values - decomposition.seasonal_component()

    points = []
    for point in forecast(adjusted, horizon, **forecast_kwargs):
        index = float(indices[(n + point.step_index - 1) % period])
        if model == MULTIPLICATIVE:
            value, low, high = point.value * index, point.low * index, point.high * index
        else:
            value, low, high = point.value + index, point.low + index, point.high + index
        points.append(ForecastPoint(
            step_index=point.step_index,
            value=max(value, 0.0),
            low=max(low, 0.0),
            high=max(high, 0.0),
        ))

    logger.debug(
        f"Seasonal forecast {horizon} steps ({model}, period={period}), "
        f"index range [{indices.min():.3f}, {indices.max():.3f}]"
    )
    return points


class Forecaster:
    """Config-driven wrapper around :func:`forecast`.

    Args:
        config: Engine configuration with a ``forecast`` section (and
            optionally ``trend`` and ``seasonality``). With
            ``forecast.seasonal`` set, predictions go through
            :func:`seasonal_forecast` using ``seasonality.period``.
    """

    def __init__(self, config: dict | None = None) -> None:
        config = config or {}
        forecast_cfg = config.get("forecast", {})
        self.horizon = forecast_cfg.get("horizon", 6)
        self.smoothing_alpha = forecast_cfg.get("smoothing_alpha", SMOOTHING_ALPHA)
        self.interval_width = forecast_cfg.get("interval_width", INTERVAL_WIDTH)
        self.level_mode = forecast_cfg.get("level_mode", LEVEL_DETRENDED)
        self.flat_band_percent = config.get("trend", {}).get("flat_band_percent", FLAT_BAND_PERCENT)
        self.seasonal = forecast_cfg.get("seasonal", False)
        self.period = config.get("seasonality", {}).get("period", SEASONAL_PERIOD)

    def predict(self, series: SeriesLike, horizon: int | None = None) -> list[ForecastPoint]:
        """Forecast with the configured settings; ``horizon`` overrides the config."""
        kwargs = {
            "smoothing_alpha": self.smoothing_alpha,
            "interval_width": self.interval_width,
            "level_mode": self.level_mode,
            "flat_band_percent": self.flat_band_percent,
        }
        steps = self.horizon if horizon is None else horizon
        if self.seasonal:
            return seasonal_forecast(series, steps, period=self.period, **kwargs)
        return forecast(series, steps, **kwargs)
