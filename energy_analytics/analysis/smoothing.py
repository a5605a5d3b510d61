"""Exponential smoothing filters: single, Holt (double) and Holt-Winters (triple)."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from energy_analytics.data.preprocessing import SeriesLike, as_series_array
from energy_analytics.errors import InsufficientHistoryError, InvalidParameterError

DEFAULT_ALPHA = 0.3

MULTIPLICATIVE = "multiplicative"
ADDITIVE = "additive"


def _check_factor(name: str, value: float) -> None:
    if not 0 < value <= 1:
        raise InvalidParameterError(f"{name} must be in (0, 1], got {value}")


def exponential_smoothing(series: SeriesLike, alpha: float = DEFAULT_ALPHA) -> np.ndarray:
    """Single exponential smoothing.

    result[0] = series[0]
    result[i] = alpha * series[i] + (1 - alpha) * result[i - 1]

    Args:
        series: Ordered numeric values.
        alpha: Smoothing factor in (0, 1]. ``alpha == 1`` returns the input.

    Returns:
        Smoothed array with the same length as ``series``.

    Raises:
        InvalidParameterError: If ``alpha`` is outside (0, 1].
    """
    _check_factor("alpha", alpha)
    values = as_series_array(series)
    smoothed = np.empty_like(values)
    if len(values) == 0:
        return smoothed
    smoothed[0] = values[0]
    for i in range(1, len(values)):
        smoothed[i] = alpha * values[i] + (1 - alpha) * smoothed[i - 1]
    return smoothed


@dataclass(frozen=True)
class HoltResult:
    """Level and trend components of double exponential smoothing.

    Attributes:
        level: Smoothed level per step.
        trend: Smoothed trend per step.
        fitted: One-step-ahead fitted values (``fitted[0]`` is the first value).
    """

    level: np.ndarray
    trend: np.ndarray
    fitted: np.ndarray

    def predict(self, steps: int) -> np.ndarray:
        """Extrapolate the last level and trend ``steps`` periods ahead."""
        if steps < 1:
            raise InvalidParameterError(f"steps must be >= 1, got {steps}")
        return self.level[-1] + self.trend[-1] * np.arange(1, steps + 1)


def holt_smoothing(
    series: SeriesLike,
    alpha: float = DEFAULT_ALPHA,
    beta: float = 0.1,
) -> HoltResult:
    """Double exponential smoothing (Holt's linear method).

    The trend is seeded with the first difference, so at least two values
    are required.

    Raises:
        InvalidParameterError: If a factor is outside (0, 1] or the series
            has fewer than two values.
    """
    _check_factor("alpha", alpha)
    _check_factor("beta", beta)
    values = as_series_array(series)
    if len(values) < 2:
        raise InvalidParameterError(
            f"Holt smoothing needs at least 2 values, got {len(values)}"
        )

    n = len(values)
    level = np.empty(n)
    trend = np.empty(n)
    fitted = np.empty(n)
    level[0] = values[0]
    trend[0] = values[1] - values[0]
    fitted[0] = values[0]
    for i in range(1, n):
        fitted[i] = level[i - 1] + trend[i - 1]
        level[i] = alpha * values[i] + (1 - alpha) * (level[i - 1] + trend[i - 1])
        trend[i] = beta * (level[i] - level[i - 1]) + (1 - beta) * trend[i - 1]
    return HoltResult(level=level, trend=trend, fitted=fitted)


@dataclass(frozen=True)
class HoltWintersResult:
    """Level, trend and seasonal components of triple exponential smoothing.

    Attributes:
        level: Smoothed level per step.
        trend: Smoothed trend per step.
        seasonal: Final seasonal index per slot (``t mod period``).
        fitted: One-step-ahead fitted values (``fitted[0]`` is the first value).
        period: Season length.
        model: "multiplicative" or "additive".
    """

    level: np.ndarray
    trend: np.ndarray
    seasonal: np.ndarray
    fitted: np.ndarray
    period: int
    model: str

    def predict(self, steps: int) -> np.ndarray:
        """Extrapolate level and trend, re-applying the seasonal index of each slot."""
        if steps < 1:
            raise InvalidParameterError(f"steps must be >= 1, got {steps}")
        n = len(self.level)
        h = np.arange(1, steps + 1)
        base = self.level[-1] + self.trend[-1] * h
        season = self.seasonal[(n + h - 1) % self.period]
        if self.model == MULTIPLICATIVE:
            return base * season
        return base + season


def holt_winters_smoothing(
    series: SeriesLike,
    period: int = 12,
    alpha: float = DEFAULT_ALPHA,
    beta: float = 0.1,
    gamma: float = 0.1,
    model: str = MULTIPLICATIVE,
) -> HoltWintersResult:
    """Triple exponential smoothing (Holt-Winters).

    Initial state comes from the first two seasons: the level is the mean
    of season one, the trend is the per-step change between the means of
    seasons one and two, and the seasonal indices are the first season's
    ratios to (or offsets from) the initial level.

    Args:
        series: Ordered numeric values.
        period: Season length in steps (12 for monthly data).
        alpha: Level smoothing factor in (0, 1].
        beta: Trend smoothing factor in (0, 1].
        gamma: Seasonal smoothing factor in (0, 1].
        model: "multiplicative" or "additive".

    Raises:
        InvalidParameterError: On a factor outside (0, 1], ``period < 2``,
            an unknown model, or non-positive values with the
            multiplicative model.
        InsufficientHistoryError: With fewer than two full seasons.
    """
    _check_factor("alpha", alpha)
    _check_factor("beta", beta)
    _check_factor("gamma", gamma)
    if model not in (MULTIPLICATIVE, ADDITIVE):
        raise InvalidParameterError(
            f"Unknown model '{model}'. Supported: {[MULTIPLICATIVE, ADDITIVE]}"
        )
    if period < 2:
        raise InvalidParameterError(f"period must be >= 2, got {period}")
    values = as_series_array(series)
    n = len(values)
    if n < 2 * period:
        raise InsufficientHistoryError(
            f"Holt-Winters needs two full seasons ({2 * period} points), got {n}"
        )
    multiplicative = model == MULTIPLICATIVE
    if multiplicative and np.any(values <= 0):
        raise InvalidParameterError(
            "Multiplicative Holt-Winters needs strictly positive values; use 'additive'"
        )

    level = np.empty(n)
    trend = np.empty(n)
    fitted = np.empty(n)
    level[0] = values[:period].mean()
    trend[0] = (values[period : 2 * period].mean() - level[0]) / period
    if multiplicative:
        seasonal = values[:period] / level[0]
    else:
        seasonal = values[:period] - level[0]
    fitted[0] = values[0]

    for i in range(1, n):
        slot = i % period
        season = seasonal[slot]
        projected = level[i - 1] + trend[i - 1]
        if multiplicative:
            fitted[i] = projected * season
            level[i] = alpha * (values[i] / season) + (1 - alpha) * projected
            seasonal[slot] = gamma * (values[i] / level[i]) + (1 - gamma) * season
        else:
            fitted[i] = projected + season
            level[i] = alpha * (values[i] - season) + (1 - alpha) * projected
            seasonal[slot] = gamma * (values[i] - level[i]) + (1 - gamma) * season
        trend[i] = beta * (level[i] - level[i - 1]) + (1 - beta) * trend[i - 1]

    return HoltWintersResult(
        level=level,
        trend=trend,
        seasonal=seasonal,
        fitted=fitted,
        period=period,
        model=model,
    )


def moving_average(series: SeriesLike, window: int = 3) -> np.ndarray:
    """Trailing simple moving average (``len - window + 1`` values).

    Series shorter than the window are returned unchanged.
    """
    if window < 1:
        raise InvalidParameterError(f"window must be >= 1, got {window}")
    values = as_series_array(series)
    if len(values) < window:
        return values
    kernel = np.ones(window) / window
    return np.convolve(values, kernel, mode="valid")
