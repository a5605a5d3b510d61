"""Linear trend classification.

Fits an ordinary least-squares line over the index 0..n-1 and classifies
the direction by the slope relative to the series mean:

    percent_change_per_step = slope / mean * 100
    rising   if percent_change_per_step >  flat_band_percent
    falling  if percent_change_per_step < -flat_band_percent
    flat     otherwise

The relative band keeps noise from flipping the direction of large series
and keeps small series from looking flat just because the slope is small.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from typing import Any

import numpy as np

from energy_analytics.data.preprocessing import SeriesLike, as_series_array, is_effectively_zero

logger = logging.getLogger(__name__)

RISING = "rising"
FALLING = "falling"
FLAT = "flat"

FLAT_BAND_PERCENT = 1.0


@dataclass(frozen=True)
class TrendResult:
    """Direction and magnitude of the linear trend.

    Attributes:
        direction: "rising", "falling" or "flat".
        slope: OLS slope in units per step.
        percent_change_per_step: Slope as a percentage of the series mean.
        intercept: OLS intercept at index 0.
    """

    direction: str
    slope: float
    percent_change_per_step: float
    intercept: float = 0.0

    def fitted(self, index: float) -> float:
        """Value of the fitted line at ``index``."""
        return self.intercept + self.slope * index

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def linear_regression(series: SeriesLike) -> tuple[float, float]:
    """Closed-form OLS fit of ``series`` against its index.

    Args:
        series: At least two values.

    Returns:
        Tuple of (slope, intercept).
    """
    y = as_series_array(series)
    n = len(y)
    if n < 2:
        return 0.0, float(y[0]) if n else 0.0
    x = np.arange(n, dtype=np.float64)
    x_mean = x.mean()
    y_mean = y.mean()
    slope = float(np.sum((x - x_mean) * (y - y_mean)) / np.sum((x - x_mean) ** 2))
    intercept = float(y_mean - slope * x_mean)
    return slope, intercept


def analyze_trend(
    series: SeriesLike,
    flat_band_percent: float = FLAT_BAND_PERCENT,
) -> TrendResult:
    """Classify the linear trend of a series.

    Series shorter than two points degrade to a flat trend with zero slope
    instead of raising, since short histories are common.

    Args:
        series: Ordered numeric values.
        flat_band_percent: Half-width of the "flat" band, in percent of the
            mean per step.

    Returns:
        A ``TrendResult``.
    """
    values = as_series_array(series)
    if len(values) < 2:
        intercept = float(values[0]) if len(values) else 0.0
        return TrendResult(direction=FLAT, slope=0.0, percent_change_per_step=0.0, intercept=intercept)

    slope, intercept = linear_regression(values)
    mean = float(values.mean())
    if is_effectively_zero(mean):
        percent = 0.0
    else:
        percent = slope / mean * 100

    if percent > flat_band_percent:
        direction = RISING
    elif percent < -flat_band_percent:
        direction = FALLING
    else:
        direction = FLAT

    logger.debug(
        f"Trend over {len(values)} points: slope={slope:.4f}, "
        f"{percent:+.2f}%/step -> {direction}"
    )
    return TrendResult(
        direction=direction,
        slope=slope,
        percent_change_per_step=percent,
        intercept=intercept,
    )
