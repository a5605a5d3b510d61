"""Seasonal decomposition and stationarity testing.

Decomposition uses statsmodels:
    - "multiplicative" / "additive": classical moving-average decomposition
      (``seasonal_decompose``) with the trend extrapolated over the edges
    - "stl": robust STL (LOESS) decomposition, additive

Seasonal indices are one value per slot ``s = t mod period``, normalized to
mean 1 (multiplicative) or 0 (additive, stl). The residual is always
expressed in the units of the series:

    residual(t) = value - trend * seasonal   (multiplicative)
                  value - trend - seasonal   (additive, stl)

Two full cycles are required to estimate the seasonal indices.

Stationarity is decided by an augmented Dickey-Fuller test when the series
is long enough and not constant; the half-mean shift screen is always
reported next to it and is the fallback otherwise.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

import numpy as np
import pandas as pd
from statsmodels.tsa.seasonal import STL, seasonal_decompose
from statsmodels.tsa.stattools import adfuller

from energy_analytics.data.preprocessing import SeriesLike, as_series_array, is_effectively_zero
from energy_analytics.errors import InsufficientHistoryError, InvalidParameterError

logger = logging.getLogger(__name__)

MULTIPLICATIVE = "multiplicative"
ADDITIVE = "additive"
STL_MODEL = "stl"
MODELS = (MULTIPLICATIVE, ADDITIVE, STL_MODEL)

# Relative shift between half-means above which a series is non-stationary.
STATIONARITY_TOLERANCE = 0.2

ADF_SIGNIFICANCE = 0.05
# Below this length the ADF regression has too few degrees of freedom.
ADF_MIN_POINTS = 10


@dataclass(frozen=True)
class Decomposition:
    """Trend, seasonal and residual components of a series."""

    trend: np.ndarray
    seasonal_indices: np.ndarray
    residual: np.ndarray
    period: int
    model: str

    def seasonal_component(self) -> np.ndarray:
        """Seasonal index aligned with every point of the series."""
        n = len(self.trend)
        return self.seasonal_indices[np.arange(n) % self.period]

    def to_dict(self) -> dict[str, Any]:
        return {
            "period": self.period,
            "model": self.model,
            "trend": self.trend.tolist(),
            "seasonal_indices": self.seasonal_indices.tolist(),
            "residual": self.residual.tolist(),
        }


def decompose(
    series: SeriesLike,
    period: int = 12,
    model: str = MULTIPLICATIVE,
) -> Decomposition:
    """Split a series into trend, seasonal and residual parts.

    Args:
        series: Ordered numeric values.
        period: Season length in steps (12 for monthly data).
        model: "multiplicative", "additive" or "stl".

    Returns:
        A ``Decomposition``.

    Raises:
        InvalidParameterError: On an unknown model, ``period < 2``, or
            non-positive values with the multiplicative model.
        InsufficientHistoryError: With fewer than two full cycles.
    """
    if model not in MODELS:
        raise InvalidParameterError(f"Unknown model '{model}'. Supported: {list(MODELS)}")
    if period < 2:
        raise InvalidParameterError(f"period must be >= 2, got {period}")
    values = as_series_array(series)
    if len(values) < 2 * period:
        raise InsufficientHistoryError(
            f"Decomposition needs two full cycles ({2 * period} points), got {len(values)}"
        )
    if model == MULTIPLICATIVE and np.any(values <= 0):
        raise InvalidParameterError(
            "Multiplicative decomposition needs strictly positive values; use 'additive'"
        )

    slots = np.arange(len(values)) % period

    if model == STL_MODEL:
        fitted = STL(values, period=period, robust=True).fit()
        trend = np.asarray(fitted.trend, dtype=np.float64)
        indices = pd.Series(np.asarray(fitted.seasonal)).groupby(slots).mean().to_numpy()
        indices = indices - indices.mean()
    else:
        fitted = seasonal_decompose(
            values, model=model, period=period, extrapolate_trend="freq"
        )
        trend = np.asarray(fitted.trend, dtype=np.float64)
        indices = np.asarray(fitted.seasonal[:period], dtype=np.float64)

    if model == MULTIPLICATIVE:
        mean_index = indices.mean()
        if not is_effectively_zero(mean_index):
            indices = indices / mean_index
        residual = values - trend * indices[slots]
    else:
        residual = values - trend - indices[slots]

    logger.debug(
        f"Decomposed {len(values)} points ({model}, period={period}): "
        f"seasonal range [{indices.min():.3f}, {indices.max():.3f}]"
    )
    return Decomposition(
        trend=trend,
        seasonal_indices=indices,
        residual=residual,
        period=period,
        model=model,
    )


def _adf_test(values: np.ndarray) -> dict[str, Any] | None:
    """Augmented Dickey-Fuller test, None when the series cannot support it."""
    n = len(values)
    if n < ADF_MIN_POINTS or is_effectively_zero(float(values.std()), float(values.mean())):
        return None
    # adfuller requires maxlag < n/2 - 2 with a constant term
    maxlag = min(int(np.ceil(12 * (n / 100) ** 0.25)), n // 2 - 3)
    adf_stat, adf_pval, adf_usedlag, adf_nobs, adf_crit, _ = adfuller(
        values, maxlag=maxlag, autolag="AIC"
    )
    if not np.isfinite(adf_pval):
        logger.debug("ADF p-value undefined for this series; using the mean-shift screen")
        return None
    return {
        "statistic": float(adf_stat),
        "pvalue": float(adf_pval),
        "used_lag": int(adf_usedlag),
        "nobs": int(adf_nobs),
        "critical_values": {k: float(v) for k, v in adf_crit.items()},
    }


def check_stationarity(series: SeriesLike) -> dict[str, Any]:
    """Test whether the series is stationary.

    Runs an augmented Dickey-Fuller test (``autolag="AIC"``): a p-value
    below 0.05 rejects the unit root. Series shorter than 10 points or
    without variance skip the test (``adf_pvalue`` is None) and fall back
    to the half-mean screen, where a relative mean shift below 20% of the
    overall mean counts as stationary. Both results are always reported.

    Raises:
        InsufficientHistoryError: With fewer than 4 points.
    """
    values = as_series_array(series)
    if len(values) < 4:
        raise InsufficientHistoryError(
            f"Stationarity check needs at least 4 points, got {len(values)}"
        )
    half = len(values) // 2
    mean = float(values.mean())
    shift = abs(float(values[half:].mean()) - float(values[:half].mean()))
    relative_shift = 0.0 if is_effectively_zero(mean) else shift / abs(mean)
    mean_shift_stationary = relative_shift < STATIONARITY_TOLERANCE

    adf = _adf_test(values)
    if adf is None:
        stationary = mean_shift_stationary
        method = "mean_shift"
    else:
        stationary = adf["pvalue"] < ADF_SIGNIFICANCE
        method = "adf"
        logger.debug(
            f"ADF stat={adf['statistic']:.3f} p={adf['pvalue']:.4f} lag={adf['used_lag']}"
        )

    return {
        "stationary": bool(stationary),
        "method": method,
        "adf_statistic": None if adf is None else adf["statistic"],
        "adf_pvalue": None if adf is None else adf["pvalue"],
        "adf_critical_values": None if adf is None else adf["critical_values"],
        "mean_shift_stationary": bool(mean_shift_stationary),
        "relative_mean_shift": relative_shift,
        "mean": mean,
        "variance": float(values.var()),
        "recommendation": "none" if stationary else "apply differencing",
    }
