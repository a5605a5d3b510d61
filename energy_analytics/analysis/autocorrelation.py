"""Autocorrelation function and cycle candidate detection.

The correlation at lag k is the Pearson correlation between the leading
slice ``series[0:n-k]`` and the lagged slice ``series[k:n]``. Lags are
bounded by ``floor(n / 2)``: beyond that the overlapping slices are too
short to say anything about periodicity.

A lag is a cycle candidate when ``|correlation| >= 0.2``. The band is an
empirical cut-off, not a significance test.

The partial autocorrelation (PACF) comes from statsmodels' Yule-Walker
estimator and is reported with the same ``AcfEntry`` shape.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from typing import Any

import numpy as np
from statsmodels.tsa.stattools import pacf

from energy_analytics.data.preprocessing import SeriesLike, as_series_array, is_effectively_zero

logger = logging.getLogger(__name__)

CYCLE_THRESHOLD = 0.2


@dataclass(frozen=True)
class AcfEntry:
    """Correlation of the series with itself shifted by ``lag`` steps."""

    lag: int
    correlation: float

    def is_cycle_candidate(self, threshold: float = CYCLE_THRESHOLD) -> bool:
        return abs(self.correlation) >= threshold

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def _pearson(a: np.ndarray, b: np.ndarray) -> float:
    """Pearson correlation, 0.0 when either slice has no variance."""
    if is_effectively_zero(float(a.std()), float(a.mean())) or is_effectively_zero(
        float(b.std()), float(b.mean())
    ):
        return 0.0
    a_dev = a - a.mean()
    b_dev = b - b.mean()
    ss_a = float(np.sum(a_dev ** 2))
    ss_b = float(np.sum(b_dev ** 2))
    corr = float(np.sum(a_dev * b_dev) / np.sqrt(ss_a * ss_b))
    return float(np.clip(corr, -1.0, 1.0))


def compute_acf(series: SeriesLike, max_lag: int) -> list[AcfEntry]:
    """Compute the autocorrelation function for lags 1..max_lag.

    Args:
        series: Ordered numeric values.
        max_lag: Requested maximum lag, clamped to ``floor(len(series) / 2)``.

    Returns:
        One ``AcfEntry`` per lag, starting at lag 1. Empty when the clamped
        maximum lag is below 1. Lag 0 is never included.
    """
    values = as_series_array(series)
    n = len(values)
    clamped = min(int(max_lag), n // 2)
    if clamped < max_lag:
        logger.debug(f"ACF max_lag clamped from {max_lag} to {clamped} (n={n})")
    if clamped < 1:
        return []

    return [
        AcfEntry(lag=lag, correlation=_pearson(values[: n - lag], values[lag:]))
        for lag in range(1, clamped + 1)
    ]


def compute_pacf(series: SeriesLike, max_lag: int) -> list[AcfEntry]:
    """Compute the partial autocorrelation function for lags 1..max_lag.

    The lag is clamped to ``floor(n / 2) - 1`` (the Yule-Walker estimator
    needs more than twice as many points as lags). A series with no
    variance gets 0.0 at every lag.
    """
    values = as_series_array(series)
    n = len(values)
    clamped = min(int(max_lag), n // 2 - 1)
    if clamped < max_lag:
        logger.debug(f"PACF max_lag clamped from {max_lag} to {clamped} (n={n})")
    if clamped < 1:
        return []

    if is_effectively_zero(float(values.std()), float(values.mean())):
        return [AcfEntry(lag=lag, correlation=0.0) for lag in range(1, clamped + 1)]

    partial = pacf(values, nlags=clamped, method="ywm")
    return [
        AcfEntry(lag=lag, correlation=float(np.clip(np.nan_to_num(partial[lag]), -1.0, 1.0)))
        for lag in range(1, clamped + 1)
    ]


def cycle_candidates(
    acf: list[AcfEntry],
    threshold: float = CYCLE_THRESHOLD,
) -> list[AcfEntry]:
    """Return the lags flagged as cycle candidates, strongest first."""
    candidates = [entry for entry in acf if entry.is_cycle_candidate(threshold)]
    return sorted(candidates, key=lambda e: (-abs(e.correlation), e.lag))
