"""Residual diagnostics for backtested forecasts.

Well-behaved residuals look like white noise: centred on zero, with no
serial correlation. Serial correlation is tested with the Ljung-Box
statistic from statsmodels over the first ``min(10, n - 1)`` lags; the
short-lag ACF is reported alongside it. Skewness and excess kurtosis
describe how far the distribution departs from normal.
"""

from __future__ import annotations

import logging
from typing import Any

import numpy as np
from scipy import stats
from statsmodels.stats.diagnostic import acorr_ljungbox

from energy_analytics.analysis.autocorrelation import CYCLE_THRESHOLD, compute_acf
from energy_analytics.data.preprocessing import SeriesLike, as_series_array, is_effectively_zero
from energy_analytics.errors import InsufficientHistoryError, InvalidParameterError

logger = logging.getLogger(__name__)

RESIDUAL_ACF_LAGS = 10
LJUNG_BOX_SIGNIFICANCE = 0.05


def ljung_box_pvalue(values: np.ndarray, max_lag: int = RESIDUAL_ACF_LAGS) -> float | None:
    """Ljung-Box p-value at lag ``min(max_lag, n - 1)``.

    None when the test is undefined (fewer than 3 values or no variance).
    """
    n = len(values)
    if n < 3 or is_effectively_zero(float(values.std()), float(values.mean())):
        return None
    lag = min(max_lag, n - 1)
    lb = acorr_ljungbox(values, lags=[lag], return_df=True)
    pvalue = float(lb["lb_pvalue"].iloc[-1])
    return None if np.isnan(pvalue) else pvalue


def analyze_residuals(residuals: SeriesLike, scale: float | None = None) -> dict[str, Any]:
    """Summarize residuals and grade the fit.

    Args:
        residuals: Actual minus predicted values.
        scale: Reference magnitude for the bias check (e.g. mean of the
            actuals). The mean residual counts as unbiased when it is within
            10% of ``scale`` (or of the residual std when ``scale`` is None).

    Returns:
        Dict with mean, variance, std, skewness, excess kurtosis, the
        residual ACF, a short-lag autocorrelation flag, the Ljung-Box
        p-value, a white-noise flag and a quality grade ("good",
        "acceptable" or "poor"). Residuals are white noise when they are
        unbiased and Ljung-Box does not reject independence at 5%. When
        Ljung-Box is undefined the ACF flag decides instead.

    Raises:
        InsufficientHistoryError: With fewer than 3 residuals.
    """
    values = as_series_array(residuals)
    if len(values) < 3:
        raise InsufficientHistoryError(
            f"Residual analysis needs at least 3 values, got {len(values)}"
        )

    mean = float(values.mean())
    std = float(values.std())
    constant = is_effectively_zero(std, mean)
    # scipy returns NaN for zero-variance input; report 0 instead
    skewness = 0.0 if constant else float(stats.skew(values))
    kurtosis = 0.0 if constant else float(stats.kurtosis(values))

    acf = compute_acf(values, RESIDUAL_ACF_LAGS)
    autocorrelated = any(entry.is_cycle_candidate(CYCLE_THRESHOLD) for entry in acf)

    lb_pvalue = ljung_box_pvalue(values)
    if lb_pvalue is None:
        serially_correlated = autocorrelated
    else:
        serially_correlated = lb_pvalue < LJUNG_BOX_SIGNIFICANCE

    reference = abs(scale) if scale is not None else std
    unbiased = abs(mean) <= 0.1 * reference if reference > 0 else is_effectively_zero(mean)
    white_noise = unbiased and not serially_correlated

    if white_noise:
        quality = "good"
    elif unbiased or not serially_correlated:
        quality = "acceptable"
    else:
        quality = "poor"

    lb_text = "n/a" if lb_pvalue is None else f"{lb_pvalue:.4f}"
    logger.debug(
        f"Residuals: mean={mean:.3f}, std={std:.3f}, "
        f"Ljung-Box p={lb_text}, quality={quality}"
    )
    return {
        "mean": mean,
        "variance": float(values.var()),
        "std": std,
        "skewness": skewness,
        "kurtosis": kurtosis,
        "acf": [entry.to_dict() for entry in acf],
        "autocorrelated": autocorrelated,
        "ljung_box_pvalue": lb_pvalue,
        "white_noise": white_noise,
        "quality": quality,
    }


def backtest_residuals(actual: SeriesLike, predicted: SeriesLike) -> np.ndarray:
    """Element-wise residuals ``actual - predicted``."""
    actual_arr = as_series_array(actual)
    predicted_arr = as_series_array(predicted)
    if len(actual_arr) != len(predicted_arr):
        raise InvalidParameterError(
            f"Length mismatch: {len(actual_arr)} actual vs {len(predicted_arr)} predicted"
        )
    return actual_arr - predicted_arr
