"""Numeric series utilities shared by the analysis components.

Handles input validation, chronological train/test splitting and
first-order differencing.
"""

from collections.abc import Sequence

import numpy as np

from energy_analytics.errors import InvalidParameterError

SeriesLike = Sequence[float] | np.ndarray


def as_series_array(series: SeriesLike) -> np.ndarray:
    """Convert a numeric sequence into a 1-D float array.

    Args:
        series: Sequence of numbers or 1-D array.

    Returns:
        1-D float64 array (a copy; the input is never modified).

    Raises:
        InvalidParameterError: If the input is not 1-D or contains NaN/Inf.
    """
    values = np.array(series, dtype=np.float64)
    if values.ndim != 1:
        raise InvalidParameterError(
            f"Series must be one-dimensional, got shape {values.shape}"
        )
    if np.isnan(values).any():
        raise InvalidParameterError(
            f"Series contains {int(np.isnan(values).sum())} NaN values. "
            f"Clean the data before analysis."
        )
    if np.isinf(values).any():
        raise InvalidParameterError(
            f"Series contains {int(np.isinf(values).sum())} Inf values. "
            f"Clean the data before analysis."
        )
    return values


def is_effectively_zero(value: float, scale: float = 1.0) -> bool:
    """Return True when ``value`` is zero up to floating point noise.

    The tolerance scales with ``scale`` (typically the series mean), so a
    constant series of 0.1 readings is treated the same as one of 1000.
    """
    return abs(value) <= 1e-12 * max(1.0, abs(scale))


def temporal_split(
    series: SeriesLike,
    train_ratio: float = 0.8,
) -> tuple[np.ndarray, np.ndarray]:
    """Split a series chronologically into train and test parts.

    Args:
        series: Ordered series values.
        train_ratio: Fraction of points kept for training.

    Returns:
        Tuple of (train, test) arrays.

    Raises:
        InvalidParameterError: If ``train_ratio`` is not in (0, 1).
    """
    if not 0 < train_ratio < 1:
        raise InvalidParameterError(f"train_ratio must be in (0, 1), got {train_ratio}")
    values = as_series_array(series)
    n_train = int(len(values) * train_ratio)
    return values[:n_train], values[n_train:]


def difference(series: SeriesLike, order: int = 1) -> np.ndarray:
    """Apply ``order`` rounds of first-order differencing.

    Raises:
        InvalidParameterError: If ``order`` is negative.
    """
    if order < 0:
        raise InvalidParameterError(f"order must be >= 0, got {order}")
    values = as_series_array(series)
    for _ in range(order):
        values = np.diff(values)
    return values


def integrate(differences: SeriesLike, initial_value: float) -> np.ndarray:
    """Invert a single round of differencing starting at ``initial_value``."""
    diffs = as_series_array(differences)
    return np.concatenate([[initial_value], initial_value + np.cumsum(diffs)])
