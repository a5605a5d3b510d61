"""Sigma-band anomaly detection.

Decision rule:
    flagged(i) = |value(i) - mean| > sigma_threshold * std
    kind(i)    = "high" if value(i) > mean else "low"

Mean and population standard deviation are computed once over the whole
series. A constant series has no anomalies.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from typing import Any

import numpy as np

from energy_analytics.data.preprocessing import SeriesLike, as_series_array, is_effectively_zero
from energy_analytics.errors import InvalidParameterError

logger = logging.getLogger(__name__)

HIGH = "high"
LOW = "low"

DEFAULT_SIGMA_THRESHOLD = 1.5


@dataclass(frozen=True)
class PeakFlag:
    """A point outside the sigma band.

    Attributes:
        index: Position in the series.
        value: Observed value.
        deviation_in_sigma: Distance from the mean in standard deviations
            (always positive; ``kind`` carries the side).
        kind: "high" or "low".
    """

    index: int
    value: float
    deviation_in_sigma: float
    kind: str

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def detect_peaks(
    series: SeriesLike,
    sigma_threshold: float = DEFAULT_SIGMA_THRESHOLD,
) -> list[PeakFlag]:
    """Flag points deviating from the mean by more than ``sigma_threshold`` std.

    Args:
        series: Ordered numeric values.
        sigma_threshold: Band half-width in standard deviations.

    Returns:
        Flags in index order. Empty for empty or constant series.

    Raises:
        InvalidParameterError: If ``sigma_threshold`` is negative.
    """
    if sigma_threshold < 0:
        raise InvalidParameterError(f"sigma_threshold must be >= 0, got {sigma_threshold}")
    values = as_series_array(series)
    if len(values) == 0:
        return []

    mean = float(values.mean())
    std = float(values.std(ddof=0))
    if is_effectively_zero(std, mean):
        return []

    flags = []
    for i, value in enumerate(values):
        deviation = abs(value - mean)
        if deviation > sigma_threshold * std:
            flags.append(PeakFlag(
                index=i,
                value=float(value),
                deviation_in_sigma=deviation / std,
                kind=HIGH if value > mean else LOW,
            ))

    logger.debug(
        f"Peaks: {len(flags)}/{len(values)} flagged "
        f"(mean={mean:.2f}, std={std:.2f}, threshold={sigma_threshold} sigma)"
    )
    return flags
