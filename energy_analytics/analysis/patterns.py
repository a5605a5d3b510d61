"""Consumption pattern heuristics.

- Change points: index where the window mean after differs from the window
  mean before by more than ``threshold`` times their averaged std.
- Period comparison: totals and averages of two periods (e.g. this year
  against last year).
- Categorization: a reading's deviation from the historical average,
  bucketed into five levels.
- Peak month: calendar month with the largest value.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from typing import Any

from energy_analytics.data.preprocessing import SeriesLike, as_series_array, is_effectively_zero
from energy_analytics.errors import InvalidParameterError

logger = logging.getLogger(__name__)

MONTH_NAMES: list[str] = [
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
]

# Upper bounds (exclusive of the next band) of percent deviation from the average.
CATEGORY_BANDS: list[tuple[float, str, str]] = [
    (50.0, "very_high", "critical"),
    (25.0, "high", "high"),
    (-10.0, "normal", "medium"),
    (-25.0, "low", "low"),
]


@dataclass(frozen=True)
class ChangePoint:
    """Shift in level between the windows before and after ``index``."""

    index: int
    mean_before: float
    mean_after: float
    change: float
    relative_change_percent: float

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def detect_change_points(
    series: SeriesLike,
    threshold: float = 2.0,
    max_window: int = 10,
) -> list[ChangePoint]:
    """Detect level shifts with a sliding before/after window.

    The window is ``min(max_window, n // 4)``; series too short for a
    window of at least one point return no change points.

    Args:
        series: Ordered numeric values.
        threshold: Required mean shift in units of the averaged window std.
        max_window: Upper bound of the window length.

    Returns:
        Change points in index order.
    """
    if threshold < 0:
        raise InvalidParameterError(f"threshold must be >= 0, got {threshold}")
    values = as_series_array(series)
    window = min(max_window, len(values) // 4)
    if window < 1:
        return []

    points = []
    for i in range(window, len(values) - window):
        before = values[i - window : i]
        after = values[i : i + window]
        mean_before = float(before.mean())
        mean_after = float(after.mean())
        combined_std = (before.std() + after.std()) / 2
        shift = abs(mean_after - mean_before)
        if is_effectively_zero(shift, mean_before):
            continue
        if shift > threshold * combined_std:
            relative = 0.0 if is_effectively_zero(mean_before) else (mean_after - mean_before) / mean_before * 100
            points.append(ChangePoint(
                index=i,
                mean_before=mean_before,
                mean_after=mean_after,
                change=mean_after - mean_before,
                relative_change_percent=relative,
            ))
    return points


def compare_periods(current: SeriesLike, previous: SeriesLike) -> dict[str, Any]:
    """Compare totals and averages of two periods.

    Args:
        current: Values of the period under review.
        previous: Values of the reference period.

    Returns:
        Dict with per-period totals/averages and percent changes. Changes
        are 0.0 when the reference total or average is zero.
    """
    cur = as_series_array(current)
    prev = as_series_array(previous)
    if len(cur) == 0 or len(prev) == 0:
        raise InvalidParameterError("Both periods need at least one value")

    cur_total, prev_total = float(cur.sum()), float(prev.sum())
    cur_avg, prev_avg = float(cur.mean()), float(prev.mean())
    total_change = 0.0 if is_effectively_zero(prev_total) else (cur_total - prev_total) / prev_total * 100
    avg_change = 0.0 if is_effectively_zero(prev_avg) else (cur_avg - prev_avg) / prev_avg * 100
    return {
        "current": {"total": cur_total, "average": cur_avg},
        "previous": {"total": prev_total, "average": prev_avg},
        "total_change_percent": total_change,
        "average_change_percent": avg_change,
        "increased": total_change > 0,
    }


def categorize_consumption(value: float, historical_average: float) -> dict[str, str]:
    """Bucket a reading by its deviation from the historical average.

    Raises:
        InvalidParameterError: If ``historical_average`` is not positive.
    """
    if historical_average <= 0:
        raise InvalidParameterError(
            f"historical_average must be > 0, got {historical_average}"
        )
    percent = (value / historical_average - 1) * 100
    for bound, category, severity in CATEGORY_BANDS:
        if percent > bound:
            return {"category": category, "severity": severity}
    return {"category": "very_low", "severity": "low"}


def peak_month(monthly_values: SeriesLike) -> dict[str, Any]:
    """Find the calendar month with the largest consumption.

    Args:
        monthly_values: Twelve values, January first.
    """
    values = as_series_array(monthly_values)
    if len(values) != 12:
        raise InvalidParameterError(f"Expected 12 monthly values, got {len(values)}")
    idx = int(values.argmax())
    return {"month": MONTH_NAMES[idx], "index": idx, "value": float(values[idx])}
