"""Aggregation of raw consumption records into monthly series.

This is the only boundary that tolerates duplicate or out-of-order input.
Records are grouped by (location, source), duplicate periods are summed
(several readings in one month are partial consumption, not conflicting
measurements) and each group is sorted ascending by (year, month).

Missing months are reported, never filled: a gap is absent data, not zero
consumption.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any

import numpy as np
import pandas as pd

from energy_analytics.errors import EmptySeriesError, InvalidParameterError

logger = logging.getLogger(__name__)

Period = tuple[int, int]

RECORD_COLUMNS: list[str] = ["location", "source", "year", "month", "value"]


@dataclass(frozen=True)
class Observation:
    """A single raw reading as exported by the persistence store."""

    location: str
    source: str
    year: int
    month: int
    value: float


@dataclass(frozen=True)
class SeriesKey:
    """Grouping key of a series."""

    location: str
    source: str


@dataclass(frozen=True)
class ObservationPoint:
    """One aggregated (year, month) value."""

    period: Period
    value: float

    def to_dict(self) -> dict[str, Any]:
        return {"period": list(self.period), "value": self.value}


@dataclass(frozen=True)
class Series:
    """Ordered monthly series, strictly increasing by period.

    Attributes:
        points: Aggregated points sorted by period.
        key: Grouping key, or None for series built from bare points.
    """

    points: tuple[ObservationPoint, ...]
    key: SeriesKey | None = None

    def __len__(self) -> int:
        return len(self.points)

    @property
    def values(self) -> np.ndarray:
        """Consumption values as a float array."""
        return np.array([p.value for p in self.points], dtype=np.float64)

    @property
    def periods(self) -> list[Period]:
        return [p.period for p in self.points]

    def missing_periods(self) -> list[Period]:
        """List the calendar months absent between the first and last period."""
        if len(self.points) < 2:
            return []
        present = {_period_index(p) for p in self.periods}
        first = _period_index(self.periods[0])
        last = _period_index(self.periods[-1])
        return [_index_period(i) for i in range(first, last + 1) if i not in present]

    def is_contiguous(self) -> bool:
        return not self.missing_periods()

    def to_dict(self) -> dict[str, Any]:
        return {
            "key": asdict(self.key) if self.key is not None else None,
            "points": [p.to_dict() for p in self.points],
        }


def _period_index(period: Period) -> int:
    year, month = period
    return year * 12 + (month - 1)


def _index_period(index: int) -> Period:
    return index // 12, index % 12 + 1


def _records_to_frame(records: Iterable[Observation | Mapping[str, Any]] | pd.DataFrame) -> pd.DataFrame:
    """Normalize the accepted record shapes into a validated DataFrame."""
    if isinstance(records, pd.DataFrame):
        df = records.copy()
    else:
        rows = [asdict(r) if isinstance(r, Observation) else dict(r) for r in records]
        df = pd.DataFrame(rows, columns=RECORD_COLUMNS if not rows else None)

    missing = [c for c in RECORD_COLUMNS if c not in df.columns]
    if missing:
        raise InvalidParameterError(f"Records are missing required columns: {missing}")
    df = df[RECORD_COLUMNS].copy()
    if df.empty:
        return df

    if df[RECORD_COLUMNS].isna().any().any():
        raise InvalidParameterError(
            f"Records contain {int(df.isna().any(axis=1).sum())} rows with missing fields"
        )

    for column in ("year", "month"):
        numeric = pd.to_numeric(df[column], errors="coerce")
        fractional = numeric.isna() | (numeric % 1 != 0)
        if fractional.any():
            raise InvalidParameterError(
                f"{column} must be an integer, got {df.loc[fractional, column].tolist()}"
            )
        df[column] = numeric

    df = df.astype({"location": str, "source": str, "year": int, "month": int, "value": float})

    bad_months = df[(df["month"] < 1) | (df["month"] > 12)]
    if not bad_months.empty:
        raise InvalidParameterError(
            f"Month must be in 1..12, got {sorted(bad_months['month'].unique().tolist())}"
        )
    if (df["value"] < 0).any():
        raise InvalidParameterError(
            f"Consumption values must be >= 0, found {int((df['value'] < 0).sum())} negative"
        )
    if np.isinf(df["value"].values).any():
        raise InvalidParameterError("Consumption values must be finite")
    return df


def aggregate_observations(
    records: Iterable[Observation | Mapping[str, Any]] | pd.DataFrame,
) -> dict[SeriesKey, Series]:
    """Collapse raw records into one ordered series per (location, source).

    Args:
        records: ``Observation`` instances, mappings with the keys
            ``location, source, year, month, value``, or a DataFrame with
            those columns. Order and duplicates are irrelevant.

    Returns:
        Dict mapping ``SeriesKey`` to its ``Series``, sorted by key.

    Raises:
        InvalidParameterError: On missing fields, non-integral years or
            months, months outside 1..12 or negative values.
    """
    df = _records_to_frame(records)
    if df.empty:
        return {}

    n_raw = len(df)
    monthly = (
        df.groupby(["location", "source", "year", "month"], sort=True)["value"]
        .sum()
        .reset_index()
    )
    logger.info(
        f"Aggregated {n_raw} records into {len(monthly)} monthly points "
        f"({n_raw - len(monthly)} duplicate readings summed)"
    )

    result: dict[SeriesKey, Series] = {}
    for (location, source), group in monthly.groupby(["location", "source"], sort=True):
        key = SeriesKey(location=location, source=source)
        points = tuple(
            ObservationPoint(period=(int(y), int(m)), value=float(v))
            for y, m, v in zip(group["year"], group["month"], group["value"])
        )
        series = Series(points=points, key=key)
        gaps = series.missing_periods()
        if gaps:
            logger.warning(
                f"  Series {location}/{source} has {len(gaps)} missing months "
                f"(first: {gaps[0][0]}-{gaps[0][1]:02d}); statistics assume contiguity"
            )
        result[key] = series
    return result


def get_series(
    records: Iterable[Observation | Mapping[str, Any]] | pd.DataFrame,
    location: str,
    source: str,
) -> Series:
    """Aggregate ``records`` and return the series of one key.

    Raises:
        EmptySeriesError: If no record matches (location, source).
    """
    key = SeriesKey(location=location, source=source)
    series = aggregate_observations(records).get(key)
    if series is None or len(series) == 0:
        raise EmptySeriesError(f"No observations for location={location!r}, source={source!r}")
    return series


def build_series(
    points: Iterable[ObservationPoint | Mapping[str, Any] | tuple[Period, float]],
    key: SeriesKey | None = None,
) -> Series:
    """Build a series from bare (period, value) points.

    Points may arrive unordered and with repeated periods; they are sorted
    and summed exactly like keyed records.

    Raises:
        EmptySeriesError: If ``points`` is empty.
        InvalidParameterError: On malformed periods or negative values.
    """
    rows = []
    for point in points:
        if isinstance(point, ObservationPoint):
            period, value = point.period, point.value
        elif isinstance(point, Mapping):
            period, value = point["period"], point["value"]
        else:
            period, value = point
        year, month = period
        rows.append({
            "location": key.location if key else "",
            "source": key.source if key else "",
            "year": year,
            "month": month,
            "value": value,
        })
    if not rows:
        raise EmptySeriesError("Cannot build a series from zero points")

    series = next(iter(aggregate_observations(rows).values()))
    return Series(points=series.points, key=key)


def load_observations_csv(
    csv_path: Path,
    column_map: dict[str, str] | None = None,
) -> pd.DataFrame:
    """Load raw observations exported from the persistence store.

    Args:
        csv_path: CSV file with one reading per row.
        column_map: Optional renaming from CSV headers to the record columns
            (e.g. ``{"municipio": "location", "valor_kwh": "value"}``).

    Returns:
        DataFrame with the columns ``location, source, year, month, value``.

    Raises:
        FileNotFoundError: If the CSV does not exist.
    """
    csv_path = Path(csv_path)
    if not csv_path.exists():
        raise FileNotFoundError(f"Observations file not found: {csv_path}")
    df = pd.read_csv(csv_path)
    if column_map:
        df = df.rename(columns=column_map)
    df = _records_to_frame(df)
    logger.info(f"Loaded {len(df)} observations from {csv_path.name}")
    return df
