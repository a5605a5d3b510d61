"""End-to-end analysis of one consumption series.

Runs every component over the same series in a single synchronous call:

    trend -> smoothing -> ACF / cycles / PACF -> peaks -> change points
          -> forecast -> backtest + residuals -> seasonality

Optional stages (backtest, residual diagnostics, seasonal decomposition,
stationarity) are skipped with a warning when the history is too short;
the mandatory stages propagate their errors.

Public API:
    ``run_analysis()``       - full report for a numeric series or ``Series``
    ``analyze_observations()`` - aggregate raw records and report per key
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import numpy as np
import pandas as pd

from energy_analytics.analysis.autocorrelation import (
    AcfEntry,
    compute_acf,
    compute_pacf,
    cycle_candidates,
)
from energy_analytics.analysis.patterns import ChangePoint, detect_change_points
from energy_analytics.analysis.peaks import PeakFlag, detect_peaks
from energy_analytics.analysis.seasonality import (
    ADDITIVE,
    MULTIPLICATIVE,
    Decomposition,
    check_stationarity,
    decompose,
)
from energy_analytics.analysis.smoothing import exponential_smoothing
from energy_analytics.analysis.trend import TrendResult, analyze_trend
from energy_analytics.data.aggregation import Observation, Series, SeriesKey, aggregate_observations
from energy_analytics.data.preprocessing import SeriesLike, as_series_array
from energy_analytics.errors import InsufficientHistoryError
from energy_analytics.evaluation.backtest import run_backtest
from energy_analytics.evaluation.metrics import AccuracyReport
from energy_analytics.evaluation.residuals import analyze_residuals, backtest_residuals
from energy_analytics.forecasting.forecaster import ForecastPoint, Forecaster
from energy_analytics.utils.config import resolve_config

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AnalysisReport:
    """Every result computed for one series."""

    values: np.ndarray
    trend: TrendResult
    smoothed: np.ndarray
    acf: list[AcfEntry]
    cycles: list[AcfEntry]
    peaks: list[PeakFlag]
    change_points: list[ChangePoint]
    forecast: list[ForecastPoint]
    key: SeriesKey | None = None
    periods: list[tuple[int, int]] = field(default_factory=list)
    accuracy: AccuracyReport | None = None
    residuals: dict[str, Any] | None = None
    pacf: list[AcfEntry] = field(default_factory=list)
    decomposition: Decomposition | None = None
    stationarity: dict[str, Any] | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "key": None if self.key is None else {"location": self.key.location, "source": self.key.source},
            "periods": [list(p) for p in self.periods],
            "values": self.values.tolist(),
            "trend": self.trend.to_dict(),
            "smoothed": self.smoothed.tolist(),
            "acf": [e.to_dict() for e in self.acf],
            "cycles": [e.to_dict() for e in self.cycles],
            "pacf": [e.to_dict() for e in self.pacf],
            "peaks": [p.to_dict() for p in self.peaks],
            "change_points": [c.to_dict() for c in self.change_points],
            "forecast": [p.to_dict() for p in self.forecast],
            "accuracy": None if self.accuracy is None else self.accuracy.to_dict(),
            "residuals": self.residuals,
            "decomposition": None if self.decomposition is None else self.decomposition.to_dict(),
            "stationarity": self.stationarity,
        }

    def save(self, path: Path) -> None:
        """Save the report to JSON.

        Args:
            path: Output file path.
        """
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(self.to_dict(), f, indent=2)
        logger.info(f"Analysis report saved to {path}")


def _forecast_kwargs(config: dict) -> dict[str, Any]:
    forecast_cfg = config["forecast"]
    return {
        "smoothing_alpha": forecast_cfg["smoothing_alpha"],
        "interval_width": forecast_cfg["interval_width"],
        "level_mode": forecast_cfg["level_mode"],
        "flat_band_percent": config["trend"]["flat_band_percent"],
    }


def _run_backtest(
    values: np.ndarray,
    config: dict,
) -> tuple[AccuracyReport | None, dict[str, Any] | None]:
    holdout = config["backtest"]["holdout"]
    kwargs = _forecast_kwargs(config)
    try:
        backtest = run_backtest(values, holdout, **kwargs)
    except InsufficientHistoryError as e:
        logger.warning(f"  Skipping backtest: {e}")
        return None, None

    try:
        residuals = analyze_residuals(
            backtest_residuals(backtest.actual, backtest.predicted),
            scale=float(backtest.actual.mean()),
        )
    except InsufficientHistoryError as e:
        logger.info(f"  Skipping residual diagnostics: {e}")
        residuals = None
    return backtest.report, residuals


def run_analysis(
    series: Series | SeriesLike,
    config: dict | None = None,
    horizon: int | None = None,
) -> AnalysisReport:
    """Run every analysis and a forecast over one series.

    Args:
        series: A ``Series`` from the aggregator or bare ordered values.
        config: Engine configuration; missing keys take the defaults.
        horizon: Forecast steps; overrides ``config["forecast"]["horizon"]``.

    Returns:
        ``AnalysisReport`` with every result.

    Raises:
        InsufficientHistoryError: If the series has fewer than 2 points
            (forecasting is mandatory).
        InvalidParameterError: On invalid values or settings.
    """
    config = resolve_config(config)
    key = series.key if isinstance(series, Series) else None
    periods = series.periods if isinstance(series, Series) else []
    values = as_series_array(series.values if isinstance(series, Series) else series)
    label = f"{key.location}/{key.source}" if key else "series"
    logger.info(f"Analyzing {label} ({len(values)} points)")

    trend = analyze_trend(values, flat_band_percent=config["trend"]["flat_band_percent"])
    smoothed = exponential_smoothing(values, config["forecast"]["smoothing_alpha"])
    acf = compute_acf(values, config["acf"]["max_lag"])
    cycles = cycle_candidates(acf, config["acf"]["cycle_threshold"])
    pacf = compute_pacf(values, config["acf"]["max_lag"])
    peaks = detect_peaks(values, config["peaks"]["sigma_threshold"])
    change_points = detect_change_points(
        values,
        threshold=config["change_points"]["threshold"],
        max_window=config["change_points"]["max_window"],
    )
    forecast_points = Forecaster(config).predict(values, horizon)

    accuracy, residuals = _run_backtest(values, config)

    period = config["seasonality"]["period"]
    decomposition = None
    if len(values) >= 2 * period:
        model = MULTIPLICATIVE if np.all(values > 0) else ADDITIVE
        decomposition = decompose(values, period=period, model=model)
    stationarity = check_stationarity(values) if len(values) >= 4 else None

    logger.info(
        f"  trend={trend.direction} ({trend.percent_change_per_step:+.2f}%/step), "
        f"peaks={len(peaks)}, cycles={[c.lag for c in cycles]}, "
        f"forecast={len(forecast_points)} steps"
    )
    return AnalysisReport(
        values=values,
        trend=trend,
        smoothed=smoothed,
        acf=acf,
        cycles=cycles,
        pacf=pacf,
        peaks=peaks,
        change_points=change_points,
        forecast=forecast_points,
        key=key,
        periods=periods,
        accuracy=accuracy,
        residuals=residuals,
        decomposition=decomposition,
        stationarity=stationarity,
    )


def analyze_observations(
    records: Iterable[Observation | Mapping[str, Any]] | pd.DataFrame,
    config: dict | None = None,
) -> dict[SeriesKey, AnalysisReport]:
    """Aggregate raw records and analyze every (location, source) series.

    Series too short to forecast are skipped with a warning.
    """
    config = resolve_config(config)
    reports: dict[SeriesKey, AnalysisReport] = {}
    for key, series in aggregate_observations(records).items():
        try:
            reports[key] = run_analysis(series, config)
        except InsufficientHistoryError as e:
            logger.warning(f"  Skipping {key.location}/{key.source}: {e}")
    return reports
