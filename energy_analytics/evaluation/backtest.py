"""Holdout backtesting of the forecaster.

The last ``holdout`` points are hidden, forecast from the remaining
history, and compared against the actuals. At least two training points
must remain, so the series needs more than ``holdout + 1`` values.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

import numpy as np

from energy_analytics.data.preprocessing import SeriesLike, as_series_array
from energy_analytics.errors import InsufficientHistoryError, InvalidParameterError
from energy_analytics.evaluation.metrics import AccuracyReport, compute_metrics
from energy_analytics.forecasting.forecaster import forecast

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BacktestResult:
    """Accuracy of one holdout backtest plus the arrays it was computed from."""

    report: AccuracyReport
    actual: np.ndarray
    predicted: np.ndarray
    r2: float


def split_holdout(series: SeriesLike, holdout: int) -> tuple[np.ndarray, np.ndarray]:
    """Split into (train, test) with the last ``holdout`` points as test.

    Raises:
        InvalidParameterError: If ``holdout < 1``.
        InsufficientHistoryError: If ``len(series) <= holdout + 1``.
    """
    if holdout < 1:
        raise InvalidParameterError(f"holdout must be >= 1, got {holdout}")
    values = as_series_array(series)
    n = len(values)
    if n <= holdout + 1:
        raise InsufficientHistoryError(
            f"Backtesting {holdout} points needs at least {holdout + 2} values, got {n}"
        )
    return values[: n - holdout], values[n - holdout :]


def run_backtest(
    series: SeriesLike,
    holdout: int,
    **forecast_kwargs,
) -> BacktestResult:
    """Forecast the last ``holdout`` points from the rest and score them.

    Args:
        series: Ordered history.
        holdout: Number of trailing points to hide and forecast.
        **forecast_kwargs: Extra settings passed to ``forecast`` (smoothing
            factor, interval width, level mode).

    Returns:
        ``BacktestResult`` holding the accuracy report, the held-out
        actuals and the matching predictions.
    """
    train, test = split_holdout(series, holdout)
    predicted = np.array([p.value for p in forecast(train, holdout, **forecast_kwargs)])
    metrics = compute_metrics(test, predicted)

    logger.info(
        f"Backtest: train={len(train)}, holdout={holdout}, "
        f"MAE={metrics['mae']:.2f}, MAPE={metrics['mape']:.2f}%, RMSE={metrics['rmse']:.2f}"
    )
    return BacktestResult(
        report=AccuracyReport(mae=metrics["mae"], mape=metrics["mape"], rmse=metrics["rmse"]),
        actual=test,
        predicted=predicted,
        r2=metrics["r2"],
    )


def evaluate_accuracy(
    series: SeriesLike,
    holdout: int,
    **forecast_kwargs,
) -> AccuracyReport:
    """Backtest the forecaster on the last ``holdout`` points.

    Returns:
        ``AccuracyReport`` with MAE, MAPE and RMSE.
    """
    return run_backtest(series, holdout, **forecast_kwargs).report
