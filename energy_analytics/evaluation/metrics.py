"""Forecast error metrics."""

import json
import logging
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any

import numpy as np
from sklearn.metrics import mean_absolute_error, mean_squared_error, r2_score

from energy_analytics.errors import InvalidParameterError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AccuracyReport:
    """Backtest accuracy of a forecast against held-out actuals.

    Attributes:
        mae: Mean absolute error.
        mape: Mean absolute percentage error over non-zero actuals, in percent.
        rmse: Root mean squared error.
    """

    mae: float
    mape: float
    rmse: float

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def compute_metrics(y_true: np.ndarray, y_pred: np.ndarray) -> dict[str, float]:
    """Compute error metrics between actual and predicted values.

    Args:
        y_true: Ground truth values.
        y_pred: Predicted values, same length as ``y_true``.

    Returns:
        Dictionary with keys: "mse", "rmse", "mae", "mape", "r2". R2 needs at
        least two points and is reported as 0.0 below that; a constant
        ``y_true`` gives 1.0 for a perfect prediction and 0.0 otherwise.

    Raises:
        InvalidParameterError: If inputs are empty, differ in length, or
            contain NaN or Inf values.
    """
    y_true = np.asarray(y_true, dtype=np.float64).ravel()
    y_pred = np.asarray(y_pred, dtype=np.float64).ravel()
    if len(y_true) == 0 or len(y_true) != len(y_pred):
        raise InvalidParameterError(
            f"Metric inputs must be non-empty and equal length, "
            f"got {len(y_true)} and {len(y_pred)}"
        )
    if np.isnan(y_true).any() or np.isnan(y_pred).any():
        raise InvalidParameterError(
            "NaN detected in metric inputs. "
            f"y_true NaNs: {np.isnan(y_true).sum()}, "
            f"y_pred NaNs: {np.isnan(y_pred).sum()}"
        )
    if np.isinf(y_true).any() or np.isinf(y_pred).any():
        raise InvalidParameterError(
            "Inf detected in metric inputs. "
            f"y_true Infs: {np.isinf(y_true).sum()}, "
            f"y_pred Infs: {np.isinf(y_pred).sum()}"
        )

    mse = mean_squared_error(y_true, y_pred)
    rmse = np.sqrt(mse)
    mae = mean_absolute_error(y_true, y_pred)

    # Zero actuals have no defined percentage error; they are left out of
    # the average. With no usable point MAPE is reported as 0.
    mask = y_true != 0
    if mask.any():
        mape = np.mean(np.abs((y_true[mask] - y_pred[mask]) / y_true[mask])) * 100
    else:
        mape = 0.0

    r2 = r2_score(y_true, y_pred) if len(y_true) >= 2 else 0.0

    return {
        "mse": float(mse),
        "rmse": float(rmse),
        "mae": float(mae),
        "mape": float(mape),
        "r2": float(r2),
    }


def save_metrics(
    metrics: dict[str, float],
    name: str,
    output_path: Path,
    metadata: dict | None = None,
) -> None:
    """Save metrics to a JSON file and log a summary.

    Args:
        metrics: Dictionary of metric name -> value.
        name: Label of the evaluated series or run.
        output_path: Path to save the JSON file.
        metadata: Optional extra fields (key, holdout, config excerpt).
    """
    output_path.parent.mkdir(parents=True, exist_ok=True)

    payload: dict = {"name": name, "metrics": metrics}
    if metadata is not None:
        payload["metadata"] = metadata

    with open(output_path, "w", encoding="utf-8") as f:
        json.dump(payload, f, indent=2)

    logger.info(f"{name} - backtest metrics")
    for metric, value in metrics.items():
        logger.info(f"  {metric.upper():>6s}: {value:.4f}")
    logger.info(f"  Saved to: {output_path}")
