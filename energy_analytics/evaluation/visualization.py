"""Visualization utilities for analysis reports."""

from pathlib import Path

import matplotlib.pyplot as plt
import numpy as np

from energy_analytics.analysis.autocorrelation import CYCLE_THRESHOLD, AcfEntry
from energy_analytics.analysis.peaks import HIGH, PeakFlag
from energy_analytics.forecasting.forecaster import ForecastPoint
from energy_analytics.scenario.simulator import ScenarioResult

# Use a clean style
plt.style.use("seaborn-v0_8-whitegrid")


def plot_forecast_with_band(
    history: np.ndarray,
    forecast: list[ForecastPoint],
    title: str,
    output_path: Path,
    smoothed: np.ndarray | None = None,
) -> None:
    """Plot the history followed by the forecast and its confidence band.

    Args:
        history: Observed values.
        forecast: Forecast points continuing the history.
        title: Plot title.
        output_path: Path to save the plot.
        smoothed: Optional smoothed history drawn over the raw values.
    """
    output_path.parent.mkdir(parents=True, exist_ok=True)

    n = len(history)
    x_hist = np.arange(n)
    x_fc = n - 1 + np.array([p.step_index for p in forecast])

    fig, ax = plt.subplots(figsize=(12, 5))
    ax.plot(x_hist, history, label="Observed", color="#2196F3", linewidth=1.5)
    if smoothed is not None:
        ax.plot(x_hist, smoothed, label="Smoothed", color="#9C27B0", linewidth=1.0, linestyle="--")
    ax.plot(x_fc, [p.value for p in forecast], label="Forecast", color="#FF5722", linewidth=1.5, marker="o")
    ax.fill_between(
        x_fc,
        [p.low for p in forecast],
        [p.high for p in forecast],
        color="#FF5722",
        alpha=0.2,
        label="Confidence band",
    )
    ax.set_xlabel("Period index")
    ax.set_ylabel("Consumption (kWh)")
    ax.set_title(title)
    ax.legend()
    plt.tight_layout()
    plt.savefig(output_path, dpi=150, bbox_inches="tight")
    plt.close(fig)


def plot_acf(
    acf: list[AcfEntry],
    title: str,
    output_path: Path,
    threshold: float = CYCLE_THRESHOLD,
) -> None:
    """Bar chart of the ACF with the cycle-candidate band."""
    output_path.parent.mkdir(parents=True, exist_ok=True)

    lags = [e.lag for e in acf]
    corrs = [e.correlation for e in acf]
    colors = ["#4CAF50" if abs(c) >= threshold else "#90A4AE" for c in corrs]

    fig, ax = plt.subplots(figsize=(10, 4))
    ax.bar(lags, corrs, color=colors)
    ax.axhline(threshold, color="red", linestyle="--", linewidth=1.0)
    ax.axhline(-threshold, color="red", linestyle="--", linewidth=1.0)
    ax.axhline(0, color="black", linewidth=0.8)
    ax.set_ylim(-1.05, 1.05)
    ax.set_xlabel("Lag (months)")
    ax.set_ylabel("Correlation")
    ax.set_title(title)
    plt.tight_layout()
    plt.savefig(output_path, dpi=150, bbox_inches="tight")
    plt.close(fig)


def plot_peaks(
    values: np.ndarray,
    peaks: list[PeakFlag],
    title: str,
    output_path: Path,
) -> None:
    """Plot the series with high and low anomalies highlighted."""
    output_path.parent.mkdir(parents=True, exist_ok=True)

    fig, ax = plt.subplots(figsize=(12, 5))
    ax.plot(np.arange(len(values)), values, color="#2196F3", linewidth=1.2, label="Observed")
    ax.axhline(float(np.mean(values)), color="gray", linestyle=":", linewidth=1.0, label="Mean")

    highs = [p for p in peaks if p.kind == HIGH]
    lows = [p for p in peaks if p.kind != HIGH]
    if highs:
        ax.scatter([p.index for p in highs], [p.value for p in highs], color="#F44336", s=40, zorder=3, label="High")
    if lows:
        ax.scatter([p.index for p in lows], [p.value for p in lows], color="#FFC107", s=40, zorder=3, label="Low")

    ax.set_xlabel("Period index")
    ax.set_ylabel("Consumption (kWh)")
    ax.set_title(title)
    ax.legend()
    plt.tight_layout()
    plt.savefig(output_path, dpi=150, bbox_inches="tight")
    plt.close(fig)


def plot_scenarios(
    results: dict[str, ScenarioResult],
    title: str,
    output_path: Path,
) -> None:
    """Overlay the baseline and every scenario projection."""
    output_path.parent.mkdir(parents=True, exist_ok=True)

    colors = [
        "#2196F3", "#FF5722", "#4CAF50", "#FFC107", "#9C27B0",
        "#00BCD4", "#795548", "#607D8B",
    ]

    fig, ax = plt.subplots(figsize=(12, 5))
    baseline_drawn = False
    for i, (name, result) in enumerate(results.items()):
        steps = [p.step_index for p in result]
        if not baseline_drawn:
            ax.plot(steps, [p.baseline_value for p in result], color="black", linewidth=1.5, label="Baseline")
            baseline_drawn = True
        ax.plot(steps, [p.value for p in result], color=colors[i % len(colors)], linewidth=1.2, label=name)

    ax.set_xlabel("Forecast step")
    ax.set_ylabel("Consumption (kWh)")
    ax.set_title(title)
    ax.legend()
    plt.tight_layout()
    plt.savefig(output_path, dpi=150, bbox_inches="tight")
    plt.close(fig)
