"""Analyze monthly consumption exported from the persistence store.

Loads a CSV of raw readings (one row per location/source/year/month),
aggregates it into one series per (location, source) and runs the full
analysis on each: trend, smoothing, ACF, peaks, change points, forecast,
backtest and seasonal decomposition. Every preset scenario is then
projected over each forecast.

Outputs per series under ``<output-dir>/<location>__<source>/``:
    report.json     - full AnalysisReport
    metrics.json    - backtest MAE/MAPE/RMSE (when the history allows it)
    scenarios.csv   - preset scenario comparison
    forecast.png, acf.png, peaks.png, scenarios.png

Usage:
    python scripts/run_analysis.py --input data/consumption.csv
    python scripts/run_analysis.py --input data/consumption.csv --horizon 12
    python scripts/run_analysis.py --input data/consumption.csv \\
        --config configs/default.yaml configs/my_site.yaml --location Tunja
"""

import argparse
import logging
import re
import sys
from pathlib import Path

import matplotlib

matplotlib.use("Agg")

PROJECT_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from energy_analytics.data.aggregation import load_observations_csv
from energy_analytics.evaluation.metrics import save_metrics
from energy_analytics.evaluation.visualization import (
    plot_acf,
    plot_forecast_with_band,
    plot_peaks,
    plot_scenarios,
)
from energy_analytics.pipeline import analyze_observations
from energy_analytics.scenario.simulator import PRESETS, apply_scenario, compare_scenarios
from energy_analytics.utils.config import load_engine_config

logger = logging.getLogger(__name__)


def _slug(text: str) -> str:
    return re.sub(r"[^A-Za-z0-9_-]+", "_", text).strip("_") or "unnamed"


def main() -> None:
    parser = argparse.ArgumentParser(description="Analyze monthly energy consumption")
    parser.add_argument(
        "--input",
        type=Path,
        required=True,
        help="CSV with columns location, source, year, month, value",
    )
    parser.add_argument(
        "--config",
        nargs="+",
        type=Path,
        default=[PROJECT_ROOT / "configs" / "default.yaml"],
        help="YAML config files (later files override earlier ones)",
    )
    parser.add_argument(
        "--output-dir",
        type=Path,
        default=PROJECT_ROOT / "results" / "analysis",
        help="Directory for reports and charts",
    )
    parser.add_argument("--horizon", type=int, default=None, help="Override forecast horizon")
    parser.add_argument("--location", type=str, default=None, help="Only analyze this location")
    parser.add_argument("--source", type=str, default=None, help="Only analyze this source")
    parser.add_argument("--no-plots", action="store_true", help="Skip chart generation")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%H:%M:%S",
    )

    config = load_engine_config(args.config)
    if args.horizon is not None:
        config["forecast"]["horizon"] = args.horizon

    df = load_observations_csv(args.input)
    if args.location is not None:
        df = df[df["location"] == args.location]
    if args.source is not None:
        df = df[df["source"] == args.source]
    if df.empty:
        logger.error("No observations left after filtering")
        sys.exit(1)

    reports = analyze_observations(df, config)
    if not reports:
        logger.error("No series long enough to analyze")
        sys.exit(1)

    scenario_cfg = config["scenario"]
    for key, report in reports.items():
        label = f"{key.location}/{key.source}"
        run_dir = args.output_dir / f"{_slug(key.location)}__{_slug(key.source)}"

        logger.info(f"{'=' * 60}")
        logger.info(f"  {label}")
        logger.info(f"{'=' * 60}")

        report.save(run_dir / "report.json")

        if report.accuracy is not None:
            save_metrics(
                report.accuracy.to_dict(),
                label,
                run_dir / "metrics.json",
                metadata={
                    "holdout": config["backtest"]["holdout"],
                    "forecast": config["forecast"],
                    "residual_quality": (report.residuals or {}).get("quality"),
                },
            )

        table = compare_scenarios(
            report.forecast,
            price_per_unit=scenario_cfg["price_per_unit"],
            emission_factor=scenario_cfg["emission_factor"],
        )
        table.to_csv(run_dir / "scenarios.csv")
        logger.info(f"  Scenario comparison:\n{table[['total', 'delta_percent', 'cost_savings']].round(2)}")

        if args.no_plots:
            continue

        plot_forecast_with_band(
            report.values,
            report.forecast,
            title=f"{label} - forecast ({report.trend.direction})",
            output_path=run_dir / "forecast.png",
            smoothed=report.smoothed,
        )
        if report.acf:
            plot_acf(
                report.acf,
                title=f"{label} - autocorrelation",
                output_path=run_dir / "acf.png",
                threshold=config["acf"]["cycle_threshold"],
            )
        plot_peaks(
            report.values,
            report.peaks,
            title=f"{label} - anomalies ({len(report.peaks)} flagged)",
            output_path=run_dir / "peaks.png",
        )
        plot_scenarios(
            {name: apply_scenario(report.forecast, params) for name, params in PRESETS.items()},
            title=f"{label} - scenarios",
            output_path=run_dir / "scenarios.png",
        )

    logger.info(f"Analyzed {len(reports)} series. Results in {args.output_dir}")


if __name__ == "__main__":
    main()
