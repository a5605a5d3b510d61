"""End-to-end tests for the analysis pipeline."""

import json

import numpy as np
import pytest

import energy_analytics.evaluation.backtest as backtest_module
from energy_analytics.analysis.trend import FLAT, RISING
from energy_analytics.data.aggregation import SeriesKey, aggregate_observations
from energy_analytics.errors import InsufficientHistoryError
from energy_analytics.pipeline import analyze_observations, run_analysis


class TestRunAnalysis:
    """Tests for the single-series report."""

    def test_linear_series(self, linear_series):
        report = run_analysis(linear_series, horizon=3)
        assert report.trend.direction == RISING
        assert report.trend.slope == pytest.approx(50.0)
        assert len(report.forecast) == 3
        assert report.forecast[0].value == pytest.approx(1300.0)
        assert report.forecast[0].high - report.forecast[0].value == pytest.approx(130.0)
        assert report.forecast[2].value > report.forecast[0].value

    def test_constant_series(self, constant_series):
        report = run_analysis(constant_series)
        assert report.trend.direction == FLAT
        assert report.peaks == []
        assert report.cycles == []
        for entry in report.acf:
            assert entry.correlation == pytest.approx(0.0)

    def test_backtest_included(self, linear_series):
        report = run_analysis(linear_series, config={"backtest": {"holdout": 3}})
        assert report.accuracy is not None
        assert report.accuracy.mae == pytest.approx(0.0, abs=1e-6)
        assert report.residuals is not None

    def test_backtest_skipped_when_short(self):
        report = run_analysis([100.0, 110.0, 120.0])
        assert report.accuracy is None
        assert report.residuals is None
        assert report.stationarity is None
        assert len(report.forecast) == 6

    def test_seasonal_series_decomposed(self, seasonal_series):
        report = run_analysis(seasonal_series)
        assert report.decomposition is not None
        assert 12 in [c.lag for c in report.cycles]
        assert report.decomposition.model == "multiplicative"
        assert len(report.pacf) == 12

    def test_zero_month_decomposed_additively(self, seasonal_series):
        values = seasonal_series.copy()
        values[5] = 0.0
        report = run_analysis(values)
        assert report.decomposition.model == "additive"

    def test_backtest_forecast_runs_once(self, seasonal_series, monkeypatch):
        """Residual diagnostics reuse the backtest predictions."""
        calls = []
        original = backtest_module.forecast

        def counting_forecast(*args, **kwargs):
            calls.append(args)
            return original(*args, **kwargs)

        monkeypatch.setattr(backtest_module, "forecast", counting_forecast)
        report = run_analysis(seasonal_series, config={"backtest": {"holdout": 3}})
        assert len(calls) == 1
        assert report.residuals is not None

    def test_residuals_match_backtest(self, seasonal_series):
        report = run_analysis(seasonal_series, config={"backtest": {"holdout": 4}})
        result = backtest_module.run_backtest(seasonal_series, 4)
        residuals = result.actual - result.predicted
        assert report.residuals["mean"] == pytest.approx(float(np.mean(residuals)))
        assert report.accuracy == result.report

    def test_partial_config(self, linear_series, sample_config):
        report = run_analysis(linear_series, config=sample_config)
        assert len(report.forecast) == 3
        assert len(report.acf) == 3

    def test_single_point_raises(self):
        with pytest.raises(InsufficientHistoryError):
            run_analysis([1000.0])

    def test_keyed_series(self, sample_records):
        series = aggregate_observations(sample_records)[SeriesKey("Tunja", "electricity")]
        report = run_analysis(series)
        assert report.key == SeriesKey("Tunja", "electricity")
        assert report.periods[0] == (2023, 1)

    def test_report_is_json_serializable(self, seasonal_series, tmp_path):
        report = run_analysis(seasonal_series)
        json.dumps(report.to_dict())
        report.save(tmp_path / "report.json")
        data = json.loads((tmp_path / "report.json").read_text())
        assert data["trend"]["direction"] == report.trend.direction
        assert len(data["forecast"]) == 6


class TestAnalyzeObservations:
    """Tests for the multi-key entry point."""

    def test_one_report_per_key(self, sample_records):
        reports = analyze_observations(sample_records)
        assert set(reports) == {
            SeriesKey("Tunja", "electricity"),
            SeriesKey("Duitama", "electricity"),
        }

    def test_short_key_skipped(self, sample_records):
        records = sample_records + [
            {"location": "Paipa", "source": "gas", "year": 2023, "month": 1, "value": 5.0},
        ]
        reports = analyze_observations(records)
        assert SeriesKey("Paipa", "gas") not in reports
        assert len(reports) == 2

    def test_flat_series_flagged_flat(self, sample_records):
        reports = analyze_observations(sample_records)
        assert reports[SeriesKey("Tunja", "electricity")].trend.direction == FLAT
        assert reports[SeriesKey("Duitama", "electricity")].accuracy is None
