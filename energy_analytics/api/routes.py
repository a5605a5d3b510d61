"""
Analytics endpoints: forecast, analyze, backtest and scenario projections.

Every endpoint is stateless; each request recomputes from the payload.
"""

import logging
from dataclasses import replace

from fastapi import APIRouter, Request

from energy_analytics.analysis.autocorrelation import compute_acf
from energy_analytics.analysis.peaks import detect_peaks
from energy_analytics.analysis.smoothing import exponential_smoothing
from energy_analytics.analysis.trend import analyze_trend
from energy_analytics.data.aggregation import build_series
from energy_analytics.evaluation.backtest import evaluate_accuracy
from energy_analytics.forecasting.forecaster import ForecastPoint, Forecaster
from energy_analytics.scenario.simulator import PRESETS, ScenarioParams, apply_scenario, compare_scenarios

from .schemas import (
    AccuracyReportModel,
    AnalyzeResponse,
    BacktestRequest,
    ErrorResponse,
    ForecastPointModel,
    ForecastRequest,
    ForecastResponse,
    ScenarioCompareRequest,
    ScenarioParamsModel,
    ScenarioRequest,
    ScenarioResponse,
    ScenarioSummaryModel,
    SeriesRequest,
)

logger = logging.getLogger(__name__)

router = APIRouter(responses={422: {"model": ErrorResponse}})


def _values(payload: SeriesRequest):
    points = [(p.period, p.value) for p in payload.series]
    return build_series(points).values


def _baseline(points: list[ForecastPointModel]) -> list[ForecastPoint]:
    return [ForecastPoint(**p.model_dump()) for p in points]


def _scenario_params(model: ScenarioParamsModel, config: dict) -> ScenarioParams:
    data = model.model_dump()
    if data["price_per_unit"] is None:
        data["price_per_unit"] = config["scenario"]["price_per_unit"]
    if data["emission_factor"] is None:
        data["emission_factor"] = config["scenario"]["emission_factor"]
    return ScenarioParams(**data)


@router.get("/health")
async def health():
    """Liveness probe"""
    return {"status": "ok"}


@router.post("/forecast", response_model=ForecastResponse)
async def post_forecast(payload: ForecastRequest, request: Request):
    """
    Forecast ``horizon`` months with a widening confidence band
    """
    values = _values(payload)
    points = Forecaster(request.app.state.config).predict(values, payload.horizon)
    logger.info(f"Forecast {payload.horizon} steps from {len(values)} points")
    return ForecastResponse(forecast=[ForecastPointModel(**p.to_dict()) for p in points])


@router.post("/analyze", response_model=AnalyzeResponse)
async def post_analyze(payload: SeriesRequest, request: Request):
    """
    Trend, smoothed series, ACF and sigma-band peaks of a series
    """
    config = request.app.state.config
    values = _values(payload)
    trend = analyze_trend(values, flat_band_percent=config["trend"]["flat_band_percent"])
    return {
        "trend": trend.to_dict(),
        "smoothed": exponential_smoothing(values, config["forecast"]["smoothing_alpha"]).tolist(),
        "acf": [e.to_dict() for e in compute_acf(values, config["acf"]["max_lag"])],
        "peaks": [p.to_dict() for p in detect_peaks(values, config["peaks"]["sigma_threshold"])],
    }


@router.post("/backtest", response_model=AccuracyReportModel)
async def post_backtest(payload: BacktestRequest, request: Request):
    """
    Hide the last ``holdout`` months, forecast them and report MAE/MAPE/RMSE
    """
    forecast_cfg = request.app.state.config["forecast"]
    report = evaluate_accuracy(
        _values(payload),
        payload.holdout,
        smoothing_alpha=forecast_cfg["smoothing_alpha"],
        interval_width=forecast_cfg["interval_width"],
        level_mode=forecast_cfg["level_mode"],
    )
    return report.to_dict()


@router.post("/scenario", response_model=ScenarioResponse)
async def post_scenario(payload: ScenarioRequest, request: Request):
    """
    Project a baseline forecast under the given scenario parameters.
    Returns the simulated points and the whole-horizon summary
    (totals, delta_percent, savings, avoided emissions).
    """
    params = _scenario_params(payload.params, request.app.state.config)
    result = apply_scenario(_baseline(payload.forecast), params)
    logger.info(f"Scenario over {len(result)} steps: {result.delta_percent:+.2f}% vs baseline")
    return result.to_dict()


@router.post("/scenario/compare", response_model=list[ScenarioSummaryModel])
async def post_scenario_compare(payload: ScenarioCompareRequest, request: Request):
    """
    Summaries of every preset scenario (plus the custom one, if given)
    """
    scenario_cfg = request.app.state.config["scenario"]
    scenarios = {
        name: replace(
            params,
            price_per_unit=scenario_cfg["price_per_unit"],
            emission_factor=scenario_cfg["emission_factor"],
        )
        for name, params in PRESETS.items()
    }
    if payload.params is not None:
        scenarios["custom"] = _scenario_params(payload.params, request.app.state.config)

    table = compare_scenarios(_baseline(payload.forecast), scenarios)
    return [
        {"scenario": name, "steps": int(row.pop("steps")), **{k: float(v) for k, v in row.items()}}
        for name, row in table.to_dict(orient="index").items()
    ]
