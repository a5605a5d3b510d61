"""Pydantic models for API requests and responses."""

from typing import Optional

from pydantic import BaseModel, Field, field_validator


class PointIn(BaseModel):
    """Monthly observation; ``period`` is a ``[year, month]`` pair."""
    period: tuple[int, int]
    value: float = Field(ge=0, description="Consumption for the period (kWh)")

    @field_validator("period")
    @classmethod
    def check_month(cls, v):
        if not 1 <= v[1] <= 12:
            raise ValueError(f"month must be in 1..12, got {v[1]}")
        return v


class SeriesRequest(BaseModel):
    series: list[PointIn] = Field(min_length=1, description="Monthly consumption history")


class ForecastRequest(SeriesRequest):
    horizon: int = Field(ge=1, le=120, description="Number of future months")


class BacktestRequest(SeriesRequest):
    holdout: int = Field(ge=1, description="Trailing months hidden and forecast")


class ForecastPointModel(BaseModel):
    step_index: int = Field(ge=1)
    value: float = Field(ge=0)
    low: float = Field(ge=0)
    high: float = Field(ge=0)


class ScenarioParamsModel(BaseModel):
    """Scenario adjustments (percent reduction is negative for a cut)."""
    percent_reduction: float = Field(default=0.0, ge=-100)
    efficiency_gain_percent: float = Field(default=0.0, le=100)
    annual_growth_percent: float = Field(default=0.0, gt=-1200)
    fixed_additive_load: float = 0.0
    horizon: Optional[int] = Field(default=None, ge=1)
    price_per_unit: Optional[float] = Field(default=None, ge=0)
    emission_factor: Optional[float] = Field(default=None, ge=0)


class ScenarioRequest(BaseModel):
    forecast: list[ForecastPointModel] = Field(min_length=1)
    params: ScenarioParamsModel = Field(default_factory=ScenarioParamsModel)


class ScenarioCompareRequest(BaseModel):
    forecast: list[ForecastPointModel] = Field(min_length=1)
    params: Optional[ScenarioParamsModel] = Field(
        default=None, description="Optional custom scenario compared with the presets"
    )


class TrendModel(BaseModel):
    direction: str
    slope: float
    percent_change_per_step: float
    intercept: float


class AcfEntryModel(BaseModel):
    lag: int
    correlation: float


class PeakFlagModel(BaseModel):
    index: int
    value: float
    deviation_in_sigma: float
    kind: str


class ForecastResponse(BaseModel):
    forecast: list[ForecastPointModel]


class AnalyzeResponse(BaseModel):
    trend: TrendModel
    smoothed: list[float]
    acf: list[AcfEntryModel]
    peaks: list[PeakFlagModel]


class AccuracyReportModel(BaseModel):
    mae: float
    mape: float
    rmse: float


class SimulatedPointModel(BaseModel):
    step_index: int
    baseline_value: float
    value: float
    low: float
    high: float
    cost: float
    emissions: float


class ScenarioTotalsModel(BaseModel):
    steps: int
    baseline_total: float
    total: float
    average: float
    delta_percent: float
    baseline_cost: float
    total_cost: float
    cost_savings: float
    baseline_emissions: float
    total_emissions: float
    avoided_emissions: float
    tree_equivalent: float


class ScenarioSummaryModel(ScenarioTotalsModel):
    scenario: str


class ScenarioResponse(BaseModel):
    """Simulated points plus whole-horizon totals versus the baseline."""
    params: ScenarioParamsModel
    points: list[SimulatedPointModel]
    summary: ScenarioTotalsModel


class ErrorResponse(BaseModel):
    detail: str
    error: str
