"""What-if scenario projections over a baseline forecast.

For a baseline point at step i the adjusted value is

    value = baseline
            * (1 + percent_reduction / 100)          # 1. target reduction
            * (1 - efficiency_gain_percent / 100)    # 2. efficiency gain
            * (1 + annual_growth_percent / 1200)^i   # 3. monthly compounded growth
            + fixed_additive_load                    # 4. new load
    value = max(value, 0)

The order of the four adjustments is fixed. ``percent_reduction`` follows
the dashboard's sign convention: a 30% cut is ``-30``.

Cost and emissions per point are ``value * price_per_unit`` and
``value * emission_factor``. A scenario is a pure function of its
parameters and the baseline, so it can be recomputed at any time.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Sequence
from dataclasses import asdict, dataclass, replace
from typing import Any

import pandas as pd

from energy_analytics.errors import InvalidParameterError
from energy_analytics.forecasting.forecaster import ForecastPoint

logger = logging.getLogger(__name__)

DEFAULT_PRICE_PER_UNIT = 500.0
DEFAULT_EMISSION_FACTOR = 0.5

# kg CO2 absorbed by one tree per year
CO2_PER_TREE = 21.0


@dataclass(frozen=True)
class ScenarioParams:
    """Immutable set of scenario adjustments.

    Attributes:
        percent_reduction: Target change in percent (negative = reduction).
        efficiency_gain_percent: Efficiency improvement in percent.
        annual_growth_percent: Demand growth per year, compounded monthly.
        fixed_additive_load: Load added to every step (e.g. new buildings).
        horizon: Number of baseline steps to simulate (None = all).
        price_per_unit: Energy price used for cost.
        emission_factor: Emissions per unit of energy.
    """

    percent_reduction: float = 0.0
    efficiency_gain_percent: float = 0.0
    annual_growth_percent: float = 0.0
    fixed_additive_load: float = 0.0
    horizon: int | None = None
    price_per_unit: float = DEFAULT_PRICE_PER_UNIT
    emission_factor: float = DEFAULT_EMISSION_FACTOR

    def __post_init__(self) -> None:
        if self.percent_reduction < -100:
            raise InvalidParameterError(
                f"percent_reduction must be >= -100, got {self.percent_reduction}"
            )
        if self.efficiency_gain_percent > 100:
            raise InvalidParameterError(
                f"efficiency_gain_percent must be <= 100, got {self.efficiency_gain_percent}"
            )
        if self.annual_growth_percent <= -1200:
            raise InvalidParameterError(
                f"annual_growth_percent must be > -1200, got {self.annual_growth_percent}"
            )
        if self.horizon is not None and self.horizon < 1:
            raise InvalidParameterError(f"horizon must be >= 1, got {self.horizon}")
        if self.price_per_unit < 0 or self.emission_factor < 0:
            raise InvalidParameterError("price_per_unit and emission_factor must be >= 0")

    def adjust(self, value: float, step: int) -> float:
        """Apply the four adjustments, in order, to one value."""
        adjusted = value * (1 + self.percent_reduction / 100)
        adjusted = adjusted * (1 - self.efficiency_gain_percent / 100)
        adjusted = adjusted * (1 + self.annual_growth_percent / 100 / 12) ** step
        adjusted = adjusted + self.fixed_additive_load
        return max(adjusted, 0.0)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class SimulatedPoint:
    """One scenario step with its cost and emissions."""

    step_index: int
    baseline_value: float
    value: float
    low: float
    high: float
    cost: float
    emissions: float

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class ScenarioResult:
    """Simulated points plus horizon totals against the baseline.

    Iterating, indexing and ``len()`` operate on the simulated points.
    """

    points: tuple[SimulatedPoint, ...]
    params: ScenarioParams

    def __iter__(self) -> Iterator[SimulatedPoint]:
        return iter(self.points)

    def __len__(self) -> int:
        return len(self.points)

    def __getitem__(self, index: int) -> SimulatedPoint:
        return self.points[index]

    @property
    def baseline_total(self) -> float:
        return sum(p.baseline_value for p in self.points)

    @property
    def total(self) -> float:
        return sum(p.value for p in self.points)

    @property
    def delta_percent(self) -> float:
        """Scenario total relative to the baseline total, in percent."""
        baseline = self.baseline_total
        if baseline == 0:
            return 0.0
        return (self.total - baseline) / baseline * 100

    @property
    def total_cost(self) -> float:
        return sum(p.cost for p in self.points)

    @property
    def total_emissions(self) -> float:
        return sum(p.emissions for p in self.points)

    def summary(self) -> dict[str, float]:
        """Horizon totals, savings and avoided emissions versus the baseline."""
        baseline_cost = self.baseline_total * self.params.price_per_unit
        baseline_emissions = self.baseline_total * self.params.emission_factor
        avoided = baseline_emissions - self.total_emissions
        n = len(self.points)
        return {
            "steps": n,
            "baseline_total": self.baseline_total,
            "total": self.total,
            "average": self.total / n if n else 0.0,
            "delta_percent": self.delta_percent,
            "baseline_cost": baseline_cost,
            "total_cost": self.total_cost,
            "cost_savings": baseline_cost - self.total_cost,
            "baseline_emissions": baseline_emissions,
            "total_emissions": self.total_emissions,
            "avoided_emissions": avoided,
            "tree_equivalent": max(0.0, avoided / CO2_PER_TREE),
        }

    def to_dict(self) -> dict[str, Any]:
        return {
            "params": self.params.to_dict(),
            "points": [p.to_dict() for p in self.points],
            "summary": self.summary(),
        }


PRESETS: dict[str, ScenarioParams] = {
    "aggressive_efficiency": ScenarioParams(
        percent_reduction=-30, efficiency_gain_percent=40, annual_growth_percent=1,
    ),
    "urban_growth": ScenarioParams(
        efficiency_gain_percent=10, annual_growth_percent=5, fixed_additive_load=5000 / 12,
    ),
    "green_transition": ScenarioParams(
        percent_reduction=-20, efficiency_gain_percent=30, annual_growth_percent=2,
    ),
    "status_quo": ScenarioParams(annual_growth_percent=1.5),
}


def apply_scenario(
    baseline: Sequence[ForecastPoint],
    params: ScenarioParams,
) -> ScenarioResult:
    """Project a baseline forecast under scenario adjustments.

    Args:
        baseline: Forecast points, in step order.
        params: Scenario adjustments; ``params.horizon`` truncates the
            baseline to its first ``horizon`` points.

    Returns:
        ``ScenarioResult`` with one ``SimulatedPoint`` per simulated step.
        All-zero adjustments reproduce the baseline values exactly.

    Raises:
        InvalidParameterError: If the baseline is empty.
    """
    if not baseline:
        raise InvalidParameterError("Baseline forecast is empty")
    selected = list(baseline)[: params.horizon] if params.horizon else list(baseline)

    points = []
    for base in selected:
        step = base.step_index
        value = params.adjust(base.value, step)
        points.append(SimulatedPoint(
            step_index=step,
            baseline_value=base.value,
            value=value,
            low=min(params.adjust(base.low, step), value),
            high=max(params.adjust(base.high, step), value),
            cost=value * params.price_per_unit,
            emissions=value * params.emission_factor,
        ))

    result = ScenarioResult(points=tuple(points), params=params)
    logger.debug(
        f"Scenario over {len(points)} steps: total={result.total:.2f} "
        f"({result.delta_percent:+.2f}% vs baseline)"
    )
    return result


def compare_scenarios(
    baseline: Sequence[ForecastPoint],
    scenarios: dict[str, ScenarioParams] | None = None,
    price_per_unit: float | None = None,
    emission_factor: float | None = None,
) -> pd.DataFrame:
    """Run several scenarios over the same baseline and tabulate them.

    Args:
        baseline: Forecast points shared by every scenario.
        scenarios: Name -> params. Defaults to ``PRESETS``.
        price_per_unit: Optional price applied to every scenario.
        emission_factor: Optional emission factor applied to every scenario.

    Returns:
        DataFrame indexed by scenario name with the ``summary()`` columns,
        sorted by total consumption (lowest first).
    """
    scenarios = PRESETS if scenarios is None else scenarios
    overrides = {}
    if price_per_unit is not None:
        overrides["price_per_unit"] = price_per_unit
    if emission_factor is not None:
        overrides["emission_factor"] = emission_factor

    rows = {}
    for name, params in scenarios.items():
        result = apply_scenario(baseline, replace(params, **overrides))
        rows[name] = result.summary()

    df = pd.DataFrame.from_dict(rows, orient="index")
    df.index.name = "scenario"
    if not df.empty:
        df = df.sort_values("total")
        logger.info(
            f"Compared {len(df)} scenarios: lowest total '{df.index[0]}' "
            f"({df['delta_percent'].iloc[0]:+.2f}%)"
        )
    return df
