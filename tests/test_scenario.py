"""Tests for what-if scenario projections."""

import pytest

from energy_analytics.errors import InvalidParameterError
from energy_analytics.forecasting.forecaster import ForecastPoint
from energy_analytics.scenario.simulator import (
    CO2_PER_TREE,
    PRESETS,
    ScenarioParams,
    apply_scenario,
    compare_scenarios,
)


@pytest.fixture
def baseline() -> list[ForecastPoint]:
    """Three flat 1000 kWh steps with a +-10% band."""
    return [ForecastPoint(step_index=i, value=1000.0, low=900.0, high=1100.0) for i in (1, 2, 3)]


# ---------------------------------------------------------------------------
#  ScenarioParams
# ---------------------------------------------------------------------------

class TestScenarioParams:
    """Tests for parameter validation and the adjustment order."""

    def test_defaults_are_identity(self):
        params = ScenarioParams()
        assert params.adjust(1234.5, 7) == 1234.5

    def test_reduction(self):
        assert ScenarioParams(percent_reduction=-30).adjust(1000.0, 1) == pytest.approx(700.0)

    def test_efficiency(self):
        assert ScenarioParams(efficiency_gain_percent=40).adjust(1000.0, 1) == pytest.approx(600.0)

    def test_monthly_compounded_growth(self):
        params = ScenarioParams(annual_growth_percent=12)
        assert params.adjust(1000.0, 1) == pytest.approx(1010.0)
        assert params.adjust(1000.0, 2) == pytest.approx(1020.1)

    def test_additive_load_applied_last(self):
        params = ScenarioParams(percent_reduction=-50, fixed_additive_load=100)
        assert params.adjust(1000.0, 1) == pytest.approx(600.0)

    def test_clamped_at_zero(self):
        params = ScenarioParams(fixed_additive_load=-5000)
        assert params.adjust(1000.0, 1) == 0.0

    @pytest.mark.parametrize("kwargs", [
        {"percent_reduction": -101},
        {"efficiency_gain_percent": 101},
        {"annual_growth_percent": -1200},
        {"horizon": 0},
        {"price_per_unit": -1},
        {"emission_factor": -0.1},
    ])
    def test_invalid(self, kwargs):
        with pytest.raises(InvalidParameterError):
            ScenarioParams(**kwargs)


# ---------------------------------------------------------------------------
#  apply_scenario
# ---------------------------------------------------------------------------

class TestApplyScenario:
    """Tests for projecting a baseline."""

    def test_all_zero_is_identity(self, baseline):
        result = apply_scenario(baseline, ScenarioParams())
        assert [p.value for p in result] == [p.value for p in baseline]
        assert [p.low for p in result] == [p.low for p in baseline]
        assert [p.high for p in result] == [p.high for p in baseline]
        assert result.delta_percent == 0.0

    def test_step_indices_preserved(self, baseline):
        result = apply_scenario(baseline, ScenarioParams(annual_growth_percent=5))
        assert [p.step_index for p in result] == [1, 2, 3]

    def test_horizon_truncates(self, baseline):
        result = apply_scenario(baseline, ScenarioParams(horizon=2))
        assert len(result) == 2
        assert result[-1].step_index == 2

    def test_cost_and_emissions(self, baseline):
        result = apply_scenario(baseline, ScenarioParams(price_per_unit=2.0, emission_factor=0.5))
        assert result[0].cost == pytest.approx(2000.0)
        assert result[0].emissions == pytest.approx(500.0)
        assert result.total_cost == pytest.approx(6000.0)

    def test_bounds_ordered(self, baseline):
        result = apply_scenario(baseline, ScenarioParams(fixed_additive_load=-950))
        for p in result:
            assert 0.0 <= p.low <= p.value <= p.high

    def test_summary(self, baseline):
        result = apply_scenario(
            baseline[:1],
            ScenarioParams(percent_reduction=-30, price_per_unit=1.0, emission_factor=0.5),
        )
        summary = result.summary()
        assert summary["steps"] == 1
        assert summary["total"] == pytest.approx(700.0)
        assert summary["delta_percent"] == pytest.approx(-30.0)
        assert summary["cost_savings"] == pytest.approx(300.0)
        assert summary["avoided_emissions"] == pytest.approx(150.0)
        assert summary["tree_equivalent"] == pytest.approx(150.0 / CO2_PER_TREE)

    def test_growth_has_no_trees(self, baseline):
        summary = apply_scenario(baseline, ScenarioParams(annual_growth_percent=10)).summary()
        assert summary["avoided_emissions"] < 0
        assert summary["tree_equivalent"] == 0.0

    def test_empty_baseline_raises(self):
        with pytest.raises(InvalidParameterError, match="empty"):
            apply_scenario([], ScenarioParams())

    def test_to_dict(self, baseline):
        data = apply_scenario(baseline, ScenarioParams()).to_dict()
        assert set(data) == {"params", "points", "summary"}
        assert len(data["points"]) == 3


# ---------------------------------------------------------------------------
#  compare_scenarios
# ---------------------------------------------------------------------------

class TestCompareScenarios:
    """Tests for the preset comparison table."""

    def test_presets_sorted_by_total(self, baseline):
        table = compare_scenarios(baseline)
        assert set(table.index) == set(PRESETS)
        assert table.index[0] == "aggressive_efficiency"
        assert table.index[-1] == "urban_growth"
        assert table["total"].is_monotonic_increasing

    def test_pricing_override(self, baseline):
        table = compare_scenarios(baseline, {"flat": ScenarioParams()}, price_per_unit=1.0)
        assert table.loc["flat", "total_cost"] == pytest.approx(3000.0)

    def test_custom_scenarios(self, baseline):
        table = compare_scenarios(baseline, {"cut": ScenarioParams(percent_reduction=-10)})
        assert list(table.index) == ["cut"]
        assert table.loc["cut", "delta_percent"] == pytest.approx(-10.0)
