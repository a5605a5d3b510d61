"""Tests for the autocorrelation function and cycle candidates."""

import numpy as np
import pytest

from energy_analytics.analysis.autocorrelation import (
    AcfEntry,
    compute_acf,
    compute_pacf,
    cycle_candidates,
)
from energy_analytics.analysis.peaks import detect_peaks


class TestComputeAcf:
    """Tests for lagged Pearson correlation."""

    def test_lags_start_at_one(self, seasonal_series):
        acf = compute_acf(seasonal_series, 12)
        assert [e.lag for e in acf] == list(range(1, 13))

    def test_values_bounded(self, seasonal_series, spiky_series):
        for series in (seasonal_series, spiky_series):
            for entry in compute_acf(series, 12):
                assert -1.0 <= entry.correlation <= 1.0

    def test_max_lag_clamped_to_half_length(self, linear_series):
        acf = compute_acf(linear_series, 12)
        assert len(acf) == 3

    def test_linear_series_fully_correlated(self, linear_series):
        acf = compute_acf(linear_series, 3)
        for entry in acf:
            assert entry.correlation == pytest.approx(1.0)

    def test_constant_series_zero(self, constant_series):
        """Zero variance gives 0.0, never NaN."""
        acf = compute_acf(constant_series, 2)
        assert len(acf) == 2
        for entry in acf:
            assert entry.correlation == 0.0

    def test_small_variation_on_large_level_is_not_constant(self):
        """A 0.2 swing around 1e6 is real variance, not rounding noise."""
        series = [1_000_000.0, 1_000_000.2] * 10
        acf = {e.lag: e.correlation for e in compute_acf(series, 2)}
        assert acf[1] < -0.99
        assert acf[2] > 0.99

    def test_zero_variance_guard_agrees_with_peaks(self):
        """A series the peak detector treats as varying must not get a flat ACF."""
        series = [1_000_000.0, 1_000_000.2] * 10
        assert detect_peaks(series, 0.5)
        assert compute_acf(series, 1)[0].correlation != 0.0

    def test_yearly_cycle(self, seasonal_series):
        acf = {e.lag: e.correlation for e in compute_acf(seasonal_series, 12)}
        assert acf[12] == pytest.approx(1.0)
        assert acf[6] < 0

    @pytest.mark.parametrize("values, max_lag", [([1.0], 5), ([1.0, 2.0, 3.0], 0), ([], 3)])
    def test_empty_when_no_valid_lag(self, values, max_lag):
        assert compute_acf(values, max_lag) == []


class TestComputePacf:
    """Tests for the partial autocorrelation function."""

    def test_lags_start_at_one(self, seasonal_series):
        pacf = compute_pacf(seasonal_series, 12)
        assert [e.lag for e in pacf] == list(range(1, 13))

    def test_clamped_below_half_length(self, linear_series):
        """Six points allow at most two partial lags."""
        assert len(compute_pacf(linear_series, 12)) == 2

    def test_values_bounded(self, seasonal_series, spiky_series):
        for series in (seasonal_series, spiky_series):
            for entry in compute_pacf(series, 8):
                assert -1.0 <= entry.correlation <= 1.0

    def test_ar1_cuts_off_after_lag_one(self):
        """An AR(1) process has one strong partial lag and little beyond it."""
        rng = np.random.default_rng(7)
        values = np.zeros(400)
        for t in range(1, 400):
            values[t] = 0.8 * values[t - 1] + rng.normal()
        pacf = {e.lag: e.correlation for e in compute_pacf(values + 100.0, 5)}
        assert pacf[1] > 0.6
        for lag in range(2, 6):
            assert abs(pacf[lag]) < 0.2

    def test_first_lag_matches_acf(self, spiky_series):
        """Partial and plain correlation coincide at lag 1."""
        pacf = compute_pacf(spiky_series, 3)
        acf = compute_acf(spiky_series, 3)
        assert pacf[0].correlation == pytest.approx(acf[0].correlation, abs=0.1)

    def test_constant_series_zero(self):
        pacf = compute_pacf([500.0] * 10, 3)
        assert [e.correlation for e in pacf] == [0.0, 0.0, 0.0]

    def test_too_short(self):
        assert compute_pacf([1.0, 2.0, 3.0], 3) == []


class TestCycleCandidates:
    """Tests for cycle candidate selection."""

    def test_strongest_first(self, seasonal_series):
        candidates = cycle_candidates(compute_acf(seasonal_series, 18))
        assert candidates[0].lag == 12

    def test_threshold(self):
        acf = [AcfEntry(1, 0.5), AcfEntry(2, 0.1), AcfEntry(3, -0.3)]
        lags = [e.lag for e in cycle_candidates(acf, threshold=0.2)]
        assert lags == [1, 3]

    def test_constant_has_no_cycles(self, constant_series):
        assert cycle_candidates(compute_acf(constant_series, 2)) == []

    def test_is_cycle_candidate_inclusive(self):
        assert AcfEntry(1, -0.2).is_cycle_candidate(0.2)
        assert not AcfEntry(1, 0.19).is_cycle_candidate(0.2)
