"""Tests for energy_analytics/data/preprocessing.py - validation, splitting, differencing."""

import numpy as np
import pytest

from energy_analytics.data.preprocessing import (
    as_series_array,
    difference,
    integrate,
    is_effectively_zero,
    temporal_split,
)
from energy_analytics.errors import InvalidParameterError


# ---------------------------------------------------------------------------
#  as_series_array
# ---------------------------------------------------------------------------

class TestAsSeriesArray:
    """Tests for input validation."""

    def test_list_to_float_array(self):
        arr = as_series_array([1, 2, 3])
        assert arr.dtype == np.float64
        assert arr.tolist() == [1.0, 2.0, 3.0]

    def test_input_not_modified(self):
        """Returned array must be a copy."""
        original = np.array([1.0, 2.0])
        arr = as_series_array(original)
        arr[0] = 99.0
        assert original[0] == 1.0

    def test_nan_raises(self):
        with pytest.raises(InvalidParameterError, match="NaN"):
            as_series_array([1.0, np.nan])

    def test_inf_raises(self):
        with pytest.raises(InvalidParameterError, match="Inf"):
            as_series_array([1.0, np.inf])

    def test_2d_raises(self):
        with pytest.raises(InvalidParameterError, match="one-dimensional"):
            as_series_array([[1.0, 2.0], [3.0, 4.0]])

    def test_errors_are_value_errors(self):
        """Engine errors stay catchable as ValueError."""
        with pytest.raises(ValueError):
            as_series_array([np.nan])


# ---------------------------------------------------------------------------
#  is_effectively_zero
# ---------------------------------------------------------------------------

class TestIsEffectivelyZero:
    """Tests for the scaled zero tolerance."""

    def test_exact_zero(self):
        assert is_effectively_zero(0.0)

    def test_rounding_noise_is_zero(self):
        assert is_effectively_zero(1e-13)

    def test_tolerance_scales(self):
        """Noise that is zero at scale 1e6 is not zero at scale 1."""
        assert is_effectively_zero(1e-7, scale=1e6)
        assert not is_effectively_zero(1e-7, scale=1.0)


# ---------------------------------------------------------------------------
#  temporal_split
# ---------------------------------------------------------------------------

class TestTemporalSplit:
    """Tests for chronological splitting."""

    def test_sizes(self):
        train, test = temporal_split(np.arange(10), 0.8)
        assert len(train) == 8
        assert len(test) == 2

    def test_order_preserved(self):
        train, test = temporal_split(np.arange(10), 0.5)
        assert train[-1] < test[0]

    @pytest.mark.parametrize("ratio", [0.0, 1.0, -0.1])
    def test_invalid_ratio(self, ratio):
        with pytest.raises(InvalidParameterError):
            temporal_split(np.arange(10), ratio)


# ---------------------------------------------------------------------------
#  difference / integrate
# ---------------------------------------------------------------------------

class TestDifferencing:
    """Tests for differencing and its inverse."""

    def test_first_difference(self):
        assert difference([1, 4, 9, 16]).tolist() == [3.0, 5.0, 7.0]

    def test_second_difference(self):
        assert difference([1, 4, 9, 16], order=2).tolist() == [2.0, 2.0]

    def test_order_zero_is_identity(self):
        assert difference([1, 2, 3], order=0).tolist() == [1.0, 2.0, 3.0]

    def test_negative_order_raises(self):
        with pytest.raises(InvalidParameterError):
            difference([1, 2, 3], order=-1)

    def test_integrate_inverts_difference(self):
        values = np.array([10.0, 12.0, 11.0, 15.0])
        restored = integrate(difference(values), values[0])
        np.testing.assert_allclose(restored, values)
