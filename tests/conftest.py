"""Shared fixtures for the test suite.

Provides small synthetic series and raw record sets that mirror the shape
of the exported consumption data, enabling fast, repeatable tests without
requiring the real store.
"""

import sys
from pathlib import Path

import numpy as np
import pandas as pd
import pytest

# Ensure project root is on the path for imports
PROJECT_ROOT = Path(__file__).resolve().parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))


# ---------------------------------------------------------------------------
#  Sample series
# ---------------------------------------------------------------------------

@pytest.fixture
def linear_series() -> list[float]:
    """Six months rising by exactly 50 per step."""
    return [1000.0, 1050.0, 1100.0, 1150.0, 1200.0, 1250.0]


@pytest.fixture
def constant_series() -> list[float]:
    return [500.0] * 5


@pytest.fixture
def seasonal_series() -> np.ndarray:
    """Three years of monthly consumption with a yearly cycle and mild growth.

    Peaks in July (index 6 of each year), troughs in January.
    """
    t = np.arange(36)
    return 1000 + 5 * t - 200 * np.cos(2 * np.pi * t / 12)


@pytest.fixture
def spiky_series() -> np.ndarray:
    """Flat noisy series with one high and one low outlier."""
    rng = np.random.default_rng(42)
    values = 800 + rng.normal(0, 10, 24)
    values[7] = 1100.0
    values[15] = 500.0
    return values


# ---------------------------------------------------------------------------
#  Raw records
# ---------------------------------------------------------------------------

def _make_records() -> list[dict]:
    """Unordered records for two keys, with one duplicate month.

    Tunja/electricity: 2023-01..2023-06, 100 per month, March read twice
    (40 + 60). Duitama/electricity: 2023-01..2023-03.
    """
    records = [
        {"location": "Tunja", "source": "electricity", "year": 2023, "month": m, "value": 100.0}
        for m in (6, 1, 2, 4, 5)
    ]
    records += [
        {"location": "Tunja", "source": "electricity", "year": 2023, "month": 3, "value": 40.0},
        {"location": "Tunja", "source": "electricity", "year": 2023, "month": 3, "value": 60.0},
    ]
    records += [
        {"location": "Duitama", "source": "electricity", "year": 2023, "month": m, "value": 200.0 + m}
        for m in (3, 1, 2)
    ]
    return records


@pytest.fixture
def sample_records() -> list[dict]:
    return _make_records()


@pytest.fixture
def sample_records_df() -> pd.DataFrame:
    return pd.DataFrame(_make_records())


@pytest.fixture
def tmp_csv(tmp_path, sample_records_df) -> Path:
    """Write sample_records_df to a temp CSV and return its path."""
    csv_path = tmp_path / "observations.csv"
    sample_records_df.to_csv(csv_path, index=False)
    return csv_path


# ---------------------------------------------------------------------------
#  Sample configuration
# ---------------------------------------------------------------------------

@pytest.fixture
def sample_config() -> dict:
    """Partial config overriding a few defaults."""
    return {
        "forecast": {"horizon": 3},
        "backtest": {"holdout": 2},
        "acf": {"max_lag": 6},
    }
