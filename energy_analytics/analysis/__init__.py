"""Independent analyses over a monthly consumption series.

Components:
    1. analyze_trend          - OLS slope and rising/falling/flat direction
    2. exponential_smoothing  - single-factor denoising filter
       holt_winters_smoothing - level, trend and seasonal smoothing
    3. compute_acf            - lagged Pearson correlation, cycle candidates
       compute_pacf           - partial autocorrelation (Yule-Walker)
    4. detect_peaks           - sigma-band anomalies
    5. detect_change_points   - before/after window level shifts
    6. decompose              - classical or STL seasonal decomposition
       check_stationarity     - augmented Dickey-Fuller test
"""

from energy_analytics.analysis.autocorrelation import (
    AcfEntry,
    compute_acf,
    compute_pacf,
    cycle_candidates,
)
from energy_analytics.analysis.patterns import (
    ChangePoint,
    categorize_consumption,
    compare_periods,
    detect_change_points,
    peak_month,
)
from energy_analytics.analysis.peaks import PeakFlag, detect_peaks
from energy_analytics.analysis.seasonality import Decomposition, check_stationarity, decompose
from energy_analytics.analysis.smoothing import (
    HoltResult,
    HoltWintersResult,
    exponential_smoothing,
    holt_smoothing,
    holt_winters_smoothing,
    moving_average,
)
from energy_analytics.analysis.trend import TrendResult, analyze_trend, linear_regression

__all__ = [
    "AcfEntry",
    "ChangePoint",
    "Decomposition",
    "HoltResult",
    "HoltWintersResult",
    "PeakFlag",
    "TrendResult",
    "analyze_trend",
    "categorize_consumption",
    "check_stationarity",
    "compare_periods",
    "compute_acf",
    "compute_pacf",
    "cycle_candidates",
    "decompose",
    "detect_change_points",
    "detect_peaks",
    "exponential_smoothing",
    "holt_smoothing",
    "holt_winters_smoothing",
    "linear_regression",
    "moving_average",
    "peak_month",
]
