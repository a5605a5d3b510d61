"""Energy consumption analytics and forecasting engine.

Turns monthly consumption histories keyed by (location, source) into trend
classifications, detected anomalies and cycles, multi-step forecasts with
confidence bands, backtested accuracy metrics and what-if scenarios.
"""

__version__ = "0.1.0"
