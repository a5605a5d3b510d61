"""Backtest metrics, residual diagnostics and charts."""
