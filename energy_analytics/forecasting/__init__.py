"""Multi-step consumption forecasting."""
