"""Configuration loading utilities for YAML-based engine settings."""

import copy
import logging
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger(__name__)

# Defaults mirror configs/default.yaml so the engine runs without any file.
DEFAULT_CONFIG: dict[str, Any] = {
    "trend": {
        "flat_band_percent": 1.0,
    },
    "forecast": {
        "horizon": 6,
        "smoothing_alpha": 0.3,
        "interval_width": 0.10,
        "level_mode": "detrended",
        "seasonal": False,
    },
    "acf": {
        "max_lag": 12,
        "cycle_threshold": 0.2,
    },
    "peaks": {
        "sigma_threshold": 1.5,
    },
    "change_points": {
        "threshold": 2.0,
        "max_window": 10,
    },
    "seasonality": {
        "period": 12,
    },
    "backtest": {
        "holdout": 3,
    },
    "scenario": {
        "price_per_unit": 500.0,
        "emission_factor": 0.5,
    },
    "api": {
        "host": "0.0.0.0",
        "port": 8000,
        "log_level": "info",
    },
}


def _deep_merge(base: dict, override: dict) -> dict:
    """Recursively merge override dict into base dict.

    Args:
        base: Base configuration dictionary.
        override: Override dictionary whose values take precedence.

    Returns:
        Merged dictionary with override values taking precedence.
    """
    merged = base.copy()
    for key, value in override.items():
        if key in merged and isinstance(merged[key], dict) and isinstance(value, dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def load_config(config_paths: list[str | Path]) -> dict[str, Any]:
    """Load and merge multiple YAML config files.

    Later files override earlier ones for duplicate keys. Nested
    dictionaries are merged recursively.

    Args:
        config_paths: List of paths to YAML config files.

    Returns:
        Merged configuration dictionary.

    Raises:
        FileNotFoundError: If a config file does not exist.
    """
    merged: dict[str, Any] = {}
    for path in config_paths:
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")
        with open(path, "r", encoding="utf-8") as f:
            config = yaml.safe_load(f) or {}
        merged = _deep_merge(merged, config)
    return merged


def load_engine_config(config_paths: list[str | Path] | None = None) -> dict[str, Any]:
    """Load engine settings: built-in defaults overridden by YAML files.

    Args:
        config_paths: Optional YAML files, applied in order on top of
            ``DEFAULT_CONFIG``.

    Returns:
        Complete configuration dictionary with every section present.
    """
    config = copy.deepcopy(DEFAULT_CONFIG)
    if config_paths:
        config = _deep_merge(config, load_config(config_paths))
        logger.info(f"Loaded engine config from {[str(p) for p in config_paths]}")
    return config


def resolve_config(config: dict[str, Any] | None = None) -> dict[str, Any]:
    """Fill in any section or key missing from ``config`` with the defaults."""
    return _deep_merge(copy.deepcopy(DEFAULT_CONFIG), config or {})
