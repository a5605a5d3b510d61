"""Tests for config loading, merging and defaults."""

from pathlib import Path

import pytest

from energy_analytics.utils.config import (
    DEFAULT_CONFIG,
    _deep_merge,
    load_config,
    load_engine_config,
    resolve_config,
)


PROJECT_ROOT = Path(__file__).resolve().parent.parent
CONFIGS_DIR = PROJECT_ROOT / "configs"


# ---------------------------------------------------------------------------
#  Deep merge
# ---------------------------------------------------------------------------

class TestDeepMerge:
    """Tests for config _deep_merge utility."""

    def test_flat_override(self):
        merged = _deep_merge({"a": 1, "b": 2}, {"b": 3, "c": 4})
        assert merged == {"a": 1, "b": 3, "c": 4}

    def test_nested_merge(self):
        base = {"forecast": {"horizon": 6, "smoothing_alpha": 0.3}}
        merged = _deep_merge(base, {"forecast": {"horizon": 12}})
        assert merged["forecast"]["horizon"] == 12
        assert merged["forecast"]["smoothing_alpha"] == 0.3

    def test_base_unchanged(self):
        base = {"a": {"x": 1}}
        _ = _deep_merge(base, {"a": {"x": 2}})
        assert base["a"]["x"] == 1  # Original should not be mutated


# ---------------------------------------------------------------------------
#  load_config / load_engine_config
# ---------------------------------------------------------------------------

class TestLoadConfig:
    """Tests for YAML config loading and merging."""

    def test_load_and_merge(self, tmp_path):
        """Later configs should override earlier ones."""
        base = tmp_path / "base.yaml"
        base.write_text("forecast:\n  horizon: 6\n  smoothing_alpha: 0.3\n")
        override = tmp_path / "override.yaml"
        override.write_text("forecast:\n  horizon: 12\n")
        result = load_config([base, override])
        assert result["forecast"]["horizon"] == 12
        assert result["forecast"]["smoothing_alpha"] == 0.3

    def test_empty_file(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("")
        assert load_config([path]) == {}

    def test_missing_file_raises(self):
        with pytest.raises(FileNotFoundError):
            load_config([Path("nonexistent.yaml")])

    def test_engine_defaults(self):
        assert load_engine_config() == DEFAULT_CONFIG

    def test_engine_override(self, tmp_path):
        path = tmp_path / "site.yaml"
        path.write_text("peaks:\n  sigma_threshold: 2.0\n")
        config = load_engine_config([path])
        assert config["peaks"]["sigma_threshold"] == 2.0
        assert config["forecast"]["horizon"] == 6

    def test_defaults_not_mutated(self, tmp_path):
        path = tmp_path / "site.yaml"
        path.write_text("forecast:\n  horizon: 24\n")
        load_engine_config([path])["acf"]["max_lag"] = 99
        assert DEFAULT_CONFIG["forecast"]["horizon"] == 6
        assert DEFAULT_CONFIG["acf"]["max_lag"] == 12

    def test_shipped_default_matches_code(self):
        """configs/default.yaml must mirror DEFAULT_CONFIG."""
        assert load_config([CONFIGS_DIR / "default.yaml"]) == DEFAULT_CONFIG


class TestResolveConfig:
    """Tests for filling partial configs."""

    def test_none(self):
        assert resolve_config() == DEFAULT_CONFIG

    def test_partial(self, sample_config):
        config = resolve_config(sample_config)
        assert config["forecast"]["horizon"] == 3
        assert config["forecast"]["smoothing_alpha"] == 0.3
        assert config["scenario"]["price_per_unit"] == 500.0
