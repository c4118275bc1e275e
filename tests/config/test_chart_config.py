"""
Tests for chart configuration and its loader.
"""

import sys

import pytest
from loguru import logger

from src.chainviz.config import ChartConfig, configure_logging, load_config
from src.chainviz.config.loader import merge_config_with_env


class TestChartConfig:
    """Test ChartConfig defaults and validation."""

    def test_defaults(self):
        config = ChartConfig()

        assert config.default_symbol == "SPY"
        assert config.default_range_days == 5
        assert config.default_expression_up == "(CVolume - COpenInterest) * CGamma"
        assert config.default_expression_down == "(PVolume - POpenInterest) * PGamma"
        assert config.combine_by_default is True
        assert config.max_value_ticks == 5
        assert config.flat_intensity == 0.5
        assert config.tracked_assets == ["SPY", "AAPL", "MSFT", "GOOG", "TSLA", "NVDA"]
        assert config.validate() == []

    def test_normalises_symbols(self):
        config = ChartConfig(default_symbol=" qqq ", tracked_assets=["spy", "iwm"], log_level="debug")

        assert config.default_symbol == "QQQ"
        assert config.tracked_assets == ["SPY", "IWM"]
        assert config.log_level == "DEBUG"

    @pytest.mark.parametrize("overrides,message", [
        ({"max_value_ticks": 0}, "max_value_ticks"),
        ({"flat_intensity": 1.5}, "flat_intensity"),
        ({"refresh_interval_seconds": 5}, "refresh_interval_seconds"),
        ({"default_expression_up": "  "}, "default_expression_up"),
        ({"log_level": "LOUD"}, "log_level"),
        ({"default_range_days": -1}, "default_range_days"),
    ])
    def test_validate_reports_errors(self, overrides, message):
        errors = ChartConfig(**overrides).validate()

        assert any(message in e for e in errors)

    def test_from_dict_ignores_unknown_keys(self):
        config = ChartConfig.from_dict({"default_symbol": "AAPL", "unused": 1})

        assert config.default_symbol == "AAPL"

    def test_from_dict_raises_on_invalid(self):
        with pytest.raises(ValueError, match="Chart config validation failed"):
            ChartConfig.from_dict({"max_value_ticks": 0})


class TestLoadConfig:
    """Test YAML loading and env overrides."""

    def test_missing_file_uses_defaults(self, tmp_path):
        config = load_config(tmp_path / "missing.yaml")

        assert config == ChartConfig()

    def test_loads_yaml(self, tmp_path):
        path = tmp_path / "chainviz.yaml"
        path.write_text(
            "default_symbol: nvda\n"
            "max_value_ticks: 8\n"
            "combine_by_default: false\n"
            "tracked_assets: [SPY, QQQ]\n"
        )

        config = load_config(path)

        assert config.default_symbol == "NVDA"
        assert config.max_value_ticks == 8
        assert config.combine_by_default is False
        assert config.tracked_assets == ["SPY", "QQQ"]

    def test_empty_yaml_uses_defaults(self, tmp_path):
        path = tmp_path / "chainviz.yaml"
        path.write_text("")

        assert load_config(path) == ChartConfig()

    def test_env_overrides_file(self, tmp_path, monkeypatch):
        path = tmp_path / "chainviz.yaml"
        path.write_text("max_value_ticks: 8\n")
        monkeypatch.setenv("CHAINVIZ_MAX_VALUE_TICKS", "3")
        monkeypatch.setenv("CHAINVIZ_COMBINE_BY_DEFAULT", "no")
        monkeypatch.setenv("CHAINVIZ_FLAT_INTENSITY", "0.25")
        monkeypatch.setenv("CHAINVIZ_TRACKED_ASSETS", "spy, qqq,")

        config = load_config(path)

        assert config.max_value_ticks == 3
        assert config.combine_by_default is False
        assert config.flat_intensity == 0.25
        assert config.tracked_assets == ["SPY", "QQQ"]

    def test_merge_leaves_input_untouched(self, monkeypatch):
        monkeypatch.setenv("CHAINVIZ_DEFAULT_SYMBOL", "IWM")
        data = {"default_symbol": "SPY"}

        merged = merge_config_with_env(data)

        assert merged["default_symbol"] == "IWM"
        assert data["default_symbol"] == "SPY"

    def test_invalid_yaml_values_raise(self, tmp_path):
        path = tmp_path / "chainviz.yaml"
        path.write_text("flat_intensity: 3\n")

        with pytest.raises(ValueError):
            load_config(path)


class TestConfigureLogging:
    """Test loguru handler setup."""

    def test_writes_log_file(self, tmp_path):
        log_file = tmp_path / "logs" / "chainviz.log"
        config = ChartConfig(log_file=str(log_file))

        configure_logging(config)
        logger.info("chart built")
        logger.remove()
        logger.add(sys.stderr)

        assert "chart built" in log_file.read_text()
