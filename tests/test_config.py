"""Tests for configuration loading.

**Feature: trade-journal**
"""

import logging
from pathlib import Path

from tradejournal.analytics import default_registry
from tradejournal.config import DEFAULT_DB_PATH, AppConfig, load_config


class TestLoadConfig:
    """Missing or broken files fall back to defaults."""

    def test_missing_file(self, tmp_path):
        config = load_config(tmp_path / "absent.toml")

        assert config == AppConfig()
        assert config.db_path == DEFAULT_DB_PATH
        assert config.simulation.num_trades == 250

    def test_full_file(self, tmp_path):
        path = tmp_path / "config.toml"
        path.write_text(
            '[journal]\n'
            'default_id = "main"\n'
            'prefix = "Main"\n'
            '\n'
            '[database]\n'
            'path = "~/journals/trades.db"\n'
            '\n'
            '[pairs.EURUSD]\n'
            'pip_size = 0.0001\n'
            'pip_value = 9.5\n'
            '\n'
            '[pairs.MYIDX]\n'
            'pip_size = 1\n'
            'pip_value = 2\n'
            'spread = 3\n'
            '\n'
            '[simulation]\n'
            'num_simulations = 500\n'
            'seed = 7\n'
        )

        config = load_config(path)

        assert config.journal.default_id == "main"
        assert config.journal.prefix == "Main"
        assert config.db_path == Path.home() / "journals" / "trades.db"
        assert config.simulation.num_simulations == 500
        assert config.simulation.seed == 7
        pairs = config.pair_configs()
        assert pairs["EURUSD"].pip_value == 9.5
        assert pairs["MYIDX"].spread == 3
        assert "XAUUSD" in pairs

    def test_broken_toml(self, tmp_path, caplog):
        path = tmp_path / "config.toml"
        path.write_text("[journal\nprefix = ")

        with caplog.at_level(logging.WARNING, logger="tradejournal.config"):
            config = load_config(path)

        assert config == AppConfig()
        assert "Ignoring unreadable config" in caplog.text

    def test_invalid_values(self, tmp_path):
        path = tmp_path / "config.toml"
        path.write_text("[pairs.EURUSD]\npip_size = 0\npip_value = 10\n")

        assert load_config(path) == AppConfig()

    def test_custom_fields_and_analysis(self, tmp_path):
        path = tmp_path / "config.toml"
        path.write_text(
            '[[custom_fields]]\n'
            'id = "emotion"\n'
            'title = "Emotion"\n'
            'allow_multiple = true\n'
            '\n'
            '[[custom_fields.options]]\n'
            'value = "Calm"\n'
            '\n'
            '[[custom_fields.options]]\n'
            'value = "FOMO"\n'
            'impact = "Negative"\n'
            '\n'
            '[[analysis]]\n'
            'id = "htf"\n'
            'title = "Higher Timeframe"\n'
            '\n'
            '[[analysis.sub_categories]]\n'
            'id = "bias"\n'
            'title = "Bias"\n'
            '\n'
            '[[analysis.sub_categories.options]]\n'
            'id = "bull"\n'
            'value = "Bullish"\n'
        )

        settings = load_config(path).app_settings()

        field = settings.custom_fields[0]
        assert (field.id, field.allow_multiple) == ("emotion", True)
        assert field.options[1].impact == "Negative"
        category = settings.analysis_configurations[0]
        assert category.sub_categories[0].option("bull").value == "Bullish"
        assert "EURUSD" in settings.pairs_config

        registry = default_registry(settings)
        assert "custom-emotion" in registry
        assert "Higher Timeframe" in registry
