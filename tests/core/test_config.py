"""
Tests for configuration and logging setup.
"""

import json
import logging
import pytest
from pattern_backtester.config.backtest_config import (
    BacktestConfig, ChannelConfig, IndicatorConfig, ScoringConfig, SimulationConfig, AggregationConfig,
    CONSERVATIVE_CONFIG, BALANCED_CONFIG, AGGRESSIVE_CONFIG, LEGACY_ABSOLUTE_SLOPE_THRESHOLD,
    create_custom_config
)
from pattern_backtester.config.log_config import LOG_LEVEL_ENV, setup_logging
from pattern_backtester.core.types import SlopeNormalization, TieBreakPolicy
from pattern_backtester.core.exceptions import ConfigurationError


class TestBacktestConfig:
    def test_defaults_are_valid(self):
        config = BacktestConfig()
        assert config.validate() == []
        assert config.simulation.max_bars == 30
        assert config.simulation.tie_break is TieBreakPolicy.TARGET_FIRST
        assert config.channel.window == 20
        assert config.aggregation.min_sample_size == 3
        assert config.confirmation.boost == 15

    def test_presets_are_valid(self):
        for preset in (CONSERVATIVE_CONFIG, BALANCED_CONFIG, AGGRESSIVE_CONFIG):
            assert preset.validate() == []
        assert CONSERVATIVE_CONFIG.simulation.tie_break is TieBreakPolicy.CONSERVATIVE

    def test_errors_are_prefixed_by_section(self):
        config = BacktestConfig(
            indicators=IndicatorConfig(ema_fast_period=50, ema_slow_period=20),
            simulation=SimulationConfig(max_bars=0),
        )
        errors = config.validate()
        assert "indicators.ema_fast_period must be shorter than ema_slow_period" in errors
        assert "simulation.max_bars must be at least 1" in errors

    def test_bucket_width_bounds(self):
        assert ScoringConfig(bucket_width=100).validate() == []
        assert ScoringConfig(bucket_width=150).validate() == ["bucket_width must be between 1 and 100"]
        assert ScoringConfig(bucket_width=0).validate() == ["bucket_width must be between 1 and 100"]

    def test_ensure_valid_raises(self):
        config = BacktestConfig(aggregation=AggregationConfig(recommendation_metric='sharpe'))
        with pytest.raises(ConfigurationError) as exc_info:
            config.ensure_valid()
        assert any('sharpe' in e for e in exc_info.value.errors)

    def test_dict_round_trip_keeps_enums(self):
        config = create_custom_config(max_bars=12, risk_level="conservative")
        data = config.to_dict()
        assert data['simulation']['tie_break'] == 'conservative'
        assert data['channel']['normalization'] == 'price'

        restored = BacktestConfig.from_dict(data)
        assert restored == config

    def test_file_round_trip(self, tmp_path):
        path = tmp_path / "backtest.json"
        config = BacktestConfig(channel=ChannelConfig(normalization=SlopeNormalization.ATR))
        config.save_to_file(str(path))

        assert json.loads(path.read_text())['channel']['normalization'] == 'atr'
        assert BacktestConfig.from_file(str(path)) == config

    def test_missing_file_raises_configuration_error(self, tmp_path):
        with pytest.raises(ConfigurationError):
            BacktestConfig.from_file(str(tmp_path / "missing.json"))

    def test_invalid_file_contents_raise_configuration_error(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text(json.dumps({'simulation': {'max_bars': 0}}))
        with pytest.raises(ConfigurationError):
            BacktestConfig.from_file(str(path))


class TestCustomConfig:
    def test_risk_levels(self):
        assert create_custom_config(risk_level="aggressive").simulation.max_bars == 45
        assert create_custom_config(risk_level="conservative").aggregation.min_sample_size == 10

    def test_unknown_risk_level_falls_back_to_balanced(self):
        config = create_custom_config(risk_level="reckless")
        assert config.simulation.max_bars == 30

    def test_max_bars_override(self):
        assert create_custom_config(max_bars=5).simulation.max_bars == 5

    def test_legacy_absolute_channel(self):
        legacy = ChannelConfig.legacy_absolute()
        assert legacy.normalization is SlopeNormalization.ABSOLUTE
        assert legacy.slope_threshold == LEGACY_ABSOLUTE_SLOPE_THRESHOLD


class TestLogging:
    def test_level_from_environment(self, monkeypatch):
        monkeypatch.setenv(LOG_LEVEL_ENV, "debug")
        logger = setup_logging()
        assert logger.name == 'pattern_backtester'
        assert logger.level == logging.DEBUG

    def test_explicit_level_wins(self, monkeypatch):
        monkeypatch.setenv(LOG_LEVEL_ENV, "debug")
        assert setup_logging("warning").level == logging.WARNING
