"""Configuration for the pattern backtester."""

from .backtest_config import (
    IndicatorConfig, ChannelConfig, ScoringConfig, ConfirmationConfig,
    SimulationConfig, AggregationConfig, BatchConfig, BacktestConfig,
    CONSERVATIVE_CONFIG, BALANCED_CONFIG, AGGRESSIVE_CONFIG, create_custom_config
)
from .log_config import setup_logging

__all__ = [
    'IndicatorConfig', 'ChannelConfig', 'ScoringConfig', 'ConfirmationConfig',
    'SimulationConfig', 'AggregationConfig', 'BatchConfig', 'BacktestConfig',
    'CONSERVATIVE_CONFIG', 'BALANCED_CONFIG', 'AGGRESSIVE_CONFIG', 'create_custom_config',
    'setup_logging'
]
