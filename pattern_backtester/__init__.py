"""
Pattern Backtester - confidence scoring and outcome simulation for chart patterns.

This package provides:
- Technical indicators (RSI, ATR, EMA crossover, volume trend)
- Support/resistance channel fitting
- Composite 0-100 confidence scoring with multi-timeframe confirmation
- Bar-by-bar trade simulation with explicit tie-break policies
- Grouped performance statistics and strategy recommendations
"""

__version__ = "1.0.0"
__author__ = "Pattern Backtester Team"

from .core.types import Direction, ChannelType, ExitReason, SimulationState, TieBreakPolicy
from .core.models import (
    PriceBar, MarketDataSeries, PatternCandidate, TradeSimulationResult,
    AggregateStats, PerformanceSummary
)
from .core.exceptions import (
    PatternBacktesterError, InvalidInputError, InsufficientDataError, ConfigurationError
)
from .config.backtest_config import BacktestConfig, create_custom_config
from .config.log_config import setup_logging
from .indicators.calculator import IndicatorCalculator
from .patterns.channels import ChannelIdentifier
from .patterns.confidence import ConfidenceScorer
from .patterns.confirmation import MultiTimeframeConfirmator
from .trading.simulator import TradeSimulator
from .analytics.aggregator import PerformanceAggregator
from .analytics.ledger import ResultLedger
from .backtest.engine import PatternBacktestEngine, BacktestRunResult
from .backtest.batch import BatchBacktestRunner, BatchReport
from .data.mock_data import MockDataGenerator


# Convenience factory functions
def create_engine(config: BacktestConfig = None) -> PatternBacktestEngine:
    """Create a backtest engine with every component built from ``config``"""
    return PatternBacktestEngine.from_config(config or BacktestConfig())


def create_batch_runner(fetch_bars, fetch_patterns,
                        config: BacktestConfig = None) -> BatchBacktestRunner:
    """Create a batch runner around a freshly configured engine"""
    config = config or BacktestConfig()
    return BatchBacktestRunner(create_engine(config), fetch_bars, fetch_patterns, config.batch)


__all__ = [
    # Core types
    'Direction', 'ChannelType', 'ExitReason', 'SimulationState', 'TieBreakPolicy',
    # Core models
    'PriceBar', 'MarketDataSeries', 'PatternCandidate', 'TradeSimulationResult',
    'AggregateStats', 'PerformanceSummary',
    # Errors
    'PatternBacktesterError', 'InvalidInputError', 'InsufficientDataError', 'ConfigurationError',
    # Configuration
    'BacktestConfig', 'create_custom_config', 'setup_logging',
    # Components
    'IndicatorCalculator', 'ChannelIdentifier', 'ConfidenceScorer', 'MultiTimeframeConfirmator',
    'TradeSimulator', 'PerformanceAggregator', 'ResultLedger',
    'PatternBacktestEngine', 'BacktestRunResult', 'BatchBacktestRunner', 'BatchReport',
    'MockDataGenerator',
    # Convenience functions
    'create_engine', 'create_batch_runner'
]
