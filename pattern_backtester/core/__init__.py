"""Core components of the pattern backtester."""

from .types import (
    Direction, ChannelType, PatternStatus, ExitReason, SimulationState,
    TieBreakPolicy, EmaCrossover, VolumeTrend, DataFreshness, SlopeNormalization
)
from .models import (
    PriceBar, MarketDataSeries, PatternCandidate, IndicatorSnapshot, ChannelInfo,
    ConfirmationResult, TradeSimulationResult, AggregateStats, PerformanceSummary,
    ConfidenceFactors, validate_series, normalize_timeframe
)
from .exceptions import (
    PatternBacktesterError, InvalidInputError, InsufficientDataError, ConfigurationError
)

__all__ = [
    'Direction', 'ChannelType', 'PatternStatus', 'ExitReason', 'SimulationState',
    'TieBreakPolicy', 'EmaCrossover', 'VolumeTrend', 'DataFreshness', 'SlopeNormalization',
    'PriceBar', 'MarketDataSeries', 'PatternCandidate', 'IndicatorSnapshot', 'ChannelInfo',
    'ConfirmationResult', 'TradeSimulationResult', 'AggregateStats', 'PerformanceSummary',
    'ConfidenceFactors', 'validate_series', 'normalize_timeframe',
    'PatternBacktesterError', 'InvalidInputError', 'InsufficientDataError', 'ConfigurationError'
]
