"""
Core type definitions for the pattern backtester.
Contains all enums and basic type definitions.
"""

from enum import Enum


class Direction(Enum):
    """Predicted direction of a pattern"""
    BULLISH = "bullish"
    BEARISH = "bearish"
    NEUTRAL = "neutral"


class ChannelType(Enum):
    """Shape of the support/resistance channel"""
    ASCENDING = "ascending"
    DESCENDING = "descending"
    HORIZONTAL = "horizontal"


class PatternStatus(Enum):
    """Lifecycle status of a detected pattern"""
    ACTIVE = "active"
    COMPLETED = "completed"
    FAILED = "failed"


class ExitReason(Enum):
    """Why a simulated trade was closed"""
    TARGET = "target"
    STOP = "stop"
    TIME_STOP = "time-stop"


class SimulationState(Enum):
    """States of the trade simulation state machine"""
    ACTIVE = "active"
    HIT_TARGET = "hit_target"
    HIT_STOP = "hit_stop"
    TIME_STOP = "time_stop"

    @property
    def is_terminal(self) -> bool:
        return self is not SimulationState.ACTIVE


class TieBreakPolicy(Enum):
    """Resolution when target and stop are both touched within one bar"""
    TARGET_FIRST = "target_first"
    STOP_FIRST = "stop_first"
    CONSERVATIVE = "conservative"


class EmaCrossover(Enum):
    """Relative position of the fast EMA against the slow EMA"""
    BULLISH = "bullish"
    BEARISH = "bearish"
    NEUTRAL = "neutral"


class VolumeTrend(Enum):
    """Direction of volume over the lookback window"""
    INCREASING = "increasing"
    DECREASING = "decreasing"
    FLAT = "flat"


class DataFreshness(Enum):
    """How current the market data supplied by the provider is"""
    REALTIME = "realtime"
    DELAYED = "delayed"
    CACHED = "cached"


class SlopeNormalization(Enum):
    """Scale used to normalize channel slopes before classification"""
    PRICE = "price"
    ATR = "atr"
    ABSOLUTE = "absolute"


# Exit reason produced by each terminal simulation state
EXIT_REASONS = {
    SimulationState.HIT_TARGET: ExitReason.TARGET,
    SimulationState.HIT_STOP: ExitReason.STOP,
    SimulationState.TIME_STOP: ExitReason.TIME_STOP,
}
