"""
Core data models for the pattern backtester.
Contains all dataclasses and model definitions.
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Dict, List, Optional, Sequence
import math
import uuid

from .types import (
    ChannelType, DataFreshness, Direction, EmaCrossover, ExitReason,
    PatternStatus, VolumeTrend,
)
from .exceptions import InvalidInputError


# Sparse mapping of factor name -> value in [0, 1]
ConfidenceFactors = Dict[str, float]

TIMEFRAME_ALIASES = {
    '1d': 'daily', 'd': 'daily', 'day': 'daily', 'daily': 'daily',
    '1w': 'weekly', 'w': 'weekly', 'week': 'weekly', 'weekly': 'weekly',
}

TIMEFRAME_DURATIONS = {
    '1m': timedelta(minutes=1),
    '5m': timedelta(minutes=5),
    '15m': timedelta(minutes=15),
    '30m': timedelta(minutes=30),
    '1h': timedelta(hours=1),
    '4h': timedelta(hours=4),
    'daily': timedelta(days=1),
    'weekly': timedelta(weeks=1),
}


def normalize_timeframe(timeframe: str) -> str:
    """Return the canonical spelling of a timeframe label"""
    if not timeframe:
        raise InvalidInputError("Timeframe must be a non-empty string", field='timeframe')
    key = timeframe.strip().lower()
    return TIMEFRAME_ALIASES.get(key, key)


def _require_positive(value: float, name: str) -> None:
    if value is None or not math.isfinite(value) or value <= 0:
        raise InvalidInputError(f"{name} must be a positive finite number, got {value!r}", field=name)


@dataclass(frozen=True)
class PriceBar:
    """Single OHLCV bar"""
    timestamp: datetime
    open: float
    high: float
    low: float
    close: float
    volume: float = 0.0

    def __post_init__(self):
        for name in ('open', 'high', 'low', 'close'):
            _require_positive(getattr(self, name), name)
        if self.high < self.low:
            raise InvalidInputError(f"Bar high {self.high} is below low {self.low}", field='high')
        if self.volume < 0:
            raise InvalidInputError(f"Volume cannot be negative, got {self.volume}", field='volume')

    @property
    def total_range(self) -> float:
        """Total price range of the bar"""
        return self.high - self.low


def validate_series(bars: Sequence[PriceBar]) -> None:
    """Raise InvalidInputError unless timestamps are strictly increasing (oldest first)"""
    for previous, current in zip(bars, bars[1:]):
        if current.timestamp <= previous.timestamp:
            raise InvalidInputError(
                f"Bar series must be ordered oldest-first: {current.timestamp} "
                f"does not follow {previous.timestamp}",
                field='timestamp'
            )


@dataclass(frozen=True)
class MarketDataSeries:
    """Ordered bars for one (symbol, timeframe) pair as delivered by the data provider"""
    symbol: str
    timeframe: str
    bars: List[PriceBar]
    freshness: DataFreshness = DataFreshness.CACHED

    def __post_init__(self):
        object.__setattr__(self, 'timeframe', normalize_timeframe(self.timeframe))
        object.__setattr__(self, 'bars', list(self.bars))
        if isinstance(self.freshness, str):
            object.__setattr__(self, 'freshness', DataFreshness(self.freshness))
        validate_series(self.bars)

    def __len__(self) -> int:
        return len(self.bars)


@dataclass(frozen=True)
class PatternCandidate:
    """
    A detected chart pattern awaiting scoring and simulation.

    Instances are validated once here and never mutated afterwards;
    enrichment steps return copies via ``dataclasses.replace``.
    """
    symbol: str
    timeframe: str
    pattern_type: str
    direction: Direction
    entry_price: float
    target_price: float
    stop_loss: float
    created_at: datetime
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    support_level: Optional[float] = None
    resistance_level: Optional[float] = None
    channel_type: Optional[ChannelType] = None
    ema_pattern: Optional[str] = None
    volume_confirmation: bool = False
    trendline_break: bool = False
    confidence_score: int = 50
    status: PatternStatus = PatternStatus.ACTIVE

    def __post_init__(self):
        if not self.symbol:
            raise InvalidInputError("Symbol is required", field='symbol')
        object.__setattr__(self, 'timeframe', normalize_timeframe(self.timeframe))
        try:
            if isinstance(self.direction, str):
                object.__setattr__(self, 'direction', Direction(self.direction.lower()))
            if isinstance(self.status, str):
                object.__setattr__(self, 'status', PatternStatus(self.status.lower()))
            if isinstance(self.channel_type, str):
                object.__setattr__(self, 'channel_type', ChannelType(self.channel_type.lower()))
        except ValueError as e:
            raise InvalidInputError(str(e)) from e

        _require_positive(self.entry_price, 'entry_price')
        _require_positive(self.target_price, 'target_price')
        _require_positive(self.stop_loss, 'stop_loss')
        if self.stop_loss == self.entry_price:
            raise InvalidInputError(
                "stop_loss equals entry_price; risk/reward is undefined", field='stop_loss'
            )
        if not 0 <= self.confidence_score <= 100:
            raise InvalidInputError(
                f"confidence_score must be within [0, 100], got {self.confidence_score}",
                field='confidence_score'
            )

    @property
    def trade_direction(self) -> Direction:
        """Direction used for trading; neutral patterns follow the side of their target"""
        if self.direction is not Direction.NEUTRAL:
            return self.direction
        return Direction.BULLISH if self.target_price > self.entry_price else Direction.BEARISH

    @property
    def risk_reward_ratio(self) -> float:
        """Reward distance divided by risk distance"""
        return abs(self.target_price - self.entry_price) / abs(self.entry_price - self.stop_loss)


@dataclass(frozen=True)
class IndicatorSnapshot:
    """Indicator values computed at the most recent bar"""
    rsi: float = 50.0
    atr: float = 0.0
    ema_fast: Optional[float] = None
    ema_slow: Optional[float] = None
    ema_crossover: EmaCrossover = EmaCrossover.NEUTRAL
    volume_trend: VolumeTrend = VolumeTrend.FLAT
    volume_slope: float = 0.0
    last_close: Optional[float] = None
    bars_used: int = 0


@dataclass(frozen=True)
class ChannelInfo:
    """Support/resistance trendlines fitted over the recent window"""
    channel_type: ChannelType = ChannelType.HORIZONTAL
    support_level: float = 0.0
    resistance_level: float = 0.0
    support_slope: float = 0.0
    resistance_slope: float = 0.0
    normalized_slope: float = 0.0
    bars_used: int = 0

    @property
    def is_degenerate(self) -> bool:
        return self.bars_used < 2


@dataclass(frozen=True)
class ConfirmationResult:
    """Outcome of checking a pattern against its higher timeframe"""
    confirmed: bool = False
    confirming_timeframe: Optional[str] = None
    boost: int = 0


@dataclass(frozen=True)
class TradeSimulationResult:
    """Outcome of one simulated trade. Created once per simulation run."""
    pattern_id: str
    symbol: str
    pattern_type: str
    timeframe: str
    direction: Direction
    confidence_score: int
    entry_date: datetime
    exit_date: datetime
    entry_price: float
    exit_price: float
    exit_reason: ExitReason
    bars_held: int
    profit_loss_percent: float
    max_drawdown_percent: float
    success: bool
    bars_to_breakout: Optional[int] = None
    bars_to_target: Optional[int] = None


@dataclass(frozen=True)
class AggregateStats:
    """Performance statistics for one group of simulated trades"""
    group_key: str
    sample_size: int
    success_count: int
    win_rate: Optional[float]
    avg_return: float
    profit_factor: float
    expectancy: float
    avg_holding_period: float
    avg_win: float = 0.0
    avg_loss: float = 0.0
    risk_reward_ratio: float = 0.0
    statistically_significant: bool = False


@dataclass(frozen=True)
class PerformanceSummary:
    """Overall metrics across every simulated trade"""
    total_trades: int
    winning_trades: int
    losing_trades: int
    win_rate: Optional[float]
    avg_return: float
    avg_win: float
    avg_loss: float
    profit_factor: float
    expectancy: float
    risk_reward_ratio: float
    max_drawdown_percent: float
    avg_holding_period: float
    target_hit_rate: float
    stop_hit_rate: float
    time_stop_rate: float
    max_consecutive_wins: int
    max_consecutive_losses: int
    consistency_score: float = 0.0
