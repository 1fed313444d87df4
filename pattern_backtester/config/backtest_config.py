"""
Configuration settings for the pattern backtester.

Every heuristic threshold used by the engine lives here so it can be
tuned and unit-tested instead of being hardcoded at call sites.
"""

from dataclasses import dataclass, field, asdict
from typing import Any, Dict, List
import json

from ..core.types import SlopeNormalization, TieBreakPolicy
from ..core.exceptions import ConfigurationError


@dataclass
class IndicatorConfig:
    """Configuration for the indicator calculator"""
    rsi_period: int = 14
    atr_period: int = 14
    ema_fast_period: int = 20
    ema_slow_period: int = 50
    volume_lookback: int = 20
    # Per-bar volume slope, relative to mean volume, below which volume is flat
    volume_slope_threshold: float = 0.005

    def validate(self) -> List[str]:
        errors = []
        for name in ('rsi_period', 'atr_period', 'ema_fast_period', 'ema_slow_period'):
            if getattr(self, name) < 1:
                errors.append(f"{name} must be at least 1")
        if self.ema_fast_period >= self.ema_slow_period:
            errors.append("ema_fast_period must be shorter than ema_slow_period")
        if self.volume_lookback < 2:
            errors.append("volume_lookback must be at least 2")
        return errors


@dataclass
class ChannelConfig:
    """Configuration for channel/trendline identification"""
    window: int = 20
    normalization: SlopeNormalization = SlopeNormalization.PRICE
    # Per-bar slope threshold, as a fraction of average price (PRICE),
    # a multiple of ATR (ATR) or raw price units (ABSOLUTE)
    slope_threshold: float = 0.001
    atr_period: int = 14

    def validate(self) -> List[str]:
        errors = []
        if self.window < 2:
            errors.append("window must be at least 2")
        if self.slope_threshold <= 0:
            errors.append("slope_threshold must be positive")
        return errors

    @classmethod
    def legacy_absolute(cls, window: int = 20) -> 'ChannelConfig':
        """Raw price-unit classification; misclassifies across price levels"""
        return cls(window=window, normalization=SlopeNormalization.ABSOLUTE,
                   slope_threshold=LEGACY_ABSOLUTE_SLOPE_THRESHOLD)


# Threshold used by legacy absolute-price classification
LEGACY_ABSOLUTE_SLOPE_THRESHOLD = 0.1


@dataclass
class ScoringConfig:
    """Configuration for confidence scoring"""
    default_score: int = 50
    volume_boost: int = 10
    trendline_boost: int = 10
    # ATR/price band considered healthy volatility for a pattern
    volatility_floor: float = 0.005
    volatility_ceiling: float = 0.05
    bucket_width: int = 10

    def validate(self) -> List[str]:
        errors = []
        if not 0 <= self.default_score <= 100:
            errors.append("default_score must be between 0 and 100")
        if self.volatility_floor <= 0 or self.volatility_ceiling <= self.volatility_floor:
            errors.append("volatility band must satisfy 0 < floor < ceiling")
        if not 1 <= self.bucket_width <= 100:
            errors.append("bucket_width must be between 1 and 100")
        return errors


@dataclass
class ConfirmationConfig:
    """Configuration for multi-timeframe confirmation"""
    boost: int = 15
    # Higher-timeframe bars either side of the candidate considered a match
    match_window_bars: int = 5

    def validate(self) -> List[str]:
        errors = []
        if self.boost < 0:
            errors.append("boost cannot be negative")
        if self.match_window_bars < 0:
            errors.append("match_window_bars cannot be negative")
        return errors


@dataclass
class SimulationConfig:
    """Configuration for the trade simulator"""
    max_bars: int = 30
    tie_break: TieBreakPolicy = TieBreakPolicy.TARGET_FIRST

    def validate(self) -> List[str]:
        errors = []
        if self.max_bars < 1:
            errors.append("max_bars must be at least 1")
        return errors


@dataclass
class AggregationConfig:
    """Configuration for the performance aggregator"""
    min_sample_size: int = 3
    recommendation_metric: str = 'expectancy'
    top_n: int = 3

    def validate(self) -> List[str]:
        errors = []
        if self.min_sample_size < 1:
            errors.append("min_sample_size must be at least 1")
        if self.recommendation_metric not in ('expectancy', 'win_rate', 'profit_factor', 'avg_return'):
            errors.append(f"unknown recommendation_metric: {self.recommendation_metric}")
        if self.top_n < 1:
            errors.append("top_n must be at least 1")
        return errors


@dataclass
class BatchConfig:
    """Configuration for batch backtest runs"""
    timeout_seconds: float = 30.0
    max_concurrency: int = 4

    def validate(self) -> List[str]:
        errors = []
        if self.timeout_seconds <= 0:
            errors.append("timeout_seconds must be positive")
        if self.max_concurrency < 1:
            errors.append("max_concurrency must be at least 1")
        return errors


@dataclass
class BacktestConfig:
    """Main backtester configuration"""
    indicators: IndicatorConfig = field(default_factory=IndicatorConfig)
    channel: ChannelConfig = field(default_factory=ChannelConfig)
    scoring: ScoringConfig = field(default_factory=ScoringConfig)
    confirmation: ConfirmationConfig = field(default_factory=ConfirmationConfig)
    simulation: SimulationConfig = field(default_factory=SimulationConfig)
    aggregation: AggregationConfig = field(default_factory=AggregationConfig)
    batch: BatchConfig = field(default_factory=BatchConfig)

    def validate(self) -> List[str]:
        """Validate every section and return a flat list of errors"""
        errors = []
        for section in ('indicators', 'channel', 'scoring', 'confirmation',
                        'simulation', 'aggregation', 'batch'):
            errors.extend(f"{section}.{e}" for e in getattr(self, section).validate())
        return errors

    def ensure_valid(self) -> 'BacktestConfig':
        errors = self.validate()
        if errors:
            raise ConfigurationError(errors)
        return self

    def to_dict(self) -> Dict[str, Any]:
        """Convert config to dictionary for serialization"""
        data = asdict(self)
        data['channel']['normalization'] = self.channel.normalization.value
        data['simulation']['tie_break'] = self.simulation.tie_break.value
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'BacktestConfig':
        """Create config from dictionary"""
        channel = dict(data.get('channel', {}))
        if 'normalization' in channel:
            channel['normalization'] = SlopeNormalization(channel['normalization'])
        simulation = dict(data.get('simulation', {}))
        if 'tie_break' in simulation:
            simulation['tie_break'] = TieBreakPolicy(simulation['tie_break'])
        return cls(
            indicators=IndicatorConfig(**data.get('indicators', {})),
            channel=ChannelConfig(**channel),
            scoring=ScoringConfig(**data.get('scoring', {})),
            confirmation=ConfirmationConfig(**data.get('confirmation', {})),
            simulation=SimulationConfig(**simulation),
            aggregation=AggregationConfig(**data.get('aggregation', {})),
            batch=BatchConfig(**data.get('batch', {})),
        )

    @classmethod
    def from_file(cls, config_path: str) -> 'BacktestConfig':
        """Load configuration from JSON file"""
        try:
            with open(config_path, 'r') as f:
                data = json.load(f)
            return cls.from_dict(data).ensure_valid()
        except (FileNotFoundError, json.JSONDecodeError, TypeError, ValueError) as e:
            raise ConfigurationError([f"Failed to load backtest config from {config_path}: {e}"]) from e

    def save_to_file(self, config_path: str):
        """Save configuration to JSON file"""
        with open(config_path, 'w') as f:
            json.dump(self.to_dict(), f, indent=2)


# Predefined configurations
CONSERVATIVE_CONFIG = BacktestConfig(
    simulation=SimulationConfig(max_bars=20, tie_break=TieBreakPolicy.CONSERVATIVE),
    aggregation=AggregationConfig(min_sample_size=10),
)

BALANCED_CONFIG = BacktestConfig()

AGGRESSIVE_CONFIG = BacktestConfig(
    simulation=SimulationConfig(max_bars=45, tie_break=TieBreakPolicy.TARGET_FIRST),
    aggregation=AggregationConfig(min_sample_size=3),
    confirmation=ConfirmationConfig(match_window_bars=10),
)


def create_custom_config(max_bars: int = None, risk_level: str = "balanced") -> BacktestConfig:
    """Create a custom configuration based on risk level"""

    risk_profiles = {
        "conservative": (20, TieBreakPolicy.CONSERVATIVE, 10),  # (max_bars, tie_break, min_sample)
        "balanced": (30, TieBreakPolicy.TARGET_FIRST, 3),
        "aggressive": (45, TieBreakPolicy.TARGET_FIRST, 3),
    }

    if risk_level not in risk_profiles:
        risk_level = "balanced"

    default_bars, tie_break, min_sample = risk_profiles[risk_level]

    return BacktestConfig(
        simulation=SimulationConfig(max_bars=max_bars or default_bars, tie_break=tie_break),
        aggregation=AggregationConfig(min_sample_size=min_sample),
    ).ensure_valid()
