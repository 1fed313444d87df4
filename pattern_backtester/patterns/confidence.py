"""
Composite confidence scoring for pattern candidates.

Each factor is a value in [0, 1] multiplied by a fixed weight. Factors
that could not be measured are simply left out and the score is
renormalized over the weight actually used, so a score is always on the
same 0-100 scale no matter how many factors were available.
"""

import logging
import math
from dataclasses import replace
from typing import Dict, Mapping, Optional

from ..core.models import (
    AggregateStats, ChannelInfo, ConfidenceFactors, IndicatorSnapshot, PatternCandidate
)
from ..core.types import ChannelType, Direction, EmaCrossover, VolumeTrend
from ..core.exceptions import InvalidInputError
from ..config.backtest_config import IndicatorConfig, ScoringConfig

logger = logging.getLogger(__name__)

DEFAULT_WEIGHTS: Dict[str, int] = {
    # Pattern quality (40)
    'patternQuality': 15,
    'priceAction': 15,
    'volumeConfirmation': 10,
    # Technical (30)
    'trendStrength': 10,
    'volatility': 5,
    'momentum': 10,
    'support': 5,
    # Timeframe (15)
    'timeframe': 5,
    'multiTimeframeAlignment': 10,
    # Market / historical (15)
    'marketCondition': 5,
    'sectorStrength': 5,
    'historicalAccuracy': 3,
    'backtestResults': 2,
}

FACTOR_CATEGORIES = {
    'pattern_quality': ('patternQuality', 'priceAction', 'volumeConfirmation'),
    'technical': ('trendStrength', 'volatility', 'momentum', 'support'),
    'timeframe': ('timeframe', 'multiTimeframeAlignment'),
    'market_historical': ('marketCondition', 'sectorStrength', 'historicalAccuracy', 'backtestResults'),
}

# Reliability of each timeframe; higher timeframes carry more weight
TIMEFRAME_RELIABILITY = {
    '1m': 0.6,
    '5m': 0.65,
    '15m': 0.7,
    '30m': 0.75,
    '1h': 0.8,
    '4h': 0.85,
    'daily': 0.9,
    'weekly': 0.95,
}

# Risk/reward at which pattern quality saturates
IDEAL_RISK_REWARD = 3.0


def round_half_up(value: float) -> int:
    """Round halves away from zero for non-negative values (2.5 -> 3)"""
    return int(math.floor(value + 0.5))


def clamp(value: float, low: float = 0.0, high: float = 1.0) -> float:
    return max(low, min(high, value))


def confidence_bucket(score: float, width: int = 10) -> str:
    """Label the bucket a confidence score falls into, e.g. ``70-79``"""
    if not 1 <= width <= 100:
        raise InvalidInputError(f"Bucket width must be between 1 and 100, got {width}", field='width')
    score = int(clamp(score, 0, 100))
    low = min(score // width * width, 100 - width)
    high = 100 if low + width >= 100 else low + width - 1
    return f"{low}-{high}"


class ConfidenceScorer:
    """Weighted, renormalized confidence scoring"""

    def __init__(self, config: ScoringConfig = None, weights: Mapping[str, float] = None):
        self.config = config or ScoringConfig()
        self.weights = dict(weights if weights is not None else DEFAULT_WEIGHTS)
        if any(w <= 0 for w in self.weights.values()):
            raise InvalidInputError("Factor weights must be positive", field='weights')

    @property
    def total_weight(self) -> float:
        return sum(self.weights.values())

    def score(self, factors: ConfidenceFactors) -> int:
        """Combine the present factors into a 0-100 score"""
        score = 0.0
        weight_used = 0.0

        for name, value in (factors or {}).items():
            weight = self.weights.get(name)
            if weight is None:
                logger.debug(f"Ignoring unknown confidence factor: {name}")
                continue
            if value is None or math.isnan(value):
                continue
            score += clamp(float(value)) * weight
            weight_used += weight

        if weight_used == 0:
            return self.config.default_score

        return round_half_up(clamp(score / weight_used * 100, 0, 100))

    def category_scores(self, factors: ConfidenceFactors) -> Dict[str, Optional[int]]:
        """Score each factor category on its own; None where no factor was present"""
        result = {}
        for category, names in FACTOR_CATEGORIES.items():
            subset = {n: factors[n] for n in names if factors.get(n) is not None}
            result[category] = self.score(subset) if subset else None
        return result

    def boost_for(self, candidate: PatternCandidate) -> int:
        """Sum of the named boosts the candidate qualifies for"""
        boost = 0
        if candidate.volume_confirmation:
            boost += self.config.volume_boost
        if candidate.trendline_break:
            boost += self.config.trendline_boost
        return boost

    def apply_boosts(self, candidate: PatternCandidate, base_score: int = None) -> PatternCandidate:
        """Return the candidate scored with its named boosts added, capped at 100"""
        base = candidate.confidence_score if base_score is None else base_score
        return replace(candidate, confidence_score=min(100, base + self.boost_for(candidate)))

    def build_factors(self, candidate: PatternCandidate,
                      snapshot: Optional[IndicatorSnapshot] = None,
                      channel: Optional[ChannelInfo] = None,
                      history: Optional[AggregateStats] = None,
                      indicator_config: IndicatorConfig = None) -> ConfidenceFactors:
        """
        Derive the measurable factors for a candidate.

        Only factors that can actually be measured from the supplied inputs
        are returned; everything else is left absent.
        """
        indicator_config = indicator_config or IndicatorConfig()
        direction = candidate.trade_direction
        factors: ConfidenceFactors = {
            'patternQuality': clamp(candidate.risk_reward_ratio / IDEAL_RISK_REWARD),
        }

        if candidate.timeframe in TIMEFRAME_RELIABILITY:
            factors['timeframe'] = TIMEFRAME_RELIABILITY[candidate.timeframe]

        if snapshot is not None and snapshot.bars_used > 0:
            factors['volumeConfirmation'] = self._volume_factor(candidate, snapshot)

            if snapshot.ema_fast is not None:
                factors['priceAction'] = self._alignment(
                    snapshot.ema_crossover is EmaCrossover.BULLISH,
                    snapshot.ema_crossover is EmaCrossover.BEARISH,
                    direction,
                )

            if snapshot.bars_used > indicator_config.rsi_period:
                rsi_fraction = snapshot.rsi / 100.0
                factors['momentum'] = rsi_fraction if direction is Direction.BULLISH else 1.0 - rsi_fraction

            if snapshot.atr > 0 and snapshot.last_close:
                factors['volatility'] = self._volatility_factor(snapshot.atr / snapshot.last_close)

        if channel is not None and not channel.is_degenerate:
            factors['trendStrength'] = self._alignment(
                channel.channel_type is ChannelType.ASCENDING,
                channel.channel_type is ChannelType.DESCENDING,
                direction,
            )
            width = channel.resistance_level - channel.support_level
            if width > 0:
                if direction is Direction.BULLISH:
                    distance = candidate.entry_price - channel.support_level
                else:
                    distance = channel.resistance_level - candidate.entry_price
                factors['support'] = clamp(1.0 - distance / width)

        if history is not None and history.statistically_significant:
            factors['historicalAccuracy'] = history.win_rate
            factors['backtestResults'] = clamp(history.profit_factor / 2.0)

        return factors

    @staticmethod
    def _alignment(is_up: bool, is_down: bool, direction: Direction) -> float:
        if not is_up and not is_down:
            return 0.5
        if (is_up and direction is Direction.BULLISH) or (is_down and direction is Direction.BEARISH):
            return 1.0
        return 0.0

    @staticmethod
    def _volume_factor(candidate: PatternCandidate, snapshot: IndicatorSnapshot) -> float:
        if candidate.volume_confirmation:
            return 1.0
        return {
            VolumeTrend.INCREASING: 0.75,
            VolumeTrend.FLAT: 0.5,
            VolumeTrend.DECREASING: 0.25,
        }[snapshot.volume_trend]

    def _volatility_factor(self, atr_ratio: float) -> float:
        floor = self.config.volatility_floor
        ceiling = self.config.volatility_ceiling
        if atr_ratio < floor:
            return clamp(atr_ratio / floor)
        if atr_ratio > ceiling:
            return clamp(ceiling / atr_ratio)
        return 1.0
