"""
Support/resistance trendline fitting and channel classification.
"""

import logging
from dataclasses import replace
from typing import Sequence

import numpy as np

from ..core.models import ChannelInfo, PatternCandidate, PriceBar, validate_series
from ..core.types import ChannelType, Direction, SlopeNormalization
from ..config.backtest_config import ChannelConfig
from ..indicators.calculator import calculate_atr, fit_line

logger = logging.getLogger(__name__)


class ChannelIdentifier:
    """Fits support and resistance lines over the most recent window of bars"""

    def __init__(self, config: ChannelConfig = None):
        self.config = config or ChannelConfig()

    def identify(self, bars: Sequence[PriceBar]) -> ChannelInfo:
        """
        Fit independent OLS lines through lows (support) and highs (resistance).

        Projected levels are the lines' values at the most recent bar. A
        window with fewer than two bars yields a horizontal channel with
        zeroed lines.
        """
        validate_series(bars)
        window = bars[-self.config.window:]
        n = len(window)
        if n < 2:
            logger.debug(f"Channel window has {n} bars; using horizontal default")
            return ChannelInfo(bars_used=n)

        support_slope, support_level = fit_line([b.low for b in window])
        resistance_slope, resistance_level = fit_line([b.high for b in window])

        average_slope = (support_slope + resistance_slope) / 2
        normalized_slope = self._normalize(average_slope, window)

        return ChannelInfo(
            channel_type=self._classify(normalized_slope),
            support_level=support_level,
            resistance_level=resistance_level,
            support_slope=support_slope,
            resistance_slope=resistance_slope,
            normalized_slope=normalized_slope,
            bars_used=n,
        )

    def _normalize(self, slope: float, window: Sequence[PriceBar]) -> float:
        mode = self.config.normalization
        if mode is SlopeNormalization.ABSOLUTE:
            return slope

        if mode is SlopeNormalization.ATR:
            # ATR over the window itself; short windows fall back to mean range
            scale = calculate_atr(window, min(self.config.atr_period, len(window) - 1))
            if scale <= 0:
                scale = float(np.mean([b.total_range for b in window]))
        else:
            scale = float(np.mean([b.close for b in window]))

        if scale <= 0:
            return 0.0
        return slope / scale

    def _classify(self, normalized_slope: float) -> ChannelType:
        threshold = self.config.slope_threshold
        if normalized_slope > threshold:
            return ChannelType.ASCENDING
        if normalized_slope < -threshold:
            return ChannelType.DESCENDING
        return ChannelType.HORIZONTAL

    def enrich(self, candidate: PatternCandidate, bars: Sequence[PriceBar],
               channel: ChannelInfo = None) -> PatternCandidate:
        """Return a copy of ``candidate`` carrying channel levels and trendline-break state"""
        if channel is None:
            channel = self.identify(bars)
        if channel.is_degenerate:
            return replace(candidate, channel_type=channel.channel_type)

        return replace(
            candidate,
            support_level=channel.support_level,
            resistance_level=channel.resistance_level,
            channel_type=channel.channel_type,
            trendline_break=self.is_trendline_break(candidate, bars[-1], channel),
        )

    @staticmethod
    def is_trendline_break(candidate: PatternCandidate, bar: PriceBar, channel: ChannelInfo) -> bool:
        """Whether ``bar`` closes beyond the trendline in the candidate's direction"""
        if channel.is_degenerate:
            return False
        if candidate.trade_direction is Direction.BULLISH:
            return bar.close > channel.resistance_level
        return bar.close < channel.support_level
