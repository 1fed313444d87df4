"""
Multi-timeframe confirmation of pattern candidates.
"""

import logging
from dataclasses import replace
from typing import Callable, Iterable, Optional

from ..core.models import (
    TIMEFRAME_DURATIONS, ConfirmationResult, PatternCandidate, normalize_timeframe
)
from ..core.types import PatternStatus
from ..config.backtest_config import ConfirmationConfig

logger = logging.getLogger(__name__)

HIGHER_TIMEFRAME = {
    '15m': '1h',
    '30m': '4h',
    '1h': '4h',
    '4h': 'daily',
}
DEFAULT_HIGHER_TIMEFRAME = 'weekly'

PatternLookup = Callable[[str, str], Iterable[PatternCandidate]]


def higher_timeframe(timeframe: str) -> str:
    """Canonical higher timeframe used to confirm patterns on ``timeframe``"""
    return HIGHER_TIMEFRAME.get(normalize_timeframe(timeframe), DEFAULT_HIGHER_TIMEFRAME)


class MultiTimeframeConfirmator:
    """Checks a candidate against active patterns on its higher timeframe"""

    def __init__(self, config: ConfirmationConfig = None, lookup: Optional[PatternLookup] = None):
        """
        Args:
            config: Boost and match-window settings
            lookup: Optional ``lookup(symbol, timeframe)`` returning the
                patterns currently known for that pair
        """
        self.config = config or ConfirmationConfig()
        self.lookup = lookup

    def confirm(self, candidate: PatternCandidate,
                higher_patterns: Optional[Iterable[PatternCandidate]] = None) -> ConfirmationResult:
        """
        Look for an active same-direction pattern on the higher timeframe.

        A failing lookup degrades to an unconfirmed result.
        """
        target_timeframe = higher_timeframe(candidate.timeframe)

        if higher_patterns is None:
            if self.lookup is None:
                return ConfirmationResult()
            try:
                higher_patterns = list(self.lookup(candidate.symbol, target_timeframe))
            except Exception as e:
                logger.warning(
                    f"Higher timeframe lookup failed for {candidate.symbol} {target_timeframe}: {e}"
                )
                return ConfirmationResult()

        window = TIMEFRAME_DURATIONS.get(target_timeframe, TIMEFRAME_DURATIONS['daily']) \
            * self.config.match_window_bars

        for pattern in higher_patterns:
            if (pattern.symbol == candidate.symbol
                    and pattern.timeframe == target_timeframe
                    and pattern.status is PatternStatus.ACTIVE
                    and pattern.direction is candidate.direction
                    and abs(pattern.created_at - candidate.created_at) <= window):
                logger.debug(
                    f"{candidate.symbol} {candidate.pattern_type} confirmed by "
                    f"{pattern.pattern_type} on {target_timeframe}"
                )
                return ConfirmationResult(
                    confirmed=True,
                    confirming_timeframe=target_timeframe,
                    boost=self.config.boost,
                )

        return ConfirmationResult()

    @staticmethod
    def apply(candidate: PatternCandidate, result: ConfirmationResult) -> PatternCandidate:
        """Return the candidate with the confirmation boost applied, capped at 100"""
        if not result.confirmed:
            return candidate
        return replace(candidate, confidence_score=min(100, candidate.confidence_score + result.boost))
