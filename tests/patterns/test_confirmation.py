"""
Tests for multi-timeframe confirmation.
"""

import logging
import pytest
from datetime import timedelta
from pattern_backtester.patterns.confirmation import MultiTimeframeConfirmator, higher_timeframe
from pattern_backtester.config.backtest_config import ConfirmationConfig
from pattern_backtester.core.models import ConfirmationResult
from pattern_backtester.core.types import Direction, PatternStatus


@pytest.fixture
def weekly_pattern(candidate_factory, base_time):
    return candidate_factory(timeframe='weekly', pattern_type='ascending_channel',
                             created_at=base_time - timedelta(weeks=1))


class TestHigherTimeframe:
    @pytest.mark.parametrize("timeframe, expected", [
        ('15m', '1h'), ('30m', '4h'), ('1h', '4h'), ('4h', 'daily'),
        ('daily', 'weekly'), ('1d', 'weekly'), ('1m', 'weekly'), ('weekly', 'weekly'),
    ])
    def test_mapping(self, timeframe, expected):
        assert higher_timeframe(timeframe) == expected


class TestConfirm:
    def test_matching_pattern_confirms(self, bullish_candidate, weekly_pattern):
        result = MultiTimeframeConfirmator().confirm(bullish_candidate, [weekly_pattern])
        assert result == ConfirmationResult(confirmed=True, confirming_timeframe='weekly', boost=15)

    def test_opposite_direction_does_not_confirm(self, bullish_candidate, candidate_factory, base_time):
        bearish_weekly = candidate_factory(
            timeframe='weekly', direction=Direction.BEARISH, target_price=90.0, stop_loss=105.0,
            created_at=base_time,
        )
        result = MultiTimeframeConfirmator().confirm(bullish_candidate, [bearish_weekly])
        assert result.confirmed is False
        assert result.boost == 0

    def test_inactive_pattern_does_not_confirm(self, bullish_candidate, candidate_factory, base_time):
        completed = candidate_factory(timeframe='weekly', status=PatternStatus.COMPLETED,
                                      created_at=base_time)
        assert not MultiTimeframeConfirmator().confirm(bullish_candidate, [completed]).confirmed

    def test_other_symbol_or_timeframe_does_not_confirm(self, bullish_candidate, candidate_factory,
                                                       base_time):
        others = [
            candidate_factory(symbol='MSFT', timeframe='weekly', created_at=base_time),
            candidate_factory(timeframe='4h', created_at=base_time),
        ]
        assert not MultiTimeframeConfirmator().confirm(bullish_candidate, others).confirmed

    def test_match_window(self, bullish_candidate, candidate_factory, base_time):
        stale = candidate_factory(timeframe='weekly', created_at=base_time - timedelta(weeks=6))
        confirmator = MultiTimeframeConfirmator()
        assert not confirmator.confirm(bullish_candidate, [stale]).confirmed

        wide = MultiTimeframeConfirmator(ConfirmationConfig(match_window_bars=6))
        assert wide.confirm(bullish_candidate, [stale]).confirmed

    def test_lookup_is_used(self, bullish_candidate, weekly_pattern):
        calls = []

        def lookup(symbol, timeframe):
            calls.append((symbol, timeframe))
            return [weekly_pattern]

        result = MultiTimeframeConfirmator(lookup=lookup).confirm(bullish_candidate)
        assert result.confirmed
        assert calls == [('AAPL', 'weekly')]

    def test_failed_lookup_degrades(self, bullish_candidate, caplog):
        def lookup(symbol, timeframe):
            raise ConnectionError("database unavailable")

        with caplog.at_level(logging.WARNING):
            result = MultiTimeframeConfirmator(lookup=lookup).confirm(bullish_candidate)

        assert result == ConfirmationResult()
        assert "database unavailable" in caplog.text

    def test_no_source_is_unconfirmed(self, bullish_candidate):
        assert MultiTimeframeConfirmator().confirm(bullish_candidate) == ConfirmationResult()


class TestApply:
    def test_boost_applied(self, candidate_factory):
        candidate = candidate_factory(confidence_score=60)
        result = ConfirmationResult(confirmed=True, confirming_timeframe='weekly', boost=15)
        assert MultiTimeframeConfirmator.apply(candidate, result).confidence_score == 75

    def test_boost_capped(self, candidate_factory):
        candidate = candidate_factory(confidence_score=95)
        result = ConfirmationResult(confirmed=True, confirming_timeframe='weekly', boost=15)
        assert MultiTimeframeConfirmator.apply(candidate, result).confidence_score == 100

    def test_unconfirmed_leaves_score(self, candidate_factory):
        candidate = candidate_factory(confidence_score=60)
        assert MultiTimeframeConfirmator.apply(candidate, ConfirmationResult()) is candidate
