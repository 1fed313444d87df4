"""
Tests for performance aggregation.
"""

import numpy as np
import pytest
from datetime import datetime, timedelta
from pattern_backtester.analytics.aggregator import (
    PerformanceAggregator, by_confidence_bucket, by_timeframe
)
from pattern_backtester.config.backtest_config import AggregationConfig
from pattern_backtester.core.models import TradeSimulationResult
from pattern_backtester.core.types import Direction, ExitReason

_counter = iter(range(10 ** 6))


def make_result(pnl, pattern_type='bull_flag', timeframe='daily', symbol='AAPL',
                exit_reason=None, success=None, bars_held=5, confidence=60, day=0, drawdown=1.0):
    if exit_reason is None:
        exit_reason = ExitReason.TARGET if pnl > 0 else ExitReason.STOP
    if success is None:
        success = pnl > 0
    entry = datetime(2024, 1, 1) + timedelta(days=day)
    return TradeSimulationResult(
        pattern_id=f"p{next(_counter):06d}",
        symbol=symbol,
        pattern_type=pattern_type,
        timeframe=timeframe,
        direction=Direction.BULLISH,
        confidence_score=confidence,
        entry_date=entry,
        exit_date=entry + timedelta(days=bars_held),
        entry_price=100.0,
        exit_price=100.0 + pnl,
        exit_reason=exit_reason,
        bars_held=bars_held,
        profit_loss_percent=pnl,
        max_drawdown_percent=drawdown,
        success=success,
    )


@pytest.fixture
def aggregator():
    return PerformanceAggregator()


class TestAggregate:
    def test_group_statistics(self, aggregator):
        results = [make_result(10.0), make_result(10.0), make_result(-5.0), make_result(-5.0)]
        stats = aggregator.aggregate(results)['bull_flag']

        assert stats.sample_size == 4
        assert stats.success_count == 2
        assert stats.win_rate == pytest.approx(0.5)
        assert stats.avg_return == pytest.approx(2.5)
        assert stats.profit_factor == pytest.approx(2.0)
        assert stats.avg_win == pytest.approx(10.0)
        assert stats.avg_loss == pytest.approx(5.0)
        assert stats.expectancy == pytest.approx(2.5)
        assert stats.risk_reward_ratio == pytest.approx(2.0)
        assert stats.avg_holding_period == pytest.approx(5.0)
        assert stats.statistically_significant is True

    def test_no_losses_profit_factor_is_zero(self, aggregator):
        stats = aggregator.aggregate([make_result(3.0)] * 3)['bull_flag']
        assert stats.profit_factor == 0.0
        assert stats.risk_reward_ratio == 0.0
        assert stats.win_rate == 1.0

    def test_small_groups_are_flagged(self, aggregator):
        stats = aggregator.aggregate([make_result(4.0), make_result(-2.0)])
        assert stats['bull_flag'].sample_size == 2
        assert stats['bull_flag'].statistically_significant is False

    def test_empty_input(self, aggregator):
        assert aggregator.aggregate([]) == {}

    def test_group_by_attribute_name(self, aggregator):
        results = [make_result(1.0, timeframe='daily'), make_result(1.0, timeframe='4h')]
        assert set(aggregator.aggregate(results, key='timeframe')) == {'daily', '4h'}
        assert set(aggregator.aggregate(results, key=by_timeframe)) == {'daily', '4h'}

    def test_group_by_confidence_bucket(self, aggregator):
        results = [make_result(1.0, confidence=c) for c in (55, 58, 72, 95, 100)]
        stats = aggregator.aggregate(results, key=by_confidence_bucket(10))
        assert {k: s.sample_size for k, s in stats.items()} == {'50-59': 2, '70-79': 1, '90-100': 2}

    def test_order_independent(self, aggregator):
        results = [make_result(p) for p in (5.0, -2.0, 3.0, -1.0, 7.0)]
        assert aggregator.aggregate(results) == aggregator.aggregate(list(reversed(results)))

    def test_time_stop_success_counts_as_win(self, aggregator):
        results = [make_result(1.5, exit_reason=ExitReason.TIME_STOP)] * 3
        assert aggregator.aggregate(results)['bull_flag'].win_rate == 1.0

    def test_invariants(self, aggregator):
        results = [make_result(p, pattern_type=t)
                   for t in ('a', 'b', 'c') for p in (4.0, -3.0, 2.0, -6.0, 0.5)]
        for stats in aggregator.aggregate(results).values():
            assert 0.0 <= stats.win_rate <= 1.0
            assert stats.profit_factor >= 0.0


class TestRecommend:
    @pytest.fixture
    def grouped(self, aggregator):
        results = (
            [make_result(p, pattern_type='bull_flag') for p in (6.0, 6.0, -2.0)]
            + [make_result(p, pattern_type='double_bottom') for p in (2.0, -3.0, -3.0, 1.0)]
            + [make_result(p, pattern_type='rare_gem') for p in (20.0, 25.0)]
        )
        return aggregator.aggregate(results)

    def test_small_groups_never_recommended(self, aggregator, grouped):
        keys = [s.group_key for s in aggregator.recommend(grouped)]
        assert 'rare_gem' not in keys
        assert keys == ['bull_flag', 'double_bottom']

    def test_best_group(self, aggregator, grouped):
        assert aggregator.best_group(grouped) == 'bull_flag'
        assert aggregator.best_group(grouped, metric='win_rate') == 'bull_flag'

    def test_top_n(self, aggregator, grouped):
        assert len(aggregator.recommend(grouped, top_n=1)) == 1

    def test_top_n_zero_returns_nothing(self, aggregator, grouped):
        assert aggregator.recommend(grouped, top_n=0) == []
        assert len(aggregator.recommend(grouped)) == 2

    def test_nothing_significant(self, aggregator):
        stats = aggregator.aggregate([make_result(5.0)])
        assert aggregator.recommend(stats) == []
        assert aggregator.best_group(stats) is None

    def test_custom_sample_threshold(self):
        strict = PerformanceAggregator(AggregationConfig(min_sample_size=4))
        assert strict.aggregate([make_result(1.0)] * 3)['bull_flag'].statistically_significant is False


class TestSummarize:
    def test_summary(self, aggregator):
        results = [
            make_result(10.0, day=0, drawdown=2.0),
            make_result(4.0, day=1, drawdown=1.0),
            make_result(-5.0, day=2, drawdown=5.0),
            make_result(-1.0, exit_reason=ExitReason.TIME_STOP, day=3),
            make_result(2.0, day=4),
        ]
        summary = aggregator.summarize(results)

        assert summary.total_trades == 5
        assert summary.winning_trades == 3
        assert summary.losing_trades == 2
        assert summary.win_rate == pytest.approx(0.6)
        assert summary.max_drawdown_percent == 5.0
        assert summary.target_hit_rate == pytest.approx(0.6)
        assert summary.stop_hit_rate == pytest.approx(0.2)
        assert summary.time_stop_rate == pytest.approx(0.2)
        assert summary.max_consecutive_wins == 2
        assert summary.max_consecutive_losses == 2
        assert summary.profit_factor == pytest.approx(16.0 / 6.0)

    def test_empty_summary(self, aggregator):
        summary = aggregator.summarize([])
        assert summary.total_trades == 0
        assert summary.win_rate is None

    def test_consistency_score(self, aggregator):
        pnls = [10.0, 4.0, -5.0, -1.0, 2.0]
        summary = aggregator.summarize([make_result(p, day=i) for i, p in enumerate(pnls)])
        # Population standard deviation over |mean| + 0.1
        expected = 100.0 - np.std(pnls) / (abs(np.mean(pnls)) + 0.1) * 10.0
        assert summary.consistency_score == pytest.approx(expected)
        assert summary.consistency_score == pytest.approx(76.0954, abs=1e-3)

    def test_consistency_score_bounds(self, aggregator):
        identical = aggregator.summarize([make_result(3.0, day=i) for i in range(4)])
        assert identical.consistency_score == 100.0
        erratic = aggregator.summarize([make_result(p, day=i) for i, p in enumerate((20.0, -20.0, 15.0, -15.0))])
        assert erratic.consistency_score == 0.0
        assert aggregator.summarize([]).consistency_score == 0.0

    def test_streaks_follow_entry_order(self, aggregator):
        # The first entry is held longest, so exit order differs from entry order
        results = [
            make_result(8.0, day=0, bars_held=10),
            make_result(-2.0, day=1, bars_held=1),
            make_result(-3.0, day=2, bars_held=1),
            make_result(4.0, day=3, bars_held=1),
        ]
        summary = aggregator.summarize(results)
        assert summary.max_consecutive_wins == 1
        assert summary.max_consecutive_losses == 2
