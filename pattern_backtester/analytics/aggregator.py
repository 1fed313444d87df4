"""
Performance aggregation over simulated trades.

Statistics are always recomputed from the supplied results, so the
reduction does not depend on the order in which results arrived.
"""

import logging
from typing import Callable, Dict, Iterable, List, Optional, Union

import numpy as np
import pandas as pd

from ..core.models import AggregateStats, PerformanceSummary, TradeSimulationResult
from ..core.types import ExitReason
from ..config.backtest_config import AggregationConfig
from ..patterns.confidence import confidence_bucket

logger = logging.getLogger(__name__)

GroupKey = Union[str, Callable[[TradeSimulationResult], str]]


def by_pattern_type(result: TradeSimulationResult) -> str:
    return result.pattern_type


def by_timeframe(result: TradeSimulationResult) -> str:
    return result.timeframe


def by_symbol(result: TradeSimulationResult) -> str:
    return result.symbol


def by_confidence_bucket(width: int = 10) -> Callable[[TradeSimulationResult], str]:
    """Group key placing results into confidence-score buckets of ``width`` points"""
    def key(result: TradeSimulationResult) -> str:
        return confidence_bucket(result.confidence_score, width)
    return key


def _resolve_key(key: GroupKey) -> Callable[[TradeSimulationResult], str]:
    if callable(key):
        return key
    return lambda result: str(getattr(result, key))


def _results_frame(results: Iterable[TradeSimulationResult]) -> pd.DataFrame:
    rows = [
        {
            'pattern_id': r.pattern_id,
            'entry_date': r.entry_date,
            'exit_date': r.exit_date,
            'profit_loss_percent': r.profit_loss_percent,
            'success': r.success,
            'bars_held': r.bars_held,
            'max_drawdown_percent': r.max_drawdown_percent,
            'exit_reason': r.exit_reason.value,
            '_result': r,
        }
        for r in results
    ]
    return pd.DataFrame(rows, columns=[
        'pattern_id', 'entry_date', 'exit_date', 'profit_loss_percent', 'success', 'bars_held',
        'max_drawdown_percent', 'exit_reason', '_result',
    ])


def _win_loss(frame: pd.DataFrame):
    """Return (win_rate, avg_win, avg_loss, profit_factor) for a non-empty frame"""
    returns = frame['profit_loss_percent']
    wins = frame.loc[frame['success'], 'profit_loss_percent']
    losses = frame.loc[~frame['success'], 'profit_loss_percent']

    win_rate = float(frame['success'].mean())
    avg_win = float(wins.mean()) if len(wins) else 0.0
    avg_loss = abs(float(losses.mean())) if len(losses) else 0.0

    gross_profit = float(returns[returns > 0].sum())
    gross_loss = abs(float(returns[returns < 0].sum()))
    profit_factor = gross_profit / gross_loss if gross_loss > 0 else 0.0
    return win_rate, avg_win, avg_loss, profit_factor


def consistency_score(returns) -> float:
    """
    Score in [0, 100] that falls as returns spread relative to their mean.

    Uses the population standard deviation of the P&L percents; 0.1 in
    the denominator keeps a near-zero mean from dividing by zero.
    """
    values = np.asarray(returns, dtype=float)
    if values.size == 0:
        return 0.0
    spread = float(np.std(values)) / (abs(float(np.mean(values))) + 0.1)
    return float(np.clip(100.0 - spread * 10.0, 0.0, 100.0))


def _max_streak(flags: List[bool], value: bool) -> int:
    best = current = 0
    for flag in flags:
        current = current + 1 if flag is value else 0
        best = max(best, current)
    return best


class PerformanceAggregator:
    """Groups simulation results and computes per-group statistics"""

    def __init__(self, config: AggregationConfig = None):
        self.config = config or AggregationConfig()

    def compute_stats(self, group_key: str, frame: pd.DataFrame) -> AggregateStats:
        """Statistics for a single group of results"""
        sample_size = len(frame)
        if sample_size == 0:
            return AggregateStats(
                group_key=group_key, sample_size=0, success_count=0, win_rate=None,
                avg_return=0.0, profit_factor=0.0, expectancy=0.0, avg_holding_period=0.0,
            )

        win_rate, avg_win, avg_loss, profit_factor = _win_loss(frame)

        return AggregateStats(
            group_key=group_key,
            sample_size=sample_size,
            success_count=int(frame['success'].sum()),
            win_rate=win_rate,
            avg_return=float(frame['profit_loss_percent'].mean()),
            profit_factor=profit_factor,
            expectancy=avg_win * win_rate - avg_loss * (1 - win_rate),
            avg_holding_period=float(frame['bars_held'].mean()),
            avg_win=avg_win,
            avg_loss=avg_loss,
            risk_reward_ratio=avg_win / avg_loss if avg_loss > 0 else 0.0,
            statistically_significant=sample_size >= self.config.min_sample_size,
        )

    def aggregate(self, results: Iterable[TradeSimulationResult],
                  key: GroupKey = by_pattern_type) -> Dict[str, AggregateStats]:
        """
        Group results by ``key`` and compute statistics for every group.

        Args:
            results: Simulation results to reduce
            key: Result attribute name or callable mapping a result to its group
        """
        key_fn = _resolve_key(key)
        frame = _results_frame(results)
        if frame.empty:
            return {}

        frame['group'] = [key_fn(r) for r in frame['_result']]
        stats = {
            str(group): self.compute_stats(str(group), group_frame)
            for group, group_frame in frame.groupby('group', sort=True)
        }

        small = [k for k, s in stats.items() if not s.statistically_significant]
        if small:
            logger.debug(
                f"{len(small)} group(s) below sample threshold {self.config.min_sample_size}: {small}"
            )
        return stats

    def recommend(self, stats: Dict[str, AggregateStats], metric: str = None,
                  top_n: int = None) -> List[AggregateStats]:
        """Best statistically significant groups, ranked by ``metric`` (descending)"""
        metric = metric or self.config.recommendation_metric
        if top_n is None:
            top_n = self.config.top_n
        eligible = [s for s in stats.values() if s.statistically_significant]
        ranked = sorted(eligible, key=lambda s: (getattr(s, metric), s.group_key), reverse=True)
        return ranked[:top_n]

    def best_group(self, stats: Dict[str, AggregateStats], metric: str = None) -> Optional[str]:
        """Key of the single best significant group, or None"""
        ranked = self.recommend(stats, metric, top_n=1)
        return ranked[0].group_key if ranked else None

    def summarize(self, results: Iterable[TradeSimulationResult]) -> PerformanceSummary:
        """Overall metrics across every result"""
        frame = _results_frame(results)
        total = len(frame)
        if total == 0:
            return PerformanceSummary(
                total_trades=0, winning_trades=0, losing_trades=0, win_rate=None,
                avg_return=0.0, avg_win=0.0, avg_loss=0.0, profit_factor=0.0, expectancy=0.0,
                risk_reward_ratio=0.0, max_drawdown_percent=0.0, avg_holding_period=0.0,
                target_hit_rate=0.0, stop_hit_rate=0.0, time_stop_rate=0.0,
                max_consecutive_wins=0, max_consecutive_losses=0,
            )

        win_rate, avg_win, avg_loss, profit_factor = _win_loss(frame)
        winning = int(frame['success'].sum())
        exit_counts = frame['exit_reason'].value_counts()
        # Streaks follow entry order, ties broken by pattern id
        ordered = frame.sort_values(['entry_date', 'pattern_id'], kind='mergesort')
        flags = [bool(f) for f in ordered['success']]

        return PerformanceSummary(
            total_trades=total,
            winning_trades=winning,
            losing_trades=total - winning,
            win_rate=win_rate,
            avg_return=float(frame['profit_loss_percent'].mean()),
            avg_win=avg_win,
            avg_loss=avg_loss,
            profit_factor=profit_factor,
            expectancy=avg_win * win_rate - avg_loss * (1 - win_rate),
            risk_reward_ratio=avg_win / avg_loss if avg_loss > 0 else 0.0,
            max_drawdown_percent=float(np.max(frame['max_drawdown_percent'])),
            avg_holding_period=float(frame['bars_held'].mean()),
            target_hit_rate=float(exit_counts.get(ExitReason.TARGET.value, 0)) / total,
            stop_hit_rate=float(exit_counts.get(ExitReason.STOP.value, 0)) / total,
            time_stop_rate=float(exit_counts.get(ExitReason.TIME_STOP.value, 0)) / total,
            max_consecutive_wins=_max_streak(flags, True),
            max_consecutive_losses=_max_streak(flags, False),
            consistency_score=consistency_score(frame['profit_loss_percent']),
        )
