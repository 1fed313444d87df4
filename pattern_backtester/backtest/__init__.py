"""Backtest orchestration for single pairs and batches."""

from .engine import PatternBacktestEngine, PreparedPattern, BacktestRunResult
from .batch import BatchBacktestRunner, BatchReport, PairOutcome

__all__ = [
    'PatternBacktestEngine', 'PreparedPattern', 'BacktestRunResult',
    'BatchBacktestRunner', 'BatchReport', 'PairOutcome'
]
