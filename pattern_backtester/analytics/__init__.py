"""Performance aggregation and result storage."""

from .aggregator import (
    PerformanceAggregator, by_pattern_type, by_timeframe, by_symbol, by_confidence_bucket
)
from .ledger import ResultLedger

__all__ = [
    'PerformanceAggregator', 'by_pattern_type', 'by_timeframe', 'by_symbol',
    'by_confidence_bucket', 'ResultLedger'
]
