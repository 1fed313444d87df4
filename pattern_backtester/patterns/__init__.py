"""Channel identification, confidence scoring and multi-timeframe confirmation."""

from .channels import ChannelIdentifier
from .confidence import (
    ConfidenceScorer, DEFAULT_WEIGHTS, FACTOR_CATEGORIES, TIMEFRAME_RELIABILITY, confidence_bucket
)
from .confirmation import MultiTimeframeConfirmator, HIGHER_TIMEFRAME, higher_timeframe

__all__ = [
    'ChannelIdentifier', 'ConfidenceScorer', 'DEFAULT_WEIGHTS', 'FACTOR_CATEGORIES',
    'TIMEFRAME_RELIABILITY', 'confidence_bucket', 'MultiTimeframeConfirmator',
    'HIGHER_TIMEFRAME', 'higher_timeframe'
]
