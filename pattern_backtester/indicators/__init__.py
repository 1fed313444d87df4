"""Technical indicators."""

from .calculator import (
    IndicatorCalculator, calculate_rsi, calculate_atr, calculate_ema,
    detect_ema_crossover, calculate_volume_trend, ema_pattern_label, fit_line
)

__all__ = [
    'IndicatorCalculator', 'calculate_rsi', 'calculate_atr', 'calculate_ema',
    'detect_ema_crossover', 'calculate_volume_trend', 'ema_pattern_label', 'fit_line'
]
