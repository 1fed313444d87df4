"""
Technical indicator calculations over oldest-first bar series.

All functions are pure and degrade to neutral values on short input
instead of raising.
"""

import logging
from dataclasses import replace
from typing import Optional, Sequence, Tuple

import numpy as np

from ..core.models import IndicatorSnapshot, PatternCandidate, PriceBar, validate_series
from ..core.types import EmaCrossover, VolumeTrend
from ..config.backtest_config import IndicatorConfig

logger = logging.getLogger(__name__)

NEUTRAL_RSI = 50.0

EMA_PATTERN_LABELS = {
    EmaCrossover.BULLISH: 'allBullish',
    EmaCrossover.BEARISH: 'allBearish',
    EmaCrossover.NEUTRAL: 'mixed',
}


def fit_line(values: Sequence[float]) -> Tuple[float, float]:
    """
    Ordinary least squares fit of ``values`` against their index.

    Indices are shifted so the last value sits at x=0, which makes the
    returned intercept the line's projected value at the most recent bar.
    Returns ``(0.0, 0.0)`` when the fit is degenerate.
    """
    y = np.asarray(values, dtype=float)
    n = len(y)
    if n < 2:
        return 0.0, 0.0

    x = np.arange(n, dtype=float) - (n - 1)
    x_mean = x.mean()
    denominator = np.sum((x - x_mean) ** 2)
    if denominator == 0:
        return 0.0, 0.0

    slope = float(np.sum((x - x_mean) * (y - y.mean())) / denominator)
    intercept = float(y.mean() - slope * x_mean)
    return slope, intercept


def calculate_rsi(closes: Sequence[float], period: int = 14) -> float:
    """Relative Strength Index with Wilder smoothing"""
    prices = np.asarray(closes, dtype=float)
    if len(prices) < period + 1:
        return NEUTRAL_RSI

    changes = np.diff(prices)
    gains = np.clip(changes, 0, None)
    losses = np.clip(-changes, 0, None)

    avg_gain = gains[:period].mean()
    avg_loss = losses[:period].mean()
    for gain, loss in zip(gains[period:], losses[period:]):
        avg_gain = (avg_gain * (period - 1) + gain) / period
        avg_loss = (avg_loss * (period - 1) + loss) / period

    if avg_loss == 0:
        return 100.0 if avg_gain > 0 else NEUTRAL_RSI
    rs = avg_gain / avg_loss
    return float(100.0 - 100.0 / (1.0 + rs))


def calculate_atr(bars: Sequence[PriceBar], period: int = 14) -> float:
    """Average True Range with Wilder smoothing; 0.0 on short series"""
    if len(bars) < period + 1:
        return 0.0

    highs = np.array([b.high for b in bars], dtype=float)
    lows = np.array([b.low for b in bars], dtype=float)
    closes = np.array([b.close for b in bars], dtype=float)
    prev_close = closes[:-1]

    true_range = np.maximum.reduce([
        highs[1:] - lows[1:],
        np.abs(highs[1:] - prev_close),
        np.abs(lows[1:] - prev_close),
    ])

    atr = true_range[:period].mean()
    for tr in true_range[period:]:
        atr = (atr * (period - 1) + tr) / period
    return float(atr)


def calculate_ema(values: Sequence[float], period: int) -> np.ndarray:
    """Exponential moving average seeded with the simple average of the first period"""
    data = np.asarray(values, dtype=float)
    if len(data) == 0:
        return data
    if len(data) < period:
        return np.full(len(data), data.mean())

    multiplier = 2.0 / (period + 1)
    ema = np.empty(len(data))
    ema[:period] = data[:period].mean()
    for i in range(period, len(data)):
        ema[i] = (data[i] - ema[i - 1]) * multiplier + ema[i - 1]
    return ema


def detect_ema_crossover(closes: Sequence[float], fast_period: int = 20,
                         slow_period: int = 50) -> Tuple[EmaCrossover, Optional[float], Optional[float]]:
    """Return the fast/slow EMA relationship at the last bar with both EMA values"""
    if len(closes) < slow_period:
        return EmaCrossover.NEUTRAL, None, None

    fast = float(calculate_ema(closes, fast_period)[-1])
    slow = float(calculate_ema(closes, slow_period)[-1])
    if fast > slow:
        return EmaCrossover.BULLISH, fast, slow
    if fast < slow:
        return EmaCrossover.BEARISH, fast, slow
    return EmaCrossover.NEUTRAL, fast, slow


def calculate_volume_trend(bars: Sequence[PriceBar], lookback: int = 20,
                           threshold: float = 0.005) -> Tuple[VolumeTrend, float]:
    """Classify volume direction from the OLS slope over the last ``lookback`` bars"""
    window = bars[-lookback:]
    if len(window) < 2:
        return VolumeTrend.FLAT, 0.0

    volumes = [b.volume for b in window]
    slope, _ = fit_line(volumes)
    mean_volume = float(np.mean(volumes))
    if mean_volume <= 0:
        return VolumeTrend.FLAT, slope

    relative = slope / mean_volume
    if relative > threshold:
        return VolumeTrend.INCREASING, slope
    if relative < -threshold:
        return VolumeTrend.DECREASING, slope
    return VolumeTrend.FLAT, slope


def ema_pattern_label(crossover: EmaCrossover) -> str:
    """Label stored on pattern records for an EMA relationship"""
    return EMA_PATTERN_LABELS[crossover]


class IndicatorCalculator:
    """Computes an indicator snapshot for the most recent bar of a series"""

    def __init__(self, config: IndicatorConfig = None):
        self.config = config or IndicatorConfig()

    def calculate(self, bars: Sequence[PriceBar], lookback: int = None) -> IndicatorSnapshot:
        """
        Compute RSI, ATR, EMA crossover and volume trend.

        Args:
            bars: Oldest-first bar series
            lookback: Optional number of most recent bars to consider
        """
        validate_series(bars)
        if lookback is not None:
            bars = bars[-lookback:] if lookback > 0 else []

        if not bars:
            logger.debug("No bars supplied; returning neutral indicator snapshot")
            return IndicatorSnapshot()

        cfg = self.config
        closes = [b.close for b in bars]
        crossover, ema_fast, ema_slow = detect_ema_crossover(
            closes, cfg.ema_fast_period, cfg.ema_slow_period
        )
        volume_trend, volume_slope = calculate_volume_trend(
            bars, cfg.volume_lookback, cfg.volume_slope_threshold
        )

        if len(bars) <= max(cfg.rsi_period, cfg.atr_period):
            logger.debug(f"Only {len(bars)} bars available; RSI/ATR fall back to neutral values")

        return IndicatorSnapshot(
            rsi=calculate_rsi(closes, cfg.rsi_period),
            atr=calculate_atr(bars, cfg.atr_period),
            ema_fast=ema_fast,
            ema_slow=ema_slow,
            ema_crossover=crossover,
            volume_trend=volume_trend,
            volume_slope=volume_slope,
            last_close=closes[-1],
            bars_used=len(bars),
        )

    def enrich(self, candidate: PatternCandidate, bars: Sequence[PriceBar],
               snapshot: IndicatorSnapshot = None) -> PatternCandidate:
        """Return a copy of ``candidate`` carrying its EMA pattern and volume confirmation"""
        if snapshot is None:
            snapshot = self.calculate(bars)
        return replace(
            candidate,
            ema_pattern=ema_pattern_label(snapshot.ema_crossover),
            volume_confirmation=(
                candidate.volume_confirmation or snapshot.volume_trend is VolumeTrend.INCREASING
            ),
        )
