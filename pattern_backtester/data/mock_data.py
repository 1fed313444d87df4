"""
Synthetic bar generation and data validation utilities.
"""

from datetime import datetime, timedelta
from typing import List, Optional, Sequence

import numpy as np

from ..core.models import PriceBar


class MockDataGenerator:
    """Generate reproducible synthetic bar series for demos and tests"""

    @staticmethod
    def generate_trending_bars(start_price: float = 100.0, num_bars: int = 100,
                               trend: float = 0.001, volatility: float = 0.01,
                               start: Optional[datetime] = None,
                               interval: timedelta = timedelta(days=1),
                               base_volume: float = 100000.0,
                               seed: Optional[int] = None) -> List[PriceBar]:
        """
        Generate a geometric random walk with drift.

        Args:
            start_price: Opening price of the first bar
            num_bars: Number of bars to generate
            trend: Mean per-bar return
            volatility: Standard deviation of the per-bar return
            start: Timestamp of the first bar (defaults to 2024-01-01)
            interval: Spacing between consecutive bars
            base_volume: Mean volume per bar
            seed: Seed for the random generator
        """
        if start_price <= 0:
            raise ValueError("start_price must be positive")
        if num_bars <= 0:
            return []

        rng = np.random.default_rng(seed)
        start = start or datetime(2024, 1, 1)

        returns = rng.normal(trend, volatility, num_bars)
        closes = start_price * np.cumprod(1.0 + returns)
        opens = np.concatenate(([start_price], closes[:-1]))
        wick = np.abs(rng.normal(0.0, volatility / 2, num_bars))
        highs = np.maximum(opens, closes) * (1.0 + wick)
        lows = np.minimum(opens, closes) * (1.0 - wick)
        volumes = np.maximum(rng.normal(base_volume, base_volume * 0.2, num_bars), 0.0)

        return [
            PriceBar(
                timestamp=start + interval * i,
                open=float(opens[i]),
                high=float(highs[i]),
                low=float(lows[i]),
                close=float(closes[i]),
                volume=float(round(volumes[i])),
            )
            for i in range(num_bars)
        ]

    @staticmethod
    def generate_flat_bars(price: float = 100.0, num_bars: int = 30, spread: float = 0.5,
                           start: Optional[datetime] = None,
                           interval: timedelta = timedelta(days=1),
                           volume: float = 100000.0) -> List[PriceBar]:
        """Generate bars that oscillate inside a fixed band around ``price``"""
        start = start or datetime(2024, 1, 1)
        return [
            PriceBar(start + interval * i, price, price + spread, price - spread, price, volume)
            for i in range(num_bars)
        ]


class DataValidator:
    """Checks a bar series for problems without raising"""

    @staticmethod
    def validate_bars(bars: Sequence[PriceBar]) -> List[str]:
        """Return a list of human-readable issues found in the series"""
        issues = []
        for i, bar in enumerate(bars):
            if not bar.low <= min(bar.open, bar.close):
                issues.append(f"Bar {i}: low {bar.low} above open/close")
            if not bar.high >= max(bar.open, bar.close):
                issues.append(f"Bar {i}: high {bar.high} below open/close")
            if i > 0 and bar.timestamp <= bars[i - 1].timestamp:
                issues.append(f"Bar {i}: timestamp {bar.timestamp} not after previous bar")
        return issues
