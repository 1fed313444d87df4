"""
Pytest configuration and shared fixtures.
"""

import pytest
from datetime import datetime, timedelta
from pattern_backtester.core.models import PatternCandidate, PriceBar
from pattern_backtester.core.types import Direction
from pattern_backtester.data.mock_data import MockDataGenerator

BASE_TIME = datetime(2024, 1, 1)


def _bar(timestamp, close, high=None, low=None, open=None, volume=1000.0):
    open = close if open is None else open
    high = max(open, close) + 0.5 if high is None else high
    low = min(open, close) - 0.5 if low is None else low
    return PriceBar(timestamp, open, high, low, close, volume)


@pytest.fixture
def base_time():
    return BASE_TIME


@pytest.fixture
def bar_factory():
    """Build a daily bar series from closes, with optional per-bar overrides"""
    def build(closes, start=BASE_TIME, interval=timedelta(days=1), overrides=None, volumes=None):
        overrides = overrides or {}
        bars = []
        for i, close in enumerate(closes):
            kwargs = dict(overrides.get(i, {}))
            if volumes is not None:
                kwargs.setdefault('volume', volumes[i])
            bars.append(_bar(start + interval * i, close, **kwargs))
        return bars
    return build


@pytest.fixture
def forward_bars(bar_factory):
    """Bars starting the day after BASE_TIME, i.e. right after detection"""
    def build(closes, overrides=None, volumes=None):
        return bar_factory(closes, start=BASE_TIME + timedelta(days=1),
                           overrides=overrides, volumes=volumes)
    return build


@pytest.fixture
def candidate_factory():
    """Create a bullish AAPL daily candidate detected at BASE_TIME"""
    def build(**overrides):
        fields = dict(
            symbol='AAPL',
            timeframe='daily',
            pattern_type='flat_top_breakout',
            direction=Direction.BULLISH,
            entry_price=100.0,
            target_price=110.0,
            stop_loss=95.0,
            created_at=BASE_TIME,
        )
        fields.update(overrides)
        return PatternCandidate(**fields)
    return build


@pytest.fixture
def bullish_candidate(candidate_factory):
    return candidate_factory()


@pytest.fixture
def bearish_candidate(candidate_factory):
    return candidate_factory(
        pattern_type='bearish_reversal', direction=Direction.BEARISH,
        target_price=90.0, stop_loss=105.0,
    )


@pytest.fixture
def sample_bars():
    """120 reproducible trending daily bars"""
    return MockDataGenerator.generate_trending_bars(
        start_price=100.0, num_bars=120, trend=0.002, volatility=0.01, seed=42
    )
