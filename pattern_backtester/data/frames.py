"""
Conversion between bar lists and pandas DataFrames.
"""

from typing import List, Sequence

import pandas as pd

from ..core.models import PriceBar, validate_series

BAR_COLUMNS = ['timestamp', 'open', 'high', 'low', 'close', 'volume']


def bars_to_frame(bars: Sequence[PriceBar]) -> pd.DataFrame:
    """Build an OHLCV frame indexed by timestamp"""
    frame = pd.DataFrame(
        [(b.timestamp, b.open, b.high, b.low, b.close, b.volume) for b in bars],
        columns=BAR_COLUMNS,
    )
    return frame.set_index('timestamp')


def frame_to_bars(frame: pd.DataFrame, sort: bool = True) -> List[PriceBar]:
    """
    Build a validated, oldest-first bar list from an OHLCV frame.

    The frame may carry timestamps either as its index or as a
    ``timestamp`` column. With ``sort=False`` an out-of-order frame raises
    ``InvalidInputError`` instead of being reordered.
    """
    if 'timestamp' not in frame.columns:
        frame = frame.rename_axis('timestamp').reset_index()
    missing = [c for c in BAR_COLUMNS if c not in frame.columns]
    if missing:
        raise ValueError(f"Frame is missing columns: {missing}")
    if sort:
        frame = frame.sort_values('timestamp', kind='mergesort')

    bars = [
        PriceBar(
            timestamp=pd.Timestamp(row.timestamp).to_pydatetime(),
            open=float(row.open),
            high=float(row.high),
            low=float(row.low),
            close=float(row.close),
            volume=float(row.volume),
        )
        for row in frame.itertuples(index=False)
    ]
    validate_series(bars)
    return bars
