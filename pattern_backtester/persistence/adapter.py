"""
Conversion between domain models and the storage layer's flat records.

This is the only module that knows about snake_case storage rows.
"""

from datetime import datetime
from typing import Any, Dict, Iterable, Mapping

import pandas as pd

from ..core.models import PatternCandidate, TradeSimulationResult
from ..core.types import Direction
from ..core.exceptions import InvalidInputError

STORAGE_FIELDS = [
    'pattern_id', 'symbol', 'pattern_type', 'timeframe', 'success',
    'profit_loss_percent', 'days_to_breakout', 'days_to_target',
    'max_drawdown', 'created_at',
]

_REQUIRED_ROW_FIELDS = ('symbol', 'timeframe', 'pattern_type', 'entry_price',
                        'target_price', 'stop_loss', 'created_at')


def to_storage_record(result: TradeSimulationResult) -> Dict[str, Any]:
    """
    Flat record in the schema the storage layer expects.

    ``days_to_breakout`` and ``days_to_target`` count bars of the pattern's
    timeframe; a trade that never broke out stores 0 bars to breakout.
    """
    return {
        'pattern_id': result.pattern_id,
        'symbol': result.symbol,
        'pattern_type': result.pattern_type,
        'timeframe': result.timeframe,
        'success': result.success,
        'profit_loss_percent': result.profit_loss_percent,
        'days_to_breakout': result.bars_to_breakout if result.bars_to_breakout is not None else 0,
        'days_to_target': result.bars_to_target,
        'max_drawdown': result.max_drawdown_percent,
        'created_at': result.entry_date.isoformat(),
    }


def results_to_frame(results: Iterable[TradeSimulationResult]) -> pd.DataFrame:
    """DataFrame of storage records, one row per result"""
    return pd.DataFrame([to_storage_record(r) for r in results], columns=STORAGE_FIELDS)


def _parse_datetime(value: Any) -> datetime:
    if isinstance(value, pd.Timestamp):
        return value.to_pydatetime()
    if isinstance(value, datetime):
        return value
    try:
        return pd.Timestamp(value).to_pydatetime()
    except (TypeError, ValueError) as e:
        raise InvalidInputError(f"Unparseable created_at: {value!r}", field='created_at') from e


def _optional_float(value: Any):
    return None if value is None else float(value)


def candidate_from_row(row: Mapping[str, Any]) -> PatternCandidate:
    """Build a validated PatternCandidate from a storage row"""
    missing = [name for name in _REQUIRED_ROW_FIELDS if row.get(name) is None]
    if missing:
        raise InvalidInputError(f"Pattern row is missing fields: {missing}")

    entry_price = float(row['entry_price'])
    target_price = float(row['target_price'])
    direction = row.get('direction')
    if direction is None:
        direction = Direction.BULLISH if target_price > entry_price else Direction.BEARISH

    kwargs = dict(
        symbol=row['symbol'],
        timeframe=row['timeframe'],
        pattern_type=row['pattern_type'],
        direction=direction,
        entry_price=entry_price,
        target_price=target_price,
        stop_loss=float(row['stop_loss']),
        created_at=_parse_datetime(row['created_at']),
        support_level=_optional_float(row.get('support_level')),
        resistance_level=_optional_float(row.get('resistance_level')),
        channel_type=row.get('channel_type'),
        ema_pattern=row.get('ema_pattern'),
        volume_confirmation=bool(row.get('volume_confirmation', False)),
        trendline_break=bool(row.get('trendline_break', False)),
    )
    if row.get('id') is not None:
        kwargs['id'] = str(row['id'])
    if row.get('confidence_score') is not None:
        kwargs['confidence_score'] = int(round(float(row['confidence_score'])))
    if row.get('status') is not None:
        kwargs['status'] = row['status']
    return PatternCandidate(**kwargs)
