"""
Basic demonstration of the pattern backtester.
"""

import asyncio
import sys
from datetime import timedelta
from typing import List

from pattern_backtester import create_batch_runner, create_engine
from pattern_backtester.analytics.aggregator import PerformanceAggregator, by_confidence_bucket
from pattern_backtester.analytics.ledger import ResultLedger
from pattern_backtester.config.backtest_config import create_custom_config
from pattern_backtester.config.log_config import setup_logging
from pattern_backtester.core.models import MarketDataSeries, PatternCandidate, PriceBar
from pattern_backtester.core.types import Direction, PatternStatus
from pattern_backtester.data.mock_data import DataValidator, MockDataGenerator
from pattern_backtester.patterns.confirmation import higher_timeframe
from pattern_backtester.persistence.adapter import results_to_frame

DEMO_SYMBOLS = ['AAPL', 'MSFT', 'NVDA']
PATTERN_TYPES = ['flat_top_breakout', 'bull_flag', 'double_bottom', 'bearish_reversal']


def make_candidates(symbol: str, timeframe: str, bars: List[PriceBar],
                    every: int = 10, warmup: int = 60) -> List[PatternCandidate]:
    """Place a synthetic candidate every ``every`` bars after the warmup period"""
    candidates = []
    for n, i in enumerate(range(warmup, len(bars) - 1, every)):
        bar = bars[i]
        pattern_type = PATTERN_TYPES[n % len(PATTERN_TYPES)]
        if pattern_type == 'bearish_reversal':
            direction = Direction.BEARISH
            target, stop = bar.close * 0.96, bar.close * 1.02
        else:
            direction = Direction.BULLISH
            target, stop = bar.close * 1.04, bar.close * 0.98
        candidates.append(PatternCandidate(
            symbol=symbol,
            timeframe=timeframe,
            pattern_type=pattern_type,
            direction=direction,
            entry_price=bar.close,
            target_price=target,
            stop_loss=stop,
            created_at=bar.timestamp,
        ))
    return candidates


def demo_single_backtest():
    """Backtest synthetic patterns on one symbol"""
    print("=== Single Symbol Backtest ===")

    engine = create_engine(create_custom_config(risk_level="conservative"))
    bars = MockDataGenerator.generate_trending_bars(
        start_price=150.0, num_bars=250, trend=0.001, volatility=0.015, seed=7
    )
    series = MarketDataSeries('AAPL', 'daily', bars)
    candidates = make_candidates('AAPL', 'daily', bars)

    ledger = ResultLedger()
    run = engine.run(series, candidates, ledger=ledger)
    print(f"Simulated {len(run.results)} trades, skipped {len(run.skipped)}")

    for result in ledger.results()[:5]:
        print(f"  {result.pattern_type:<18} score {result.confidence_score:>3}  "
              f"{result.exit_reason.value:<9} {result.profit_loss_percent:+6.2f}% "
              f"after {result.bars_held} bars")

    return ledger


def demo_aggregation(ledger: ResultLedger):
    """Group results and print recommendations"""
    print("\n=== Performance Aggregation ===")

    aggregator = PerformanceAggregator()
    summary = aggregator.summarize(ledger)
    print(f"Trades: {summary.total_trades}  Win rate: {(summary.win_rate or 0) * 100:.1f}%  "
          f"Expectancy: {summary.expectancy:+.2f}%  Profit factor: {summary.profit_factor:.2f}")

    by_type = aggregator.aggregate(ledger)
    for key, stats in by_type.items():
        marker = "" if stats.statistically_significant else " (small sample)"
        print(f"  {key:<18} n={stats.sample_size:<3} win {stats.win_rate * 100:5.1f}% "
              f"avg {stats.avg_return:+6.2f}%{marker}")

    print("\nBy confidence bucket:")
    for key, stats in aggregator.aggregate(ledger, key=by_confidence_bucket(10)).items():
        print(f"  {key:<7} n={stats.sample_size:<3} win {stats.win_rate * 100:5.1f}%")

    best = aggregator.best_group(by_type)
    print(f"\nRecommended pattern type: {best or 'none (not enough samples)'}")

    frame = results_to_frame(ledger)
    print(f"\nStorage records ready: {len(frame)} rows, columns {list(frame.columns)}")
    return by_type


def demo_batch():
    """Run several symbols concurrently with injected async data sources"""
    print("\n=== Batch Backtest ===")

    series_by_symbol = {
        symbol: MockDataGenerator.generate_trending_bars(
            start_price=100.0 + 50 * i, num_bars=200, trend=0.0005 * (i + 1),
            volatility=0.02, seed=i
        )
        for i, symbol in enumerate(DEMO_SYMBOLS)
    }

    async def fetch_bars(symbol, timeframe):
        if symbol not in series_by_symbol:
            raise KeyError(f"no data for {symbol}")
        return MarketDataSeries(symbol, timeframe, series_by_symbol[symbol])

    async def fetch_patterns(symbol, timeframe):
        bars = series_by_symbol.get(symbol, [])
        if timeframe == higher_timeframe('daily'):
            # One standing weekly pattern per symbol for confirmation
            bar = bars[len(bars) // 2]
            return [PatternCandidate(
                symbol=symbol, timeframe=timeframe, pattern_type='ascending_channel',
                direction=Direction.BULLISH, entry_price=bar.close,
                target_price=bar.close * 1.1, stop_loss=bar.close * 0.95,
                created_at=bar.timestamp - timedelta(days=3), status=PatternStatus.ACTIVE,
            )]
        return make_candidates(symbol, timeframe, bars, every=15)

    runner = create_batch_runner(fetch_bars, fetch_patterns)
    report = asyncio.run(runner.run(DEMO_SYMBOLS + ['MISSING'], ['daily']))

    for outcome in report.outcomes:
        run = outcome.run
        status = "✅" if run.success else f"❌ {run.error}"
        print(f"  {run.symbol:<8} {run.timeframe:<6} {len(run.results):>3} trades "
              f"({outcome.processing_time:.2f}s) {status}")
    print(f"Total trades from successful pairs: {len(report.results)}")
    return report


def demo_data_validation():
    """Generate and validate mock data"""
    print("\n=== Data Validation ===")
    bars = MockDataGenerator.generate_trending_bars(start_price=300.0, num_bars=20, seed=1)
    issues = DataValidator.validate_bars(bars)
    if issues:
        print(f"Data validation issues found: {len(issues)}")
        for issue in issues[:3]:
            print(f"  - {issue}")
    else:
        print("✅ All data validation checks passed!")
    return bars


def comprehensive_demo():
    """Run a comprehensive demonstration"""
    setup_logging("WARNING")
    print("🚀 Pattern Backtester Comprehensive Demo")
    print("=" * 50)

    try:
        ledger = demo_single_backtest()
        stats = demo_aggregation(ledger)
        report = demo_batch()
        bars = demo_data_validation()

        print("\n" + "=" * 50)
        print("✅ All demos completed successfully!")
        return {
            'ledger': ledger,
            'stats': stats,
            'batch_report': report,
            'mock_data': bars,
        }

    except Exception as e:
        print(f"\n❌ Demo failed with error: {e}")
        import traceback
        traceback.print_exc()
        return None


if __name__ == "__main__":
    if len(sys.argv) > 1:
        demo_name = sys.argv[1].lower()

        if demo_name == 'single':
            demo_single_backtest()
        elif demo_name == 'aggregate':
            demo_aggregation(demo_single_backtest())
        elif demo_name == 'batch':
            demo_batch()
        elif demo_name == 'data':
            demo_data_validation()
        else:
            print("Available demos: single, aggregate, batch, data")
    else:
        comprehensive_demo()
