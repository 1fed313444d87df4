"""
Concurrent backtesting across many (symbol, timeframe) pairs.

Data and pattern fetching are injected as coroutines so the runner never
talks to a market-data provider or database directly.
"""

import asyncio
import logging
import time
from dataclasses import dataclass, field
from typing import Awaitable, Callable, List, Optional, Sequence

from ..core.models import MarketDataSeries, PatternCandidate, TradeSimulationResult
from ..config.backtest_config import BatchConfig
from ..patterns.confirmation import higher_timeframe
from .engine import BacktestRunResult, PatternBacktestEngine

logger = logging.getLogger(__name__)

BarsFetcher = Callable[[str, str], Awaitable[MarketDataSeries]]
PatternsFetcher = Callable[[str, str], Awaitable[List[PatternCandidate]]]


@dataclass
class PairOutcome:
    """Run result for one pair plus how long it took"""
    run: BacktestRunResult
    processing_time: float


@dataclass
class BatchReport:
    """Everything a batch run produced, including the pairs that failed"""
    outcomes: List[PairOutcome] = field(default_factory=list)

    @property
    def successful(self) -> List[BacktestRunResult]:
        return [o.run for o in self.outcomes if o.run.success]

    @property
    def failed(self) -> List[BacktestRunResult]:
        return [o.run for o in self.outcomes if not o.run.success]

    @property
    def results(self) -> List[TradeSimulationResult]:
        """All trade results from the pairs that succeeded"""
        return [r for run in self.successful for r in run.results]

    @property
    def success(self) -> bool:
        return not self.failed


class BatchBacktestRunner:
    """
    Runs the backtest engine over every (symbol, timeframe) combination.

    Each pair runs under its own timeout; a failure or timeout is reported
    for that pair and never stops the others.
    """

    def __init__(self, engine: PatternBacktestEngine, fetch_bars: BarsFetcher,
                 fetch_patterns: PatternsFetcher, config: BatchConfig = None):
        self.engine = engine
        self.fetch_bars = fetch_bars
        self.fetch_patterns = fetch_patterns
        self.config = config or BatchConfig()

    async def run(self, symbols: Sequence[str], timeframes: Sequence[str]) -> BatchReport:
        semaphore = asyncio.Semaphore(self.config.max_concurrency)
        pairs = [(symbol, timeframe) for symbol in symbols for timeframe in timeframes]
        logger.info(f"Backtesting {len(pairs)} pair(s) with concurrency {self.config.max_concurrency}")

        outcomes = await asyncio.gather(
            *(self._run_pair(semaphore, symbol, timeframe) for symbol, timeframe in pairs)
        )
        report = BatchReport(outcomes=list(outcomes))

        logger.info(f"Batch complete: {len(report.successful)} succeeded, {len(report.failed)} failed, "
                    f"{len(report.results)} trade(s)")
        return report

    def run_sync(self, symbols: Sequence[str], timeframes: Sequence[str]) -> BatchReport:
        """Blocking wrapper around :meth:`run`"""
        return asyncio.run(self.run(symbols, timeframes))

    async def _run_pair(self, semaphore: asyncio.Semaphore, symbol: str, timeframe: str) -> PairOutcome:
        async with semaphore:
            start_time = time.time()
            try:
                run = await asyncio.wait_for(
                    self._backtest_pair(symbol, timeframe), timeout=self.config.timeout_seconds
                )
            except asyncio.TimeoutError:
                error = f"timed out after {self.config.timeout_seconds}s"
                logger.error(f"❌ {symbol} {timeframe} {error}")
                run = BacktestRunResult(symbol=symbol, timeframe=timeframe, success=False, error=error)
            except Exception as e:
                logger.error(f"❌ {symbol} {timeframe} failed: {e}")
                run = BacktestRunResult(symbol=symbol, timeframe=timeframe, success=False, error=str(e))
            return PairOutcome(run=run, processing_time=time.time() - start_time)

    async def _backtest_pair(self, symbol: str, timeframe: str) -> BacktestRunResult:
        series = await self.fetch_bars(symbol, timeframe)
        candidates = await self.fetch_patterns(symbol, timeframe)
        higher_patterns = await self._fetch_higher_patterns(symbol, timeframe)

        # Engine work is CPU bound; keep the event loop free for the other pairs
        return await asyncio.to_thread(self.engine.run, series, candidates, higher_patterns)

    async def _fetch_higher_patterns(self, symbol: str, timeframe: str) -> Optional[List[PatternCandidate]]:
        higher = higher_timeframe(timeframe)
        try:
            return list(await self.fetch_patterns(symbol, higher))
        except Exception as e:
            # Confirmation degrades to unconfirmed
            logger.warning(f"Could not load {higher} patterns for {symbol}: {e}")
            return []
