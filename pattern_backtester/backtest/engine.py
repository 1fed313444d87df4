"""
Backtest engine that wires the scoring and simulation components together
for one (symbol, timeframe) pair.
"""

import logging
from bisect import bisect_right
from dataclasses import dataclass, field
from typing import Iterable, List, Mapping, Optional

from ..core.models import (
    AggregateStats, ChannelInfo, ConfidenceFactors, ConfirmationResult, IndicatorSnapshot,
    MarketDataSeries, PatternCandidate, PriceBar, TradeSimulationResult
)
from ..core.types import DataFreshness
from ..core.exceptions import InsufficientDataError, InvalidInputError
from ..config.backtest_config import BacktestConfig
from ..indicators.calculator import IndicatorCalculator
from ..patterns.channels import ChannelIdentifier
from ..patterns.confidence import ConfidenceScorer
from ..patterns.confirmation import MultiTimeframeConfirmator
from ..trading.simulator import TradeSimulator
from ..analytics.ledger import ResultLedger

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PreparedPattern:
    """A candidate after enrichment, scoring and confirmation"""
    candidate: PatternCandidate
    snapshot: IndicatorSnapshot
    channel: ChannelInfo
    factors: ConfidenceFactors
    base_score: int
    confirmation: ConfirmationResult


@dataclass
class BacktestRunResult:
    """Outcome of backtesting every candidate of one (symbol, timeframe) pair"""
    symbol: str
    timeframe: str
    success: bool
    results: List[TradeSimulationResult] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)
    error: Optional[str] = None
    freshness: Optional[DataFreshness] = None


class PatternBacktestEngine:
    """
    Enriches, scores, confirms and simulates pattern candidates.

    The engine holds no mutable state of its own; results are returned
    to the caller or recorded into a caller-supplied ``ResultLedger``.
    """

    def __init__(self, indicators: IndicatorCalculator = None,
                 channels: ChannelIdentifier = None,
                 scorer: ConfidenceScorer = None,
                 confirmator: MultiTimeframeConfirmator = None,
                 simulator: TradeSimulator = None,
                 config: BacktestConfig = None):
        self.config = config or BacktestConfig()
        self.indicators = indicators or IndicatorCalculator(self.config.indicators)
        self.channels = channels or ChannelIdentifier(self.config.channel)
        self.scorer = scorer or ConfidenceScorer(self.config.scoring)
        self.confirmator = confirmator or MultiTimeframeConfirmator(self.config.confirmation)
        self.simulator = simulator or TradeSimulator(self.config.simulation)

    @classmethod
    def from_config(cls, config: BacktestConfig) -> 'PatternBacktestEngine':
        """Build an engine with every component configured from ``config``"""
        return cls(config=config.ensure_valid())

    def prepare(self, candidate: PatternCandidate, history: List[PriceBar],
                higher_patterns: Optional[Iterable[PatternCandidate]] = None,
                history_stats: Optional[AggregateStats] = None) -> PreparedPattern:
        """
        Enrich and score a candidate using the bars up to its detection.

        Args:
            candidate: Raw candidate from pattern detection
            history: Oldest-first bars up to and including the detection bar
            higher_patterns: Known patterns on the higher timeframe
            history_stats: Past performance of this pattern type, if known
        """
        snapshot = self.indicators.calculate(history)
        channel = self.channels.identify(history)

        enriched = self.indicators.enrich(candidate, history, snapshot)
        enriched = self.channels.enrich(enriched, history, channel)

        factors = self.scorer.build_factors(
            enriched, snapshot, channel, history_stats, self.indicators.config
        )
        base_score = self.scorer.score(factors)
        scored = self.scorer.apply_boosts(enriched, base_score)

        confirmation = self.confirmator.confirm(scored, higher_patterns)
        final = self.confirmator.apply(scored, confirmation)

        return PreparedPattern(
            candidate=final,
            snapshot=snapshot,
            channel=channel,
            factors=factors,
            base_score=base_score,
            confirmation=confirmation,
        )

    def run(self, series: MarketDataSeries, candidates: Iterable[PatternCandidate],
            higher_patterns: Optional[Iterable[PatternCandidate]] = None,
            ledger: Optional[ResultLedger] = None,
            history_stats: Optional[Mapping[str, AggregateStats]] = None) -> BacktestRunResult:
        """
        Backtest every candidate detected on ``series``.

        ``history_stats`` is keyed by pattern type, as returned by
        ``PerformanceAggregator.aggregate(results, by_pattern_type)``.
        Candidates whose detection time leaves no forward bars are skipped.
        """
        history_stats = history_stats or {}
        if not series.bars:
            raise InsufficientDataError(f"No bars available for {series.symbol} {series.timeframe}")

        if higher_patterns is not None:
            higher_patterns = list(higher_patterns)

        bars = series.bars
        timestamps = [b.timestamp for b in bars]
        max_bars = self.simulator.config.max_bars
        result = BacktestRunResult(
            symbol=series.symbol, timeframe=series.timeframe, success=True,
            freshness=series.freshness,
        )

        for candidate in candidates:
            if candidate.symbol != series.symbol or candidate.timeframe != series.timeframe:
                raise InvalidInputError(
                    f"Candidate {candidate.id} is for {candidate.symbol} {candidate.timeframe}, "
                    f"not {series.symbol} {series.timeframe}"
                )

            split = bisect_right(timestamps, candidate.created_at)
            forward = bars[split:split + max_bars]
            if not forward:
                logger.info(f"Skipping {candidate.symbol} {candidate.pattern_type} ({candidate.id}): "
                            f"no bars after {candidate.created_at}")
                result.skipped.append(candidate.id)
                continue

            prepared = self.prepare(candidate, bars[:split], higher_patterns,
                                    history_stats.get(candidate.pattern_type))
            outcome = self.simulator.simulate(prepared.candidate, forward)
            result.results.append(outcome)
            if ledger is not None:
                ledger.record(outcome)

        logger.info(f"{series.symbol} {series.timeframe}: simulated {len(result.results)} pattern(s), "
                    f"skipped {len(result.skipped)}")
        return result
