"""
Forward simulation of pattern trades against historical bars.

A ``TradeSimulation`` is a small state machine created for one candidate
and one forward bar series. It starts ``ACTIVE`` on the bar immediately
after detection and moves to exactly one terminal state:

    ACTIVE -> HIT_TARGET | HIT_STOP | TIME_STOP

When a single bar touches both the target and the stop, the intrabar
order is unknown. ``TieBreakPolicy`` decides the outcome explicitly:

    TARGET_FIRST  target wins (legacy behaviour, optimistic)
    STOP_FIRST    stop wins
    CONSERVATIVE  stop wins, and a bar that opens through the stop
                  fills at its open instead of the stop price
"""

import logging
from typing import Optional, Sequence

from ..core.models import PatternCandidate, PriceBar, TradeSimulationResult, validate_series
from ..core.types import EXIT_REASONS, Direction, SimulationState, TieBreakPolicy
from ..core.exceptions import InsufficientDataError, InvalidInputError, PatternBacktesterError
from ..config.backtest_config import SimulationConfig

logger = logging.getLogger(__name__)


class TradeSimulation:
    """State machine for a single simulated trade"""

    def __init__(self, candidate: PatternCandidate, max_bars: int = 30,
                 tie_break: TieBreakPolicy = TieBreakPolicy.TARGET_FIRST):
        self.candidate = candidate
        self.max_bars = max_bars
        self.tie_break = tie_break
        self.direction = candidate.trade_direction

        self.state = SimulationState.ACTIVE
        self.bars_consumed = 0
        self.last_bar: Optional[PriceBar] = None
        self.exit_price: Optional[float] = None
        self.max_drawdown_percent = 0.0
        self.bars_to_breakout: Optional[int] = None

        entry = candidate.entry_price
        self._stop_distance_percent = abs(entry - candidate.stop_loss) / entry * 100

    @property
    def is_finished(self) -> bool:
        return self.state.is_terminal

    def step(self, bar: PriceBar) -> SimulationState:
        """Advance the trade by one bar and return the resulting state"""
        if self.is_finished:
            raise PatternBacktesterError(
                f"Simulation for {self.candidate.id} already finished in state {self.state.value}"
            )

        self.bars_consumed += 1
        self.last_bar = bar
        bullish = self.direction is Direction.BULLISH
        c = self.candidate

        if bullish:
            target_hit = bar.high >= c.target_price
            stop_hit = bar.low <= c.stop_loss
        else:
            target_hit = bar.low <= c.target_price
            stop_hit = bar.high >= c.stop_loss

        self._track_excursion(bar)

        if target_hit and (not stop_hit or self.tie_break is TieBreakPolicy.TARGET_FIRST):
            self._exit(SimulationState.HIT_TARGET, c.target_price)
        elif stop_hit:
            self._exit(SimulationState.HIT_STOP, self._stop_fill(bar))
        elif self.bars_consumed >= self.max_bars:
            self._exit(SimulationState.TIME_STOP, bar.close)

        return self.state

    def finish(self) -> SimulationState:
        """Close an open trade at the last consumed close when the bars run out"""
        if self.is_finished:
            return self.state
        if self.last_bar is None:
            raise InsufficientDataError(f"No forward bars to simulate {self.candidate.id}")
        self._exit(SimulationState.TIME_STOP, self.last_bar.close)
        return self.state

    def result(self) -> TradeSimulationResult:
        """Build the immutable result of a finished simulation"""
        if not self.is_finished:
            raise PatternBacktesterError(f"Simulation for {self.candidate.id} is still active")

        c = self.candidate
        sign = 1.0 if self.direction is Direction.BULLISH else -1.0
        profit_loss_percent = sign * (self.exit_price - c.entry_price) / c.entry_price * 100
        exit_reason = EXIT_REASONS[self.state]

        if self.state is SimulationState.HIT_TARGET:
            success = True
        elif self.state is SimulationState.HIT_STOP:
            success = False
        else:
            success = profit_loss_percent > 0

        return TradeSimulationResult(
            pattern_id=c.id,
            symbol=c.symbol,
            pattern_type=c.pattern_type,
            timeframe=c.timeframe,
            direction=self.direction,
            confidence_score=c.confidence_score,
            entry_date=c.created_at,
            exit_date=self.last_bar.timestamp,
            entry_price=c.entry_price,
            exit_price=self.exit_price,
            exit_reason=exit_reason,
            bars_held=self.bars_consumed,
            profit_loss_percent=profit_loss_percent,
            max_drawdown_percent=self.max_drawdown_percent,
            success=success,
            bars_to_breakout=self.bars_to_breakout,
            bars_to_target=self.bars_consumed if self.state is SimulationState.HIT_TARGET else None,
        )

    def _exit(self, state: SimulationState, price: float) -> None:
        self.state = state
        self.exit_price = price
        if state is SimulationState.HIT_STOP:
            realized = abs(price - self.candidate.entry_price) / self.candidate.entry_price * 100
            self.max_drawdown_percent = max(self.max_drawdown_percent, realized)

    def _stop_fill(self, bar: PriceBar) -> float:
        stop = self.candidate.stop_loss
        if self.tie_break is not TieBreakPolicy.CONSERVATIVE:
            return stop
        if self.direction is Direction.BULLISH:
            return min(bar.open, stop)
        return max(bar.open, stop)

    def _track_excursion(self, bar: PriceBar) -> None:
        entry = self.candidate.entry_price
        if self.direction is Direction.BULLISH:
            adverse = (entry - bar.low) / entry * 100
            breakout = bar.close > entry
        else:
            adverse = (bar.high - entry) / entry * 100
            breakout = bar.close < entry

        adverse = min(max(adverse, 0.0), self._stop_distance_percent)
        self.max_drawdown_percent = max(self.max_drawdown_percent, adverse)
        if breakout and self.bars_to_breakout is None:
            self.bars_to_breakout = self.bars_consumed


class TradeSimulator:
    """Stateless service that runs one ``TradeSimulation`` per candidate"""

    def __init__(self, config: SimulationConfig = None):
        self.config = config or SimulationConfig()

    def simulate(self, candidate: PatternCandidate, bars: Sequence[PriceBar]) -> TradeSimulationResult:
        """
        Walk forward through ``bars`` until the trade exits.

        Args:
            candidate: Scored pattern candidate
            bars: Oldest-first bars starting immediately after detection
        """
        self.validate(candidate, bars)

        simulation = TradeSimulation(candidate, self.config.max_bars, self.config.tie_break)
        for bar in bars:
            if simulation.step(bar).is_terminal:
                break
        simulation.finish()

        result = simulation.result()
        logger.debug(
            f"{candidate.symbol} {candidate.pattern_type}: {result.exit_reason.value} after "
            f"{result.bars_held} bars, P&L {result.profit_loss_percent:+.2f}%"
        )
        return result

    @staticmethod
    def validate(candidate: PatternCandidate, bars: Sequence[PriceBar]) -> None:
        """Reject inputs that would make the simulation meaningless"""
        if not bars:
            raise InsufficientDataError(f"No forward bars available for {candidate.symbol}")
        validate_series(bars)
        if bars[0].timestamp <= candidate.created_at:
            raise InvalidInputError(
                f"Forward bars must start after detection at {candidate.created_at}",
                field='bars'
            )

        entry, target, stop = candidate.entry_price, candidate.target_price, candidate.stop_loss
        if candidate.trade_direction is Direction.BULLISH:
            if not stop < entry < target:
                raise InvalidInputError(
                    f"Bullish trade needs stop < entry < target, got {stop} / {entry} / {target}"
                )
        elif not target < entry < stop:
            raise InvalidInputError(
                f"Bearish trade needs target < entry < stop, got {target} / {entry} / {stop}"
            )
