"""
Caller-owned store of simulation results.
"""

from typing import Dict, Iterable, Iterator, List, Optional

from ..core.models import TradeSimulationResult
from ..core.exceptions import InvalidInputError


class ResultLedger:
    """Lookup table of simulation results keyed by pattern id"""

    def __init__(self, results: Iterable[TradeSimulationResult] = ()):
        self._results: Dict[str, TradeSimulationResult] = {}
        for result in results:
            self.record(result)

    def record(self, result: TradeSimulationResult) -> None:
        """Store a result; each pattern may only be simulated once"""
        if result.pattern_id in self._results:
            raise InvalidInputError(
                f"Pattern {result.pattern_id} already has a recorded result", field='pattern_id'
            )
        self._results[result.pattern_id] = result

    def extend(self, results: Iterable[TradeSimulationResult]) -> None:
        for result in results:
            self.record(result)

    def get(self, pattern_id: str) -> Optional[TradeSimulationResult]:
        return self._results.get(pattern_id)

    def results(self) -> List[TradeSimulationResult]:
        return list(self._results.values())

    def for_symbol(self, symbol: str) -> List[TradeSimulationResult]:
        return [r for r in self._results.values() if r.symbol == symbol]

    def __contains__(self, pattern_id: str) -> bool:
        return pattern_id in self._results

    def __len__(self) -> int:
        return len(self._results)

    def __iter__(self) -> Iterator[TradeSimulationResult]:
        return iter(self._results.values())
