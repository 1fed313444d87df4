"""
Tests for the result ledger.
"""

import pytest
from pattern_backtester.analytics.ledger import ResultLedger
from pattern_backtester.trading.simulator import TradeSimulator
from pattern_backtester.core.exceptions import InvalidInputError


@pytest.fixture
def results(candidate_factory, forward_bars):
    bars = forward_bars([101, 102, 103], overrides={2: {'high': 111.0}})
    simulator = TradeSimulator()
    return [
        simulator.simulate(candidate_factory(symbol='AAPL'), bars),
        simulator.simulate(candidate_factory(symbol='MSFT'), bars),
        simulator.simulate(candidate_factory(symbol='AAPL', pattern_type='bull_flag'), bars),
    ]


class TestResultLedger:
    def test_record_and_lookup(self, results):
        ledger = ResultLedger()
        for result in results:
            ledger.record(result)

        assert len(ledger) == 3
        assert results[0].pattern_id in ledger
        assert ledger.get(results[1].pattern_id) is results[1]
        assert ledger.get('missing') is None
        assert list(ledger) == results

    def test_duplicate_pattern_rejected(self, results):
        ledger = ResultLedger(results)
        with pytest.raises(InvalidInputError):
            ledger.record(results[0])

    def test_for_symbol(self, results):
        ledger = ResultLedger()
        ledger.extend(results)
        assert [r.symbol for r in ledger.for_symbol('AAPL')] == ['AAPL', 'AAPL']
        assert ledger.for_symbol('TSLA') == []

    def test_results_is_a_copy(self, results):
        ledger = ResultLedger(results)
        ledger.results().clear()
        assert len(ledger) == 3
