"""Trade simulation."""

from .simulator import TradeSimulation, TradeSimulator

__all__ = ['TradeSimulation', 'TradeSimulator']
