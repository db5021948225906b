"""
Run module: simulation engine, results, config-driven runner and CLI.
"""

from .engine import SimulationEngine
from .result import BacktestResult, EquityPoint
from .runner import run_backtest, run_many

__all__ = ["SimulationEngine", "BacktestResult", "EquityPoint", "run_backtest", "run_many"]
