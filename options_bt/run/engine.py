"""
Simulation engine: feeds observations to one strategy and routes its orders through one ledger.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import List

from ..data.models import DataProvider
from ..errors import InvalidInputError
from ..money import Number
from ..portfolio import OrderOutcome, OrderResult, PortfolioLedger, Trade
from ..strategy.base import Strategy
from .result import BacktestResult, EquityPoint

logger = logging.getLogger(__name__)


class SimulationEngine:
    """
    Per tick: strategy -> orders -> ledger pre-check -> execute or drop -> valuation.

    Rejected orders are logged and recorded with their outcome; they are never retried.
    Runs are single-threaded and deterministic for the same provider data and parameters.
    """

    def __init__(self, provider: DataProvider, strategy: Strategy, initial_capital: Number):
        self.provider = provider
        self.strategy = strategy
        self._ledger = PortfolioLedger(initial_capital)
        self._trades: List[Trade] = []
        self._order_results: List[OrderResult] = []
        self._equity: List[EquityPoint] = []

    @property
    def ledger(self) -> PortfolioLedger:
        return self._ledger

    @property
    def executed_trades(self) -> List[Trade]:
        return list(self._trades)

    @property
    def order_results(self) -> List[OrderResult]:
        return list(self._order_results)

    def _reset(self) -> None:
        self.strategy.reset()
        self._ledger.reset()
        self._trades.clear()
        self._order_results.clear()
        self._equity.clear()

    def run_backtest(self, symbol: str, start_date: date, end_date: date) -> BacktestResult:
        if end_date < start_date:
            raise InvalidInputError(f"end date {end_date} is before start date {start_date}")

        logger.info(f"Starting backtest for {self.strategy.name} on {symbol} from {start_date} to {end_date}")
        self._reset()
        self.strategy.set_available_capital(self._ledger.total_value)

        observations = self.provider.get_market_data(symbol, start_date, end_date)
        logger.info(f"Processing {len(observations)} observations")

        for observation in observations:
            for order in self.strategy.generate_orders(observation):
                outcome = self._ledger.check(order)
                if outcome is OrderOutcome.EXECUTED:
                    self._ledger.execute(order)
                    self._trades.append(order)
                else:
                    logger.warning(f"Order rejected ({outcome.value}): {order}")
                self._order_results.append(OrderResult(order=order, outcome=outcome))

            self._ledger.valuate(observation)
            self._equity.append(
                EquityPoint(
                    timestamp=observation.timestamp,
                    cash=self._ledger.cash,
                    total_value=self._ledger.total_value,
                )
            )

        result = BacktestResult(
            strategy_name=self.strategy.name,
            start_date=start_date,
            end_date=end_date,
            trades=tuple(self._trades),
            final_value=self._ledger.total_value,
            initial_capital=self._ledger.initial_capital,
            order_results=tuple(self._order_results),
            equity_curve=tuple(self._equity),
        )
        logger.info(
            f"Backtest completed: {result.trade_count} trades, final value ${result.final_value} "
            f"({result.return_pct}%)"
        )
        return result
