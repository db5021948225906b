"""
Cash + positions ledger for long-only backtesting:
- cash and non-negative per-symbol quantities
- BUY requires cash, SELL requires a held position (no margin, no shorting)
- mark-to-market of the observed symbol
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Dict

from ..data.models import MarketObservation
from ..errors import InvalidInputError, InvariantViolationError
from ..money import Number, percent, to_decimal

logger = logging.getLogger(__name__)


class Side(str, Enum):
    BUY = "BUY"
    SELL = "SELL"


class OrderOutcome(str, Enum):
    EXECUTED = "EXECUTED"
    REJECTED_INSUFFICIENT_FUNDS = "REJECTED_INSUFFICIENT_FUNDS"
    REJECTED_INSUFFICIENT_POSITION = "REJECTED_INSUFFICIENT_POSITION"


@dataclass(frozen=True)
class Order:
    """An instruction to trade. Once executed by the ledger it is recorded as a trade."""

    symbol: str
    side: Side
    quantity: int
    price: Decimal
    timestamp: datetime

    def __post_init__(self):
        object.__setattr__(self, "side", Side(self.side))
        object.__setattr__(self, "price", to_decimal(self.price))

    @property
    def notional(self) -> Decimal:
        return self.price * self.quantity

    def __str__(self) -> str:
        return f"{self.side.value} {self.quantity} {self.symbol} @ ${self.price} on {self.timestamp}"


# Executed orders are stored unchanged in the trade log
Trade = Order


@dataclass(frozen=True)
class OrderResult:
    order: Order
    outcome: OrderOutcome

    @property
    def executed(self) -> bool:
        return self.outcome is OrderOutcome.EXECUTED


def validate_order(order: Order) -> None:
    """Reject malformed orders before they can touch the ledger."""
    if not order.symbol:
        raise InvalidInputError("order symbol must not be empty")
    if isinstance(order.quantity, bool) or not isinstance(order.quantity, int) or order.quantity <= 0:
        raise InvalidInputError(f"order quantity must be a positive integer, got {order.quantity!r}")
    if not order.price.is_finite() or order.price < 0:
        raise InvalidInputError(f"order price must be >= 0, got {order.price}")


class PortfolioLedger:
    """
    Owns cash and positions for one backtest run.

    Callers must pre-check with check()/can_execute() before execute();
    executing an order that fails its pre-check is an invariant violation.
    """

    def __init__(self, initial_capital: Number):
        capital = to_decimal(initial_capital)
        if not capital.is_finite() or capital < 0:
            raise InvalidInputError(f"initial capital must be >= 0, got {initial_capital}")
        self._initial_capital = capital
        self._cash = capital
        self._positions: Dict[str, int] = {}
        self._total_value = capital

    def reset(self) -> None:
        self._cash = self._initial_capital
        self._positions.clear()
        self._total_value = self._initial_capital

    def check(self, order: Order) -> OrderOutcome:
        """Outcome the order would have if executed now."""
        validate_order(order)
        if order.side is Side.BUY:
            if self._cash >= order.notional:
                return OrderOutcome.EXECUTED
            return OrderOutcome.REJECTED_INSUFFICIENT_FUNDS
        if self.position(order.symbol) >= order.quantity:
            return OrderOutcome.EXECUTED
        return OrderOutcome.REJECTED_INSUFFICIENT_POSITION

    def can_execute(self, order: Order) -> bool:
        return self.check(order) is OrderOutcome.EXECUTED

    def execute(self, order: Order) -> None:
        """Apply the order to cash and position together."""
        outcome = self.check(order)
        if outcome is not OrderOutcome.EXECUTED:
            raise InvariantViolationError(f"Cannot execute order ({outcome.value}): {order}")

        held = self.position(order.symbol)
        if order.side is Side.BUY:
            new_cash = self._cash - order.notional
            new_qty = held + order.quantity
        else:
            new_cash = self._cash + order.notional
            new_qty = held - order.quantity

        self._cash = new_cash
        if new_qty == 0:
            self._positions.pop(order.symbol, None)
        else:
            self._positions[order.symbol] = new_qty
        logger.debug(f"Executed {order} | cash={self._cash} position={new_qty}")

    def valuate(self, observation: MarketObservation) -> Decimal:
        """
        Mark to market using this observation.

        Only observation.symbol is priced; other symbols contribute nothing until
        their own observation arrives.
        """
        held = self.position(observation.symbol)
        self._total_value = self._cash + observation.price * held
        return self._total_value

    def position(self, symbol: str) -> int:
        return self._positions.get(symbol, 0)

    @property
    def positions(self) -> Dict[str, int]:
        return dict(self._positions)

    @property
    def cash(self) -> Decimal:
        return self._cash

    @property
    def total_value(self) -> Decimal:
        return self._total_value

    @property
    def initial_capital(self) -> Decimal:
        return self._initial_capital

    @property
    def pnl(self) -> Decimal:
        return self._total_value - self._initial_capital

    @property
    def return_pct(self) -> Decimal:
        return percent(self.pnl, self._initial_capital)
