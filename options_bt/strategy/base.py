"""
Strategy contract.

A strategy consumes one observation at a time, owns its own entry/exit state, and emits
orders for the engine to route through the ledger. Every concrete strategy is a
FLAT -> OPEN -> FLAT state machine for a single configured underlying.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import date, timedelta
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, List, Optional

from ..data.models import MarketObservation
from ..money import Number, floor_div, quantize, quantize_up, to_decimal
from ..portfolio.portfolio import Order, Side
from ..pricing import OptionContract, OptionType, intrinsic_value

CAPITAL_BUFFER = Decimal("0.95")  # invest at most 95% of capital
CONTRACT_SIZE = 100  # shares per option contract
DEFAULT_CAPITAL = Decimal("10000")


class PositionState(str, Enum):
    FLAT = "FLAT"
    OPEN = "OPEN"


def synthetic_premium(spot: Number, strike: Number, option_type: OptionType, time_value: Number) -> Decimal:
    """Intrinsic value plus a heuristic time value, in cents."""
    return quantize(intrinsic_value(spot, strike, option_type) + to_decimal(time_value))


def gross_up(amount: Number) -> Decimal:
    """Capital needed so that 95% of it covers amount, rounded up to cents."""
    return quantize_up(to_decimal(amount) / CAPITAL_BUFFER)


class Strategy(ABC):
    """
    Base class for all strategies.

    Params (common):
      - symbol: str, required. Underlying traded by the strategy.
      - capital: number, optional. Capital used for sizing until the engine calls set_available_capital().
    """

    display_name: str = "Strategy"

    def __init__(self, params: Dict[str, Any]):
        self.params = dict(params)
        symbol = self.params.get("symbol")
        if not symbol:
            raise ValueError(f"{type(self).__name__} requires a 'symbol' param")
        self.symbol = str(symbol)
        self._capital = to_decimal(self.params.get("capital", DEFAULT_CAPITAL))

    @property
    def name(self) -> str:
        return self.display_name

    @property
    def available_capital(self) -> Decimal:
        return self._capital

    def set_available_capital(self, amount: Number) -> None:
        """Called by the engine once before each run with the portfolio's real value."""
        self._capital = to_decimal(amount)

    def matches(self, observation: MarketObservation) -> bool:
        return observation.symbol == self.symbol

    def generate_orders(self, observation: MarketObservation) -> List[Order]:
        """Orders for this observation; empty for other symbols."""
        if not self.matches(observation):
            return []
        return self.on_observation(observation)

    @abstractmethod
    def on_observation(self, observation: MarketObservation) -> List[Order]:
        ...

    @abstractmethod
    def reset(self) -> None:
        ...

    def minimum_capital_required(self, observation: MarketObservation) -> Optional[Decimal]:
        """Capital needed for at least one entry; None means any amount works."""
        return None

    def _order(self, symbol: str, side: Side, quantity: int, price: Number, observation: MarketObservation) -> Order:
        return Order(
            symbol=symbol,
            side=side,
            quantity=int(quantity),
            price=to_decimal(price),
            timestamp=observation.timestamp,
        )

    def _contract(self, option_type: OptionType, strike: Decimal, expiration: date) -> OptionContract:
        return OptionContract(underlying=self.symbol, option_type=option_type, strike=strike, expiration=expiration)

    def _affordable_shares(self, price: Decimal) -> int:
        return floor_div(self._capital * CAPITAL_BUFFER, price)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(symbol={self.symbol!r})"


def expiration_after(entry: date, days: int) -> date:
    return entry + timedelta(days=int(days))
