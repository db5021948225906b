"""
Buy and Hold Strategy.

Buys as many shares as 95% of available capital allows on the first observation,
then sells everything once the configured sell date is reached.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional

from ..data.models import MarketObservation
from ..portfolio.portfolio import Order, Side
from .base import Strategy, PositionState
from .registry import register_strategy

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HoldState:
    state: PositionState = PositionState.FLAT
    entry_date: Optional[date] = None
    entry_price: Optional[Decimal] = None
    quantity: int = 0


def _as_date(value: Any) -> Optional[date]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value))


@register_strategy("buy_and_hold")
class BuyAndHoldStrategy(Strategy):
    """
    Params:
      - symbol: str
      - sell_date: date or ISO string, optional. Without it the position is held to the end of the run.
    """

    display_name = "Buy and Hold Strategy"

    def __init__(self, params: Dict[str, Any]):
        super().__init__(params)
        self.sell_date = _as_date(params.get("sell_date"))
        self._book = HoldState()

    @property
    def book(self) -> HoldState:
        return self._book

    def reset(self) -> None:
        self._book = HoldState()

    def on_observation(self, observation: MarketObservation) -> List[Order]:
        today = observation.trade_date
        past_sell_date = self.sell_date is not None and today >= self.sell_date

        if self._book.state is PositionState.FLAT:
            # no re-entry once the holding period is over
            if past_sell_date:
                return []
            return self._enter(observation)
        if past_sell_date:
            return self._exit(observation)
        return []

    def _enter(self, observation: MarketObservation) -> List[Order]:
        price = observation.price
        shares = self._affordable_shares(price)
        if shares <= 0:
            logger.warning(
                f"Cannot afford any shares of {self.symbol} at ${price} with capital ${self.available_capital}"
            )
            return []

        self._book = HoldState(
            state=PositionState.OPEN,
            entry_date=observation.trade_date,
            entry_price=price,
            quantity=shares,
        )
        logger.info(f"Bought {shares} shares of {self.symbol} at ${price} (${price * shares} invested)")
        return [self._order(self.symbol, Side.BUY, shares, price, observation)]

    def _exit(self, observation: MarketObservation) -> List[Order]:
        book = self._book
        price = observation.price
        self._book = HoldState()

        held_days = (observation.trade_date - book.entry_date).days
        logger.info(
            f"Sold {book.quantity} shares of {self.symbol} at ${price}, "
            f"P&L: ${(price - book.entry_price) * book.quantity}, held for {held_days} days"
        )
        return [self._order(self.symbol, Side.SELL, book.quantity, price, observation)]

    def minimum_capital_required(self, observation: MarketObservation) -> Optional[Decimal]:
        # one share
        return observation.price
