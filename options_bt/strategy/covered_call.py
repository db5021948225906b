"""
Covered Call Strategy.

Buys a fixed lot of shares and writes one call per 100 shares at spot + strike_offset.
At expiration the shares are sold and the calls bought back at settlement value.
Call premium is synthetic: intrinsic value + days_to_expiration * 0.05.

The ledger does not allow short positions, so the call write is rejected unless the
calls are already held. The buy-back at expiration is still sent and can then open a
long call with no written leg to pair against.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Any, Dict, List, Optional

from ..data.models import MarketObservation
from ..money import to_decimal
from ..portfolio.portfolio import Order, Side
from ..pricing import OptionContract, OptionType
from .base import Strategy, PositionState, CONTRACT_SIZE, expiration_after, synthetic_premium
from .registry import register_strategy

logger = logging.getLogger(__name__)

TIME_VALUE_PER_DAY = Decimal("0.05")


@dataclass(frozen=True)
class CoveredCallState:
    state: PositionState = PositionState.FLAT
    entry_date: Optional[date] = None
    call: Optional[OptionContract] = None
    premium: Optional[Decimal] = None
    shares: int = 0
    contracts: int = 0


@register_strategy("covered_call")
class CoveredCallStrategy(Strategy):
    """
    Params:
      - symbol: str
      - days_to_expiration: int (default 30)
      - strike_offset: number, added to spot for the call strike (default 5)
      - share_quantity: int, shares bought per entry (default 100)
    """

    display_name = "Covered Call Strategy"

    def __init__(self, params: Dict[str, Any]):
        super().__init__(params)
        self.days_to_expiration = int(params.get("days_to_expiration", 30))
        self.strike_offset = to_decimal(params.get("strike_offset", 5))
        self.share_quantity = int(params.get("share_quantity", 100))
        if self.days_to_expiration < 0:
            raise ValueError(f"days_to_expiration must be >= 0, got {self.days_to_expiration}")
        if self.share_quantity <= 0:
            raise ValueError(f"share_quantity must be positive, got {self.share_quantity}")
        self._book = CoveredCallState()

    @property
    def book(self) -> CoveredCallState:
        return self._book

    def reset(self) -> None:
        self._book = CoveredCallState()

    def _call_premium(self, spot: Decimal, strike: Decimal) -> Decimal:
        return synthetic_premium(spot, strike, OptionType.CALL, self.days_to_expiration * TIME_VALUE_PER_DAY)

    def on_observation(self, observation: MarketObservation) -> List[Order]:
        if self._book.state is PositionState.FLAT:
            return self._enter(observation)
        if observation.trade_date >= self._book.call.expiration:
            return self._exit(observation)
        return []

    def _enter(self, observation: MarketObservation) -> List[Order]:
        spot = observation.price
        contracts = self.share_quantity // CONTRACT_SIZE
        strike = spot + self.strike_offset
        if strike <= 0:
            logger.warning(
                f"Call strike ${strike} (spot ${spot} + offset ${self.strike_offset}) is not positive, skipping entry"
            )
            return []

        call = self._contract(
            OptionType.CALL,
            strike,
            expiration_after(observation.trade_date, self.days_to_expiration),
        )
        premium = self._call_premium(spot, call.strike)

        orders = [self._order(self.symbol, Side.BUY, self.share_quantity, spot, observation)]
        if contracts > 0:
            orders.append(self._order(call.symbol, Side.SELL, contracts, premium, observation))

        self._book = CoveredCallState(
            state=PositionState.OPEN,
            entry_date=observation.trade_date,
            call=call,
            premium=premium,
            shares=self.share_quantity,
            contracts=contracts,
        )
        logger.info(
            f"Entered covered call position: bought {self.share_quantity} shares at ${spot}, "
            f"sold {contracts} call(s) at strike ${call.strike} for ${premium}"
        )
        return orders

    def _exit(self, observation: MarketObservation) -> List[Order]:
        book = self._book
        spot = observation.price
        settlement = book.call.intrinsic(spot)

        orders = [self._order(self.symbol, Side.SELL, book.shares, spot, observation)]
        if book.contracts > 0:
            orders.append(self._order(book.call.symbol, Side.BUY, book.contracts, settlement, observation))

        self._book = CoveredCallState()
        logger.info(f"Closed covered call position at stock price ${spot} (call settled at ${settlement})")
        return orders

    def minimum_capital_required(self, observation: MarketObservation) -> Optional[Decimal]:
        return observation.price * self.share_quantity
