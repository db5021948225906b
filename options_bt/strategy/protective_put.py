"""
Protective Put Strategy.

Buys shares in 100-share lots sized from 95% of capital and one put per lot at
spot - strike_offset. At expiration both legs are sold; the put settles at intrinsic value.
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
from .base import Strategy, PositionState, CONTRACT_SIZE, expiration_after, gross_up, synthetic_premium
from .registry import register_strategy

logger = logging.getLogger(__name__)

TIME_VALUE_PER_DAY = Decimal("0.05")


@dataclass(frozen=True)
class ProtectivePutState:
    state: PositionState = PositionState.FLAT
    entry_date: Optional[date] = None
    put: Optional[OptionContract] = None
    premium: Optional[Decimal] = None
    shares: int = 0

    @property
    def contracts(self) -> int:
        return self.shares // CONTRACT_SIZE


@register_strategy("protective_put")
class ProtectivePutStrategy(Strategy):
    """
    Params:
      - symbol: str
      - days_to_expiration: int (default 30)
      - strike_offset: number, subtracted from spot for the put strike (default 5)
    """

    display_name = "Protective Put Strategy"

    def __init__(self, params: Dict[str, Any]):
        super().__init__(params)
        self.days_to_expiration = int(params.get("days_to_expiration", 30))
        self.strike_offset = to_decimal(params.get("strike_offset", 5))
        if self.days_to_expiration < 0:
            raise ValueError(f"days_to_expiration must be >= 0, got {self.days_to_expiration}")
        self._book = ProtectivePutState()

    @property
    def book(self) -> ProtectivePutState:
        return self._book

    def reset(self) -> None:
        self._book = ProtectivePutState()

    def _put_premium(self, spot: Decimal, strike: Decimal) -> Decimal:
        return synthetic_premium(spot, strike, OptionType.PUT, self.days_to_expiration * TIME_VALUE_PER_DAY)

    def on_observation(self, observation: MarketObservation) -> List[Order]:
        if self._book.state is PositionState.FLAT:
            return self._enter(observation)
        if observation.trade_date >= self._book.put.expiration:
            return self._exit(observation)
        return []

    def _enter(self, observation: MarketObservation) -> List[Order]:
        spot = observation.price
        affordable = self._affordable_shares(spot)
        if affordable < CONTRACT_SIZE:
            logger.warning(
                f"Cannot afford enough shares for protective put (need {CONTRACT_SIZE}+): can only afford "
                f"{affordable} shares of {self.symbol} at ${spot} with capital ${self.available_capital}"
            )
            return []

        shares = (affordable // CONTRACT_SIZE) * CONTRACT_SIZE
        strike = spot - self.strike_offset
        if strike <= 0:
            logger.warning(
                f"Put strike ${strike} (spot ${spot} - offset ${self.strike_offset}) is not positive, skipping entry"
            )
            return []

        put = self._contract(
            OptionType.PUT,
            strike,
            expiration_after(observation.trade_date, self.days_to_expiration),
        )
        premium = self._put_premium(spot, put.strike)

        self._book = ProtectivePutState(
            state=PositionState.OPEN,
            entry_date=observation.trade_date,
            put=put,
            premium=premium,
            shares=shares,
        )
        logger.info(
            f"Entered protective put position: bought {shares} shares at ${spot}, "
            f"bought {self._book.contracts} put(s) at strike ${put.strike} for ${premium}"
        )
        return [
            self._order(self.symbol, Side.BUY, shares, spot, observation),
            self._order(put.symbol, Side.BUY, self._book.contracts, premium, observation),
        ]

    def _exit(self, observation: MarketObservation) -> List[Order]:
        book = self._book
        spot = observation.price
        settlement = book.put.intrinsic(spot)

        self._book = ProtectivePutState()
        logger.info(f"Closed protective put position at stock price ${spot} (put settled at ${settlement})")
        return [
            self._order(self.symbol, Side.SELL, book.shares, spot, observation),
            self._order(book.put.symbol, Side.SELL, book.contracts, settlement, observation),
        ]

    def minimum_capital_required(self, observation: MarketObservation) -> Optional[Decimal]:
        spot = observation.price
        put_cost = self._put_premium(spot, spot - self.strike_offset)
        return gross_up(spot * CONTRACT_SIZE + put_cost)
