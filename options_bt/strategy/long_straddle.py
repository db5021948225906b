"""
Long Straddle Strategy.

Buys an at-the-money call and put with equal quantities and holds until either the
mark-to-intrinsic profit per straddle reaches profit_threshold or the options expire.

Premiums come from a volatility-scaled heuristic, not the Black-Scholes model:
    time value = max(sqrt(days / 365) * 0.25 * spot * 0.4, 0.10)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Any, Dict, List, Optional

from ..data.models import MarketObservation
from ..money import floor_div, quantize, to_decimal
from ..portfolio.portfolio import Order, Side
from ..pricing import OptionContract, OptionType
from .base import Strategy, PositionState, CAPITAL_BUFFER, expiration_after, gross_up, synthetic_premium
from .registry import register_strategy

logger = logging.getLogger(__name__)

VOLATILITY = Decimal("0.25")
TIME_VALUE_SCALE = Decimal("0.4")
MIN_TIME_VALUE = Decimal("0.10")
CAPITAL_PER_CONTRACT_CAP = Decimal("10")  # never more than one contract per $10 of capital


@dataclass(frozen=True)
class StraddleState:
    state: PositionState = PositionState.FLAT
    entry_date: Optional[date] = None
    call: Optional[OptionContract] = None
    put: Optional[OptionContract] = None
    entry_cost: Optional[Decimal] = None  # call + put premium, per straddle
    contracts: int = 0

    def intrinsic_value(self, spot: Decimal) -> Decimal:
        return self.call.intrinsic(spot) + self.put.intrinsic(spot)


def heuristic_time_value(spot: Decimal, days_to_expiration: int) -> Decimal:
    years = Decimal(max(int(days_to_expiration), 0)) / Decimal(365)
    estimate = quantize(years.sqrt() * VOLATILITY * spot * TIME_VALUE_SCALE)
    return max(estimate, MIN_TIME_VALUE)


@register_strategy("long_straddle")
class LongStraddleStrategy(Strategy):
    """
    Params:
      - symbol: str
      - days_to_expiration: int (default 30)
      - max_contracts: int, upper bound on contracts per leg (default 1)
      - profit_threshold: number, per-straddle profit that triggers an early exit (default 50)
    """

    display_name = "Long Straddle Strategy"

    def __init__(self, params: Dict[str, Any]):
        super().__init__(params)
        self.days_to_expiration = int(params.get("days_to_expiration", 30))
        self.max_contracts = int(params.get("max_contracts", 1))
        self.profit_threshold = to_decimal(params.get("profit_threshold", 50))
        if self.days_to_expiration < 0:
            raise ValueError(f"days_to_expiration must be >= 0, got {self.days_to_expiration}")
        if self.max_contracts <= 0:
            raise ValueError(f"max_contracts must be positive, got {self.max_contracts}")
        self._book = StraddleState()

    @property
    def book(self) -> StraddleState:
        return self._book

    def reset(self) -> None:
        self._book = StraddleState()

    def premiums(self, spot: Decimal, strike: Decimal) -> Dict[OptionType, Decimal]:
        time_value = heuristic_time_value(spot, self.days_to_expiration)
        return {
            OptionType.CALL: synthetic_premium(spot, strike, OptionType.CALL, time_value),
            OptionType.PUT: synthetic_premium(spot, strike, OptionType.PUT, time_value),
        }

    def contract_quantity(self, straddle_cost: Decimal) -> int:
        """min(max_contracts, affordable, capital / 10), but at least 1 when anything is affordable."""
        affordable = floor_div(self.available_capital * CAPITAL_BUFFER, straddle_cost)
        if affordable <= 0:
            return 0
        safety_cap = floor_div(self.available_capital, CAPITAL_PER_CONTRACT_CAP)
        return max(1, min(self.max_contracts, affordable, safety_cap))

    def on_observation(self, observation: MarketObservation) -> List[Order]:
        if self._book.state is PositionState.FLAT:
            return self._enter(observation)

        book = self._book
        profit = book.intrinsic_value(observation.price) - book.entry_cost
        if profit >= self.profit_threshold:
            logger.info(f"Closing straddle due to profit target reached: ${profit}")
            return self._exit(observation)
        if observation.trade_date >= book.call.expiration:
            logger.info("Closing straddle at expiration")
            return self._exit(observation)
        return []

    def _enter(self, observation: MarketObservation) -> List[Order]:
        spot = observation.price
        expiration = expiration_after(observation.trade_date, self.days_to_expiration)
        call = self._contract(OptionType.CALL, spot, expiration)
        put = self._contract(OptionType.PUT, spot, expiration)
        prices = self.premiums(spot, spot)
        cost = prices[OptionType.CALL] + prices[OptionType.PUT]

        contracts = self.contract_quantity(cost)
        if contracts <= 0:
            logger.warning(
                f"Cannot afford a straddle on {self.symbol}: cost ${cost} per contract, "
                f"capital ${self.available_capital}"
            )
            return []

        self._book = StraddleState(
            state=PositionState.OPEN,
            entry_date=observation.trade_date,
            call=call,
            put=put,
            entry_cost=cost,
            contracts=contracts,
        )
        logger.info(f"Entered long straddle position at strike ${spot}, {contracts} contract(s), entry cost ${cost}")
        return [
            self._order(call.symbol, Side.BUY, contracts, prices[OptionType.CALL], observation),
            self._order(put.symbol, Side.BUY, contracts, prices[OptionType.PUT], observation),
        ]

    def _exit(self, observation: MarketObservation) -> List[Order]:
        book = self._book
        spot = observation.price
        call_value = book.call.intrinsic(spot)
        put_value = book.put.intrinsic(spot)

        self._book = StraddleState()
        logger.info(f"Closed long straddle position: P&L ${call_value + put_value - book.entry_cost} per straddle")
        return [
            self._order(book.call.symbol, Side.SELL, book.contracts, call_value, observation),
            self._order(book.put.symbol, Side.SELL, book.contracts, put_value, observation),
        ]

    def minimum_capital_required(self, observation: MarketObservation) -> Optional[Decimal]:
        spot = observation.price
        prices = self.premiums(spot, spot)
        return gross_up(prices[OptionType.CALL] + prices[OptionType.PUT])
