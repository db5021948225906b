"""
Data models for market observations and provider interfaces.
"""

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import List, Protocol

from ..money import to_decimal


@dataclass(frozen=True)
class MarketObservation:
    """
    One daily observation for a symbol.

    price is the close; bid/ask are derived by the provider. ask >= bid is assumed, not enforced.
    """
    symbol: str
    timestamp: datetime
    price: Decimal
    bid: Decimal
    ask: Decimal
    volume: int = 0

    def __post_init__(self):
        # Accept plain numbers from callers; store Decimals
        for name in ("price", "bid", "ask"):
            object.__setattr__(self, name, to_decimal(getattr(self, name)))
        object.__setattr__(self, "volume", int(self.volume))

    @property
    def trade_date(self) -> date:
        return self.timestamp.date()

    @property
    def spread(self) -> Decimal:
        return self.ask - self.bid

    @property
    def mid(self) -> Decimal:
        return (self.bid + self.ask) / 2


class DataProvider(Protocol):
    """
    Protocol for observation providers.

    Providers return the complete, date-ordered observation sequence for one symbol.
    The engine does not verify ordering or completeness.
    """

    def get_market_data(self, symbol: str, start: date, end: date) -> List[MarketObservation]:
        """
        Load observations for symbol between start and end (inclusive).

        Args:
            symbol: Ticker (e.g. "SPY")
            start: First trading date
            end: Last trading date

        Returns:
            Observations sorted by timestamp
        """
        ...
