"""
In-memory provider over observations that were already loaded.
"""

from datetime import date
from typing import Iterable, List

from .models import MarketObservation


class InMemoryDataProvider:
    """Serves a fixed set of observations, filtered by symbol and date range and sorted by timestamp."""

    def __init__(self, observations: Iterable[MarketObservation]):
        self._observations = sorted(observations, key=lambda o: o.timestamp)

    def get_market_data(self, symbol: str, start: date, end: date) -> List[MarketObservation]:
        return [o for o in self._observations if o.symbol == symbol and start <= o.trade_date <= end]
