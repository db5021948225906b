"""
Capital requirement check: can the configured capital fund at least one entry?

Non-interactive: the caller decides whether an insufficient result is a warning
or a hard failure (see run.runner).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import List, Optional

from ..data.models import DataProvider, MarketObservation
from ..errors import DataProviderError
from ..money import Number, to_decimal
from ..strategy.base import Strategy, CONTRACT_SIZE
from ..strategy.long_straddle import LongStraddleStrategy
from ..strategy.covered_call import CoveredCallStrategy
from ..strategy.protective_put import ProtectivePutStrategy

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CapitalCheckResult:
    sufficient: bool
    required: Decimal
    available: Decimal
    reason: str = "ok"

    @property
    def shortfall(self) -> Decimal:
        return max(self.required - self.available, Decimal("0"))


def _reason(strategy: Strategy, observation: MarketObservation, required: Decimal) -> str:
    if isinstance(strategy, (CoveredCallStrategy, ProtectivePutStrategy)):
        return (
            f"Requires {CONTRACT_SIZE}+ shares for options trading "
            f"({observation.price} * {CONTRACT_SIZE} = ${required:.2f})"
        )
    if isinstance(strategy, LongStraddleStrategy):
        return f"Requires at least 1 call + 1 put contract (estimated ${required:.2f})"
    return f"Requires at least ${required:.2f} for this strategy"


def check_capital_requirement(
    strategy: Strategy, capital: Number, observation: MarketObservation
) -> CapitalCheckResult:
    """Compare capital with the strategy's minimum for this observation."""
    available = to_decimal(capital)
    required = strategy.minimum_capital_required(observation)

    if required is None:
        return CapitalCheckResult(True, available, available, "No minimum requirement")
    if available >= required:
        return CapitalCheckResult(True, required, available, "Capital is sufficient")
    return CapitalCheckResult(False, required, available, _reason(strategy, observation, required))


def check_first_observation(
    strategy: Strategy,
    capital: Number,
    provider: DataProvider,
    observations: Optional[List[MarketObservation]] = None,
    *,
    symbol: Optional[str] = None,
    start=None,
    end=None,
) -> Optional[CapitalCheckResult]:
    """
    Run the check against the first observation of a run.

    Either pass the observations already loaded, or symbol/start/end to fetch them.
    Returns None when there is no data to check against.
    """
    if observations is None:
        try:
            observations = provider.get_market_data(symbol or strategy.symbol, start, end)
        except DataProviderError as e:
            logger.warning(f"Could not check capital requirements: {e}")
            return None

    if not observations:
        logger.warning(f"No market data available for {symbol or strategy.symbol} to check capital against")
        return None

    result = check_capital_requirement(strategy, capital, observations[0])
    if not result.sufficient:
        logger.warning(
            f"Insufficient capital for {strategy.name}: have ${result.available}, "
            f"need ${result.required} ({result.reason})"
        )
    return result
