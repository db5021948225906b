"""
Strategy module with deterministic discovery via explicit imports.

Strategies are registered via @register_strategy decorator when modules are imported.
This __init__.py imports all built-in strategy modules to ensure registration happens.
"""

from .base import Strategy, PositionState
from .registry import (
    register_strategy,
    list_strategies,
    get_strategy,
    discover_strategies,
)

# Import strategy modules to trigger registration
from .buy_and_hold import BuyAndHoldStrategy
from .covered_call import CoveredCallStrategy
from .protective_put import ProtectivePutStrategy
from .long_straddle import LongStraddleStrategy

__all__ = [
    "Strategy",
    "PositionState",
    "BuyAndHoldStrategy",
    "CoveredCallStrategy",
    "ProtectivePutStrategy",
    "LongStraddleStrategy",
    "register_strategy",
    "list_strategies",
    "get_strategy",
    "discover_strategies",
]
