"""
Strategy registry for pluggable strategies.

Strategies register themselves using @register_strategy decorator.
Registry provides lookup and instantiation with friendly error messages.
"""

from typing import Dict, Type, List, Any
import logging

from .base import Strategy

logger = logging.getLogger(__name__)

# name -> Strategy class
_strategy_registry: Dict[str, Type[Strategy]] = {}


def register_strategy(name: str):
    """
    Decorator to register a strategy class.

    Example:
        @register_strategy("covered_call")
        class CoveredCallStrategy(Strategy):
            ...
    """
    def decorator(cls: Type[Strategy]):
        if name in _strategy_registry:
            logger.warning(f"Strategy '{name}' is already registered. Overwriting.")
        _strategy_registry[name] = cls
        logger.debug(f"Registered strategy: {name} -> {cls.__name__}")
        return cls
    return decorator


def list_strategies() -> List[str]:
    return sorted(_strategy_registry.keys())


def get_strategy(name: str, params: Dict[str, Any]) -> Strategy:
    """
    Instantiate a registered strategy.

    Args:
        name: Registry key (e.g. "long_straddle")
        params: Strategy parameters from config (must include "symbol")

    Raises:
        ValueError: If the name is unknown or the params are rejected
    """
    if name not in _strategy_registry:
        available = list_strategies()
        if available:
            raise ValueError(f"Unknown strategy: '{name}'. Available strategies: {', '.join(available)}")
        raise ValueError(
            f"Unknown strategy: '{name}'. No strategies are registered.\n"
            f"Make sure strategy modules are imported (add to options_bt/strategy/__init__.py)"
        )

    strategy_cls = _strategy_registry[name]
    try:
        return strategy_cls(params)
    except Exception as e:
        raise ValueError(f"Failed to instantiate strategy '{name}': {e}") from e


def discover_strategies() -> List[str]:
    """Import the strategy package so every built-in strategy is registered."""
    from . import buy_and_hold, covered_call, protective_put, long_straddle  # noqa: F401

    logger.info(f"Discovered {len(_strategy_registry)} strategies: {list_strategies()}")
    return list_strategies()
