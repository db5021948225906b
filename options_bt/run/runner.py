"""
Backtest runner: builds provider, strategy and engine from a RunConfig and runs them.

This is the single entry point used by the CLI.
"""

import logging
from typing import Iterable, List, Optional

from ..config import RunConfig
from ..data import CsvDataProvider, DataProvider, HolidayCalendar, InMemoryDataProvider, MarketObservation
from ..errors import InsufficientCapitalError
from ..risk import CapitalCheckResult, check_first_observation
from ..strategy import get_strategy, discover_strategies
from ..strategy.base import Strategy
from .engine import SimulationEngine
from .result import BacktestResult

logger = logging.getLogger(__name__)


def build_provider(config: RunConfig) -> CsvDataProvider:
    if config.data.provider != "csv":
        raise ValueError(f"Unsupported data provider: {config.data.provider}")

    calendar: Optional[HolidayCalendar] = None
    if config.data.validate_calendar:
        calendar = HolidayCalendar.for_range(config.engine.start, config.engine.end)
    return CsvDataProvider(config.data.csv_dir, spread_pct=config.data.spread_pct, calendar=calendar)


def check_capital(
    config: RunConfig, strategy: Strategy, provider: DataProvider, observations: List[MarketObservation]
) -> Optional[CapitalCheckResult]:
    """Warn, or raise when enforce_min_capital is set, if capital cannot fund one entry."""
    result = check_first_observation(strategy, config.engine.initial_capital, provider, observations)
    if result is not None and not result.sufficient and config.engine.enforce_min_capital:
        raise InsufficientCapitalError(
            f"{strategy.name} needs at least ${result.required} but only ${result.available} is configured: "
            f"{result.reason}"
        )
    return result


def run_backtest(config: RunConfig) -> BacktestResult:
    """
    Run a backtest with the given configuration.

    Returns:
        BacktestResult for the configured strategy and date range

    Raises whatever aborted the run after logging it; no partial result is returned.
    """
    label = config.name or config.strategy.name
    logger.info(f"Starting backtest run '{label}'...")

    try:
        discover_strategies()

        provider = build_provider(config)
        strategy = get_strategy(config.strategy.name, config.strategy_params())
        logger.info(f"Strategy: {strategy.name} ({config.strategy.name})")

        # one read of the source data serves both the capital check and the engine
        observations = provider.get_market_data(config.engine.symbol, config.engine.start, config.engine.end)
        check_capital(config, strategy, provider, observations)

        engine = SimulationEngine(InMemoryDataProvider(observations), strategy, config.engine.initial_capital)
        result = engine.run_backtest(config.engine.symbol, config.engine.start, config.engine.end)

        logger.info(f"Run '{label}' finished\n{result.summary()}")
        return result

    except Exception as e:
        logger.error(f"Backtest failed: {e}", exc_info=True)
        raise


def run_many(configs: Iterable[RunConfig]) -> List[BacktestResult]:
    """Run several configurations one after another, each with its own engine."""
    return [run_backtest(config) for config in configs]
