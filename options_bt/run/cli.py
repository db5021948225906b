"""
CLI entrypoint for running backtests.
"""

import argparse
import logging
import sys
from datetime import date
from typing import List, Optional

from ..config import load_config, apply_env_overrides, apply_cli_overrides, RunConfig
from ..strategy import list_strategies, discover_strategies
from .runner import run_backtest
from .result import BacktestResult

logger = logging.getLogger(__name__)


def setup_logging(level: str = "INFO"):
    """Setup logging configuration"""
    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def print_summary(result: BacktestResult):
    """Print backtest summary to console"""
    metrics = result.metrics()

    print("\n" + "=" * 70)
    print("BACKTEST SUMMARY")
    print("=" * 70)
    print(f"Strategy: {result.strategy_name}")
    print(f"Period: {result.start_date} to {result.end_date}")
    print("-" * 70)
    print(f"Initial Capital: ${result.initial_capital:,.2f}")
    print(f"Final Value: ${result.final_value:,.2f}")
    print(f"Total Return: ${result.total_return:,.2f} ({result.return_pct:.2f}%)")
    print(f"Max Drawdown: {metrics['max_drawdown_pct']:.2f}%")
    print(f"Sharpe Ratio: {metrics['sharpe']:.2f}")
    print(f"Total Trades: {result.trade_count}")
    print(f"Rejected Orders: {result.rejected_count}")
    print("=" * 70 + "\n")


def cmd_list_strategies():
    """List all available strategies"""
    discover_strategies()
    strategies = list_strategies()

    print("\n" + "=" * 70)
    print("AVAILABLE STRATEGIES")
    print("=" * 70)
    for strategy in strategies:
        print(f"  - {strategy}")
    print("=" * 70 + "\n")


def cmd_dry_run(config: RunConfig):
    """Dry run: print the resolved config without executing"""
    print("\n" + "=" * 70)
    print("DRY RUN - Configuration Resolved")
    print("=" * 70)
    print(f"Strategy: {config.strategy.name}")
    print(f"Params: {config.strategy_params()}")
    print(f"Symbol: {config.engine.symbol}")
    print(f"Date Range: {config.engine.start} to {config.engine.end}")
    print(f"Initial Capital: ${config.engine.initial_capital}")
    print(f"Data Provider: {config.data.provider} ({config.data.csv_dir})")
    print("=" * 70 + "\n")


def resolve_config(
    config_path: str,
    start: Optional[str] = None,
    end: Optional[str] = None,
    strategy: Optional[str] = None,
    sets: Optional[List[str]] = None,
) -> RunConfig:
    """File -> environment -> --set -> explicit flags, later sources win."""
    config = load_config(config_path)
    config = apply_env_overrides(config)
    if sets:
        config = apply_cli_overrides(config, sets)

    engine_updates = {}
    if start:
        engine_updates["start"] = date.fromisoformat(start)
    if end:
        engine_updates["end"] = date.fromisoformat(end)
    if engine_updates or strategy:
        data = config.model_dump()
        data["engine"].update(engine_updates)
        if strategy:
            data["strategy"]["name"] = strategy
        # Re-validate (start <= end)
        config = RunConfig(**data)
    return config


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entrypoint"""
    parser = argparse.ArgumentParser(
        description="Options Strategy Backtester - CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Run with config file
  python -m options_bt.run --config configs/spy_straddle.yaml

  # Override date range
  python -m options_bt.run --config configs/spy_straddle.yaml --start 2024-01-02 --end 2024-01-30

  # Override strategy and config values
  python -m options_bt.run --config configs/spy_straddle.yaml --strategy covered_call --set engine.initial_capital=50000

  # Dry run (resolve config without executing)
  python -m options_bt.run --config configs/spy_straddle.yaml --dry-run

  # List available strategies
  python -m options_bt.run --list-strategies
        """,
    )

    parser.add_argument("--config", type=str, help="Path to config file (YAML or JSON)")
    parser.add_argument("--start", type=str, help="Override start date (ISO format, e.g., 2024-01-02)")
    parser.add_argument("--end", type=str, help="Override end date (ISO format, e.g., 2024-01-30)")
    parser.add_argument("--strategy", type=str, help="Override strategy name")
    parser.add_argument(
        "--set",
        action="append",
        dest="sets",
        metavar="KEY=VALUE",
        help="Override config value (can be used multiple times). Use nested keys: strategy.params.max_contracts=5",
    )
    parser.add_argument("--list-strategies", action="store_true", help="List all available strategies and exit")
    parser.add_argument("--dry-run", action="store_true", help="Resolve config and print it without executing")
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="INFO",
        help="Logging level (default: INFO)",
    )

    args = parser.parse_args(argv)

    setup_logging(args.log_level)

    if args.list_strategies:
        cmd_list_strategies()
        return 0

    if not args.config:
        print("ERROR: --config is required", file=sys.stderr)
        parser.print_help()
        return 1

    try:
        config = resolve_config(args.config, args.start, args.end, args.strategy, args.sets)
    except Exception as e:
        print(f"ERROR: {e}", file=sys.stderr)
        logger.exception("Failed to resolve config")
        return 1

    if args.dry_run:
        cmd_dry_run(config)
        return 0

    try:
        result = run_backtest(config)
    except Exception as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1

    print_summary(result)
    return 0


if __name__ == "__main__":
    sys.exit(main())
