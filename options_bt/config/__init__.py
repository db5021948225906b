"""
Configuration system: schemas and loaders
"""

from .schemas import (
    DataConfig,
    EngineConfig,
    StrategyConfig,
    RunConfig,
)
from .loader import load_config, apply_env_overrides, apply_cli_overrides, parse_value

__all__ = [
    "DataConfig",
    "EngineConfig",
    "StrategyConfig",
    "RunConfig",
    "load_config",
    "apply_env_overrides",
    "apply_cli_overrides",
    "parse_value",
]
