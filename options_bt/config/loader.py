"""
Configuration loader with YAML/JSON support, environment overrides, and CLI overrides.
"""

import json
import logging
import os
from pathlib import Path
from typing import Dict, Any, List

import yaml

from .schemas import RunConfig

logger = logging.getLogger(__name__)

ENV_PREFIX = "OPBT__"


def load_config(path: str) -> RunConfig:
    """
    Load configuration from YAML or JSON file.

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If the file format is unsupported
    """
    config_path = Path(path)

    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    suffix = config_path.suffix.lower()

    with open(config_path, "r", encoding="utf-8") as f:
        if suffix in [".yaml", ".yml"]:
            config_dict = yaml.safe_load(f)
        elif suffix == ".json":
            config_dict = json.load(f)
        else:
            raise ValueError(f"Unsupported config file format: {suffix}. Use .yaml, .yml, or .json")

    if not isinstance(config_dict, dict):
        raise ValueError(f"Config file {path} must contain a mapping at the top level")

    logger.debug(f"Loaded config from {config_path}")
    return RunConfig(**config_dict)


def parse_value(raw: str) -> Any:
    """JSON first, then true/false/null and numbers, finally the raw string."""
    try:
        return json.loads(raw)
    except (json.JSONDecodeError, ValueError):
        pass

    lowered = raw.lower()
    if lowered == "true":
        return True
    if lowered == "false":
        return False
    if lowered == "null":
        return None
    try:
        return float(raw) if "." in raw else int(raw)
    except ValueError:
        return raw


def _set_nested(overrides: Dict[str, Any], path: List[str], value: Any) -> None:
    current = overrides
    for part in path[:-1]:
        current = current.setdefault(part, {})
    current[path[-1]] = value


def _apply(cfg: RunConfig, overrides: Dict[str, Any]) -> RunConfig:
    if not overrides:
        return cfg
    merged = _deep_merge(cfg.model_dump(), overrides)
    # Re-validate
    return RunConfig(**merged)


def apply_env_overrides(cfg: RunConfig, environ: Dict[str, str] = None) -> RunConfig:
    """
    Apply environment variable overrides to configuration.

    Environment variables must follow pattern: OPBT__{section}__{key}
    Example: OPBT__engine__initial_capital=50000
             OPBT__strategy__params__max_contracts=5
    """
    environ = os.environ if environ is None else environ
    overrides: Dict[str, Any] = {}

    for key, value in environ.items():
        if not key.startswith(ENV_PREFIX):
            continue
        # env vars are often uppercase
        parts = key[len(ENV_PREFIX):].lower().split("__")
        if len(parts) < 2:
            continue
        _set_nested(overrides, parts, parse_value(value))

    if overrides:
        logger.info(f"Applying environment overrides: {overrides}")
    return _apply(cfg, overrides)


def apply_cli_overrides(cfg: RunConfig, sets: List[str]) -> RunConfig:
    """
    Apply CLI --set key=value overrides to configuration.

    Supports nested keys: engine.initial_capital=50000 or strategy.params.profit_threshold=25
    """
    if not sets:
        return cfg

    overrides: Dict[str, Any] = {}
    for set_str in sets:
        if "=" not in set_str:
            raise ValueError(f"Invalid --set format: {set_str}. Expected 'key=value'")

        key_str, value_str = set_str.split("=", 1)
        key_parts = key_str.split(".")
        if len(key_parts) < 2:
            raise ValueError(f"Invalid --set key format: {key_str}. Expected 'section.key' or 'section.nested.key'")
        _set_nested(overrides, key_parts, parse_value(value_str))

    return _apply(cfg, overrides)


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Deep merge two dictionaries"""
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result
