"""
Configuration Loader Module

Loads chart configuration from a YAML file, applies environment variable
overrides and sets up loguru handlers.
"""

import os
import sys
from pathlib import Path
from typing import Any, Dict, Union

import yaml
from loguru import logger

from src.chainviz.config.chart_config import ChartConfig


DEFAULT_CONFIG_PATH = "config/chainviz.yaml"

ENV_PREFIX = "CHAINVIZ_"

BOOL_KEYS = {"combine_by_default"}
INT_KEYS = {
    "default_range_days",
    "refresh_interval_seconds",
    "refresh_horizon_days",
    "max_value_ticks",
    "snackbar_capacity",
}
FLOAT_KEYS = {"flat_intensity"}
LIST_KEYS = {"tracked_assets"}
STR_KEYS = {
    "default_symbol",
    "default_expression_up",
    "default_expression_down",
    "default_map_expression",
    "log_level",
    "log_file",
}


def load_config(path: Union[str, Path] = DEFAULT_CONFIG_PATH) -> ChartConfig:
    """
    Load chart configuration.

    Args:
        path: YAML config file path

    Returns:
        ChartConfig with file settings and env overrides applied
        (defaults if the file does not exist)

    Raises:
        ValueError: If config is invalid
    """
    config_file = Path(path)
    config_data: Dict[str, Any] = {}

    if config_file.exists():
        with open(config_file, "r") as f:
            config_data = yaml.safe_load(f) or {}
        logger.info(f"Loaded config from {config_file}")
    else:
        logger.warning(f"Config file not found: {config_file}, using defaults")

    config_data = merge_config_with_env(config_data)

    return ChartConfig.from_dict(config_data)


def merge_config_with_env(config_data: Dict[str, Any]) -> Dict[str, Any]:
    """
    Merge configuration with environment variables.

    Environment variables override config file settings.

    Examples:
        CHAINVIZ_DEFAULT_SYMBOL=QQQ
        CHAINVIZ_MAX_VALUE_TICKS=8
        CHAINVIZ_COMBINE_BY_DEFAULT=false
        CHAINVIZ_TRACKED_ASSETS=SPY,QQQ

    Args:
        config_data: Configuration data from file

    Returns:
        Merged configuration with env vars applied
    """
    merged = dict(config_data)

    for config_key in BOOL_KEYS | INT_KEYS | FLOAT_KEYS | LIST_KEYS | STR_KEYS:
        env_var = ENV_PREFIX + config_key.upper()
        env_value = os.environ.get(env_var)
        if env_value is None:
            continue

        if config_key in BOOL_KEYS:
            merged[config_key] = env_value.lower() in ("true", "1", "yes", "on")
        elif config_key in INT_KEYS:
            merged[config_key] = int(env_value)
        elif config_key in FLOAT_KEYS:
            merged[config_key] = float(env_value)
        elif config_key in LIST_KEYS:
            merged[config_key] = [s.strip() for s in env_value.split(",") if s.strip()]
        else:
            merged[config_key] = env_value

        logger.debug(f"Overriding {config_key} from env: {env_var}")

    return merged


def configure_logging(config: ChartConfig) -> None:
    """
    Configure loguru handlers.

    Replaces the default handler with a stderr handler at the configured
    level and, when log_file is set, a rotating file handler.
    """
    logger.remove()
    logger.add(
        sys.stderr,
        level=config.log_level,
        format="<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | <level>{message}</level>"
    )

    if config.log_file:
        Path(config.log_file).parent.mkdir(parents=True, exist_ok=True)
        logger.add(
            config.log_file,
            rotation="10 MB",
            level="DEBUG",
            format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{line} | {message}"
        )
