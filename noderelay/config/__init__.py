"""Configuration module for noderelay."""

from noderelay.config.loader import load_config, get_config_path, save_config
from noderelay.config.schema import Config, LoggingConfig, RpcConfig
from noderelay.config.access import get_config, clear_config_cache

__all__ = [
    "Config",
    "RpcConfig",
    "LoggingConfig",
    "load_config",
    "save_config",
    "get_config_path",
    "get_config",
    "clear_config_cache",
]
