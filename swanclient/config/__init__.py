"""Configuration module for swanclient."""

from swanclient.config.loader import get_config_path, load_config, save_config
from swanclient.config.schema import Config, HttpConfig, LotusConfig, SenderConfig, SwanConfig

__all__ = [
    "Config",
    "HttpConfig",
    "LotusConfig",
    "SenderConfig",
    "SwanConfig",
    "get_config_path",
    "load_config",
    "save_config",
]
