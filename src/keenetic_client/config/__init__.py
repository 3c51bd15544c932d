"""Configuration management for the Keenetic client."""

from keenetic_client.config.loader import get_config, load_config, reset_config
from keenetic_client.config.settings import KeeneticSettings

__all__ = [
    "KeeneticSettings",
    "get_config",
    "load_config",
    "reset_config",
]
