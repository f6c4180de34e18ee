"""
Configuration de Chat Relay.
"""

from .loader import load_config, reload_config, get_config
from .settings import RelaySettings, HttpConfig


def get_relay_settings(config_path: str = None) -> RelaySettings:
    """Charge la configuration et la convertit en réglages figés."""
    return RelaySettings.from_config(load_config(config_path))


__all__ = [
    "load_config",
    "reload_config",
    "get_config",
    "get_relay_settings",
    "RelaySettings",
    "HttpConfig",
]
