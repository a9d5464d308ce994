"""
Shellpack Configuration - TOML-based settings.

Example usage:
    from shellpack.config import load_settings

    settings = load_settings()
    registry = PluginRegistry(settings.plugins_dir, retry_policy=settings.retry_policy())
"""

from shellpack.config.schema import ConfigField
from shellpack.config.settings import (
    SETTINGS_SCHEMA,
    Settings,
    default_home,
    load_settings,
    write_default_config,
)

__all__ = [
    "ConfigField",
    "SETTINGS_SCHEMA",
    "Settings",
    "default_home",
    "load_settings",
    "write_default_config",
]
