"""
Shellpack settings.

Settings are read from ``$SHELLPACK_HOME/config.toml`` (default home:
``~/.shellpack``) and passed explicitly to the components that need them;
nothing in the library reads process-wide paths on its own.
"""

import os
from dataclasses import dataclass
from pathlib import Path

from shellpack.config.schema import ConfigField, ValidationError, validate_config
from shellpack.config.toml_handler import generate_toml_from_schema, read_toml, write_toml
from shellpack.errors import ConfigError
from shellpack.marketplace import DEFAULT_API_URL
from shellpack.recovery import RetryPolicy
from shellpack.scripts.materializer import default_cache_dir

HOME_ENV_VAR = "SHELLPACK_HOME"
CONFIG_FILENAME = "config.toml"
SECTION = "shellpack"

SETTINGS_SCHEMA: dict[str, ConfigField] = {
    "plugins_dir": ConfigField(
        str, "plugins", "Plugin install directory (relative paths resolve against the home dir)"
    ),
    "scripts_cache_dir": ConfigField(
        str, "", "Where scripts are materialized before running (empty: system temp)"
    ),
    "retry_max_attempts": ConfigField(
        int, 3, "Total attempts for network and transient file operations", min=1, max=10
    ),
    "retry_initial_delay": ConfigField(float, 0.1, "First retry delay in seconds", min=0.0),
    "retry_max_delay": ConfigField(float, 5.0, "Upper bound for a retry delay", min=0.0),
    "retry_backoff_factor": ConfigField(float, 2.0, "Delay multiplier per retry", min=1.0),
    "marketplace_url": ConfigField(str, DEFAULT_API_URL, "Plugin marketplace base URL"),
    "marketplace_timeout": ConfigField(float, 30.0, "HTTP timeout in seconds", min=1.0),
    "log_level": ConfigField(
        str, "WARNING", "Log level", choices=["DEBUG", "INFO", "WARNING", "ERROR"]
    ),
}


def default_home() -> Path:
    env = os.environ.get(HOME_ENV_VAR)
    if env:
        return Path(env).expanduser()
    return Path.home() / ".shellpack"


@dataclass(frozen=True)
class Settings:
    """Resolved shellpack settings."""

    home: Path
    plugins_dir: Path
    scripts_cache_dir: Path
    retry_max_attempts: int = 3
    retry_initial_delay: float = 0.1
    retry_max_delay: float = 5.0
    retry_backoff_factor: float = 2.0
    marketplace_url: str = DEFAULT_API_URL
    marketplace_timeout: float = 30.0
    log_level: str = "WARNING"

    @property
    def config_file(self) -> Path:
        return self.home / CONFIG_FILENAME

    def retry_policy(self) -> RetryPolicy:
        return RetryPolicy(
            max_attempts=self.retry_max_attempts,
            initial_delay=self.retry_initial_delay,
            max_delay=self.retry_max_delay,
            backoff_factor=self.retry_backoff_factor,
        )


def load_settings(home: Path | None = None) -> Settings:
    """
    Load settings from the config file under home.

    A missing file yields defaults.

    Args:
        home: Shellpack home directory (default: $SHELLPACK_HOME or ~/.shellpack)

    Returns:
        Settings object

    Raises:
        ConfigError: If the file exists but is unreadable or invalid
    """
    home = Path(home) if home else default_home()
    config_file = home / CONFIG_FILENAME

    table = {}
    if config_file.exists():
        data = read_toml(config_file)
        table = data.get(SECTION, {})
        if not isinstance(table, dict):
            raise ValidationError(f"[{SECTION}] must be a table in {config_file}")

    values = validate_config(dict(table), SETTINGS_SCHEMA)

    plugins_dir = Path(values.pop("plugins_dir")).expanduser()
    if not plugins_dir.is_absolute():
        plugins_dir = home / plugins_dir

    cache = values.pop("scripts_cache_dir")
    scripts_cache_dir = Path(cache).expanduser() if cache else default_cache_dir()

    return Settings(
        home=home,
        plugins_dir=plugins_dir,
        scripts_cache_dir=scripts_cache_dir,
        **values,
    )


def write_default_config(path: Path) -> None:
    """
    Write a commented config file with every setting at its default.

    Raises:
        ConfigError: If path already exists or cannot be written
    """
    if path.exists():
        raise ConfigError(f"Config file already exists: {path}")
    write_toml(path, generate_toml_from_schema(SECTION, SETTINGS_SCHEMA, {}))
