"""
TOML File I/O Handler.

- Parse TOML files using tomllib
- Write TOML files using tomlkit (preserves comments and formatting)
- Generate a commented settings file from the schema
"""

import tomllib
from pathlib import Path
from typing import Any

import tomlkit

from shellpack.config.schema import ConfigField
from shellpack.errors import ConfigError, FileOperationFailed
from shellpack.fileio import atomic_write_text


def read_toml(file_path: Path) -> dict[str, Any]:
    """
    Read and parse a TOML file.

    Raises:
        ConfigError: If the file cannot be read or parsed
    """
    try:
        with open(file_path, "rb") as f:
            return tomllib.load(f)
    except FileNotFoundError as e:
        raise ConfigError(f"TOML file not found: {file_path}") from e
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Failed to parse TOML file {file_path}: {e}") from e
    except OSError as e:
        raise ConfigError(f"Failed to read TOML file {file_path}: {e}") from e


def write_toml(file_path: Path, content: str | dict[str, Any]) -> None:
    """
    Write a TOML document.

    Args:
        file_path: Target file
        content: Pre-rendered TOML text, or data to serialize with tomlkit

    Raises:
        ConfigError: If the file cannot be written
    """
    text = content if isinstance(content, str) else tomlkit.dumps(content)
    try:
        atomic_write_text(file_path, text)
    except FileOperationFailed as e:
        raise ConfigError(f"Failed to write TOML file {file_path}: {e}") from e


def generate_toml_from_schema(
    section: str, schema: dict[str, ConfigField], config_data: dict[str, Any]
) -> str:
    """
    Generate TOML content from schema with descriptive comments.

    Args:
        section: Table name
        schema: Schema dictionary (field_name -> ConfigField)
        config_data: Values to write (defaults fill the gaps)

    Returns:
        TOML string with comments
    """
    doc = tomlkit.document()
    doc.add(tomlkit.comment("shellpack configuration"))
    doc.add(tomlkit.nl())

    table = tomlkit.table()

    for field_name, field in schema.items():
        if field.description:
            table.add(tomlkit.comment(field.description))

        constraints = []
        if field.min is not None:
            constraints.append(f"min: {field.min}")
        if field.max is not None:
            constraints.append(f"max: {field.max}")
        if field.choices is not None:
            constraints.append(f"choices: {field.choices}")
        if constraints:
            table.add(tomlkit.comment(f"Constraints: {', '.join(constraints)}"))

        table.add(field_name, config_data.get(field_name, field.default))
        table.add(tomlkit.nl())

    doc.add(section, table)

    return tomlkit.dumps(doc)
