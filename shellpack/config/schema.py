"""
Configuration Schema.

Typed field declarations for the shellpack settings file.

Key features:
- Field definitions with defaults, descriptions and constraints
- Validation of loaded values against the schema
- Defaults filled in for missing fields
"""

from dataclasses import dataclass
from typing import Any

from shellpack.errors import ConfigError


class SchemaError(ConfigError):
    """Raised when a field definition itself is invalid."""

    pass


class ValidationError(ConfigError):
    """Raised when a configuration value fails validation."""

    pass


@dataclass
class ConfigField:
    """
    Represents a configuration field with type and constraints.

    Attributes:
        type_: The expected type of the field value
        default: Default value for the field
        description: Human-readable description (written as a TOML comment)
        min: Minimum value (numbers only)
        max: Maximum value (numbers only)
        choices: List of allowed values (optional)
    """

    type_: type
    default: Any
    description: str = ""
    min: Any = None
    max: Any = None
    choices: list[Any] | None = None

    def __post_init__(self):
        if not isinstance(self.default, self.type_):
            raise SchemaError(
                f"Default value {self.default!r} does not match type {self.type_.__name__}"
            )
        if (self.min is not None or self.max is not None) and self.type_ not in (int, float):
            raise SchemaError(
                f"min/max constraints only supported for int, float. Got {self.type_.__name__}"
            )
        if self.choices is not None and self.default not in self.choices:
            raise SchemaError(
                f"Default value {self.default!r} not in choices {self.choices}"
            )

    def coerce(self, value: Any) -> Any:
        """Accept ints where floats are expected (TOML writes 5 for 5.0)."""
        if self.type_ is float and isinstance(value, int) and not isinstance(value, bool):
            return float(value)
        return value

    def validate(self, value: Any) -> None:
        """
        Validate a value against this field's constraints.

        Raises:
            ValidationError: If validation fails
        """
        # bool is an int subclass; don't let true pass as 1
        if not isinstance(value, self.type_) or (
            self.type_ is not bool and isinstance(value, bool)
        ):
            raise ValidationError(
                f"Expected type {self.type_.__name__}, got {type(value).__name__}"
            )

        if self.choices is not None and value not in self.choices:
            raise ValidationError(
                f"Value {value!r} not in allowed choices {self.choices}"
            )

        if self.min is not None and value < self.min:
            raise ValidationError(f"Value {value} is less than minimum {self.min}")
        if self.max is not None and value > self.max:
            raise ValidationError(f"Value {value} is greater than maximum {self.max}")


def validate_config(
    config: dict[str, Any], schema: dict[str, ConfigField]
) -> dict[str, Any]:
    """
    Validate a (possibly partial) configuration table against a schema.

    Missing fields take their defaults.

    Args:
        config: Values read from the config file
        schema: Schema dictionary (field_name -> ConfigField)

    Returns:
        A complete, validated configuration dictionary

    Raises:
        ValidationError: On unknown fields or invalid values
    """
    for key in config:
        if key not in schema:
            raise ValidationError(f"Unknown configuration field: {key}")

    result = {}
    for field_name, field in schema.items():
        value = field.coerce(config.get(field_name, field.default))
        try:
            field.validate(value)
        except ValidationError as e:
            raise ValidationError(f"Field '{field_name}': {e}") from e
        result[field_name] = value
    return result

