"""
Tests for Configuration System.

This test suite covers:
1. Schema validation (type mismatch, constraint violation)
2. TOML generation from schema (with comments)
3. TOML parsing errors
4. Settings loading, defaults and path resolution
"""

import tempfile
import tomllib
from pathlib import Path

import pytest

from shellpack.config import SETTINGS_SCHEMA, ConfigField, load_settings, write_default_config
from shellpack.config.schema import (
    SchemaError,
    ValidationError,
    validate_config,
)
from shellpack.config.settings import HOME_ENV_VAR, default_home
from shellpack.config.toml_handler import generate_toml_from_schema, read_toml, write_toml
from shellpack.errors import ConfigError
from shellpack.marketplace import DEFAULT_API_URL
from shellpack.recovery import DEFAULT_POLICY, RetryPolicy
from shellpack.scripts.materializer import default_cache_dir


class TestSchemaValidation:
    """Test schema field validation."""

    def test_field_default_type_mismatch(self):
        """ConfigField should reject default value that doesn't match type."""
        with pytest.raises(SchemaError, match="does not match type"):
            ConfigField(int, "not an int", "Bad default")

    def test_field_min_max_constraints(self):
        """ConfigField should enforce min/max for numbers."""
        field = ConfigField(int, 3, "Attempts", min=1, max=10)

        field.validate(1)
        field.validate(10)

        with pytest.raises(ValidationError, match="less than minimum"):
            field.validate(0)
        with pytest.raises(ValidationError, match="greater than maximum"):
            field.validate(11)

    def test_min_max_rejected_for_strings(self):
        with pytest.raises(SchemaError, match="only supported for int, float"):
            ConfigField(str, "x", "Nope", min=1)

    def test_field_choices_constraint(self):
        field = ConfigField(str, "INFO", "Level", choices=["INFO", "DEBUG"])
        field.validate("DEBUG")
        with pytest.raises(ValidationError, match="not in allowed choices"):
            field.validate("TRACE")

    def test_field_choices_default_must_be_in_choices(self):
        with pytest.raises(SchemaError, match="not in choices"):
            ConfigField(str, "TRACE", "Level", choices=["INFO"])

    def test_bool_is_not_an_int(self):
        with pytest.raises(ValidationError, match="Expected type int"):
            ConfigField(int, 3).validate(True)

    def test_int_coerced_to_float(self):
        field = ConfigField(float, 0.1)
        assert field.coerce(5) == 5.0
        assert isinstance(field.coerce(5), float)
        assert field.coerce(True) is True


class TestValidateConfig:
    def test_partial_config_filled_with_defaults(self):
        values = validate_config({"retry_max_attempts": 5}, SETTINGS_SCHEMA)
        assert values["retry_max_attempts"] == 5
        assert values["log_level"] == "WARNING"
        assert set(values) == set(SETTINGS_SCHEMA)

    def test_unknown_field(self):
        with pytest.raises(ValidationError, match="Unknown configuration field: colour"):
            validate_config({"colour": "blue"}, SETTINGS_SCHEMA)

    def test_error_names_field(self):
        with pytest.raises(ValidationError, match="Field 'retry_max_attempts'"):
            validate_config({"retry_max_attempts": 0}, SETTINGS_SCHEMA)

    def test_empty_config_is_all_defaults(self):
        values = validate_config({}, SETTINGS_SCHEMA)
        assert values["marketplace_url"] == DEFAULT_API_URL
        assert values["retry_max_attempts"] == DEFAULT_POLICY.max_attempts


class TestTOMLHandler:
    """Test TOML file operations."""

    def test_generate_from_schema_has_comments(self):
        schema = {
            "port": ConfigField(int, 8080, "Server port", min=1, max=65535),
            "level": ConfigField(str, "INFO", "Log level", choices=["INFO", "DEBUG"]),
        }

        text = generate_toml_from_schema("server", schema, {"port": 9000})

        assert "# Server port" in text
        assert "# Constraints: min: 1, max: 65535" in text
        assert "choices: ['INFO', 'DEBUG']" in text
        assert tomllib.loads(text) == {"server": {"port": 9000, "level": "INFO"}}

    def test_write_then_read(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "sub" / "out.toml"
            write_toml(path, {"shellpack": {"log_level": "DEBUG"}})
            assert read_toml(path) == {"shellpack": {"log_level": "DEBUG"}}

    def test_read_missing(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            with pytest.raises(ConfigError, match="not found"):
                read_toml(Path(tmpdir) / "missing.toml")

    def test_read_invalid(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "bad.toml"
            path.write_text("[shellpack\nlog_level = ")
            with pytest.raises(ConfigError, match="Failed to parse"):
                read_toml(path)


class TestLoadSettings:
    """Test resolving Settings from a home directory."""

    def test_missing_file_gives_defaults(self, tmp_path):
        settings = load_settings(tmp_path)

        assert settings.home == tmp_path
        assert settings.config_file == tmp_path / "config.toml"
        assert settings.plugins_dir == tmp_path / "plugins"
        assert settings.scripts_cache_dir == default_cache_dir()
        assert settings.marketplace_url == DEFAULT_API_URL
        assert settings.log_level == "WARNING"
        assert settings.retry_policy() == DEFAULT_POLICY

    def test_values_from_file(self, tmp_path):
        (tmp_path / "config.toml").write_text(
            "[shellpack]\n"
            'plugins_dir = "/opt/shellpack/plugins"\n'
            'scripts_cache_dir = "cache"\n'
            "retry_max_attempts = 5\n"
            "retry_max_delay = 2\n"
            'log_level = "DEBUG"\n'
        )

        settings = load_settings(tmp_path)

        assert settings.plugins_dir == Path("/opt/shellpack/plugins")
        assert settings.scripts_cache_dir == Path("cache")
        assert settings.log_level == "DEBUG"
        assert settings.retry_policy() == RetryPolicy(
            max_attempts=5, initial_delay=0.1, max_delay=2.0, backoff_factor=2.0
        )

    def test_relative_plugins_dir(self, tmp_path):
        (tmp_path / "config.toml").write_text('[shellpack]\nplugins_dir = "p"\n')
        assert load_settings(tmp_path).plugins_dir == tmp_path / "p"

    def test_other_tables_ignored(self, tmp_path):
        (tmp_path / "config.toml").write_text('[other]\nkey = 1\n')
        assert load_settings(tmp_path).log_level == "WARNING"

    def test_invalid_value(self, tmp_path):
        (tmp_path / "config.toml").write_text('[shellpack]\nlog_level = "LOUD"\n')
        with pytest.raises(ConfigError, match="log_level"):
            load_settings(tmp_path)

    def test_section_must_be_table(self, tmp_path):
        (tmp_path / "config.toml").write_text('shellpack = "nope"\n')
        with pytest.raises(ConfigError, match="must be a table"):
            load_settings(tmp_path)

    def test_home_from_environment(self, tmp_path, monkeypatch):
        monkeypatch.setenv(HOME_ENV_VAR, str(tmp_path))
        assert default_home() == tmp_path
        assert load_settings().home == tmp_path

    def test_default_home(self, monkeypatch):
        monkeypatch.delenv(HOME_ENV_VAR, raising=False)
        assert default_home() == Path.home() / ".shellpack"


class TestWriteDefaultConfig:
    def test_written_file_loads_as_defaults(self, tmp_path):
        path = tmp_path / "config.toml"

        write_default_config(path)

        text = path.read_text()
        assert "# Plugin marketplace base URL" in text
        settings = load_settings(tmp_path)
        assert settings.plugins_dir == tmp_path / "plugins"
        assert settings.retry_policy() == DEFAULT_POLICY

    def test_refuses_to_overwrite(self, tmp_path):
        path = tmp_path / "config.toml"
        path.write_text("# mine\n")

        with pytest.raises(ConfigError, match="already exists"):
            write_default_config(path)

        assert path.read_text() == "# mine\n"
