"""
Plugin Manifest System.

This module provides manifest parsing and validation for plugin packages.

Key features:
- info.json parsing into typed dataclasses
- Structural validation of every field
- Cross-check that declared script files exist under scripts/
- Dotted version comparison for min_tool_version
"""

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from shellpack.errors import (
    FileOperationFailed,
    InvalidManifest,
    MissingManifest,
    MissingScriptFile,
    MissingScriptsDir,
)
from shellpack.fileio import read_text

MANIFEST_FILENAME = "info.json"
SCRIPTS_DIRNAME = "scripts"


@dataclass
class ScriptEntry:
    """
    A script shipped by a plugin.

    Attributes:
        name: Display name
        file: Path relative to the plugin's scripts/ directory
        description: Human-readable description
        executable: Whether the executable bit must be set after install
    """

    name: str
    file: str
    description: str
    executable: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "file": self.file,
            "description": self.description,
            "executable": self.executable,
        }


@dataclass
class PluginManifest:
    """
    Represents a plugin manifest (info.json).

    Attributes:
        id: Unique plugin identifier
        name: Display name
        version: Plugin version
        description: Plugin description
        author: Plugin author
        scripts: Scripts shipped by the plugin
        dependencies: Ids of plugins that must be installed first
        tags: Free-form tags
        min_tool_version: Minimum shellpack version, if any
    """

    id: str
    name: str
    version: str
    description: str
    author: str
    scripts: list[ScriptEntry] = field(default_factory=list)
    dependencies: list[str] = field(default_factory=list)
    tags: list[str] = field(default_factory=list)
    min_tool_version: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "version": self.version,
            "description": self.description,
            "author": self.author,
            "scripts": [script.to_dict() for script in self.scripts],
            "dependencies": list(self.dependencies),
            "tags": list(self.tags),
            "min_tool_version": self.min_tool_version,
        }


def _require_str(data: dict[str, Any], key: str, where: str = "manifest") -> str:
    if key not in data:
        raise InvalidManifest(f"Missing required field in {where}: {key}")
    value = data[key]
    if not isinstance(value, str):
        raise InvalidManifest(f"'{key}' field in {where} must be a string")
    return value


def _optional_str_list(data: dict[str, Any], key: str) -> list[str]:
    value = data.get(key, [])
    if value is None:
        return []
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise InvalidManifest(f"'{key}' field must be a list of strings")
    return list(value)


def _parse_script_entry(data: Any, index: int) -> ScriptEntry:
    where = f"scripts[{index}]"
    if not isinstance(data, dict):
        raise InvalidManifest(f"{where} must be an object")

    executable = data.get("executable", False)
    if not isinstance(executable, bool):
        raise InvalidManifest(f"'executable' field in {where} must be a boolean")

    return ScriptEntry(
        name=_require_str(data, "name", where),
        file=_require_str(data, "file", where),
        description=_require_str(data, "description", where),
        executable=executable,
    )


def manifest_from_dict(data: Any) -> PluginManifest:
    """
    Build a PluginManifest from decoded JSON.

    Only the shape is checked here; emptiness checks happen in validate().

    Args:
        data: Decoded JSON value

    Returns:
        PluginManifest object

    Raises:
        InvalidManifest: If data does not have the manifest shape
    """
    if not isinstance(data, dict):
        raise InvalidManifest("manifest must be a JSON object")

    scripts = data.get("scripts")
    if "scripts" not in data:
        raise InvalidManifest("Missing required field in manifest: scripts")
    if not isinstance(scripts, list):
        raise InvalidManifest("'scripts' field must be a list")

    min_tool_version = data.get("min_tool_version")
    if min_tool_version is not None and not isinstance(min_tool_version, str):
        raise InvalidManifest("'min_tool_version' field must be a string")

    return PluginManifest(
        id=_require_str(data, "id"),
        name=_require_str(data, "name"),
        version=_require_str(data, "version"),
        description=_require_str(data, "description"),
        author=_require_str(data, "author"),
        scripts=[_parse_script_entry(s, i) for i, s in enumerate(scripts)],
        dependencies=_optional_str_list(data, "dependencies"),
        tags=_optional_str_list(data, "tags"),
        min_tool_version=min_tool_version,
    )


def parse_manifest(manifest_path: Path) -> PluginManifest:
    """
    Parse an info.json file.

    Args:
        manifest_path: Path to info.json

    Returns:
        PluginManifest object

    Raises:
        MissingManifest: If the file does not exist
        InvalidManifest: If the file is not valid JSON or has the wrong shape
    """
    if not manifest_path.is_file():
        raise MissingManifest(manifest_path)

    try:
        content = read_text(manifest_path)
    except FileOperationFailed as e:
        raise InvalidManifest(f"Failed to read {manifest_path.name}: {e}") from e
    except UnicodeDecodeError as e:
        raise InvalidManifest(f"{manifest_path.name} is not valid UTF-8: {e}") from e

    try:
        data = json.loads(content)
    except json.JSONDecodeError as e:
        raise InvalidManifest(f"Failed to parse {manifest_path.name}: {e}") from e

    return manifest_from_dict(data)


def validate(plugin_dir: Path) -> PluginManifest:
    """
    Validate an unpacked plugin tree and return its manifest.

    Checks run in a fixed order: id, name and version non-empty, scripts/
    present, then every declared script file present.

    Args:
        plugin_dir: Root of the unpacked plugin

    Returns:
        The validated PluginManifest

    Raises:
        MissingManifest: If info.json is absent
        InvalidManifest: If info.json fails to parse or a required field is empty
        MissingScriptsDir: If scripts/ is absent
        MissingScriptFile: Naming the first declared script that is absent
    """
    manifest = parse_manifest(plugin_dir / MANIFEST_FILENAME)

    if not manifest.id:
        raise InvalidManifest("Plugin ID cannot be empty")
    if manifest.id in (".", "..") or "/" in manifest.id or "\\" in manifest.id:
        raise InvalidManifest(
            f"Invalid plugin ID: {manifest.id!r}. Must be usable as a directory name"
        )
    if not manifest.name:
        raise InvalidManifest("Plugin name cannot be empty")
    if not manifest.version:
        raise InvalidManifest("Plugin version cannot be empty")

    scripts_dir = plugin_dir / SCRIPTS_DIRNAME
    if not scripts_dir.is_dir():
        raise MissingScriptsDir(scripts_dir)

    root = scripts_dir.resolve()
    for script in manifest.scripts:
        script_path = scripts_dir / script.file
        if not script_path.resolve().is_relative_to(root):
            raise InvalidManifest(
                f"Script file '{script.file}' points outside {SCRIPTS_DIRNAME}/"
            )
        if not script_path.is_file():
            raise MissingScriptFile(script.file)

    return manifest


def _version_parts(version: str) -> list[int]:
    parts = []
    for piece in version.strip().lstrip("v").split("."):
        digits = ""
        for ch in piece:
            if not ch.isdigit():
                break
            digits += ch
        parts.append(int(digits) if digits else 0)
    return parts


def compare_versions(v1: str, v2: str) -> int:
    """
    Compare two dotted version strings.

    Non-numeric suffixes ("1.2.0-beta") are ignored.

    Returns:
        -1 if v1 < v2, 0 if v1 == v2, 1 if v1 > v2
    """
    parts1 = _version_parts(v1)
    parts2 = _version_parts(v2)

    # Pad shorter version with zeros
    max_len = max(len(parts1), len(parts2))
    parts1.extend([0] * (max_len - len(parts1)))
    parts2.extend([0] * (max_len - len(parts2)))

    for p1, p2 in zip(parts1, parts2, strict=True):
        if p1 < p2:
            return -1
        elif p1 > p2:
            return 1
    return 0
