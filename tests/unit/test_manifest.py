"""
Tests for manifest parsing and plugin tree validation.

This test suite covers:
1. Valid and minimal manifests
2. Shape errors (missing fields, wrong types, bad JSON)
3. Post-parse checks in order: id, name, version, scripts/, script files
4. Version comparison
"""

import json
import tempfile
from pathlib import Path

import pytest

from shellpack.errors import (
    InvalidManifest,
    MissingManifest,
    MissingScriptFile,
    MissingScriptsDir,
)
from shellpack.plugin.manifest import (
    PluginManifest,
    ScriptEntry,
    compare_versions,
    manifest_from_dict,
    validate,
)

from tests.conftest import manifest_data


def make_tree(root: Path, manifest, scripts=("hello.sh",), scripts_dir=True) -> Path:
    if manifest is not None:
        text = manifest if isinstance(manifest, str) else json.dumps(manifest)
        (root / "info.json").write_text(text)
    if scripts_dir:
        (root / "scripts").mkdir()
        for name in scripts:
            path = root / "scripts" / name
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text("#!/usr/bin/env bash\n")
    return root


class TestValidate:
    """Test validate() on unpacked plugin trees."""

    def test_valid_manifest(self):
        """Should return every manifest field."""
        with tempfile.TemporaryDirectory() as tmpdir:
            data = manifest_data(
                "hello", dependencies=["base"], min_tool_version="0.2.0"
            )
            manifest = validate(make_tree(Path(tmpdir), data))

            assert manifest.id == "hello"
            assert manifest.name == "Hello Plugin"
            assert manifest.version == "1.0.0"
            assert manifest.author == "Test Author"
            assert manifest.dependencies == ["base"]
            assert manifest.tags == ["demo"]
            assert manifest.min_tool_version == "0.2.0"
            assert manifest.scripts == [
                ScriptEntry("Hello", "hello.sh", "Say hello", executable=True)
            ]

    def test_optional_fields_default(self):
        """Should default dependencies, tags, executable and min_tool_version."""
        with tempfile.TemporaryDirectory() as tmpdir:
            data = manifest_data(
                scripts=[{"name": "Hello", "file": "hello.sh", "description": ""}]
            )
            del data["dependencies"]
            del data["tags"]
            manifest = validate(make_tree(Path(tmpdir), data))

            assert manifest.dependencies == []
            assert manifest.tags == []
            assert manifest.min_tool_version is None
            assert manifest.scripts[0].executable is False

    def test_nested_script_file(self):
        """Should accept script files in subdirectories of scripts/."""
        with tempfile.TemporaryDirectory() as tmpdir:
            data = manifest_data(
                scripts=[{"name": "Deep", "file": "lib/deep.sh", "description": ""}]
            )
            manifest = validate(make_tree(Path(tmpdir), data, scripts=("lib/deep.sh",)))
            assert manifest.scripts[0].file == "lib/deep.sh"

    def test_missing_manifest(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            with pytest.raises(MissingManifest):
                validate(make_tree(Path(tmpdir), None))

    def test_invalid_json(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            with pytest.raises(InvalidManifest, match="Failed to parse info.json"):
                validate(make_tree(Path(tmpdir), "{ invalid json }"))

    def test_manifest_not_utf8(self):
        """Undecodable bytes are a parse failure, not a crash."""
        with tempfile.TemporaryDirectory() as tmpdir:
            tree = make_tree(Path(tmpdir), None)
            (tree / "info.json").write_bytes(b'{"id": "\xff"}')
            with pytest.raises(InvalidManifest, match="not valid UTF-8"):
                validate(tree)

    def test_missing_required_field(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            data = manifest_data()
            del data["author"]
            with pytest.raises(InvalidManifest, match="Missing required field"):
                validate(make_tree(Path(tmpdir), data))

    def test_wrong_field_type(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            with pytest.raises(InvalidManifest, match="'dependencies' field"):
                validate(make_tree(Path(tmpdir), manifest_data(dependencies="base")))

    def test_empty_id(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            with pytest.raises(InvalidManifest, match="Plugin ID cannot be empty"):
                validate(make_tree(Path(tmpdir), manifest_data(id="")))

    def test_id_with_path_separator(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            with pytest.raises(InvalidManifest, match="Invalid plugin ID"):
                validate(make_tree(Path(tmpdir), manifest_data(id="../evil")))

    def test_empty_name(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            with pytest.raises(InvalidManifest, match="name cannot be empty"):
                validate(make_tree(Path(tmpdir), manifest_data(name="")))

    def test_empty_version(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            with pytest.raises(InvalidManifest, match="version cannot be empty"):
                validate(make_tree(Path(tmpdir), manifest_data(version="")))

    def test_empty_id_checked_before_scripts_dir(self):
        """Field checks run before the scripts/ check."""
        with tempfile.TemporaryDirectory() as tmpdir:
            tree = make_tree(Path(tmpdir), manifest_data(id=""), scripts_dir=False)
            with pytest.raises(InvalidManifest):
                validate(tree)

    def test_missing_scripts_dir(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            tree = make_tree(Path(tmpdir), manifest_data(), scripts_dir=False)
            with pytest.raises(MissingScriptsDir):
                validate(tree)

    def test_missing_script_file_names_first_offender(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            data = manifest_data(
                scripts=[
                    {"name": "Hello", "file": "hello.sh", "description": ""},
                    {"name": "Gone", "file": "gone.sh", "description": ""},
                    {"name": "Also", "file": "also-gone.sh", "description": ""},
                ]
            )
            with pytest.raises(MissingScriptFile) as exc_info:
                validate(make_tree(Path(tmpdir), data))

            assert exc_info.value.file == "gone.sh"

    def test_script_file_outside_scripts_dir(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            data = manifest_data(
                scripts=[{"name": "Evil", "file": "../info.json", "description": ""}]
            )
            with pytest.raises(InvalidManifest, match="outside scripts/"):
                validate(make_tree(Path(tmpdir), data))


class TestManifestFromDict:
    """Test shape parsing and serialization."""

    def test_to_dict_matches_input(self):
        data = manifest_data(min_tool_version="1.0")
        assert manifest_from_dict(data).to_dict() == data | {"min_tool_version": "1.0"}

    def test_rejects_non_object(self):
        with pytest.raises(InvalidManifest, match="JSON object"):
            manifest_from_dict(["not", "a", "manifest"])

    def test_rejects_non_bool_executable(self):
        data = manifest_data(
            scripts=[{"name": "x", "file": "x.sh", "description": "", "executable": "yes"}]
        )
        with pytest.raises(InvalidManifest, match="must be a boolean"):
            manifest_from_dict(data)

    def test_dataclass_defaults(self):
        manifest = PluginManifest("a", "A", "1", "", "")
        assert manifest.scripts == []
        assert manifest.dependencies == []


class TestCompareVersions:
    def test_ordering(self):
        assert compare_versions("1.0.0", "1.0.0") == 0
        assert compare_versions("1.0", "1.0.0") == 0
        assert compare_versions("1.2.0", "1.10.0") == -1
        assert compare_versions("2.0.0", "1.9.9") == 1
        assert compare_versions("v0.3.0", "0.2.9") == 1
        assert compare_versions("1.2.0-beta", "1.2.0") == 0
