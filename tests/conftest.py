"""Shared fixtures: build plugin archives on the fly."""

import io
import json
import tarfile
from pathlib import Path

import pytest


def manifest_data(plugin_id: str = "hello", **overrides) -> dict:
    data = {
        "id": plugin_id,
        "name": f"{plugin_id.title()} Plugin",
        "version": "1.0.0",
        "description": f"The {plugin_id} plugin",
        "author": "Test Author",
        "scripts": [
            {
                "name": "Hello",
                "file": "hello.sh",
                "description": "Say hello",
                "executable": True,
            }
        ],
        "dependencies": [],
        "tags": ["demo"],
    }
    data.update(overrides)
    return data


def write_archive(
    archive_path: Path,
    manifest: dict | str | bytes | None,
    scripts: dict[str, str] | None = None,
    with_scripts_dir: bool = True,
) -> Path:
    """
    Write a .tar.gz plugin archive.

    Args:
        archive_path: Where to write
        manifest: info.json content (dict is JSON-encoded, str/bytes written as-is,
            None omits the file)
        scripts: scripts/ members, relative name -> text
        with_scripts_dir: Add an (empty) scripts/ directory entry
    """
    if scripts is None:
        scripts = {"hello.sh": "#!/usr/bin/env bash\necho hello\n"}

    def add_file(tar: tarfile.TarFile, name: str, text: str | bytes) -> None:
        payload = text if isinstance(text, bytes) else text.encode("utf-8")
        info = tarfile.TarInfo(name)
        info.size = len(payload)
        info.mode = 0o644
        tar.addfile(info, io.BytesIO(payload))

    archive_path.parent.mkdir(parents=True, exist_ok=True)
    with tarfile.open(archive_path, "w:gz") as tar:
        if manifest is not None:
            text = manifest if isinstance(manifest, (str, bytes)) else json.dumps(manifest)
            add_file(tar, "info.json", text)
        if with_scripts_dir:
            info = tarfile.TarInfo("scripts")
            info.type = tarfile.DIRTYPE
            info.mode = 0o755
            tar.addfile(info)
            for name, text in scripts.items():
                add_file(tar, f"scripts/{name}", text)

    return archive_path


@pytest.fixture
def build_archive(tmp_path):
    """Factory: build_archive(plugin_id, **manifest_overrides) -> archive path."""

    def _build(
        plugin_id: str = "hello",
        scripts: dict[str, str] | None = None,
        manifest: dict | str | bytes | None = None,
        with_scripts_dir: bool = True,
        omit_manifest: bool = False,
        **overrides,
    ) -> Path:
        if omit_manifest:
            content = None
        elif manifest is not None:
            content = manifest
        else:
            content = manifest_data(plugin_id, **overrides)
        return write_archive(
            tmp_path / "archives" / f"{plugin_id}.tar.gz",
            content,
            scripts,
            with_scripts_dir,
        )

    return _build
