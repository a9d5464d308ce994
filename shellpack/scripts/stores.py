"""
Script stores.

A script store maps a script name to its bytes. The resolver and the
materializer work against any object with a ``read(name)`` method returning
bytes, or None when the store has no such script.
"""

import json
from importlib import resources
from importlib.resources.abc import Traversable
from pathlib import Path
from typing import Protocol

from shellpack.fileio import read_bytes

CATALOG_FILENAME = "info.json"


class ScriptStore(Protocol):
    def read(self, name: str) -> bytes | None: ...


def _is_plain_name(name: str) -> bool:
    parts = name.replace("\\", "/").split("/")
    return bool(name) and not name.startswith("/") and ".." not in parts


class EmbeddedScripts:
    """Built-in scripts shipped as package data in shellpack/scripts/assets."""

    def __init__(self, package: str = "shellpack.scripts", folder: str = "assets"):
        self._root: Traversable = resources.files(package).joinpath(folder)

    def read(self, name: str) -> bytes | None:
        if not _is_plain_name(name):
            return None
        entry = self._root.joinpath(*name.split("/"))
        if not entry.is_file():
            return None
        return entry.read_bytes()

    def catalog(self) -> dict[str, str]:
        """Map each built-in script listed in info.json to its description."""
        data = self.read(CATALOG_FILENAME)
        if data is None:
            return {}
        entries = json.loads(data)
        return {
            name: info.get("English", "") if isinstance(info, dict) else ""
            for name, info in sorted(entries.items())
        }


class DirectoryScripts:
    """Scripts stored on disk, e.g. an installed plugin's scripts/ directory."""

    def __init__(self, root: Path):
        self.root = Path(root)

    def read(self, name: str) -> bytes | None:
        if not _is_plain_name(name):
            return None
        path = self.root / name
        if not path.is_file():
            return None
        return read_bytes(path)


class ChainedScripts:
    """Look a script up in several stores, first hit wins."""

    def __init__(self, *stores: ScriptStore):
        self.stores = stores

    def read(self, name: str) -> bytes | None:
        for store in self.stores:
            data = store.read(name)
            if data is not None:
                return data
        return None
