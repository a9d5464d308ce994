"""
Plugin Registry.

This module provides plugin lifecycle management on top of a persisted
registry file.

Key features:
- Install from a .tar.gz archive (extract, validate, copy, record)
- Uninstall and enable/disable
- Dependency presence checks at install time
- Atomic whole-file persistence of the registry
- Orphaned install directory reporting
"""

import json
import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, NamedTuple

from shellpack.errors import (
    FileOperationFailed,
    IncompatibleToolVersion,
    InvalidManifest,
    MissingDependency,
    PluginAlreadyInstalled,
    PluginNotInstalled,
    RegistryCorrupt,
)
from shellpack.fileio import (
    atomic_write_text,
    copy_tree,
    read_text,
    remove_dir,
    set_executable,
)
from shellpack.plugin.archive import cleanup, extract
from shellpack.plugin.manifest import (
    SCRIPTS_DIRNAME,
    PluginManifest,
    compare_versions,
    manifest_from_dict,
    validate,
)
from shellpack.recovery import DEFAULT_POLICY, RetryPolicy, with_recovery
from shellpack.scripts.stores import DirectoryScripts

logger = logging.getLogger(__name__)

REGISTRY_FILENAME = "registry.json"
TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


@dataclass
class InstalledPlugin:
    """
    Registry record for an installed plugin.

    Attributes:
        manifest: The plugin's validated manifest
        install_path: Directory the plugin was copied into
        installed_at: Local time of installation
        enabled: Whether the plugin's scripts are offered for execution
    """

    manifest: PluginManifest
    install_path: Path
    installed_at: datetime
    enabled: bool = True

    @property
    def id(self) -> str:
        return self.manifest.id

    @property
    def scripts_dir(self) -> Path:
        return self.install_path / SCRIPTS_DIRNAME

    def to_dict(self) -> dict[str, Any]:
        return {
            "manifest": self.manifest.to_dict(),
            "install_path": str(self.install_path),
            "installed_at": self.installed_at.strftime(TIMESTAMP_FORMAT),
            "enabled": self.enabled,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "InstalledPlugin":
        return cls(
            manifest=manifest_from_dict(data["manifest"]),
            install_path=Path(data["install_path"]),
            installed_at=datetime.fromisoformat(data["installed_at"]),
            enabled=bool(data.get("enabled", False)),
        )


class EnabledScript(NamedTuple):
    """A runnable script contributed by an enabled plugin."""

    label: str
    description: str
    path: Path


class PluginRegistry:
    """
    Durable mapping from plugin id to InstalledPlugin.

    The registry file is loaded once at construction. Every mutating
    operation runs under one lock: mutate in memory, write the whole
    registry back, and roll the in-memory change back if the write fails.
    """

    def __init__(
        self,
        plugins_dir: Path,
        registry_file: Path | None = None,
        retry_policy: RetryPolicy = DEFAULT_POLICY,
        tool_version: str | None = None,
        temp_root: Path | None = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        """
        Initialize PluginRegistry.

        Args:
            plugins_dir: Directory plugins are installed into
            registry_file: Registry JSON path (default: plugins_dir/registry.json)
            retry_policy: Policy used when persisting the registry
            tool_version: Running shellpack version for min_tool_version checks
            temp_root: Parent directory for archive extraction
            clock: Source of installation timestamps

        Raises:
            RegistryCorrupt: If the registry file exists but cannot be parsed
        """
        if tool_version is None:
            from shellpack import __version__ as tool_version

        self.plugins_dir = Path(plugins_dir)
        self.registry_file = (
            Path(registry_file) if registry_file else self.plugins_dir / REGISTRY_FILENAME
        )
        self.retry_policy = retry_policy
        self.tool_version = tool_version
        self.temp_root = temp_root
        self._clock = clock
        self._plugins: dict[str, InstalledPlugin] = {}
        self._lock = threading.RLock()

        self._load()

    # --- persistence ---------------------------------------------------------

    def _load(self) -> None:
        if not self.registry_file.exists():
            logger.debug("No registry at %s, starting empty", self.registry_file)
            return

        try:
            data = json.loads(read_text(self.registry_file))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise RegistryCorrupt(self.registry_file, str(e)) from e

        if not isinstance(data, dict):
            raise RegistryCorrupt(self.registry_file, "expected a JSON object")

        plugins = {}
        for plugin_id, entry in data.items():
            try:
                record = InstalledPlugin.from_dict(entry)
            except (InvalidManifest, KeyError, TypeError, ValueError) as e:
                raise RegistryCorrupt(
                    self.registry_file, f"bad entry '{plugin_id}': {e}"
                ) from e
            if record.id != plugin_id:
                raise RegistryCorrupt(
                    self.registry_file,
                    f"entry '{plugin_id}' holds manifest for '{record.id}'",
                )
            plugins[plugin_id] = record

        self._plugins = plugins

    def _save(self) -> None:
        payload = {pid: record.to_dict() for pid, record in self._plugins.items()}
        text = json.dumps(payload, indent=2, ensure_ascii=False)
        with_recovery(
            lambda: atomic_write_text(self.registry_file, text), self.retry_policy
        )

    # --- lifecycle -----------------------------------------------------------

    def install(self, archive_path: Path) -> str:
        """
        Install a plugin from a .tar.gz archive.

        Args:
            archive_path: Path to the plugin archive

        Returns:
            The installed plugin's id

        Raises:
            ArchiveNotFound, ArchiveCorrupt: If the archive cannot be unpacked
            ManifestError: If the package fails validation
            PluginAlreadyInstalled: If the id is already registered
            MissingDependency: If a declared dependency is not installed
            IncompatibleToolVersion: If the plugin needs a newer shellpack
            FileOperationFailed: If copying or persisting fails
        """
        temp_dir = extract(Path(archive_path), self.temp_root)
        try:
            manifest = validate(temp_dir)

            with self._lock:
                self._check_installable(manifest)

                install_path = self.plugins_dir / manifest.id
                if install_path.exists():
                    # Left behind by an install whose registry write failed
                    logger.warning("Overwriting orphaned plugin directory %s", install_path)
                    remove_dir(install_path)

                copy_tree(temp_dir, install_path)
                self._set_script_permissions(install_path, manifest)

                self._plugins[manifest.id] = InstalledPlugin(
                    manifest=manifest,
                    install_path=install_path,
                    installed_at=self._clock().replace(microsecond=0),
                    enabled=True,
                )
                try:
                    self._save()
                except FileOperationFailed:
                    del self._plugins[manifest.id]
                    raise
        finally:
            cleanup(temp_dir)

        logger.info("Installed plugin %s %s", manifest.id, manifest.version)
        return manifest.id

    def _check_installable(self, manifest: PluginManifest) -> None:
        if manifest.id in self._plugins:
            raise PluginAlreadyInstalled(manifest.id)

        for dep in manifest.dependencies:
            if dep not in self._plugins:
                raise MissingDependency(dep)

        if manifest.min_tool_version and (
            compare_versions(self.tool_version, manifest.min_tool_version) < 0
        ):
            raise IncompatibleToolVersion(
                manifest.id, manifest.min_tool_version, self.tool_version
            )

    def _set_script_permissions(self, install_path: Path, manifest: PluginManifest) -> None:
        scripts_dir = install_path / SCRIPTS_DIRNAME
        for script in manifest.scripts:
            if not script.executable:
                continue
            script_path = scripts_dir / script.file
            if script_path.exists():
                set_executable(script_path)

    def uninstall(self, plugin_id: str) -> None:
        """
        Uninstall a plugin.

        Args:
            plugin_id: Id of the plugin to remove

        Raises:
            PluginNotInstalled: If plugin_id is unknown
            FileOperationFailed: If the directory or the registry write fails
        """
        with self._lock:
            record = self._plugins.get(plugin_id)
            if record is None:
                raise PluginNotInstalled(plugin_id)

            if record.install_path.exists():
                remove_dir(record.install_path)

            del self._plugins[plugin_id]
            try:
                self._save()
            except FileOperationFailed:
                self._plugins[plugin_id] = record
                raise

        logger.info("Uninstalled plugin %s", plugin_id)

    def toggle(self, plugin_id: str, enabled: bool) -> None:
        """
        Enable or disable a plugin.

        Raises:
            PluginNotInstalled: If plugin_id is unknown
        """
        with self._lock:
            record = self._plugins.get(plugin_id)
            if record is None:
                raise PluginNotInstalled(plugin_id)

            previous = record.enabled
            record.enabled = enabled
            try:
                self._save()
            except FileOperationFailed:
                record.enabled = previous
                raise

        logger.info("%s plugin %s", "Enabled" if enabled else "Disabled", plugin_id)

    # --- queries -------------------------------------------------------------

    def get(self, plugin_id: str) -> InstalledPlugin | None:
        with self._lock:
            return self._plugins.get(plugin_id)

    def list_plugins(self) -> list[InstalledPlugin]:
        """List all installed plugins."""
        with self._lock:
            return list(self._plugins.values())

    def get_enabled_scripts(self) -> list[EnabledScript]:
        """
        Collect the scripts of every enabled plugin.

        Scripts whose file has been deleted since installation are skipped.

        Returns:
            EnabledScript tuples, ordered by plugin id then manifest order
        """
        scripts = []
        with self._lock:
            for plugin_id in sorted(self._plugins):
                record = self._plugins[plugin_id]
                if not record.enabled:
                    continue
                for script in record.manifest.scripts:
                    script_path = record.scripts_dir / script.file
                    if script_path.exists():
                        scripts.append(
                            EnabledScript(
                                label=f"{script.name} - {record.manifest.name}",
                                description=script.description,
                                path=script_path,
                            )
                        )
        return scripts

    def script_store(self, plugin_id: str) -> DirectoryScripts:
        """
        Get a script store over a plugin's scripts/ directory.

        Raises:
            PluginNotInstalled: If plugin_id is unknown
        """
        record = self.get(plugin_id)
        if record is None:
            raise PluginNotInstalled(plugin_id)
        return DirectoryScripts(record.scripts_dir)

    def orphaned_dirs(self) -> list[Path]:
        """
        Find plugin directories that have no registry record.

        These are left behind when an install copies files but fails to
        persist the registry. A later install of the same id overwrites them.
        """
        if not self.plugins_dir.is_dir():
            return []
        with self._lock:
            known = {record.install_path.resolve() for record in self._plugins.values()}
        return sorted(
            path
            for path in self.plugins_dir.iterdir()
            if path.is_dir()
            and not path.name.startswith(".")
            and path.resolve() not in known
        )
