"""
Shellpack error hierarchy.

Every failure the library can report is a subclass of ShellpackError and
carries the structured fields callers need to branch on, so the CLI never
has to parse messages.

Errors marked ``recoverable`` are candidates for shellpack.recovery; all
others are surfaced to the caller immediately.
"""

import errno as _errno
from pathlib import Path


class ShellpackError(Exception):
    """Base exception for all shellpack errors."""

    recoverable = False


# --- archives ---------------------------------------------------------------


class ArchiveError(ShellpackError):
    """Base exception for archive-related errors."""

    pass


class ArchiveNotFound(ArchiveError):
    """Raised when the archive path does not exist."""

    def __init__(self, path: Path | str):
        self.path = Path(path)
        super().__init__(f"Plugin archive does not exist: {self.path}")


class ArchiveCorrupt(ArchiveError):
    """Raised when an archive cannot be decompressed or unpacked."""

    def __init__(self, path: Path | str, reason: str = ""):
        self.path = Path(path)
        self.reason = reason
        message = f"Failed to extract plugin archive {self.path}"
        if reason:
            message += f": {reason}"
        super().__init__(message)


# --- manifests --------------------------------------------------------------


class ManifestError(ShellpackError):
    """Base exception for manifest-related errors."""

    pass


class MissingManifest(ManifestError):
    """Raised when a plugin tree has no manifest file."""

    def __init__(self, path: Path | str):
        self.path = Path(path)
        super().__init__(f"Plugin package missing manifest file: {self.path}")


class InvalidManifest(ManifestError):
    """Raised when the manifest does not parse into a PluginManifest."""

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Invalid plugin manifest: {reason}")


class MissingScriptsDir(ManifestError):
    """Raised when a plugin tree has no scripts/ directory."""

    def __init__(self, path: Path | str):
        self.path = Path(path)
        super().__init__(f"Plugin package missing scripts directory: {self.path}")


class MissingScriptFile(ManifestError):
    """Raised when a declared script file is absent from scripts/."""

    def __init__(self, file: str):
        self.file = file
        super().__init__(f"Script file '{file}' not found")


# --- script resolution ------------------------------------------------------


class ResolutionError(ShellpackError):
    """Base exception for script dependency resolution errors."""

    pass


class ScriptNotFound(ResolutionError):
    """Raised when an entry script or an imported script cannot be located."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Script not found: {name}")


class CircularDependency(ResolutionError):
    """Raised when the import graph contains a cycle."""

    def __init__(self, node: str):
        self.node = node
        super().__init__(f"Circular dependency detected involving: {node}")


class UnresolvedDependencies(ResolutionError):
    """Raised when the topological sort cannot order every node."""

    def __init__(self, missing: list[str]):
        self.missing = sorted(missing)
        super().__init__(
            f"Failed to resolve all dependencies: {', '.join(self.missing)}"
        )


# --- plugins ----------------------------------------------------------------


class PluginError(ShellpackError):
    """Base exception for plugin lifecycle errors."""

    pass


class PluginAlreadyInstalled(PluginError):
    def __init__(self, plugin_id: str):
        self.plugin_id = plugin_id
        super().__init__(f"Plugin '{plugin_id}' is already installed")


class PluginNotInstalled(PluginError):
    def __init__(self, plugin_id: str):
        self.plugin_id = plugin_id
        super().__init__(f"Plugin '{plugin_id}' is not installed")


class MissingDependency(PluginError):
    def __init__(self, plugin_id: str):
        self.plugin_id = plugin_id
        super().__init__(f"Missing dependency: {plugin_id}")


class IncompatibleToolVersion(PluginError):
    """Raised when a plugin requires a newer shellpack than the running one."""

    def __init__(self, plugin_id: str, required: str, current: str):
        self.plugin_id = plugin_id
        self.required = required
        self.current = current
        super().__init__(
            f"Plugin '{plugin_id}' requires shellpack >= {required}, "
            f"but {current} is running"
        )


class RegistryCorrupt(PluginError):
    """Raised when the registry file exists but cannot be read back."""

    def __init__(self, path: Path | str, reason: str = ""):
        self.path = Path(path)
        self.reason = reason
        message = f"Plugin registry is corrupt: {self.path}"
        if reason:
            message += f" ({reason})"
        super().__init__(message)


# --- transient failures -----------------------------------------------------


class FileOperationFailed(ShellpackError):
    """
    Raised when a filesystem operation fails.

    Attributes:
        path: The offending path
        errno: errno of the underlying OSError, if any
    """

    recoverable = True

    def __init__(self, path: Path | str, reason: str = "", errno: int | None = None):
        self.path = Path(path)
        self.reason = reason
        self.errno = errno
        message = f"File operation failed: {self.path}"
        if reason:
            message += f": {reason}"
        super().__init__(message)

    @classmethod
    def from_os_error(cls, path: Path | str, exc: OSError) -> "FileOperationFailed":
        return cls(path, exc.strerror or str(exc), exc.errno)

    @property
    def is_not_found(self) -> bool:
        return self.errno == _errno.ENOENT


class NetworkFailed(ShellpackError):
    """Raised when a network request fails or returns a non-success status."""

    recoverable = True

    def __init__(self, url: str, reason: str = "", status_code: int | None = None):
        self.url = url
        self.reason = reason
        self.status_code = status_code
        message = f"Network request failed: {url}"
        if reason:
            message += f": {reason}"
        super().__init__(message)


# --- configuration ----------------------------------------------------------


class ConfigError(ShellpackError):
    """Raised when the configuration file is unreadable or invalid."""

    pass
