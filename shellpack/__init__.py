"""
Shellpack - plugin manager for bundles of shell scripts.

This is the main package that exports the public API:
- PluginRegistry: install, uninstall, enable/disable plugins
- ScriptMaterializer / DependencyResolver: run scripts after their imports
- with_recovery / RetryPolicy: retry transient failures
"""

__version__ = "0.3.0"

from shellpack.errors import ShellpackError
from shellpack.plugin.registry import InstalledPlugin, PluginRegistry
from shellpack.recovery import RetryPolicy, retry_with_backoff, with_recovery
from shellpack.scripts.materializer import ScriptMaterializer
from shellpack.scripts.resolver import DependencyResolver

__all__ = [
    "__version__",
    "DependencyResolver",
    "InstalledPlugin",
    "PluginRegistry",
    "RetryPolicy",
    "ScriptMaterializer",
    "ShellpackError",
    "retry_with_backoff",
    "with_recovery",
]
