"""
pm query command (-Q).

Lists installed plugins, their scripts, leftover directories and the
built-in scripts.
"""

import sys
from typing import Any

from pm.commands import open_registry
from shellpack.config import Settings
from shellpack.errors import PluginNotInstalled
from shellpack.plugin.registry import InstalledPlugin, PluginRegistry
from shellpack.scripts.stores import EmbeddedScripts


def query_command(args: Any, settings: Settings) -> int:
    """
    Execute query command.

    Returns:
        Exit code (0 for success, non-zero for error)
    """
    if args.builtin:
        for name, description in EmbeddedScripts().catalog().items():
            print(f"{name}\t{description}")
        return 0

    registry = open_registry(settings)

    if args.orphans:
        for path in registry.orphaned_dirs():
            print(path)
        return 0

    if args.scripts:
        for script in registry.get_enabled_scripts():
            print(f"{script.label}\t{script.description}\t{script.path}")
        return 0

    if args.info or args.list:
        if not args.targets:
            print("Error: No targets specified", file=sys.stderr)
            return 1
        for plugin_id in args.targets:
            record = _require(registry, plugin_id)
            if args.info:
                print_info(record)
            else:
                for script in record.manifest.scripts:
                    print(f"{plugin_id} {record.scripts_dir / script.file}")
        return 0

    for record in sorted(registry.list_plugins(), key=lambda r: r.id):
        state = "" if record.enabled else " [disabled]"
        print(f"{record.id} {record.manifest.version}{state}")
    return 0


def _require(registry: PluginRegistry, plugin_id: str) -> InstalledPlugin:
    record = registry.get(plugin_id)
    if record is None:
        raise PluginNotInstalled(plugin_id)
    return record


def print_info(record: InstalledPlugin) -> None:
    manifest = record.manifest
    rows = [
        ("Id", manifest.id),
        ("Name", manifest.name),
        ("Version", manifest.version),
        ("Description", manifest.description),
        ("Author", manifest.author),
        ("Depends On", ", ".join(manifest.dependencies) or "None"),
        ("Tags", ", ".join(manifest.tags) or "None"),
        ("Scripts", ", ".join(s.name for s in manifest.scripts) or "None"),
        ("Install Path", str(record.install_path)),
        ("Installed At", record.installed_at.isoformat(sep=" ")),
        ("Enabled", "yes" if record.enabled else "no"),
    ]
    for label, value in rows:
        print(f"{label:<13}: {value}")
    print()
