"""pm remove command (-R)."""

import sys
from typing import Any

from pm.commands import open_registry, require_targets
from shellpack.config import Settings
from shellpack.errors import ShellpackError


def remove_command(args: Any, settings: Settings) -> int:
    if not require_targets(args, "pm -R <plugin>..."):
        return 1

    registry = open_registry(settings)
    failed = False

    for plugin_id in args.targets:
        try:
            registry.uninstall(plugin_id)
            print(f"Removed {plugin_id}")
        except ShellpackError as e:
            print(f"Failed to remove {plugin_id}: {e}", file=sys.stderr)
            failed = True

    return 1 if failed else 0
