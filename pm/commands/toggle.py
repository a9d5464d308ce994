"""pm enable/disable commands (-E, -D)."""

import sys
from typing import Any

from pm.commands import open_registry, require_targets
from shellpack.config import Settings
from shellpack.errors import ShellpackError


def toggle_command(args: Any, settings: Settings) -> int:
    enabled = bool(args.enable)
    flag = "-E" if enabled else "-D"
    if not require_targets(args, f"pm {flag} <plugin>..."):
        return 1

    registry = open_registry(settings)
    failed = False

    for plugin_id in args.targets:
        try:
            registry.toggle(plugin_id, enabled)
            print(f"{'Enabled' if enabled else 'Disabled'} {plugin_id}")
        except ShellpackError as e:
            print(f"Error: {e}", file=sys.stderr)
            failed = True

    return 1 if failed else 0
