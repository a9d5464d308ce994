"""pm subcommands. Each exposes ``<name>_command(args, settings) -> int``."""

import sys

from shellpack.config import Settings
from shellpack.plugin.registry import PluginRegistry


def open_registry(settings: Settings) -> PluginRegistry:
    return PluginRegistry(settings.plugins_dir, retry_policy=settings.retry_policy())


def require_targets(args, usage: str) -> bool:
    if args.targets:
        return True
    print("Error: No targets specified", file=sys.stderr)
    print(f"Usage: {usage}", file=sys.stderr)
    return False
