"""
pm install command (-S).

Install plugins from local archives or marketplace URLs.
"""

import sys
from pathlib import Path
from typing import Any

from pm.commands import open_registry, require_targets
from shellpack.config import Settings
from shellpack.errors import ShellpackError
from shellpack.marketplace import MarketplaceClient
from shellpack.plugin.archive import cleanup
from shellpack.plugin.registry import PluginRegistry


def is_url(target: str) -> bool:
    return target.startswith(("http://", "https://"))


def install_command(args: Any, settings: Settings) -> int:
    """
    Execute install command.

    Args:
        args: Parsed command-line arguments
        settings: Loaded settings

    Returns:
        Exit code (0 for success, non-zero for error)
    """
    if not require_targets(args, "pm -S <archive|url>..."):
        return 1

    registry = open_registry(settings)
    success_count = 0
    fail_count = 0

    with MarketplaceClient(settings.marketplace_url, settings.marketplace_timeout) as client:
        for target in args.targets:
            try:
                plugin_id = install_target(target, registry, client, settings)
                print(f"Installed {plugin_id}")
                success_count += 1
            except ShellpackError as e:
                print(f"Failed to install {target}: {e}", file=sys.stderr)
                fail_count += 1

    # Summary
    if args.verbose:
        print(f"\nInstalled: {success_count}, Failed: {fail_count}")

    return 0 if fail_count == 0 else 1


def install_target(
    target: str,
    registry: PluginRegistry,
    client: MarketplaceClient,
    settings: Settings,
) -> str:
    """
    Install a single archive path or URL.

    Downloaded archives are deleted once the install finishes.
    """
    if not is_url(target):
        return registry.install(Path(target))

    archive = client.fetch_archive(target, policy=settings.retry_policy())
    try:
        return registry.install(archive)
    finally:
        cleanup(archive.parent)
