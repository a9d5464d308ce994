"""
pm run command (-X).

Resolves a script's imports, materializes everything in order and runs the
executable scripts one after another, stopping at the first failure.
"""

import os
import subprocess
import sys
from pathlib import Path
from typing import Any

from pm.commands import open_registry, require_targets
from shellpack.config import Settings
from shellpack.scripts.materializer import ScriptMaterializer
from shellpack.scripts.stores import ChainedScripts, EmbeddedScripts


class ScriptFailed(Exception):
    """Raised when a materialized script exits non-zero or cannot start."""

    def __init__(self, path: Path, returncode: int | None, reason: str = ""):
        self.path = path
        self.returncode = returncode
        detail = reason or f"exit code {returncode}"
        super().__init__(f"{path.name} failed: {detail}")


def run_command(args: Any, settings: Settings) -> int:
    if not require_targets(args, "pm -X <script> [--plugin <id>]"):
        return 1

    embedded = EmbeddedScripts()
    if args.plugin:
        store = ChainedScripts(open_registry(settings).script_store(args.plugin), embedded)
    else:
        store = embedded

    materializer = ScriptMaterializer(
        store, settings.scripts_cache_dir, settings.retry_policy()
    )

    for script in args.targets:
        if args.print:
            for name in materializer.resolver.resolve(script):
                print(name)
            continue

        paths = materializer.materialize_with_deps(script)
        try:
            run_scripts(paths, settings)
        except ScriptFailed as e:
            print(f"Error: {e}", file=sys.stderr)
            print("Stopping; remaining scripts were not run", file=sys.stderr)
            return 1

    return 0


def run_scripts(paths: list[Path], settings: Settings) -> None:
    """
    Run materialized scripts in order.

    Raises:
        ScriptFailed: On the first script that fails
    """
    env = os.environ.copy()
    env["SHELLPACK_HOME"] = str(settings.home)
    env["SHELLPACK_SCRIPTS_DIR"] = str(settings.scripts_cache_dir)

    for i, path in enumerate(paths, start=1):
        if len(paths) > 1:
            print(f"Running script {i}/{len(paths)}: {path.name}")
        try:
            result = subprocess.run(["bash", str(path)], env=env, check=False)
        except OSError as e:
            raise ScriptFailed(path, None, str(e)) from e
        if result.returncode != 0:
            raise ScriptFailed(path, result.returncode)
