"""
Script materialization.

Writes scripts from a store to a cache directory and marks them executable
so they can be handed to a shell.
"""

import logging
import tempfile
from pathlib import Path

from shellpack.errors import ScriptNotFound
from shellpack.fileio import set_executable, write_bytes
from shellpack.recovery import DEFAULT_POLICY, RetryPolicy, with_recovery
from shellpack.scripts.resolver import DependencyResolver
from shellpack.scripts.stores import ScriptStore

logger = logging.getLogger(__name__)


def default_cache_dir() -> Path:
    return Path(tempfile.gettempdir()) / "shellpack_scripts"


class ScriptMaterializer:
    """
    Materializes scripts and their imports into a cache directory.

    Example:
        materializer = ScriptMaterializer(EmbeddedScripts(), cache_dir)
        for path in materializer.materialize_with_deps("installthing.sh"):
            run(path)
    """

    def __init__(
        self,
        store: ScriptStore,
        cache_dir: Path | None = None,
        retry_policy: RetryPolicy = DEFAULT_POLICY,
    ):
        self.store = store
        self.cache_dir = Path(cache_dir) if cache_dir else default_cache_dir()
        self.retry_policy = retry_policy
        self.resolver = DependencyResolver(store)

    def materialize(self, name: str) -> Path:
        """
        Write one script to the cache directory and make it executable.

        Existing files are overwritten so the cache never serves stale content.

        Raises:
            ScriptNotFound: If the store has no such script
            FileOperationFailed: If writing fails after recovery
        """
        data = self.store.read(name)
        if data is None:
            raise ScriptNotFound(name)

        dest = self.cache_dir / name

        def write() -> None:
            write_bytes(dest, data)
            set_executable(dest)

        with_recovery(write, self.retry_policy)
        logger.debug("Materialized %s at %s", name, dest)
        return dest

    def materialize_with_deps(self, name: str) -> list[Path]:
        """
        Resolve name's imports and materialize the executable ones in order.

        Returns:
            Paths to run, dependencies first
        """
        return [self.materialize(script) for script in self.resolver.resolve(name)]
