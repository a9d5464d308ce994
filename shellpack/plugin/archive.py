"""
Plugin archive extraction.

Plugins are distributed as gzip-compressed tar archives. extract() unpacks
one into a fresh temporary directory; the caller owns that directory and
must remove it once done (see cleanup()).
"""

import logging
import shutil
import tarfile
import tempfile
import zlib
from pathlib import Path

from shellpack.errors import ArchiveCorrupt, ArchiveNotFound

logger = logging.getLogger(__name__)

TEMP_PREFIX = "shellpack_plugin_"


def extract(archive_path: Path, temp_root: Path | None = None) -> Path:
    """
    Unpack a .tar.gz archive into a new temporary directory.

    Args:
        archive_path: Path to the archive
        temp_root: Parent for the temporary directory (system temp by default)

    Returns:
        Path of the directory holding the unpacked tree

    Raises:
        ArchiveNotFound: If archive_path does not exist
        ArchiveCorrupt: If the archive cannot be decompressed or unpacked, or
            contains members that would land outside the target directory
    """
    archive_path = Path(archive_path)
    if not archive_path.is_file():
        raise ArchiveNotFound(archive_path)

    temp_dir = Path(tempfile.mkdtemp(prefix=TEMP_PREFIX, dir=temp_root))
    logger.debug("Extracting %s into %s", archive_path, temp_dir)

    try:
        with tarfile.open(archive_path, mode="r:gz") as archive:
            archive.extractall(temp_dir, filter="data")
    except (tarfile.TarError, OSError, EOFError, zlib.error) as e:
        cleanup(temp_dir)
        raise ArchiveCorrupt(archive_path, str(e)) from e

    return temp_dir


def cleanup(temp_dir: Path) -> None:
    """Remove an extraction directory, logging (not raising) on failure."""
    try:
        shutil.rmtree(temp_dir)
    except FileNotFoundError:
        pass
    except OSError as e:
        logger.warning("Failed to remove temporary directory %s: %s", temp_dir, e)
