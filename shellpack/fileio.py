"""
Filesystem helpers.

Thin wrappers around pathlib/shutil/os that report failures as
FileOperationFailed carrying the offending path.
"""

import logging
import os
import shutil
import stat
import sys
import tempfile
from pathlib import Path

from shellpack.errors import FileOperationFailed

logger = logging.getLogger(__name__)

# Deepest directory nesting copy_tree will follow
MAX_COPY_DEPTH = 64


def read_text(path: Path) -> str:
    """
    Read a file as UTF-8 text.

    Raises:
        FileOperationFailed: If the file cannot be read
        UnicodeDecodeError: If the content is not UTF-8 (callers map this
            to their own parse error)
    """
    try:
        return path.read_text(encoding="utf-8")
    except OSError as e:
        raise FileOperationFailed.from_os_error(path, e) from e


def read_bytes(path: Path) -> bytes:
    try:
        return path.read_bytes()
    except OSError as e:
        raise FileOperationFailed.from_os_error(path, e) from e


def write_bytes(path: Path, data: bytes) -> None:
    """Write raw bytes to a file, creating parent directories if needed."""
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
    except OSError as e:
        raise FileOperationFailed.from_os_error(path, e) from e


def atomic_write_text(path: Path, text: str) -> None:
    """
    Replace a file's contents atomically.

    The text is written to a sibling temporary file, flushed to disk and
    renamed over the target, so readers see either the old or the new
    content, never a truncated file.

    Args:
        path: Target file
        text: New contents

    Raises:
        FileOperationFailed: If any step fails (the target is left untouched)
    """
    tmp_name = None
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            dir=path.parent, prefix=f".{path.name}.", suffix=".tmp"
        )
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(text)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_name, path)
    except OSError as e:
        if tmp_name is not None and os.path.exists(tmp_name):
            os.unlink(tmp_name)
        raise FileOperationFailed.from_os_error(path, e) from e


def create_dir(path: Path) -> None:
    """Recursively create a directory (no error if it exists)."""
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise FileOperationFailed.from_os_error(path, e) from e


def remove_dir(path: Path) -> None:
    """Remove a directory tree."""
    try:
        shutil.rmtree(path)
    except OSError as e:
        raise FileOperationFailed.from_os_error(path, e) from e


def rename(src: Path, dest: Path) -> None:
    """Move src to dest, creating dest's parent directories if needed."""
    try:
        dest.parent.mkdir(parents=True, exist_ok=True)
        os.replace(src, dest)
    except OSError as e:
        raise FileOperationFailed.from_os_error(src, e) from e


def set_executable(path: Path) -> None:
    """Add the executable bits to a file. No-op on Windows."""
    if sys.platform == "win32":
        return
    try:
        mode = path.stat().st_mode
        path.chmod(mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    except OSError as e:
        raise FileOperationFailed.from_os_error(path, e) from e


def copy_tree(src: Path, dest: Path, max_depth: int = MAX_COPY_DEPTH) -> None:
    """
    Recursively copy a directory tree.

    Walks with an explicit stack instead of recursion. Directory symlinks
    are not descended into; file symlinks are copied as regular files.

    Args:
        src: Source directory
        dest: Destination directory (created if missing)
        max_depth: Maximum nesting depth to follow

    Raises:
        FileOperationFailed: On any I/O error, or if the tree is deeper than
            max_depth
    """
    stack: list[tuple[Path, Path, int]] = [(src, dest, 0)]

    while stack:
        current_src, current_dest, depth = stack.pop()
        if depth > max_depth:
            raise FileOperationFailed(
                current_src, f"directory nesting exceeds {max_depth} levels"
            )

        create_dir(current_dest)

        try:
            entries = sorted(current_src.iterdir())
        except OSError as e:
            raise FileOperationFailed.from_os_error(current_src, e) from e

        for entry in entries:
            target = current_dest / entry.name
            if entry.is_dir():
                if entry.is_symlink():
                    logger.debug("Skipping directory symlink %s", entry)
                    continue
                stack.append((entry, target, depth + 1))
            else:
                try:
                    shutil.copy2(entry, target)
                except OSError as e:
                    raise FileOperationFailed.from_os_error(entry, e) from e
