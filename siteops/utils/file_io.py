"""
General file I/O utilities.

This module provides the small file operations shared by the optimizer
and the reporter: sizes, timestamped names and temp-file swaps.
"""

import os
import shutil
import tempfile
from datetime import datetime
from pathlib import Path
from typing import Iterable, Optional

TIMESTAMP_FORMAT = "%Y%m%d_%H%M%S"


def ensure_directory(path: Path) -> Path:
    """
    Ensure a directory exists, creating it if necessary.

    Args:
        path: Directory path

    Returns:
        The path (for chaining)
    """
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_file_size(filepath: Path) -> int:
    """Get file size in bytes (0 if the file does not exist)."""
    return filepath.stat().st_size if filepath.exists() else 0


def timestamped_path(
    directory: Path,
    prefix: str,
    suffix: str,
    now: Optional[datetime] = None,
) -> Path:
    """
    Build ``directory/<prefix>_<YYYYmmdd_HHMMSS><suffix>``.

    Example:
        >>> timestamped_path(Path("backups"), "assets", ".tar.gz")
        PosixPath('backups/assets_20240215_103000.tar.gz')
    """
    stamp = (now or datetime.now()).strftime(TIMESTAMP_FORMAT)
    return directory / f"{prefix}_{stamp}{suffix}"


def temp_sibling(filepath: Path) -> Path:
    """
    Create an empty, uniquely named temporary file next to ``filepath``.

    The name keeps the extension for the external compressors
    (``photo.jpg`` -> ``.photo.k2x9a_1q.jpg``). It is created exclusively, so
    an existing asset is never reused or overwritten. The caller removes it.
    """
    fd, name = tempfile.mkstemp(
        dir=filepath.parent, prefix=f".{filepath.stem}.", suffix=filepath.suffix
    )
    os.close(fd)
    return Path(name)


def replace_file(source: Path, destination: Path) -> None:
    """Atomically move ``source`` over ``destination``, keeping its permissions."""
    if destination.exists():
        shutil.copymode(destination, source)
    os.replace(source, destination)


def discard(filepath: Path) -> None:
    """Remove a file if it exists."""
    filepath.unlink(missing_ok=True)


def find_files(directory: Path, suffixes: Iterable[str]) -> list[Path]:
    """
    Recursively list files under ``directory`` with one of ``suffixes``.

    Matching is case-insensitive. A missing directory yields an empty list.

    Args:
        directory: Root to search
        suffixes: Extensions including the dot (e.g. ``{".jpg", ".jpeg"}``)

    Returns:
        Sorted list of matching files
    """
    if not directory.is_dir():
        return []
    wanted = {s.lower() for s in suffixes}
    return sorted(
        p for p in directory.rglob("*")
        if p.is_file() and p.suffix.lower() in wanted
    )
