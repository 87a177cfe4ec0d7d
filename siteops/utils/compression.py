"""
File compression and archiving utilities.

This module provides gzip siblings for static assets and date-stamped
tar.gz backups of whole directory trees.
"""

import gzip
import shutil
import tarfile
from datetime import datetime
from pathlib import Path
from typing import Optional

from siteops.utils.file_io import ensure_directory, timestamped_path


def compress_file(
    input_file: Path,
    output_file: Optional[Path] = None,
    level: int = 9,
) -> Path:
    """
    Write a gzip-compressed copy of a file, keeping the original.

    Args:
        input_file: Path to file to compress
        output_file: Path for compressed file (default: input_file + ".gz")
        level: Compression level (1-9, default: 9)

    Returns:
        Path to compressed file

    Example:
        >>> compressed = compress_file(Path("site.css"))
        >>> print(compressed)
        site.css.gz
    """
    if output_file is None:
        output_file = input_file.with_suffix(input_file.suffix + ".gz")

    with open(input_file, "rb") as f_in:
        with gzip.open(output_file, "wb", compresslevel=level) as f_out:
            shutil.copyfileobj(f_in, f_out)

    return output_file


def archive_directory(
    source_dir: Path,
    archive_dir: Path,
    name: str,
    now: Optional[datetime] = None,
) -> Path:
    """
    Archive a directory tree as ``archive_dir/<name>_<timestamp>.tar.gz``.

    The archive contains the directory itself (``assets/...``), not just
    its contents.

    Args:
        source_dir: Directory to archive
        archive_dir: Directory for archives (created if needed)
        name: Archive name prefix
        now: Timestamp override

    Returns:
        Path to the archive

    Raises:
        FileNotFoundError: source_dir does not exist
        OSError / tarfile.TarError: the archive could not be written
    """
    if not source_dir.is_dir():
        raise FileNotFoundError(f"Directory not found: {source_dir}")

    ensure_directory(archive_dir)
    archive_path = timestamped_path(archive_dir, name, ".tar.gz", now=now)

    with tarfile.open(archive_path, "w:gz") as tar:
        tar.add(source_dir, arcname=source_dir.resolve().name)

    return archive_path
