"""
siteops Utility Library.

This package provides reusable utility functions for siteops scripts and services.

Modules:
--------
logging_setup
    Logging configuration utilities.
process
    Subprocess execution with explicit timeouts.
dependencies
    External tool presence checks.
notifications
    Email alert dispatch.
compression
    Gzip copies and tar.gz directory backups.
file_io
    General file I/O utilities.
cli
    Argument parsing helpers for the scripts.
"""

from siteops.utils.logging_setup import setup_logging, close_handlers
from siteops.utils.process import CommandError, run_command
from siteops.utils.dependencies import (
    Tool,
    DependencyReport,
    check_dependencies,
    install_hints,
)
from siteops.utils.notifications import AlertDispatcher
from siteops.utils.compression import compress_file, archive_directory
from siteops.utils.file_io import (
    ensure_directory,
    find_files,
    get_file_size,
    timestamped_path,
)
from siteops.utils.cli import ScriptArgumentParser, positive_int

__all__ = [
    # logging_setup
    "setup_logging",
    "close_handlers",
    # process
    "CommandError",
    "run_command",
    # dependencies
    "Tool",
    "DependencyReport",
    "check_dependencies",
    "install_hints",
    # notifications
    "AlertDispatcher",
    # compression
    "compress_file",
    "archive_directory",
    # file_io
    "ensure_directory",
    "find_files",
    "get_file_size",
    "timestamped_path",
    # cli
    "ScriptArgumentParser",
    "positive_int",
]
