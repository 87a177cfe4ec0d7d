"""
Argument parsing helpers shared by the siteops scripts.
"""

import argparse
import sys

USAGE_ERROR_EXIT_CODE = 1


class ScriptArgumentParser(argparse.ArgumentParser):
    """
    ArgumentParser that prints the full help on bad input and exits with 1.

    argparse exits with 2 on usage errors; the siteops scripts are run from
    cron wrappers that treat any non-zero status as failure and expect 1.
    """

    def __init__(self, *args, **kwargs):
        kwargs.setdefault("allow_abbrev", False)
        super().__init__(*args, **kwargs)

    def error(self, message: str):
        self.print_help(sys.stderr)
        self.exit(USAGE_ERROR_EXIT_CODE, f"\n{self.prog}: error: {message}\n")


def positive_int(value: str) -> int:
    """argparse type for a strictly positive integer."""
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid integer value: {value!r}")
    if number <= 0:
        raise argparse.ArgumentTypeError(f"must be greater than zero: {value}")
    return number
