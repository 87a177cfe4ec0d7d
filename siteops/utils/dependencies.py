"""
External tool dependency checks.

Scripts declare the binaries they need before doing any work. A missing
required tool is fatal for the caller; a missing optional tool only
degrades a feature (for example, no e-mail alerts without mail/sendmail).
"""

import logging
import shutil
from dataclasses import dataclass, field
from typing import Callable, Iterable, Optional

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Tool:
    """An external program and the package that provides it."""

    name: str
    binary: str
    package: Optional[str] = None

    @property
    def package_name(self) -> str:
        return self.package or self.binary


@dataclass
class DependencyReport:
    """Outcome of a dependency check."""

    missing_required: list[Tool] = field(default_factory=list)
    missing_optional: list[Tool] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.missing_required


# Package managers used for the installation hints, in display order
INSTALL_COMMANDS = (
    ("Ubuntu/Debian", "sudo apt-get install"),
    ("CentOS/RHEL", "sudo yum install"),
    ("macOS", "brew install"),
)

JPEGOPTIM = Tool("jpegoptim", "jpegoptim")
OPTIPNG = Tool("optipng", "optipng")
MAIL = Tool("mail", "mail", package="mailutils")
SENDMAIL = Tool("sendmail", "sendmail")
FREE = Tool("free", "free", package="procps")


def install_hints(tools: Iterable[Tool]) -> list[str]:
    """Per-platform installation commands for ``tools``."""
    packages = " ".join(tool.package_name for tool in tools)
    lines = []
    for platform, command in INSTALL_COMMANDS:
        lines.append(f"{platform}:")
        lines.append(f"  {command} {packages}")
    return lines


def check_dependencies(
    required: Iterable[Tool],
    optional: Iterable[Tool] = (),
    which: Callable[[str], Optional[str]] = shutil.which,
) -> DependencyReport:
    """
    Check that external tools are installed.

    Args:
        required: Tools the caller cannot run without
        optional: Tools whose absence only disables a feature
        which: PATH lookup (injectable for tests)

    Returns:
        DependencyReport; ``report.ok`` is False if any required tool is missing
    """
    report = DependencyReport()

    for tool in required:
        if not which(tool.binary):
            report.missing_required.append(tool)

    for tool in optional:
        if not which(tool.binary):
            report.missing_optional.append(tool)

    if report.missing_optional:
        names = ", ".join(t.name for t in report.missing_optional)
        logger.warning(f"Optional tools not found: {names}")

    if report.missing_required:
        names = " ".join(t.name for t in report.missing_required)
        logger.error(f"Missing required tools: {names}")
        logger.error("Please install the missing tools:")
        for line in install_hints(report.missing_required):
            logger.error(line)
        return report

    logger.info("All required tools are available")
    return report
