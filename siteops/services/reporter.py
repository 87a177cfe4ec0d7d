"""
Reporter Service - savings ledger and plain-text reports.

The asset optimizer appends one ``SavingsRecord`` per saving to a JSON-lines
ledger; the optimization report sums it. The website monitor hands its
``CheckResult`` list over for the status report. Reports are written once
and never read back.
"""
from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path
from typing import Dict, Iterable, List, Optional

from pydantic import ValidationError

from siteops.core.settings import OptimizerSettings
from siteops.schemas.monitor_schema import CheckResult
from siteops.schemas.optimizer_schema import SavingsRecord
from siteops.utils.file_io import ensure_directory, find_files, timestamped_path

logger = logging.getLogger(__name__)

IMAGE_SUFFIXES = {".jpg", ".jpeg", ".png", ".gif"}

# Section title for each monitor check, in report order
STATUS_SECTIONS = (
    ("availability", "Availability Check"),
    ("performance", "Performance Check"),
    ("certificate", "SSL Certificate Check"),
    ("disk", "System Resources"),
    ("memory", None),
)


def append_savings(ledger: Path, record: SavingsRecord) -> None:
    """Append one record to the JSON-lines savings ledger."""
    ledger.parent.mkdir(parents=True, exist_ok=True)
    with open(ledger, "a", encoding="utf-8") as fh:
        fh.write(record.model_dump_json() + "\n")


def read_savings(ledger: Path) -> List[SavingsRecord]:
    """
    Load every record from the savings ledger.

    A missing or empty ledger yields an empty list. Lines that do not parse
    are skipped with a warning.
    """
    if not ledger.exists():
        return []

    records = []
    with open(ledger, encoding="utf-8", errors="replace") as fh:
        for line_no, line in enumerate(fh, start=1):
            line = line.strip()
            if not line:
                continue
            try:
                records.append(SavingsRecord.model_validate_json(line))
            except ValidationError:
                logger.warning(f"Skipping malformed savings record at {ledger}:{line_no}")
    return records


def total_savings(records: Iterable[SavingsRecord]) -> int:
    return sum(r.bytes_saved for r in records)


def savings_by_type(records: Iterable[SavingsRecord]) -> Dict[str, int]:
    totals: Dict[str, int] = {}
    for record in records:
        key = record.asset_type.value
        totals[key] = totals.get(key, 0) + record.bytes_saved
    return totals


def write_optimization_report(
    settings: OptimizerSettings,
    now: Optional[datetime] = None,
) -> Path:
    """
    Write ``optimization_report_<timestamp>.txt`` into ``settings.report_dir``.

    Returns:
        Path to the report
    """
    now = now or datetime.now()
    report_file = timestamped_path(
        ensure_directory(settings.report_dir), "optimization_report", ".txt", now=now
    )

    total_images = len(find_files(settings.images_dir, IMAGE_SUFFIXES))
    total_css = len(find_files(settings.css_dir, {".css"}))
    total_js = len(find_files(settings.js_dir, {".js"}))

    records = read_savings(settings.savings_file)
    by_type = savings_by_type(records)

    lines = [
        "=== Asset Optimization Report ===",
        f"Generated: {now:%a %b %d %H:%M:%S %Y}",
        "",
        "Files processed:",
        f"- Images: {total_images}",
        f"- CSS: {total_css}",
        f"- JavaScript: {total_js}",
        "",
        f"Total space saved: {total_savings(records)} bytes",
    ]
    for asset_type in sorted(by_type):
        lines.append(f"- {asset_type}: {by_type[asset_type]} bytes")
    lines.append(f"Report saved to: {report_file}")

    report_file.write_text("\n".join(lines) + "\n", encoding="utf-8")
    logger.info(f"Optimization report generated: {report_file}")
    return report_file


def format_status_sections(results: Iterable[CheckResult]) -> List[str]:
    """Render check results grouped under the status report headings."""
    by_check = {r.check: r for r in results}
    lines: List[str] = []

    for check, title in STATUS_SECTIONS:
        result = by_check.get(check)
        if title:
            lines.extend(["", f"=== {title} ==="])
        if result is None:
            continue
        if check == "availability":
            lines.append(f"Status: {'UP' if result.healthy else 'DOWN'}")
        lines.append(result.message)

    return lines


def write_status_report(
    results: Iterable[CheckResult],
    url: str,
    report_dir: Path,
    now: Optional[datetime] = None,
) -> Path:
    """
    Write ``status_report_<timestamp>.txt`` for one round of checks.

    Returns:
        Path to the report
    """
    now = now or datetime.now()
    report_file = timestamped_path(
        ensure_directory(report_dir), "status_report", ".txt", now=now
    )

    lines = [
        "=== Website Status Report ===",
        f"Generated: {now:%a %b %d %H:%M:%S %Y}",
        f"Website: {url}",
    ]
    lines.extend(format_status_sections(results))

    report_file.write_text("\n".join(lines) + "\n", encoding="utf-8")
    logger.info(f"Status report generated: {report_file}")
    return report_file
