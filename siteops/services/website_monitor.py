"""
Website Monitor Service - availability, performance, TLS and host resource checks.

Each check logs one line, returns a ``CheckResult`` and, when the result
falls into an alerting tier, hands exactly one alert to the dispatcher.
Checks never raise for network or host problems; those become ``error`` or
``critical`` results so that a monitoring loop keeps running.
"""
from __future__ import annotations

import logging
import shutil
import socket
import ssl
import time
from datetime import datetime, timezone
from typing import Callable, List, Optional, Tuple
from urllib.parse import urlsplit

import requests
from cryptography import x509

from siteops.core.settings import MonitorSettings
from siteops.schemas.monitor_schema import CheckResult, CheckStatus
from siteops.utils.notifications import AlertDispatcher
from siteops.utils.process import CommandError, run_command

logger = logging.getLogger(__name__)

SECONDS_PER_DAY = 86400
HTTPS_PORT = 443

_LOG_LEVELS = {
    CheckStatus.OK: logging.INFO,
    CheckStatus.SKIPPED: logging.INFO,
    CheckStatus.WARNING: logging.WARNING,
    CheckStatus.CRITICAL: logging.ERROR,
    CheckStatus.ERROR: logging.ERROR,
}


# ----------------------------------------------------------------------
# Classification
# ----------------------------------------------------------------------

def classify_performance(
    load_time_ms: int,
    excellent_ms: int = 1000,
    good_ms: int = 2000,
    fair_ms: int = 3000,
) -> Tuple[str, CheckStatus]:
    """Bucket a page load time into Excellent / Good / Fair / Poor."""
    if load_time_ms < excellent_ms:
        return "Excellent", CheckStatus.OK
    if load_time_ms < good_ms:
        return "Good", CheckStatus.OK
    if load_time_ms < fair_ms:
        return "Fair", CheckStatus.OK
    return "Poor", CheckStatus.WARNING


def classify_certificate_days(
    days: int,
    warning_days: int = 30,
    critical_days: int = 7,
) -> CheckStatus:
    """
    Tier for the days left before a certificate expires.

    More than ``warning_days`` is healthy, more than ``critical_days`` is a
    warning, anything else (including expired) is critical.
    """
    if days > warning_days:
        return CheckStatus.OK
    if days > critical_days:
        return CheckStatus.WARNING
    return CheckStatus.CRITICAL


def classify_usage(percent: int, warning: int = 80, critical: int = 90) -> CheckStatus:
    """Tier for a disk or memory utilization percentage."""
    if percent < warning:
        return CheckStatus.OK
    if percent < critical:
        return CheckStatus.WARNING
    return CheckStatus.CRITICAL


def days_until(expiry: datetime, now: datetime) -> int:
    """Whole days between ``now`` and ``expiry``, truncated toward zero."""
    return int((expiry - now).total_seconds() / SECONDS_PER_DAY)


# ----------------------------------------------------------------------
# Measurements
# ----------------------------------------------------------------------

def fetch_certificate_expiry(host: str, port: int = HTTPS_PORT, timeout: float = 10.0) -> datetime:
    """
    Return the ``notAfter`` date of the certificate served by ``host``.

    The chain is not verified: an expired or self-signed certificate must
    still report its dates so that it can be classified by days remaining.

    Raises:
        OSError: DNS, connection or TLS handshake failure (incl. ssl.SSLError)
        ValueError: the server sent no certificate, or it cannot be parsed
    """
    context = ssl.create_default_context()
    context.check_hostname = False
    context.verify_mode = ssl.CERT_NONE

    with socket.create_connection((host, port), timeout=timeout) as sock:
        with context.wrap_socket(sock, server_hostname=host) as tls:
            der = tls.getpeercert(binary_form=True)

    if not der:
        raise ValueError(f"No certificate presented by {host}")
    return x509.load_der_x509_certificate(der).not_valid_after_utc


def parse_free_output(output: str) -> int:
    """
    Memory utilization percent from ``free -m`` output.

    Raises:
        ValueError: no usable ``Mem:`` row
    """
    for line in output.splitlines():
        fields = line.split()
        if fields and fields[0] == "Mem:" and len(fields) >= 3:
            total = int(fields[1])
            used = int(fields[2])
            if total <= 0:
                raise ValueError("Total memory reported as zero")
            return round(used * 100 / total)
    raise ValueError("No 'Mem:' row in free output")


def disk_usage_percent(path) -> int:
    usage = shutil.disk_usage(path)
    if usage.total <= 0:
        raise ValueError(f"Total size of {path} reported as zero")
    return round(usage.used * 100 / usage.total)


class WebsiteMonitor:
    """
    Run health checks against one website and the local host.

    Args:
        settings: Monitor configuration
        dispatcher: Alert sink
        session: requests session (injectable for tests)
        runner: Command runner for ``free`` (injectable for tests)
        which: PATH lookup (injectable for tests)
        clock: Monotonic clock used for load times and the loop schedule
        sleep: Sleep function used between loop iterations
        now: Current UTC time, used for certificate expiry
    """

    def __init__(
        self,
        settings: MonitorSettings,
        dispatcher: AlertDispatcher,
        session: Optional[requests.Session] = None,
        runner: Callable = run_command,
        which: Callable[[str], Optional[str]] = shutil.which,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
        now: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ):
        self.settings = settings
        self.dispatcher = dispatcher
        self.session = session or requests.Session()
        self.runner = runner
        self.which = which
        self.clock = clock
        self.sleep = sleep
        self.now = now

    @property
    def timeout(self) -> Tuple[float, float]:
        return (self.settings.connect_timeout, self.settings.request_timeout)

    def _result(
        self,
        check: str,
        status: CheckStatus,
        message: str,
        value: Optional[float] = None,
        unit: Optional[str] = None,
        alert: Optional[Tuple[str, str]] = None,
    ) -> CheckResult:
        logger.log(_LOG_LEVELS[status], message)
        alerted = False
        if alert:
            subject, body = alert
            self.dispatcher.send(subject, body)
            alerted = True
        return CheckResult(
            check=check,
            status=status,
            message=message,
            value=value,
            unit=unit,
            alerted=alerted,
        )

    # ------------------------------------------------------------------
    # Website checks
    # ------------------------------------------------------------------

    def check_availability(self, url: str) -> CheckResult:
        """UP iff the response status equals ``success_code``."""
        try:
            response = self.session.get(url, timeout=self.timeout, allow_redirects=False)
        except requests.RequestException as e:
            return self._result(
                "availability",
                CheckStatus.CRITICAL,
                f"Website is DOWN - Connection failed ({e})",
                alert=(
                    "Website Down Alert",
                    f"Website {url} is currently down. Connection failed: {e}",
                ),
            )

        code = response.status_code
        elapsed = response.elapsed.total_seconds()

        if code == self.settings.success_code:
            return self._result(
                "availability",
                CheckStatus.OK,
                f"Website is UP - HTTP {code} - Response time: {elapsed:.3f}s",
                value=elapsed,
                unit="s",
            )

        return self._result(
            "availability",
            CheckStatus.WARNING,
            f"Website returned HTTP {code} - Response time: {elapsed:.3f}s",
            value=elapsed,
            unit="s",
            alert=(
                "Website Warning",
                f"Website {url} returned HTTP {code}. Response time: {elapsed:.3f}s",
            ),
        )

    def check_performance(self, url: str) -> CheckResult:
        """Total load time of the page body, bucketed into four tiers."""
        started = self.clock()
        try:
            self.session.get(url, timeout=self.timeout)
        except requests.RequestException as e:
            return self._result(
                "performance",
                CheckStatus.ERROR,
                f"Performance: cannot measure load time ({e})",
            )
        load_time_ms = round((self.clock() - started) * 1000)

        label, status = classify_performance(
            load_time_ms,
            self.settings.perf_excellent_ms,
            self.settings.perf_good_ms,
            self.settings.perf_fair_ms,
        )
        alert = None
        if status != CheckStatus.OK:
            alert = (
                "Performance Alert",
                f"Website performance is poor. Load time: {load_time_ms}ms",
            )
        return self._result(
            "performance",
            status,
            f"Performance: {label} ({load_time_ms}ms)",
            value=load_time_ms,
            unit="ms",
            alert=alert,
        )

    def check_certificate(self, url: str) -> CheckResult:
        """Days until the site's TLS certificate expires."""
        parts = urlsplit(url)
        if parts.scheme != "https" or not parts.hostname:
            return self._result(
                "certificate",
                CheckStatus.SKIPPED,
                f"SSL: skipped ({url} is not an https URL)",
            )

        host = parts.hostname
        try:
            port = parts.port or HTTPS_PORT
            expiry = fetch_certificate_expiry(host, port, timeout=self.settings.connect_timeout)
        except (OSError, ValueError) as e:
            return self._result(
                "certificate",
                CheckStatus.ERROR,
                f"SSL: Cannot verify certificate ({e})",
                alert=(
                    "SSL Verification Alert",
                    f"Could not verify the SSL certificate of {host}: {e}",
                ),
            )

        days = days_until(expiry, self.now())
        status = classify_certificate_days(
            days, self.settings.ssl_warning_days, self.settings.ssl_critical_days
        )

        if status == CheckStatus.OK:
            return self._result(
                "certificate", status, f"SSL: Valid (expires in {days} days)",
                value=days, unit="days",
            )
        if status == CheckStatus.WARNING:
            return self._result(
                "certificate", status, f"SSL: Expiring soon (expires in {days} days)",
                value=days, unit="days",
                alert=("SSL Expiry Warning", f"SSL certificate for {host} expires in {days} days"),
            )
        if days < 0:
            summary = f"expired {-days} days ago"
        else:
            summary = f"expires in {days} days"
        return self._result(
            "certificate", status, f"SSL: Critical ({summary})",
            value=days, unit="days",
            alert=("SSL Expiry Alert", f"SSL certificate for {host} {summary}"),
        )

    # ------------------------------------------------------------------
    # Host resources
    # ------------------------------------------------------------------

    def _usage_result(
        self,
        check: str,
        label: str,
        percent: int,
        warning: int,
        critical: int,
    ) -> CheckResult:
        status = classify_usage(percent, warning, critical)
        if status == CheckStatus.OK:
            return self._result(check, status, f"{label}: Healthy ({percent}% used)",
                                value=percent, unit="%")
        if status == CheckStatus.WARNING:
            return self._result(
                check, status, f"{label}: Warning ({percent}% used)",
                value=percent, unit="%",
                alert=(f"{label} Warning", f"{label} usage is at {percent}%"),
            )
        return self._result(
            check, status, f"{label}: Critical ({percent}% used)",
            value=percent, unit="%",
            alert=(f"{label} Alert", f"{label} usage is critical at {percent}%"),
        )

    def check_disk(self) -> CheckResult:
        try:
            percent = disk_usage_percent(self.settings.disk_path)
        except (OSError, ValueError) as e:
            return self._result("disk", CheckStatus.ERROR, f"Disk: cannot read usage ({e})")
        return self._usage_result(
            "disk", "Disk", percent,
            self.settings.disk_warning_percent, self.settings.disk_critical_percent,
        )

    def check_memory(self) -> CheckResult:
        free_path = self.which("free")
        if not free_path:
            return self._result("memory", CheckStatus.SKIPPED, "Memory: skipped (free not available)")

        try:
            output = self.runner([free_path, "-m"], timeout=self.settings.connect_timeout).stdout
            percent = parse_free_output(output)
        except (CommandError, ValueError) as e:
            return self._result("memory", CheckStatus.ERROR, f"Memory: cannot read usage ({e})")

        return self._usage_result(
            "memory", "Memory", percent,
            self.settings.memory_warning_percent, self.settings.memory_critical_percent,
        )

    # ------------------------------------------------------------------
    # Orchestration
    # ------------------------------------------------------------------

    def run_checks(self, url: str) -> List[CheckResult]:
        """Run every check once, in a fixed order."""
        return [
            self.check_availability(url),
            self.check_performance(url),
            self.check_certificate(url),
            self.check_disk(),
            self.check_memory(),
        ]

    def monitor(self, url: str, interval: float, max_iterations: Optional[int] = None) -> int:
        """
        Repeat ``run_checks`` with ``interval`` seconds between sequence starts.

        If a sequence takes longer than the interval, the next one starts
        immediately. Runs until the process is stopped unless
        ``max_iterations`` is given.

        Returns:
            Number of completed check sequences
        """
        logger.info(f"Starting continuous monitoring (interval: {interval}s)...")
        iterations = 0

        while max_iterations is None or iterations < max_iterations:
            started = self.clock()
            self.run_checks(url)
            iterations += 1
            logger.info("-" * 40)

            if max_iterations is not None and iterations >= max_iterations:
                break

            remaining = interval - (self.clock() - started)
            if remaining > 0:
                self.sleep(remaining)

        return iterations
