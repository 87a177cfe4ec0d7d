"""
Tests for Website Monitor Service.
"""
import contextlib
import socket
import ssl
import threading
from datetime import datetime, timedelta, timezone
from unittest.mock import ANY, MagicMock, call, patch

import pytest
import requests
from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.x509.oid import NameOID

from siteops.schemas.monitor_schema import CheckStatus
from siteops.services.website_monitor import (
    WebsiteMonitor,
    classify_certificate_days,
    classify_performance,
    classify_usage,
    days_until,
    fetch_certificate_expiry,
    parse_free_output,
)
from siteops.utils.process import CommandError

NOW = datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)

FREE_OUTPUT = """              total        used        free      shared  buff/cache   available
Mem:           8000        6800         400          10         800        1000
Swap:          2048           0        2048
"""


def make_response(status_code=200, seconds=0.25):
    response = MagicMock()
    response.status_code = status_code
    response.elapsed = timedelta(seconds=seconds)
    return response


@pytest.fixture
def session():
    session = MagicMock()
    session.get.return_value = make_response()
    return session


@pytest.fixture
def make_monitor(monitor_settings, mock_dispatcher, session):
    """Build a WebsiteMonitor with injected collaborators."""
    def _make(**kwargs):
        kwargs.setdefault("session", session)
        kwargs.setdefault("which", lambda name: f"/usr/bin/{name}")
        kwargs.setdefault("now", lambda: NOW)
        return WebsiteMonitor(monitor_settings, mock_dispatcher, **kwargs)
    return _make


class TestClassification:
    """Tests for the tier functions."""

    @pytest.mark.parametrize("ms,label,status", [
        (0, "Excellent", CheckStatus.OK),
        (999, "Excellent", CheckStatus.OK),
        (1000, "Good", CheckStatus.OK),
        (1999, "Good", CheckStatus.OK),
        (2000, "Fair", CheckStatus.OK),
        (2999, "Fair", CheckStatus.OK),
        (3000, "Poor", CheckStatus.WARNING),
        (12000, "Poor", CheckStatus.WARNING),
    ])
    def test_performance_tiers(self, ms, label, status):
        assert classify_performance(ms) == (label, status)

    @pytest.mark.parametrize("days,status", [
        (31, CheckStatus.OK),
        (30, CheckStatus.WARNING),
        (8, CheckStatus.WARNING),
        (7, CheckStatus.CRITICAL),
        (0, CheckStatus.CRITICAL),
        (-3, CheckStatus.CRITICAL),
    ])
    def test_certificate_tiers(self, days, status):
        assert classify_certificate_days(days) == status

    @pytest.mark.parametrize("percent,status", [
        (0, CheckStatus.OK),
        (79, CheckStatus.OK),
        (80, CheckStatus.WARNING),
        (89, CheckStatus.WARNING),
        (90, CheckStatus.CRITICAL),
        (100, CheckStatus.CRITICAL),
    ])
    def test_usage_tiers(self, percent, status):
        assert classify_usage(percent) == status

    def test_days_until_truncates(self):
        assert days_until(NOW + timedelta(days=8, hours=23), NOW) == 8
        assert days_until(NOW - timedelta(hours=5), NOW) == 0


class TestParseFreeOutput:
    """Tests for parse_free_output."""

    def test_percent_used(self):
        assert parse_free_output(FREE_OUTPUT) == 85

    def test_missing_mem_row(self):
        with pytest.raises(ValueError):
            parse_free_output("Swap: 2048 0 2048\n")

    def test_zero_total(self):
        with pytest.raises(ValueError):
            parse_free_output("Mem: 0 0 0\n")


class TestCheckAvailability:
    """Tests for check_availability."""

    def test_up(self, make_monitor, mock_dispatcher):
        result = make_monitor().check_availability("https://example.com")

        assert result.status == CheckStatus.OK
        assert result.message == "Website is UP - HTTP 200 - Response time: 0.250s"
        assert result.alerted is False
        mock_dispatcher.send.assert_not_called()

    def test_non_200_alerts_once(self, make_monitor, session, mock_dispatcher):
        session.get.return_value = make_response(503)

        result = make_monitor().check_availability("https://example.com")

        assert result.status == CheckStatus.WARNING
        assert "HTTP 503" in result.message
        assert result.alerted is True
        mock_dispatcher.send.assert_called_once_with("Website Warning", ANY)

    def test_connection_failure(self, make_monitor, session, mock_dispatcher):
        session.get.side_effect = requests.ConnectionError("connection refused")

        result = make_monitor().check_availability("https://example.com")

        assert result.status == CheckStatus.CRITICAL
        assert result.message.startswith("Website is DOWN")
        mock_dispatcher.send.assert_called_once_with("Website Down Alert", ANY)

    def test_uses_connect_and_request_timeouts(self, make_monitor, session):
        make_monitor().check_availability("https://example.com")

        session.get.assert_called_once_with(
            "https://example.com", timeout=(10.0, 30.0), allow_redirects=False
        )

    def test_redirect_is_not_followed(self, make_monitor, session, mock_dispatcher):
        session.get.return_value = make_response(301)

        result = make_monitor().check_availability("http://example.com")

        assert result.status == CheckStatus.WARNING
        assert result.message.startswith("Website returned HTTP 301")
        mock_dispatcher.send.assert_called_once_with("Website Warning", ANY)


class TestCheckPerformance:
    """Tests for check_performance."""

    def test_excellent(self, make_monitor, mock_dispatcher):
        monitor = make_monitor(clock=MagicMock(side_effect=[100.0, 100.4]))

        result = monitor.check_performance("https://example.com")

        assert result.message == "Performance: Excellent (400ms)"
        assert result.value == 400
        mock_dispatcher.send.assert_not_called()

    def test_poor_alerts(self, make_monitor, mock_dispatcher):
        monitor = make_monitor(clock=MagicMock(side_effect=[0.0, 3.5]))

        result = monitor.check_performance("https://example.com")

        assert result.status == CheckStatus.WARNING
        assert result.message == "Performance: Poor (3500ms)"
        mock_dispatcher.send.assert_called_once_with(
            "Performance Alert", "Website performance is poor. Load time: 3500ms"
        )

    def test_request_failure_is_error(self, make_monitor, session, mock_dispatcher):
        session.get.side_effect = requests.Timeout("timed out")
        monitor = make_monitor(clock=MagicMock(side_effect=[0.0, 30.0]))

        result = monitor.check_performance("https://example.com")

        assert result.status == CheckStatus.ERROR
        mock_dispatcher.send.assert_not_called()


class TestCheckCertificate:
    """Tests for check_certificate."""

    @pytest.mark.parametrize("days,status,subject", [
        (31, CheckStatus.OK, None),
        (30, CheckStatus.WARNING, "SSL Expiry Warning"),
        (8, CheckStatus.WARNING, "SSL Expiry Warning"),
        (7, CheckStatus.CRITICAL, "SSL Expiry Alert"),
    ])
    def test_expiry_tiers(self, make_monitor, mock_dispatcher, days, status, subject):
        expiry = NOW + timedelta(days=days, hours=1)
        with patch(
            "siteops.services.website_monitor.fetch_certificate_expiry",
            return_value=expiry,
        ) as fetch:
            result = make_monitor().check_certificate("https://example.com/")

        fetch.assert_called_once_with("example.com", 443, timeout=10.0)
        assert result.status == status
        assert result.value == days
        assert f"expires in {days} days" in result.message
        if subject:
            mock_dispatcher.send.assert_called_once_with(subject, ANY)
        else:
            mock_dispatcher.send.assert_not_called()

    def test_custom_port(self, make_monitor):
        with patch(
            "siteops.services.website_monitor.fetch_certificate_expiry",
            return_value=NOW + timedelta(days=90),
        ) as fetch:
            make_monitor().check_certificate("https://example.com:8443/")

        fetch.assert_called_once_with("example.com", 8443, timeout=10.0)

    def test_http_url_skipped(self, make_monitor, mock_dispatcher):
        result = make_monitor().check_certificate("http://example.com")

        assert result.status == CheckStatus.SKIPPED
        mock_dispatcher.send.assert_not_called()

    def test_handshake_failure_alerts(self, make_monitor, mock_dispatcher):
        with patch(
            "siteops.services.website_monitor.fetch_certificate_expiry",
            side_effect=OSError("certificate verify failed"),
        ):
            result = make_monitor().check_certificate("https://example.com")

        assert result.status == CheckStatus.ERROR
        assert "Cannot verify certificate" in result.message
        mock_dispatcher.send.assert_called_once_with("SSL Verification Alert", ANY)

    def test_expired_is_critical(self, make_monitor, mock_dispatcher):
        with patch(
            "siteops.services.website_monitor.fetch_certificate_expiry",
            return_value=NOW - timedelta(days=3, hours=1),
        ):
            result = make_monitor().check_certificate("https://example.com")

        assert result.status == CheckStatus.CRITICAL
        assert result.value == -3
        assert result.message == "SSL: Critical (expired 3 days ago)"
        mock_dispatcher.send.assert_called_once_with(
            "SSL Expiry Alert", "SSL certificate for example.com expired 3 days ago"
        )

    def test_invalid_port_is_error(self, make_monitor, mock_dispatcher):
        with patch("siteops.services.website_monitor.fetch_certificate_expiry") as fetch:
            result = make_monitor().check_certificate("https://example.com:abc/")

        fetch.assert_not_called()
        assert result.status == CheckStatus.ERROR
        mock_dispatcher.send.assert_called_once_with("SSL Verification Alert", ANY)


EXPIRED_AT = NOW - timedelta(days=3)


@pytest.fixture
def tls_server(temp_dir):
    """Serve a self-signed certificate that expired at EXPIRED_AT on a local port."""
    key = ec.generate_private_key(ec.SECP256R1())
    name = x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, "localhost")])
    cert = (
        x509.CertificateBuilder()
        .subject_name(name)
        .issuer_name(name)
        .public_key(key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(EXPIRED_AT - timedelta(days=30))
        .not_valid_after(EXPIRED_AT)
        .sign(key, hashes.SHA256())
    )
    cert_file = temp_dir / "server.crt"
    key_file = temp_dir / "server.key"
    cert_file.write_bytes(cert.public_bytes(serialization.Encoding.PEM))
    key_file.write_bytes(key.private_bytes(
        serialization.Encoding.PEM,
        serialization.PrivateFormat.PKCS8,
        serialization.NoEncryption(),
    ))

    context = ssl.SSLContext(ssl.PROTOCOL_TLS_SERVER)
    context.load_cert_chain(str(cert_file), str(key_file))
    listener = socket.create_server(("127.0.0.1", 0))
    listener.settimeout(5)

    def serve():
        while True:
            try:
                conn, _ = listener.accept()
            except OSError:
                return
            conn.settimeout(5)
            with contextlib.suppress(OSError):
                with context.wrap_socket(conn, server_side=True) as tls:
                    tls.recv(1)

    thread = threading.Thread(target=serve, daemon=True)
    thread.start()
    yield listener.getsockname()[1]
    listener.close()
    thread.join(timeout=1)


class TestRealCertificateFetch:
    """Tests against a local TLS server."""

    def test_reads_expired_certificate(self, tls_server):
        expiry = fetch_certificate_expiry("127.0.0.1", tls_server, timeout=5.0)

        assert expiry == EXPIRED_AT

    def test_expired_certificate_is_critical(self, make_monitor, mock_dispatcher, tls_server):
        result = make_monitor().check_certificate(f"https://127.0.0.1:{tls_server}/")

        assert result.status == CheckStatus.CRITICAL
        assert result.message == "SSL: Critical (expired 3 days ago)"
        mock_dispatcher.send.assert_called_once_with("SSL Expiry Alert", ANY)

    def test_closed_port_is_error(self, make_monitor, mock_dispatcher):
        with socket.create_server(("127.0.0.1", 0)) as unused:
            port = unused.getsockname()[1]

        result = make_monitor().check_certificate(f"https://127.0.0.1:{port}/")

        assert result.status == CheckStatus.ERROR
        mock_dispatcher.send.assert_called_once_with("SSL Verification Alert", ANY)


class TestResourceChecks:
    """Tests for disk and memory checks."""

    def test_disk_healthy(self, make_monitor, mock_dispatcher):
        with patch("siteops.services.website_monitor.disk_usage_percent", return_value=42):
            result = make_monitor().check_disk()

        assert result.message == "Disk: Healthy (42% used)"
        mock_dispatcher.send.assert_not_called()

    def test_disk_warning_alerts(self, make_monitor, mock_dispatcher):
        with patch("siteops.services.website_monitor.disk_usage_percent", return_value=85):
            result = make_monitor().check_disk()

        assert result.status == CheckStatus.WARNING
        mock_dispatcher.send.assert_called_once_with("Disk Warning", "Disk usage is at 85%")

    def test_disk_critical_alerts(self, make_monitor, mock_dispatcher):
        with patch("siteops.services.website_monitor.disk_usage_percent", return_value=95):
            result = make_monitor().check_disk()

        assert result.status == CheckStatus.CRITICAL
        mock_dispatcher.send.assert_called_once_with("Disk Alert", "Disk usage is critical at 95%")

    def test_memory_from_free(self, make_monitor, mock_dispatcher):
        runner = MagicMock(return_value=MagicMock(stdout=FREE_OUTPUT))

        result = make_monitor(runner=runner).check_memory()

        runner.assert_called_once_with(["/usr/bin/free", "-m"], timeout=10.0)
        assert result.message == "Memory: Warning (85% used)"
        mock_dispatcher.send.assert_called_once_with("Memory Warning", "Memory usage is at 85%")

    def test_memory_skipped_without_free(self, make_monitor):
        runner = MagicMock()

        result = make_monitor(runner=runner, which=lambda name: None).check_memory()

        assert result.status == CheckStatus.SKIPPED
        runner.assert_not_called()

    def test_memory_command_failure(self, make_monitor, mock_dispatcher):
        runner = MagicMock(side_effect=CommandError(["free"], "timed out after 10.0s"))

        result = make_monitor(runner=runner).check_memory()

        assert result.status == CheckStatus.ERROR
        mock_dispatcher.send.assert_not_called()


class TestRunChecks:
    """Tests for run_checks and the monitoring loop."""

    def test_fixed_order(self, make_monitor):
        with patch(
            "siteops.services.website_monitor.fetch_certificate_expiry",
            return_value=NOW + timedelta(days=90),
        ), patch("siteops.services.website_monitor.disk_usage_percent", return_value=10):
            monitor = make_monitor(
                clock=MagicMock(side_effect=[0.0, 0.1]),
                runner=MagicMock(return_value=MagicMock(stdout=FREE_OUTPUT)),
            )
            results = monitor.run_checks("https://example.com")

        assert [r.check for r in results] == [
            "availability", "performance", "certificate", "disk", "memory",
        ]

    def test_interval_between_sequence_starts(self, make_monitor):
        sleep = MagicMock()
        # start 0 -> done 2 (sleep 8); start 10 -> done 25 (overrun); start 25
        clock = MagicMock(side_effect=[0.0, 2.0, 10.0, 25.0, 25.0])
        monitor = make_monitor(clock=clock, sleep=sleep)

        with patch.object(monitor, "run_checks") as run_checks:
            iterations = monitor.monitor("https://example.com", 10, max_iterations=3)

        assert iterations == 3
        assert run_checks.call_count == 3
        assert sleep.call_args_list == [call(8.0)]

    def test_single_iteration_does_not_sleep(self, make_monitor):
        sleep = MagicMock()
        monitor = make_monitor(clock=MagicMock(return_value=0.0), sleep=sleep)

        with patch.object(monitor, "run_checks"):
            assert monitor.monitor("https://example.com", 300, max_iterations=1) == 1

        sleep.assert_not_called()

    def test_bad_certificate_url_keeps_sequence(self, make_monitor):
        with patch("siteops.services.website_monitor.disk_usage_percent", return_value=10):
            monitor = make_monitor(
                clock=MagicMock(side_effect=[0.0, 0.1]),
                runner=MagicMock(return_value=MagicMock(stdout=FREE_OUTPUT)),
            )
            results = monitor.run_checks("https://example.com:abc/")

        assert len(results) == 5
        assert results[2].check == "certificate"
        assert results[2].status == CheckStatus.ERROR
