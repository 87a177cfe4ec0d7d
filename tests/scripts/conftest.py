"""
Pytest fixtures for siteops script tests.

Provides common fixtures for testing the command-line scripts:
- An asset tree wired up through OPTIMIZER_* environment variables
- Monitor configuration through MONITOR_* environment variables
"""
import pytest


@pytest.fixture
def asset_env(monkeypatch, temp_dir):
    """Point the optimizer at a temporary asset tree."""
    assets = temp_dir / "assets"
    for sub in ("images", "css", "js"):
        (assets / sub).mkdir(parents=True)

    monkeypatch.setenv("OPTIMIZER_ASSETS_DIR", str(assets))
    monkeypatch.setenv("OPTIMIZER_BACKUP_DIR", str(temp_dir / "backups"))
    monkeypatch.setenv("OPTIMIZER_REPORT_DIR", str(temp_dir / "reports"))
    monkeypatch.setenv("OPTIMIZER_LOG_FILE", str(temp_dir / "optimization.log"))
    monkeypatch.setenv("OPTIMIZER_SAVINGS_FILE", str(temp_dir / "savings.jsonl"))
    return assets


@pytest.fixture
def monitor_env(monkeypatch, temp_dir):
    """Monitor configuration for script tests."""
    monkeypatch.setenv("MONITOR_WEBSITE_URL", "https://portfolio.example.com")
    monkeypatch.setenv("MONITOR_ALERT_EMAIL", "ops@example.com")
    monkeypatch.setenv("MONITOR_CHECK_INTERVAL", "120")
    monkeypatch.setenv("MONITOR_REPORT_DIR", str(temp_dir / "reports"))
    monkeypatch.setenv("MONITOR_LOG_FILE", str(temp_dir / "website_monitor.log"))
    return temp_dir
