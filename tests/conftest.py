"""
Pytest fixtures for siteops tests.

Provides temporary asset trees, settings pointed at them, and mock
dispatchers/sessions for the optimizer and monitor service tests.
"""
import tempfile
from pathlib import Path
from unittest.mock import MagicMock

import pytest
from PIL import Image

from siteops.core.settings import MonitorSettings, OptimizerSettings


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def temp_file(temp_dir):
    """Create a temporary file."""
    def _create_file(name: str, content: str = "") -> Path:
        file_path = temp_dir / name
        file_path.parent.mkdir(parents=True, exist_ok=True)
        file_path.write_text(content)
        return file_path
    return _create_file


@pytest.fixture
def optimizer_settings(temp_dir):
    """Optimizer settings rooted in a temporary asset tree."""
    assets = temp_dir / "assets"
    for sub in ("images", "css", "js"):
        (assets / sub).mkdir(parents=True)
    return OptimizerSettings(
        assets_dir=assets,
        backup_dir=temp_dir / "backups",
        report_dir=temp_dir / "reports",
        log_file=temp_dir / "optimization.log",
        savings_file=temp_dir / "savings.jsonl",
    )


@pytest.fixture
def monitor_settings(temp_dir):
    """Monitor settings with default thresholds."""
    return MonitorSettings(
        website_url="https://example.com",
        alert_email="ops@example.com",
        report_dir=temp_dir / "reports",
        log_file=temp_dir / "website_monitor.log",
    )


@pytest.fixture
def mock_dispatcher():
    """Alert dispatcher that records send() calls."""
    dispatcher = MagicMock()
    dispatcher.send.return_value = True
    return dispatcher


@pytest.fixture
def make_blob():
    """Write a file of ``size`` bytes (not a valid image)."""
    def _make(path: Path, size: int) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(b"\xff" * size)
        return path
    return _make


@pytest.fixture
def make_image():
    """Write a solid-color image with Pillow."""
    def _make(path: Path, width: int, height: int, image_format: str = "JPEG") -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        Image.new("RGB", (width, height), color=(200, 30, 30)).save(path, format=image_format)
        return path
    return _make
