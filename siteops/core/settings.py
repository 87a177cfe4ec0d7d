from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class OptimizerSettings(BaseSettings):
    """Asset optimizer settings.

    Every field can be overridden with an ``OPTIMIZER_``-prefixed environment
    variable or in a local ``.env`` file, e.g. ``OPTIMIZER_MAX_IMAGE_SIZE=250000``.
    """

    model_config = SettingsConfigDict(
        env_prefix="OPTIMIZER_",
        env_file=".env",
        extra="ignore",
    )

    # Directories
    assets_dir: Path = Field(
        default=Path("../assets"),
        description="Root directory of the website assets",
    )
    images_subdir: str = "images"
    css_subdir: str = "css"
    js_subdir: str = "js"
    backup_dir: Path = Field(
        default=Path("backups"),
        description="Directory for timestamped tar.gz backups of the asset root",
    )
    report_dir: Path = Path(".")

    # Output files
    log_file: Path = Path("optimization.log")
    savings_file: Path = Field(
        default=Path("optimization_savings.jsonl"),
        description="JSON-lines ledger of bytes saved per file",
    )

    # Image thresholds
    max_image_size: int = Field(
        default=500_000,
        ge=0,
        description="Images at or below this size (bytes) are not compressed",
    )
    jpeg_quality: int = Field(default=85, ge=1, le=100)
    png_level: int = Field(default=7, ge=0, le=7)
    max_width: int = Field(default=1920, gt=0)
    max_height: int = Field(default=1080, gt=0)

    file_backups: bool = Field(
        default=True,
        description="Write <file>.backup before rewriting CSS/JS files",
    )
    command_timeout: int = Field(
        default=120,
        gt=0,
        description="Timeout in seconds for each external compressor call",
    )

    @property
    def images_dir(self) -> Path:
        return self.assets_dir / self.images_subdir

    @property
    def css_dir(self) -> Path:
        return self.assets_dir / self.css_subdir

    @property
    def js_dir(self) -> Path:
        return self.assets_dir / self.js_subdir


class MonitorSettings(BaseSettings):
    """Website monitor settings.

    Thresholds are inclusive lower bounds of the worse tier: a disk at exactly
    ``disk_warning_percent`` is already a warning.
    """

    model_config = SettingsConfigDict(
        env_prefix="MONITOR_",
        env_file=".env",
        extra="ignore",
    )

    website_url: str = "https://your-portfolio-domain.com"
    alert_email: str = Field(
        default="",
        description="Alert recipient. Empty means alerts are logged and dropped.",
    )
    check_interval: int = Field(
        default=300,
        gt=0,
        description="Seconds between the starts of successive check sequences",
    )
    log_file: Path = Path("website_monitor.log")
    report_dir: Path = Path(".")

    # HTTP
    connect_timeout: float = Field(default=10.0, gt=0)
    request_timeout: float = Field(default=30.0, gt=0)
    success_code: int = 200

    # Performance tiers (milliseconds)
    perf_excellent_ms: int = 1000
    perf_good_ms: int = 2000
    perf_fair_ms: int = 3000

    # Certificate tiers (days remaining)
    ssl_warning_days: int = 30
    ssl_critical_days: int = 7

    # Resource tiers (percent used)
    disk_warning_percent: int = 80
    disk_critical_percent: int = 90
    memory_warning_percent: int = 80
    memory_critical_percent: int = 90
    disk_path: Path = Path("/")

    mail_timeout: int = Field(
        default=30,
        gt=0,
        description="Timeout in seconds for the mail/sendmail command",
    )
