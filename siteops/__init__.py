"""
siteops - operational tooling for a static website.

This package holds the shared code behind the maintenance and cron scripts
that keep a static portfolio site lean and healthy: asset optimization and
website health monitoring.

Packages:
- core: Configuration (pydantic-settings)
- schemas: Pydantic models for check results and savings records
- services: Asset optimizer, website monitor and reporter
- utils: Logging, subprocess, dependency, notification and file helpers

Usage:
    # Optimize all assets and write a report
    python scripts/maintenance/optimize_assets.py --all --report

    # Check the website once
    python scripts/cron/monitor_website.py --check --url https://example.com

Environment Variables:
    OPTIMIZER_*: Asset optimizer settings (see siteops.core.settings)
    MONITOR_*: Website monitor settings (see siteops.core.settings)
"""

__version__ = "0.1.0"
