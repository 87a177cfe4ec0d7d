"""
siteops Core Package

This package contains configuration shared by the siteops services
and scripts.

Modules:
- settings: Optimizer and monitor settings loaded from env / .env

Environment Variables:
    OPTIMIZER_ASSETS_DIR: Root directory of the website assets
    MONITOR_WEBSITE_URL: URL checked by the website monitor
    MONITOR_ALERT_EMAIL: Recipient for monitor alerts
"""
