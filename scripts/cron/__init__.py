"""
siteops Cron Scripts

This package contains scripts typically run as scheduled cron jobs (or as
a long-running process) to watch the production website.

Scripts:
- monitor_website.py: Availability, performance, TLS and host resource checks

Usage:
    python scripts/cron/monitor_website.py --help

Environment Variables:
    MONITOR_WEBSITE_URL: URL to monitor
    MONITOR_ALERT_EMAIL: Email for alerts
    MONITOR_CHECK_INTERVAL: Seconds between checks in monitor mode
    MONITOR_LOG_FILE: Log file
"""
