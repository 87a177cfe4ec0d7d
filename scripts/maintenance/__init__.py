"""
siteops Maintenance Scripts

This package contains scripts run by hand or before a deploy to keep the
website's static assets small.

Scripts:
- optimize_assets.py: Compress images and minify CSS/JavaScript

Usage:
    python scripts/maintenance/optimize_assets.py --help

Environment Variables:
    OPTIMIZER_ASSETS_DIR: Root directory of the website assets
    OPTIMIZER_BACKUP_DIR: Directory for tar.gz backups
    OPTIMIZER_LOG_FILE: Log file
"""
