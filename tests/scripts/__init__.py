"""
siteops Script Tests

This package contains tests for the command-line scripts:
- maintenance/: Asset optimization script
- cron/: Website monitoring script
"""
