"""
siteops services.

Modules:
- asset_optimizer: Image compression/resizing and CSS/JS minification
- website_monitor: Availability, performance, TLS and resource checks
- reporter: Savings ledger and plain-text report files
"""
