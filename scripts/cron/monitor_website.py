#!/usr/bin/env python3
"""
Monitor website availability and performance.

Checks that the site answers with HTTP 200, measures its load time, checks
how long its TLS certificate remains valid, and checks local disk and memory
usage. Results that cross a threshold are e-mailed to MONITOR_ALERT_EMAIL
through mail or sendmail.

Usage:
    python monitor_website.py --check                    # Single check
    python monitor_website.py --monitor                  # Start monitoring
    python monitor_website.py --report                   # Write a status report
    python monitor_website.py --url https://example.com  # Monitor specific URL
    python monitor_website.py --monitor --interval 60    # Check every 60 seconds

Environment Variables:
    MONITOR_WEBSITE_URL: URL to monitor
    MONITOR_ALERT_EMAIL: Alert recipient (alerts are dropped if unset)
    MONITOR_CHECK_INTERVAL: Seconds between checks in monitor mode (default: 300)
    MONITOR_LOG_FILE: Log file (default: website_monitor.log)
    MONITOR_REPORT_DIR: Directory for status reports (default: .)
"""

import logging
import sys
from typing import Optional, Sequence

from dotenv import load_dotenv

from siteops.core.settings import MonitorSettings
from siteops.services.reporter import write_status_report
from siteops.services.website_monitor import WebsiteMonitor
from siteops.utils.cli import ScriptArgumentParser, positive_int
from siteops.utils.dependencies import FREE, MAIL, SENDMAIL, check_dependencies
from siteops.utils.logging_setup import close_handlers, setup_logging
from siteops.utils.notifications import AlertDispatcher

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)

MODE_CHECK = "check"
MODE_MONITOR = "monitor"
MODE_REPORT = "report"


def build_parser() -> ScriptArgumentParser:
    parser = ScriptArgumentParser(
        description="Monitor website availability and performance",
    )
    parser.add_argument(
        "-c", "--check",
        dest="mode", action="store_const", const=MODE_CHECK,
        help="Perform a single check (default)",
    )
    parser.add_argument(
        "-m", "--monitor",
        dest="mode", action="store_const", const=MODE_MONITOR,
        help="Start continuous monitoring",
    )
    parser.add_argument(
        "-r", "--report",
        dest="mode", action="store_const", const=MODE_REPORT,
        help="Generate status report",
    )
    parser.add_argument(
        "-u", "--url",
        default=None,
        help="Set website URL to monitor (default: MONITOR_WEBSITE_URL)",
    )
    parser.add_argument(
        "-i", "--interval",
        type=positive_int,
        default=None,
        metavar="SEC",
        help="Set check interval in seconds (default: MONITOR_CHECK_INTERVAL)",
    )
    parser.set_defaults(mode=MODE_CHECK)
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)

    settings = MonitorSettings()
    url = args.url or settings.website_url
    interval = args.interval if args.interval is not None else settings.check_interval

    root_logger = setup_logging(log_file=settings.log_file)

    try:
        logger.info(f"Starting website monitoring for: {url}")
        check_dependencies(required=[], optional=[MAIL, SENDMAIL, FREE])

        dispatcher = AlertDispatcher(settings.alert_email, timeout=settings.mail_timeout)
        monitor = WebsiteMonitor(settings, dispatcher)

        if args.mode == MODE_MONITOR:
            try:
                monitor.monitor(url, interval)
            except KeyboardInterrupt:
                logger.info("Monitoring stopped")
        elif args.mode == MODE_REPORT:
            logger.info("Generating status report...")
            results = monitor.run_checks(url)
            write_status_report(results, url, settings.report_dir)
        else:
            logger.info("Performing single check...")
            monitor.run_checks(url)

        logger.info("Monitoring completed")
        return 0

    finally:
        close_handlers(root_logger)


if __name__ == "__main__":
    sys.exit(main())
