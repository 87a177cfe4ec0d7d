#!/usr/bin/env python3
"""
Optimize the website's images, CSS and JavaScript.

JPEG and PNG images above the size threshold are recompressed with
jpegoptim / optipng and oversized images are downscaled. CSS and JavaScript
are minified. Optionally the whole asset tree is archived first, gzip
copies of CSS/JS are written, and a savings report is generated.

Usage:
    python optimize_assets.py               # Optimize all assets
    python optimize_assets.py --images      # Optimize images only
    python optimize_assets.py --css         # Optimize CSS only
    python optimize_assets.py --backup      # Create backup and optimize all
    python optimize_assets.py --gzip        # Optimize and create gzip versions

Environment Variables:
    OPTIMIZER_ASSETS_DIR: Asset root (default: ../assets)
    OPTIMIZER_BACKUP_DIR: Backup archive directory (default: backups)
    OPTIMIZER_LOG_FILE: Log file (default: optimization.log)
    OPTIMIZER_SAVINGS_FILE: Savings ledger (default: optimization_savings.jsonl)
    OPTIMIZER_MAX_IMAGE_SIZE: Compress images above this many bytes (default: 500000)
    OPTIMIZER_JPEG_QUALITY: jpegoptim maximum quality (default: 85)
"""

import logging
import sys
from typing import Optional, Sequence

from dotenv import load_dotenv

from siteops.core.settings import OptimizerSettings
from siteops.services.asset_optimizer import AssetOptimizer, required_tools
from siteops.services.reporter import write_optimization_report
from siteops.utils.cli import ScriptArgumentParser
from siteops.utils.dependencies import check_dependencies
from siteops.utils.logging_setup import close_handlers, setup_logging

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)

# (images, css, js)
ALL_ASSETS = (True, True, True)
IMAGES_ONLY = (True, False, False)
CSS_ONLY = (False, True, False)
JS_ONLY = (False, False, True)


def build_parser() -> ScriptArgumentParser:
    parser = ScriptArgumentParser(
        description="Optimize images, CSS and JavaScript files of the website",
    )
    parser.add_argument(
        "-i", "--images",
        dest="selection", action="store_const", const=IMAGES_ONLY,
        help="Optimize images only",
    )
    parser.add_argument(
        "-c", "--css",
        dest="selection", action="store_const", const=CSS_ONLY,
        help="Optimize CSS only",
    )
    parser.add_argument(
        "-j", "--js",
        dest="selection", action="store_const", const=JS_ONLY,
        help="Optimize JavaScript only",
    )
    parser.add_argument(
        "-a", "--all",
        dest="selection", action="store_const", const=ALL_ASSETS,
        help="Optimize all assets (default)",
    )
    parser.add_argument(
        "-b", "--backup",
        action="store_true",
        help="Create backup before optimization",
    )
    parser.add_argument(
        "-g", "--gzip",
        action="store_true",
        help="Create gzipped versions of CSS/JS files",
    )
    parser.add_argument(
        "-r", "--report",
        action="store_true",
        help="Generate optimization report",
    )
    parser.set_defaults(selection=ALL_ASSETS)
    return parser


def print_summary(selection: tuple, backup: bool, gzip: bool, log_file) -> None:
    images, css, js = selection
    print("")
    print("Optimization Summary:")
    print("========================")
    if images:
        print("- Images optimized")
    if css:
        print("- CSS optimized")
    if js:
        print("- JavaScript optimized")
    if backup:
        print("- Backup created")
    if gzip:
        print("- Gzip versions created")
    print("")
    print(f"Check {log_file} for detailed information")


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)
    images, css, js = args.selection

    settings = OptimizerSettings()
    root_logger = setup_logging(log_file=settings.log_file)

    try:
        logger.info("Starting asset optimization...")

        if not check_dependencies(required_tools(images)).ok:
            return 1

        optimizer = AssetOptimizer(settings)

        if args.backup:
            if optimizer.create_backup() is None:
                logger.error("Backup failed, aborting optimization")
                return 1
            logger.info("Backup completed successfully")

        stats = optimizer.run(images=images, css=css, js=js, gzip=args.gzip)

        if args.report:
            write_optimization_report(settings)

        logger.info(
            f"Processed {stats.processed} files: {stats.optimized} optimized, "
            f"{stats.skipped} unchanged, {stats.failed} failed, "
            f"{stats.total_saved} bytes saved"
        )
        logger.info("Asset optimization completed successfully!")
        print_summary(args.selection, args.backup, args.gzip, settings.log_file)
        return 0

    finally:
        close_handlers(root_logger)


if __name__ == "__main__":
    sys.exit(main())
