"""
Asset Optimizer Service - shrinks the images, CSS and JavaScript of the site.

Images above the size threshold are run through jpegoptim / optipng on a
temporary copy and the original is only replaced when the result is strictly
smaller. Oversized images are downscaled with Pillow. CSS and JavaScript are
minified with rcssmin / rjsmin, which tokenize strings, URLs and regex
literals instead of blindly stripping ``//`` and ``/* */``.

Every file is processed independently: an error is logged, the file is
counted as failed, and the run moves on to the next file.
"""
from __future__ import annotations

import logging
import shutil
import tarfile
from pathlib import Path
from typing import Callable, List, Optional, Sequence, Tuple

from PIL import Image
from rcssmin import cssmin
from rjsmin import jsmin

from siteops.core.settings import OptimizerSettings
from siteops.schemas.optimizer_schema import AssetType, OptimizationStats, SavingsRecord
from siteops.services.reporter import append_savings
from siteops.utils.compression import archive_directory, compress_file
from siteops.utils.dependencies import JPEGOPTIM, OPTIPNG, Tool
from siteops.utils.file_io import (
    discard,
    find_files,
    get_file_size,
    replace_file,
    temp_sibling,
)
from siteops.utils.process import CommandError, run_command

logger = logging.getLogger(__name__)

JPEG_SUFFIXES = {".jpg", ".jpeg"}
PNG_SUFFIXES = {".png"}

# Errors that skip the current file without aborting the run
FILE_ERRORS = (CommandError, OSError, UnicodeDecodeError, Image.DecompressionBombError)

Step = Tuple[str, Callable[[Path], bool]]


def required_tools(images: bool) -> List[Tool]:
    """External binaries needed for the selected asset types."""
    return [JPEGOPTIM, OPTIPNG] if images else []


def percent_saved(original_size: int, optimized_size: int) -> int:
    """Integer percentage saved; 0 for empty files."""
    if original_size <= 0:
        return 0
    return (original_size - optimized_size) * 100 // original_size


def savings_message(label: str, name: str, original_size: int, optimized_size: int) -> str:
    saved = original_size - optimized_size
    pct = percent_saved(original_size, optimized_size)
    return f"{label} optimized: {name} - Saved {saved} bytes ({pct}%)"


class AssetOptimizer:
    """
    Optimize the assets under ``settings.assets_dir``.

    Args:
        settings: Optimizer configuration
        runner: Command runner used for jpegoptim / optipng (injectable for tests)
    """

    def __init__(
        self,
        settings: OptimizerSettings,
        runner: Callable = run_command,
    ):
        self.settings = settings
        self.runner = runner
        self.stats = OptimizationStats()

    # ------------------------------------------------------------------
    # Bookkeeping
    # ------------------------------------------------------------------

    def _record(
        self,
        path: Path,
        asset_type: AssetType,
        original_size: int,
        optimized_size: int,
    ) -> None:
        record = SavingsRecord(
            path=str(path),
            asset_type=asset_type,
            original_size=original_size,
            optimized_size=optimized_size,
        )
        self.stats.add_savings(asset_type, record.bytes_saved)
        append_savings(self.settings.savings_file, record)

    def _process(self, path: Path, steps: Sequence[Step]) -> None:
        """Run ``steps`` on one file, isolating failures to that file."""
        self.stats.processed += 1
        changed = False

        for action, step in steps:
            try:
                changed = step(path) or changed
            except FILE_ERRORS as e:
                logger.error(f"Failed to {action}: {path.name} ({e})")
                self.stats.failed += 1
                return

        if changed:
            self.stats.optimized += 1
        else:
            self.stats.skipped += 1

    # ------------------------------------------------------------------
    # Images
    # ------------------------------------------------------------------

    def _compress_image(
        self,
        path: Path,
        asset_type: AssetType,
        build_command: Callable[[Path], List[str]],
    ) -> bool:
        label = asset_type.value.upper()
        original_size = get_file_size(path)

        if original_size <= self.settings.max_image_size:
            logger.info(f"{label} already small enough: {path.name} ({original_size} bytes)")
            return False

        logger.info(f"Optimizing {label}: {path.name} ({original_size} bytes)")

        temp_file = temp_sibling(path)
        try:
            shutil.copy2(path, temp_file)
            self.runner(build_command(temp_file), timeout=self.settings.command_timeout)
            optimized_size = get_file_size(temp_file)

            if optimized_size < original_size:
                replace_file(temp_file, path)
                logger.info(savings_message(label, path.name, original_size, optimized_size))
                self._record(path, asset_type, original_size, optimized_size)
                return True

            logger.info(f"{label} already optimized: {path.name}")
            return False
        finally:
            discard(temp_file)

    def optimize_jpeg(self, path: Path) -> bool:
        """Losslessly recompress a JPEG above the size threshold."""
        return self._compress_image(
            path,
            AssetType.JPEG,
            lambda target: [
                "jpegoptim",
                "--strip-all",
                f"--max={self.settings.jpeg_quality}",
                str(target),
            ],
        )

    def optimize_png(self, path: Path) -> bool:
        """Recompress a PNG above the size threshold."""
        return self._compress_image(
            path,
            AssetType.PNG,
            lambda target: [
                "optipng",
                f"-o{self.settings.png_level}",
                "-strip",
                "all",
                str(target),
            ],
        )

    def resize_image(self, path: Path) -> bool:
        """
        Downscale an image that exceeds the maximum width or height.

        The aspect ratio is preserved and the result fits inside
        ``max_width`` x ``max_height``.

        Returns:
            True if the image was resized
        """
        max_width = self.settings.max_width
        max_height = self.settings.max_height

        try:
            with Image.open(path) as img:
                width, height = img.size
        except (OSError, Image.DecompressionBombError):
            logger.warning(f"Cannot get dimensions for: {path.name}")
            return False

        if width <= max_width and height <= max_height:
            return False

        logger.info(
            f"Resizing image: {path.name} ({width}x{height} -> max {max_width}x{max_height})"
        )

        temp_file = temp_sibling(path)
        try:
            with Image.open(path) as img:
                image_format = img.format
                img.thumbnail((max_width, max_height), Image.Resampling.LANCZOS)
                if image_format == "JPEG":
                    img.save(temp_file, format=image_format, quality=self.settings.jpeg_quality)
                else:
                    img.save(temp_file, format=image_format, optimize=True)
                new_width, new_height = img.size
            replace_file(temp_file, path)
        finally:
            discard(temp_file)

        logger.info(f"Image resized: {path.name} -> {new_width}x{new_height}")
        return True

    # ------------------------------------------------------------------
    # CSS / JavaScript
    # ------------------------------------------------------------------

    def _backup_file(self, path: Path) -> None:
        backup = path.with_name(path.name + ".backup")
        if backup.exists():
            return
        shutil.copy2(path, backup)
        logger.info(f"Backup written: {backup.name}")

    def _minify(
        self,
        path: Path,
        asset_type: AssetType,
        label: str,
        minifier: Callable[[str], str],
    ) -> bool:
        logger.info(f"Optimizing {label}: {path.name}")

        source = path.read_text(encoding="utf-8")
        if self.settings.file_backups:
            self._backup_file(path)

        original_size = get_file_size(path)
        temp_file = temp_sibling(path)
        try:
            temp_file.write_text(minifier(source), encoding="utf-8")
            optimized_size = get_file_size(temp_file)

            if optimized_size < original_size:
                replace_file(temp_file, path)
                logger.info(savings_message(label, path.name, original_size, optimized_size))
                self._record(path, asset_type, original_size, optimized_size)
                return True

            logger.info(f"{label} already minified: {path.name}")
            return False
        finally:
            discard(temp_file)

    def minify_css(self, path: Path) -> bool:
        return self._minify(path, AssetType.CSS, "CSS", cssmin)

    def minify_js(self, path: Path) -> bool:
        return self._minify(path, AssetType.JS, "JavaScript", jsmin)

    def create_gzip(self, path: Path) -> bool:
        """
        Write a ``.gz`` sibling for servers that serve precompressed files.

        Returns False: the asset itself is unchanged.
        """
        gzip_file = compress_file(path)
        original_size = get_file_size(path)
        gzip_size = get_file_size(gzip_file)
        saved = original_size - gzip_size
        logger.info(
            f"Gzip created: {gzip_file.name} - Saved {saved} bytes "
            f"({percent_saved(original_size, gzip_size)}%)"
        )
        self._record(path, AssetType.GZIP, original_size, gzip_size)
        return False

    # ------------------------------------------------------------------
    # Backups and orchestration
    # ------------------------------------------------------------------

    def create_backup(self, source_dir: Optional[Path] = None, name: str = "assets") -> Optional[Path]:
        """
        Archive the asset tree before it is modified.

        Returns:
            Path to the archive, or None if it could not be written
        """
        source_dir = source_dir or self.settings.assets_dir
        try:
            archive = archive_directory(source_dir, self.settings.backup_dir, name)
        except (OSError, tarfile.TarError) as e:
            logger.error(f"Failed to create backup of {source_dir}: {e}")
            return None
        logger.info(f"Backup created: {archive}")
        return archive

    def _run_type(self, title: str, directory: Path, batches: Sequence[Tuple[set, List[Step]]]) -> None:
        if not directory.is_dir():
            logger.warning(f"{title} directory not found: {directory}")
            return

        logger.info(f"Starting {title.lower()} optimization...")
        for suffixes, steps in batches:
            for path in find_files(directory, suffixes):
                self._process(path, steps)
        logger.info(f"{title} optimization completed")

    def run(
        self,
        images: bool = True,
        css: bool = True,
        js: bool = True,
        gzip: bool = False,
    ) -> OptimizationStats:
        """
        Optimize the selected asset types.

        Args:
            images: Compress and resize JPEG/PNG images
            css: Minify stylesheets
            js: Minify scripts
            gzip: Also write .gz siblings of CSS/JS files

        Returns:
            Counters and bytes saved for this run
        """
        if images:
            self._run_type("Image", self.settings.images_dir, [
                (JPEG_SUFFIXES, [("optimize JPEG", self.optimize_jpeg), ("resize", self.resize_image)]),
                (PNG_SUFFIXES, [("optimize PNG", self.optimize_png), ("resize", self.resize_image)]),
            ])

        gzip_step: List[Step] = [("create gzip", self.create_gzip)] if gzip else []

        if css:
            self._run_type("CSS", self.settings.css_dir, [
                ({".css"}, [("optimize CSS", self.minify_css)] + gzip_step),
            ])

        if js:
            self._run_type("JavaScript", self.settings.js_dir, [
                ({".js"}, [("optimize JavaScript", self.minify_js)] + gzip_step),
            ])

        return self.stats
