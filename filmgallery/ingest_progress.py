"""
IngestProgress - Tracks and displays upload progress.
"""

import logging
from typing import Optional

from .ingest_stats import IngestStats


class IngestProgress:
    """
    Tracks and displays upload progress with optional per-file output.
    """

    def __init__(
        self,
        show_files: bool = False,
        log_interval: int = 10,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize progress tracker.

        Args:
            show_files: If True, print each file as it finishes
            log_interval: Log summary progress every N images (when not show_files)
            logger: Optional logger instance
        """
        self.show_files = show_files
        self.log_interval = log_interval
        self.logger = logger or logging.getLogger(__name__)
        self.last_logged = 0

    def on_image_done(
        self,
        filename: str,
        success: bool,
        uploaded_bytes: Optional[int] = None,
        error: Optional[str] = None
    ) -> None:
        """
        Called when an image is stored or skipped.

        Args:
            filename: Original filename
            success: Whether all three renditions were stored
            uploaded_bytes: Bytes stored for the image (if success)
            error: Error message (if failed)
        """
        if self.show_files:
            if success:
                size_str = self._format_bytes(uploaded_bytes) if uploaded_bytes else "unknown"
                print(f"  [OK] {filename} -> 3 renditions stored ({size_str})")
            else:
                print(f"  [SKIP] {filename} -> {error or 'failed'}")

    def on_progress_update(self, stats: IngestStats) -> None:
        """
        Called after every finished image to report overall progress.

        Args:
            stats: Current upload statistics
        """
        total_done = stats.completed_count

        if not self.show_files and total_done - self.last_logged >= self.log_interval:
            self.last_logged = total_done
            self.logger.info(
                f"Progress: {stats.succeeded} stored, {stats.skipped} skipped, "
                f"{stats.remaining_count} left ({stats.rate_per_minute:.1f}/min)"
            )

    @staticmethod
    def _format_bytes(bytes_val: Optional[int]) -> str:
        """Format bytes as human-readable string."""
        if bytes_val is None:
            return "unknown"
        for unit in ['B', 'KB', 'MB', 'GB']:
            if bytes_val < 1024:
                return f"{bytes_val:.1f} {unit}"
            bytes_val /= 1024
        return f"{bytes_val:.1f} TB"
