"""
Reporter - Human-readable summaries of uploads, deletions and albums.
"""

import logging
import sys
from typing import Optional, TextIO

from .deleter import DeleteResult
from .ingest_stats import IngestStats
from .ingestor import IngestResult
from .keys import ORIGINAL, PREVIEW, THUMBNAIL
from .manifest import Album


class Reporter:
    """
    Generates human-readable reports for the CLI.
    """

    def __init__(
        self,
        output: Optional[TextIO] = None,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize reporter.

        Args:
            output: Output stream (default: stdout)
            logger: Optional logger instance
        """
        self.output = output or sys.stdout
        self.logger = logger or logging.getLogger(__name__)

    def _print(self, text: str = "") -> None:
        """Print to output stream."""
        print(text, file=self.output)

    def _format_bytes(self, bytes_val: float) -> str:
        """Format bytes as human-readable string."""
        for unit in ['B', 'KB', 'MB', 'GB', 'TB']:
            if bytes_val < 1024:
                return f"{bytes_val:.1f} {unit}"
            bytes_val /= 1024
        return f"{bytes_val:.1f} PB"

    def _format_duration(self, seconds: float) -> str:
        """Format duration as human-readable string."""
        if seconds < 60:
            return f"{seconds:.1f} seconds"
        elif seconds < 3600:
            return f"{seconds / 60:.1f} minutes"
        else:
            return f"{seconds / 3600:.1f} hours"

    def _print_failures(self, stats: IngestStats) -> None:
        if not stats.failures:
            return
        self._print()
        self._print("Skipped images:")
        for failure in stats.failures:
            self._print(f"  {failure.filename} ({failure.stage}): {failure.error}")

    def report_upload(self, result: IngestResult) -> None:
        """Summary of a finished upload."""
        stats = result.stats
        self._print("=" * 60)
        self._print("UPLOAD COMPLETE")
        self._print("=" * 60)
        self._print(f"  Album:       {result.album.name}")
        self._print(f"  Album ID:    {result.album_id}")
        self._print(f"  Images:      {stats.succeeded} stored, {stats.skipped} skipped, {stats.total} total")
        self._print(f"  Uploaded:    {self._format_bytes(stats.bytes_uploaded)}")
        self._print(f"  Time:        {self._format_duration(stats.elapsed_seconds)}")
        self._print_failures(stats)

    def report_upload_failure(self, reason: str, stats: Optional[IngestStats] = None) -> None:
        """Summary of an upload that produced no album."""
        self._print("=" * 60)
        self._print("UPLOAD FAILED")
        self._print("=" * 60)
        self._print(f"  Reason:      {reason}")
        self._print("  No album was created.")
        if stats is not None:
            self._print_failures(stats)

    def report_delete(self, result: DeleteResult) -> None:
        """Summary of an album deletion."""
        if result.removed == 0 and result.complete:
            self._print(f"Album {result.album_id}: nothing to delete")
            return
        self._print(f"Album {result.album_id}: {result.removed} objects removed")
        if not result.complete:
            self._print(f"  {len(result.failed_keys)} objects could not be deleted:")
            for key in result.failed_keys:
                self._print(f"    {key}")

    def report_album(self, album: Album) -> None:
        """Details of a stored album."""
        self._print("=" * 60)
        self._print(f"ALBUM: {album.name}")
        self._print("=" * 60)
        self._print(f"  Album ID:    {album.album_id}")
        self._print(f"  Created:     {album.created_at}")
        self._print(f"  Images:      {album.total_images}")
        self._print(f"  Stored:      {self._format_bytes(album.total_bytes)}")
        self._print()
        self._print(f"  {'ID':<20} {'Original':>11} {'Preview':>11} {'Thumb':>9}  Filename")
        self._print(f"  {'-' * 20} {'-' * 11} {'-' * 11} {'-' * 9}  {'-' * 20}")
        for entry in album.images:
            dims = {}
            for rendition_class in (ORIGINAL, PREVIEW, THUMBNAIL):
                width, height = entry.dimensions(rendition_class)
                dims[rendition_class] = f"{width}x{height}"
            self._print(
                f"  {entry.id:<20} {dims[ORIGINAL]:>11} {dims[PREVIEW]:>11} "
                f"{dims[THUMBNAIL]:>9}  {entry.original_filename}"
            )
