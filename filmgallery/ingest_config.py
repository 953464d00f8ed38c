"""
IngestConfig - Policy and tuning knobs for one ingestion run.
"""

import os
from dataclasses import dataclass, field


def _default_render_workers() -> int:
    return os.cpu_count() or 1


@dataclass
class IngestConfig:
    """
    Ingestion settings.

    Attributes:
        fail_fast: Abort the whole album on the first per-image failure
            instead of skipping the image
        sort_by_capture_time: Stable-sort images by EXIF capture time
        render_workers: Parallel decode/encode workers (CPU bound)
        upload_workers: Parallel upload workers (network bound)
        quality: JPEG quality for every rendition
        thumbnail_size: Long-edge bound for thumbnails
        preview_size: Long-edge bound for previews
        strip_metadata: Remove EXIF (including GPS) from every rendition
    """
    fail_fast: bool = False
    sort_by_capture_time: bool = False
    render_workers: int = field(default_factory=_default_render_workers)
    upload_workers: int = 8
    quality: int = 92
    thumbnail_size: int = 400
    preview_size: int = 2048
    strip_metadata: bool = True
