"""
IngestStats - Statistics for an upload run.
"""

import time
from dataclasses import dataclass, field
from typing import List


@dataclass
class ImageFailure:
    """
    A source image that was left out of the album.

    Attributes:
        index: Position of the image in the upload
        filename: Original filename
        stage: 'render' (read, decode or encode) or 'upload'
        error: Error message
    """
    index: int
    filename: str
    stage: str
    error: str


@dataclass
class IngestStats:
    """
    Statistics for an upload run.

    Attributes:
        total: Source images in the upload
        succeeded: Images whose three renditions were stored
        skipped: Images left out after a failure
        bytes_uploaded: Total bytes of renditions stored
        start_time: Start timestamp
        failures: One entry per skipped image, in input order
    """
    total: int = 0
    succeeded: int = 0
    skipped: int = 0
    bytes_uploaded: int = 0
    start_time: float = field(default_factory=time.time)
    failures: List[ImageFailure] = field(default_factory=list)

    def record_failure(self, failure: ImageFailure) -> None:
        self.skipped += 1
        self.failures.append(failure)
        self.failures.sort(key=lambda f: f.index)

    @property
    def elapsed_seconds(self) -> float:
        """Elapsed time in seconds."""
        return time.time() - self.start_time

    @property
    def rate_per_minute(self) -> float:
        """Images stored per minute."""
        if self.elapsed_seconds > 0:
            return self.succeeded / self.elapsed_seconds * 60
        return 0.0

    @property
    def completed_count(self) -> int:
        """Images finished either way."""
        return self.succeeded + self.skipped

    @property
    def remaining_count(self) -> int:
        return self.total - self.completed_count
