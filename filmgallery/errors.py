"""
Errors - Exception hierarchy for album ingestion, storage and reading.
"""

from typing import Optional


class GalleryError(Exception):
    """Base class for all filmgallery errors."""


class InputError(GalleryError):
    """Invalid caller input: unreadable path, malformed album id."""


class EmptyInputError(InputError):
    """No source images were supplied to an upload."""


class ImageError(GalleryError):
    """
    Failure confined to a single source image.

    Attributes:
        filename: Original filename of the image that failed (display only)
    """

    def __init__(self, message: str, filename: Optional[str] = None):
        super().__init__(message)
        self.filename = filename


class DecodeError(ImageError):
    """Source bytes are corrupt or in an unsupported format."""


class EncodeError(ImageError):
    """A rendition could not be encoded as JPEG."""


class StoreError(GalleryError):
    """
    Object store operation failed.

    Attributes:
        key: Object key involved, if any
        fatal: True for errors that no retry can fix (auth, missing bucket);
            these abort an ingestion run regardless of failure policy
    """

    def __init__(self, message: str, key: Optional[str] = None, fatal: bool = False):
        super().__init__(message)
        self.key = key
        self.fatal = fatal


class NotFoundError(GalleryError):
    """Object or album does not exist (or must be treated as not existing)."""


class ManifestError(GalleryError):
    """Manifest could not be serialized."""


class ParseError(ManifestError):
    """Manifest bytes are not a valid, complete album description."""


class IngestError(GalleryError):
    """
    Run-level ingestion failure; no manifest was written.

    Attributes:
        stats: IngestStats of the run so far, if any
    """

    def __init__(self, message: str, stats=None):
        super().__init__(message)
        self.stats = stats


class NoImagesSucceededError(IngestError):
    """Every source image failed, so no album was created."""


class IngestCancelledError(IngestError):
    """Ingestion was stopped before the manifest was written."""
