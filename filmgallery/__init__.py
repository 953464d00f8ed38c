"""
Film gallery - private web albums kept entirely in an S3-compatible bucket.

Upload flow:
    1. Render: each source image becomes thumbnail, preview and original JPEGs
    2. Store: renditions are uploaded under {album_id}/
    3. Publish: {album_id}/manifest.json is written last

A manifest is only ever written once every image it lists is fully stored,
so manifest presence is what makes an album visible.
"""

__version__ = "1.0.0"

from .errors import (
    GalleryError,
    InputError,
    EmptyInputError,
    ImageError,
    DecodeError,
    EncodeError,
    StoreError,
    NotFoundError,
    ManifestError,
    ParseError,
    IngestError,
    NoImagesSucceededError,
    IngestCancelledError,
)
from .s3_config import S3Config
from .s3_client import S3Client
from .ingest_config import IngestConfig
from .renderer import Rendition, RenditionRenderer
from .manifest import Album, ImageEntry, serialize, deserialize
from .sources import SourceImage, collect_source_paths, collect_sources
from .ingest_stats import IngestStats, ImageFailure
from .ingest_progress import IngestProgress
from .ingestor import Ingestor, IngestResult
from .deleter import AlbumDeleter, DeleteResult
from .reader import GalleryReader
from .reporter import Reporter

__all__ = [
    "GalleryError",
    "InputError",
    "EmptyInputError",
    "ImageError",
    "DecodeError",
    "EncodeError",
    "StoreError",
    "NotFoundError",
    "ManifestError",
    "ParseError",
    "IngestError",
    "NoImagesSucceededError",
    "IngestCancelledError",
    "S3Config",
    "S3Client",
    "IngestConfig",
    "Rendition",
    "RenditionRenderer",
    "Album",
    "ImageEntry",
    "serialize",
    "deserialize",
    "SourceImage",
    "collect_source_paths",
    "collect_sources",
    "IngestStats",
    "ImageFailure",
    "IngestProgress",
    "Ingestor",
    "IngestResult",
    "AlbumDeleter",
    "DeleteResult",
    "GalleryReader",
    "Reporter",
]
