"""
GalleryReader - Read side of an album: manifest lookup and rendition addressing.

Anything short of a complete, parsable manifest is reported as NotFoundError
with the same message, so callers cannot tell missing from corrupt.
"""

import logging
from typing import Optional

from .errors import NotFoundError, ParseError
from .keys import ORIGINAL, RENDITION_CLASSES, is_valid_album_id, manifest_key, object_key
from .manifest import Album, ImageEntry, deserialize
from .s3_client import S3Client


class GalleryReader:
    """
    Loads albums for rendering.
    """

    def __init__(self, store: S3Client, logger: Optional[logging.Logger] = None):
        self.store = store
        self.logger = logger or logging.getLogger(__name__)

    def load_album(self, album_id: str) -> Album:
        """
        Fetch and parse an album manifest.

        Raises:
            NotFoundError: Album is absent, incomplete or unreadable
        """
        if not is_valid_album_id(album_id):
            raise NotFoundError(self._not_found(album_id))

        try:
            data = self.store.get(manifest_key(album_id))
        except NotFoundError:
            self.logger.info(f"No manifest for album {album_id}")
            raise NotFoundError(self._not_found(album_id))

        try:
            album = deserialize(data)
        except ParseError as e:
            self.logger.error(f"Unreadable manifest for album {album_id}: {e}")
            raise NotFoundError(self._not_found(album_id))

        if album.album_id != album_id:
            self.logger.error(f"Manifest of album {album_id} names album {album.album_id}")
            raise NotFoundError(self._not_found(album_id))
        return album

    def get_image(self, album_id: str, image_id: str) -> ImageEntry:
        """Look up one image of an album."""
        album = self.load_album(album_id)
        entry = album.get_image(image_id)
        if entry is None:
            raise NotFoundError(f"Image not found: {image_id}")
        return entry

    @staticmethod
    def rendition_key(album_id: str, rendition_class: str, image_id: str) -> str:
        if rendition_class not in RENDITION_CLASSES:
            raise NotFoundError(f"Unknown rendition: {rendition_class}")
        return object_key(album_id, rendition_class, image_id)

    def fetch_rendition(self, album_id: str, rendition_class: str, image_id: str) -> bytes:
        """Return rendition bytes of an image listed in the album manifest."""
        entry = self.get_image(album_id, image_id)
        return self.store.get(self.rendition_key(album_id, rendition_class, entry.id))

    def download_url(self, album_id: str, image_id: str, expires_in: Optional[int] = None) -> str:
        """Time-limited URL for the full-resolution original, named after the source file."""
        entry = self.get_image(album_id, image_id)
        return self.store.presigned_url(
            self.rendition_key(album_id, ORIGINAL, entry.id),
            expires_in=expires_in,
            download_name=entry.original_filename,
        )

    @staticmethod
    def _not_found(album_id: str) -> str:
        return f"Album not found: {album_id}"
