"""
AlbumDeleter - Removes every object of an album.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional

from .errors import InputError
from .keys import album_prefix, is_valid_album_id, manifest_key
from .s3_client import S3Client


@dataclass
class DeleteResult:
    """
    Outcome of an album deletion.

    Attributes:
        album_id: Album that was deleted
        removed: Objects confirmed deleted
        failed_keys: Objects that could not be confirmed deleted
    """
    album_id: str
    removed: int = 0
    failed_keys: List[str] = field(default_factory=list)

    @property
    def complete(self) -> bool:
        return not self.failed_keys


class AlbumDeleter:
    """
    Deletes albums.

    The manifest goes first, in its own request, so that an interrupted
    deletion already reads as "not found". Remaining renditions are then
    removed in batches; any left behind are orphans.
    """

    def __init__(self, store: S3Client, logger: Optional[logging.Logger] = None):
        self.store = store
        self.logger = logger or logging.getLogger(__name__)

    def delete(self, album_id: str) -> DeleteResult:
        """
        Delete an album. Deleting a missing album removes nothing and succeeds.

        Raises:
            InputError: album_id is not a valid album id
            StoreError: Listing the album failed
        """
        if not is_valid_album_id(album_id):
            raise InputError(f"Invalid album id: {album_id!r}")

        result = DeleteResult(album_id=album_id)
        keys = self.store.list(album_prefix(album_id))
        if not keys:
            self.logger.info(f"Album {album_id} has no objects, nothing to delete")
            return result

        manifest = manifest_key(album_id)
        if manifest in keys:
            failed = self.store.delete_many([manifest])
            if failed:
                # Without the manifest gone the album is still visible; stop here.
                self.logger.error(f"Could not delete manifest of album {album_id}")
                result.failed_keys = list(failed)
                return result
            result.removed += 1
            self.logger.info(f"Deleted manifest of album {album_id}")

        renditions = [k for k in keys if k != manifest]
        failed = self.store.delete_many(renditions)
        result.removed += len(renditions) - len(failed)
        result.failed_keys.extend(failed)

        if failed:
            self.logger.warning(f"Album {album_id}: {len(failed)} objects left as orphans")
        self.logger.info(f"Deleted album {album_id}: {result.removed} objects removed")
        return result
