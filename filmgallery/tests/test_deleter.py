"""Tests for AlbumDeleter class."""

import pytest

from filmgallery.deleter import AlbumDeleter, DeleteResult
from filmgallery.errors import InputError
from filmgallery.keys import manifest_key
from filmgallery.manifest import serialize


def _store_album(store, album):
    store.put(manifest_key(album.album_id), serialize(album), 'application/json')
    for entry in album.images:
        for rendition_class in ('thumbnail', 'preview', 'original'):
            store.put(entry.key(album.album_id, rendition_class), b'jpeg')


class TestAlbumDeleter:
    """Tests for AlbumDeleter class."""

    def test_delete_album(self, memory_store, sample_album):
        """Test every object of the album is removed."""
        _store_album(memory_store, sample_album)

        result = AlbumDeleter(memory_store).delete(sample_album.album_id)

        assert result.complete
        assert result.removed == 1 + 2 * 3
        assert memory_store.objects == {}

    def test_manifest_deleted_first(self, memory_store, sample_album):
        """Test the manifest goes alone, before any rendition."""
        _store_album(memory_store, sample_album)

        AlbumDeleter(memory_store).delete(sample_album.album_id)

        assert memory_store.delete_log[0] == [manifest_key(sample_album.album_id)]
        assert manifest_key(sample_album.album_id) not in memory_store.delete_log[1]

    def test_other_albums_untouched(self, memory_store, sample_album):
        """Test deletion stays inside the album prefix."""
        _store_album(memory_store, sample_album)
        other = '0a1b2c3d-4e5f-4a6b-8c7d-9e0f1a2b3c4d/manifest.json'
        memory_store.put(other, b'{}', 'application/json')

        AlbumDeleter(memory_store).delete(sample_album.album_id)

        assert list(memory_store.objects) == [other]

    def test_delete_missing_album(self, memory_store):
        """Test deleting an unknown album succeeds and removes nothing."""
        result = AlbumDeleter(memory_store).delete('3f2b8c1e-9a4d-4e6f-8b7a-1c2d3e4f5a6b')

        assert result.complete
        assert result.removed == 0
        assert memory_store.delete_log == []

    def test_delete_twice(self, memory_store, sample_album):
        """Test deletion is idempotent."""
        _store_album(memory_store, sample_album)
        deleter = AlbumDeleter(memory_store)

        deleter.delete(sample_album.album_id)
        second = deleter.delete(sample_album.album_id)

        assert second.complete
        assert second.removed == 0

    def test_delete_orphans_without_manifest(self, memory_store, sample_album):
        """Test renditions left by an aborted upload are cleaned up."""
        _store_album(memory_store, sample_album)
        memory_store.objects.pop(manifest_key(sample_album.album_id))

        result = AlbumDeleter(memory_store).delete(sample_album.album_id)

        assert result.removed == 6
        assert memory_store.objects == {}

    def test_partial_failure_reported(self, memory_store, sample_album):
        """Test renditions that could not be deleted are listed."""
        _store_album(memory_store, sample_album)
        stuck = sample_album.images[0].key(sample_album.album_id, 'original')
        memory_store.undeletable.add(stuck)

        result = AlbumDeleter(memory_store).delete(sample_album.album_id)

        assert not result.complete
        assert result.failed_keys == [stuck]
        assert result.removed == 6
        assert manifest_key(sample_album.album_id) not in memory_store.objects

    def test_manifest_delete_failure_stops(self, memory_store, sample_album):
        """Test renditions are kept while the manifest still exists."""
        _store_album(memory_store, sample_album)
        memory_store.undeletable.add(manifest_key(sample_album.album_id))

        result = AlbumDeleter(memory_store).delete(sample_album.album_id)

        assert result.failed_keys == [manifest_key(sample_album.album_id)]
        assert result.removed == 0
        assert len(memory_store.objects) == 7

    @pytest.mark.parametrize('album_id', ['', '../', 'abc', '*'])
    def test_invalid_album_id(self, memory_store, album_id):
        """Test malformed ids are rejected before touching the store."""
        with pytest.raises(InputError):
            AlbumDeleter(memory_store).delete(album_id)

        assert memory_store.delete_log == []


class TestDeleteResult:
    """Tests for DeleteResult."""

    def test_complete(self):
        assert DeleteResult(album_id='a').complete
        assert not DeleteResult(album_id='a', failed_keys=['k']).complete
