"""
Pytest fixtures for filmgallery tests.
"""

import io
import threading
from typing import Callable, Dict, List, Optional

import pytest
from PIL import Image

from filmgallery.errors import NotFoundError, StoreError


class MemoryStore:
    """
    In-memory stand-in for S3Client with failure injection.

    Args:
        fail_put: Called with each key before a put; may raise to simulate
            a failed upload
    """

    def __init__(self, fail_put: Optional[Callable[[str], None]] = None):
        self.objects: Dict[str, bytes] = {}
        self.content_types: Dict[str, str] = {}
        self.put_log: List[str] = []
        self.delete_log: List[List[str]] = []
        self.undeletable: set = set()
        self.fail_put = fail_put
        self._lock = threading.Lock()

    def put(self, key: str, data: bytes, content_type: str = 'image/jpeg') -> None:
        if self.fail_put:
            self.fail_put(key)
        with self._lock:
            self.objects[key] = data
            self.content_types[key] = content_type
            self.put_log.append(key)

    def get(self, key: str) -> bytes:
        with self._lock:
            if key not in self.objects:
                raise NotFoundError(f"Object not found: {key}")
            return self.objects[key]

    def list(self, prefix: str) -> List[str]:
        with self._lock:
            return sorted(k for k in self.objects if k.startswith(prefix))

    def delete_many(self, keys) -> List[str]:
        keys = list(keys)
        failed = []
        with self._lock:
            self.delete_log.append(keys)
            for key in keys:
                if key in self.undeletable:
                    failed.append(key)
                else:
                    self.objects.pop(key, None)
        return failed

    def presigned_url(self, key: str, expires_in=None, download_name=None) -> str:
        url = f"https://signed.example.com/{key}?expires={expires_in or 3600}"
        if download_name:
            url += f"&name={download_name}"
        return url

    def manifest_keys(self) -> List[str]:
        return [k for k in self.objects if k.endswith('/manifest.json')]


def fail_on(fragment: str, fatal: bool = False) -> Callable[[str], None]:
    """Build a fail_put hook that rejects keys containing fragment."""
    def hook(key: str) -> None:
        if fragment in key:
            raise StoreError(f"Injected failure for {key}", key=key, fatal=fatal)
    return hook


def make_jpeg(width: int = 120, height: int = 80, color='red', exif: Optional[Image.Exif] = None) -> bytes:
    """Encode a solid-color JPEG."""
    img = Image.new('RGB', (width, height), color=color)
    buffer = io.BytesIO()
    if exif is not None:
        img.save(buffer, format='JPEG', exif=exif.tobytes())
    else:
        img.save(buffer, format='JPEG')
    return buffer.getvalue()


@pytest.fixture
def s3_config():
    """Fixture providing S3 configuration."""
    from filmgallery.s3_config import S3Config

    return S3Config(
        bucket='test-bucket',
        endpoint='https://test-endpoint.example.com:9000',
        access_key='test-access-key',
        secret_key='test-secret-key',
        region='us-east-1',
        backoff_ms=0,
        backoff_max_ms=0,
    )


@pytest.fixture
def memory_store():
    """Fixture providing an empty in-memory store."""
    return MemoryStore()


@pytest.fixture
def sample_image_bytes():
    """Fixture providing sample JPEG image bytes."""
    return make_jpeg(120, 80)


@pytest.fixture
def sample_png_bytes():
    """Fixture providing sample PNG image bytes with transparency."""
    img = Image.new('RGBA', (100, 100), color=(255, 0, 0, 128))
    buffer = io.BytesIO()
    img.save(buffer, format='PNG')
    return buffer.getvalue()


@pytest.fixture
def sample_sources():
    """Fixture providing three in-memory source images."""
    from filmgallery.sources import SourceImage

    return [
        SourceImage(filename='roll1-01.jpg', data=make_jpeg(300, 200, 'red')),
        SourceImage(filename='roll1-02.jpg', data=make_jpeg(200, 300, 'green')),
        SourceImage(filename='roll1-03.jpg', data=make_jpeg(500, 500, 'blue')),
    ]


@pytest.fixture
def corrupt_source():
    """Fixture providing a source that cannot be decoded."""
    from filmgallery.sources import SourceImage

    return SourceImage(filename='broken.jpg', data=b'\xff\xd8\xff not really a jpeg')


@pytest.fixture
def sample_album():
    """Fixture providing an album with two images."""
    from filmgallery.manifest import Album, ImageEntry

    album = Album(
        album_id='3f2b8c1e-9a4d-4e6f-8b7a-1c2d3e4f5a6b',
        name='Roll 12',
        created_at='2026-01-01T12:00:00+00:00',
    )
    album.add_image(ImageEntry(
        id='00000-a1b2c3d4e5f6',
        original_filename='frame-01.jpg',
        width_thumbnail=400, height_thumbnail=267,
        width_preview=2048, height_preview=1365,
        width_original=6000, height_original=4000,
        size_thumbnail=30000, size_preview=900000, size_original=9000000,
        captured_at='2025-12-31T10:00:00',
        file_hash='ab' * 32,
    ))
    album.add_image(ImageEntry(
        id='00001-0f1e2d3c4b5a',
        original_filename='frame-02.jpg',
        width_thumbnail=267, height_thumbnail=400,
        width_preview=1365, height_preview=2048,
        width_original=4000, height_original=6000,
        size_thumbnail=31000, size_preview=910000, size_original=9100000,
    ))
    return album


@pytest.fixture
def logger():
    """Fixture providing a logger."""
    import logging
    return logging.getLogger('test')
