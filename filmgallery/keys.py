"""
Key scheme - Album/image identifiers and their object-store keys.

Layout (shared with every reader):
    {album_id}/manifest.json
    {album_id}/thumbnails/{image_id}.jpg
    {album_id}/previews/{image_id}.jpg
    {album_id}/originals/{image_id}.jpg
"""

import hashlib
import uuid

THUMBNAIL = 'thumbnail'
PREVIEW = 'preview'
ORIGINAL = 'original'

RENDITION_CLASSES = (THUMBNAIL, PREVIEW, ORIGINAL)

RENDITION_DIRS = {
    THUMBNAIL: 'thumbnails',
    PREVIEW: 'previews',
    ORIGINAL: 'originals',
}

MANIFEST_NAME = 'manifest.json'


def new_album_id() -> str:
    """Generate a fresh, unguessable album id."""
    return str(uuid.uuid4())


def is_valid_album_id(value: str) -> bool:
    """True if value is a canonical UUID string."""
    if not isinstance(value, str):
        return False
    try:
        return str(uuid.UUID(value)) == value
    except ValueError:
        return False


def image_id(index: int, source: bytes) -> str:
    """
    Assign the id of the image at position index within an upload.

    The zero-padded index keeps ids unique and in input order; the content
    digest suffix makes them opaque. Filenames never take part.
    """
    digest = hashlib.sha256(source).hexdigest()[:12]
    return f"{index:05d}-{digest}"


def album_prefix(album_id: str) -> str:
    return f"{album_id}/"


def manifest_key(album_id: str) -> str:
    return f"{album_id}/{MANIFEST_NAME}"


def object_key(album_id: str, rendition_class: str, image_id: str) -> str:
    """Key of one rendition of one image."""
    try:
        directory = RENDITION_DIRS[rendition_class]
    except KeyError:
        raise ValueError(f"Unknown rendition class: {rendition_class!r}")
    return f"{album_id}/{directory}/{image_id}.jpg"
