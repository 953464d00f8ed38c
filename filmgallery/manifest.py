"""
Manifest - The JSON description of an album and its ordered images.

The manifest at {album_id}/manifest.json is the only document a gallery
reader fetches. Reading fails closed: anything incomplete or malformed is a
ParseError, never a partially-populated Album.
"""

import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import List, Optional, Tuple

from .errors import ManifestError, ParseError
from .keys import RENDITION_CLASSES, is_valid_album_id, object_key


@dataclass
class ImageEntry:
    """
    One image of an album with the metadata of its three renditions.

    Attributes:
        id: Image id, unique within the album
        original_filename: Source filename (display/download hint only)
        width_thumbnail, height_thumbnail: Thumbnail dimensions
        width_preview, height_preview: Preview dimensions
        width_original, height_original: Original dimensions
        size_thumbnail, size_preview, size_original: Encoded sizes in bytes
        renditions: Rendition classes stored for this image
        captured_at: EXIF capture time (ISO 8601), if known
        file_hash: SHA-256 of the source bytes, if known
    """
    id: str
    original_filename: str
    width_thumbnail: int
    height_thumbnail: int
    width_preview: int
    height_preview: int
    width_original: int
    height_original: int
    size_thumbnail: int = 0
    size_preview: int = 0
    size_original: int = 0
    renditions: List[str] = field(default_factory=lambda: list(RENDITION_CLASSES))
    captured_at: Optional[str] = None
    file_hash: Optional[str] = None

    DIMENSION_FIELDS = (
        'width_thumbnail', 'height_thumbnail',
        'width_preview', 'height_preview',
        'width_original', 'height_original',
    )
    SIZE_FIELDS = ('size_thumbnail', 'size_preview', 'size_original')

    def dimensions(self, rendition_class: str) -> Tuple[int, int]:
        """Return (width, height) of a rendition class."""
        return (
            getattr(self, f'width_{rendition_class}'),
            getattr(self, f'height_{rendition_class}'),
        )

    def key(self, album_id: str, rendition_class: str) -> str:
        """Object key of one rendition of this image."""
        return object_key(album_id, rendition_class, self.id)

    def to_dict(self) -> dict:
        data = {
            'id': self.id,
            'original_filename': self.original_filename,
        }
        for name in self.DIMENSION_FIELDS + self.SIZE_FIELDS:
            data[name] = getattr(self, name)
        data['renditions'] = list(self.renditions)
        if self.captured_at is not None:
            data['captured_at'] = self.captured_at
        if self.file_hash is not None:
            data['file_hash'] = self.file_hash
        return data

    @classmethod
    def from_dict(cls, data: dict) -> 'ImageEntry':
        """Create from dictionary, rejecting anything incomplete."""
        if not isinstance(data, dict):
            raise ParseError("Image entry is not an object")

        image_id = _require_str(data, 'id')
        filename = _require_str(data, 'original_filename')
        if not image_id:
            raise ParseError("Image id is empty")

        values = {}
        for name in cls.DIMENSION_FIELDS:
            values[name] = _require_int(data, name, minimum=1)
        for name in cls.SIZE_FIELDS:
            values[name] = _require_int(data, name, minimum=0)

        renditions = data.get('renditions')
        if not isinstance(renditions, list) or not all(isinstance(r, str) for r in renditions):
            raise ParseError(f"Image {image_id}: renditions must be a list of names")
        if len(renditions) != len(RENDITION_CLASSES) or set(renditions) != set(RENDITION_CLASSES):
            raise ParseError(f"Image {image_id}: expected renditions {list(RENDITION_CLASSES)}, got {renditions}")

        captured_at = _optional_str(data, 'captured_at')
        file_hash = _optional_str(data, 'file_hash')

        return cls(
            id=image_id,
            original_filename=filename,
            renditions=list(renditions),
            captured_at=captured_at,
            file_hash=file_hash,
            **values
        )


@dataclass
class Album:
    """
    A complete album.

    Attributes:
        album_id: UUID string; also the object-store prefix
        name: Display name
        created_at: ISO 8601 UTC timestamp of the ingestion run
        images: Images in display order
    """
    album_id: str
    name: str
    created_at: str
    images: List[ImageEntry] = field(default_factory=list)

    def add_image(self, entry: ImageEntry) -> None:
        self.images.append(entry)

    def get_image(self, image_id: str) -> Optional[ImageEntry]:
        for entry in self.images:
            if entry.id == image_id:
                return entry
        return None

    @property
    def total_images(self) -> int:
        return len(self.images)

    @property
    def total_bytes(self) -> int:
        """Stored bytes across all renditions."""
        return sum(
            e.size_thumbnail + e.size_preview + e.size_original
            for e in self.images
        )

    def to_dict(self) -> dict:
        return {
            'album_id': self.album_id,
            'name': self.name,
            'created_at': self.created_at,
            'images': [entry.to_dict() for entry in self.images],
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'Album':
        """Create from dictionary. Unknown fields are ignored."""
        if not isinstance(data, dict):
            raise ParseError("Manifest root is not an object")

        album_id = _require_str(data, 'album_id')
        if not is_valid_album_id(album_id):
            raise ParseError(f"Invalid album id: {album_id!r}")
        name = _require_str(data, 'name')
        created_at = _require_str(data, 'created_at')
        try:
            datetime.fromisoformat(created_at)
        except ValueError:
            raise ParseError(f"Invalid created_at: {created_at!r}")

        images_data = data.get('images')
        if not isinstance(images_data, list):
            raise ParseError("Manifest images must be a list")

        images = [ImageEntry.from_dict(item) for item in images_data]
        seen = set()
        for entry in images:
            if entry.id in seen:
                raise ParseError(f"Duplicate image id: {entry.id}")
            seen.add(entry.id)

        return cls(album_id=album_id, name=name, created_at=created_at, images=images)

    @classmethod
    def create_new(cls, album_id: str, name: str) -> 'Album':
        """Create a new empty album stamped with the current UTC time."""
        return cls(
            album_id=album_id,
            name=name,
            created_at=datetime.now(timezone.utc).isoformat(),
        )


def serialize(album: Album) -> bytes:
    """
    Encode an album as manifest JSON.

    Raises:
        ManifestError: The album cannot be represented as JSON
    """
    try:
        return json.dumps(album.to_dict(), indent=2, ensure_ascii=False).encode('utf-8')
    except (TypeError, ValueError) as e:
        raise ManifestError(f"Cannot serialize manifest for {album.album_id}: {e}") from e


def deserialize(data: bytes) -> Album:
    """
    Decode manifest JSON.

    Raises:
        ParseError: Bytes are not a complete, well-formed manifest
    """
    try:
        payload = json.loads(data.decode('utf-8'))
    except (UnicodeDecodeError, ValueError) as e:
        raise ParseError(f"Manifest is not valid JSON: {e}") from e
    return Album.from_dict(payload)


def _require_str(data: dict, name: str) -> str:
    value = data.get(name)
    if not isinstance(value, str):
        raise ParseError(f"Missing or invalid field: {name}")
    return value


def _optional_str(data: dict, name: str) -> Optional[str]:
    value = data.get(name)
    if value is not None and not isinstance(value, str):
        raise ParseError(f"Invalid field: {name}")
    return value


def _require_int(data: dict, name: str, minimum: int) -> int:
    value = data.get(name)
    # bool is an int subclass and never a valid dimension
    if isinstance(value, bool) or not isinstance(value, int) or value < minimum:
        raise ParseError(f"Missing or invalid field: {name}")
    return value
