"""
Sources - Collects the source images for an upload.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Optional

from .errors import ImageError, InputError

IMAGE_EXTENSIONS = {'.jpg', '.jpeg', '.png', '.gif', '.tif', '.tiff', '.bmp', '.webp'}


def display_name(name: str) -> str:
    """
    Make a filename safe to store as UTF-8 text.

    Undecodable bytes in filenames arrive as lone surrogates; they become
    U+FFFD so the name can always be written into a manifest.
    """
    try:
        raw = name.encode('utf-8', 'surrogateescape')
    except UnicodeEncodeError:
        raw = name.encode('utf-8', 'replace')
    return raw.decode('utf-8', 'replace')


@dataclass
class SourceImage:
    """
    A source image, either on disk or already in memory.

    Attributes:
        filename: Display name; never used to build storage keys
        path: File to read (None for in-memory sources)
        data: Image bytes (None to read from path)
    """
    filename: str
    path: Optional[Path] = None
    data: Optional[bytes] = None

    def __post_init__(self):
        self.filename = display_name(self.filename)

    @classmethod
    def from_path(cls, path: Path) -> 'SourceImage':
        return cls(filename=path.name, path=path)

    def read(self) -> bytes:
        """Return the image bytes."""
        if self.data is not None:
            return self.data
        try:
            return self.path.read_bytes()
        except OSError as e:
            raise ImageError(f"Cannot read {display_name(str(self.path))}: {e}", filename=self.filename) from e


def is_image_file(path: Path) -> bool:
    return path.suffix.lower() in IMAGE_EXTENSIONS


def collect_source_paths(paths: Iterable[str]) -> List[Path]:
    """
    Expand files and directories into the list of image files to upload.

    Directories are walked recursively; non-image files are ignored. The
    result is sorted by path so uploads of the same tree list images in the
    same order.

    Raises:
        InputError: A path does not exist or cannot be read
    """
    image_paths = []
    for path_str in paths:
        path = Path(path_str)

        if not path.exists():
            raise InputError(f"Path does not exist: {path}")
        if not os.access(path, os.R_OK):
            raise InputError(f"Path is not readable: {path}")

        if path.is_file():
            if is_image_file(path):
                image_paths.append(path)
        elif path.is_dir():
            for root, _dirs, files in os.walk(path, followlinks=True):
                for name in files:
                    file_path = Path(root) / name
                    if is_image_file(file_path):
                        image_paths.append(file_path)

    return sorted(set(image_paths))


def collect_sources(paths: Iterable[str]) -> List[SourceImage]:
    """Collect source images from files and directories."""
    return [SourceImage.from_path(p) for p in collect_source_paths(paths)]
