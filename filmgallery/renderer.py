"""
RenditionRenderer - Decodes a source image and produces the three JPEG renditions.
"""

import io
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Dict, Optional, Tuple

from PIL import Image, ImageOps, UnidentifiedImageError

from .errors import DecodeError, EncodeError
from .keys import ORIGINAL, PREVIEW, THUMBNAIL

EXIF_IFD = 0x8769
EXIF_ORIENTATION = 0x0112
EXIF_DATETIME = 0x0132
EXIF_DATETIME_ORIGINAL = 0x9003
EXIF_GPS_IFD = 0x8825

_DECODE_ERRORS = (UnidentifiedImageError, OSError, SyntaxError, ValueError, Image.DecompressionBombError)

# Modes whose ICC profile still applies after conversion to JPEG output
_COLOR_SPACE = {'RGB': 'RGB', 'RGBA': 'RGB', 'RGBX': 'RGB', 'L': 'L', 'LA': 'L'}


@dataclass
class Rendition:
    """
    One encoded rendition.

    Attributes:
        data: JPEG bytes
        width: Pixel width
        height: Pixel height
    """
    data: bytes
    width: int
    height: int

    @property
    def size(self) -> int:
        """Encoded size in bytes."""
        return len(self.data)


class RenditionRenderer:
    """
    Produces thumbnail, preview and original renditions using Pillow.

    All output is upright (EXIF orientation applied), RGB, metadata-free JPEG.
    Quality defaults to 92 with 4:4:4 chroma so film grain survives encoding.
    """

    def __init__(
        self,
        thumbnail_size: int = 400,
        preview_size: int = 2048,
        quality: int = 92,
        strip_metadata: bool = True,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize renderer.

        Args:
            thumbnail_size: Long-edge bound for thumbnails (default: 400)
            preview_size: Long-edge bound for previews (default: 2048)
            quality: JPEG quality for output (default: 92)
            strip_metadata: If False, a source that is already a plain upright
                JPEG is kept byte-for-byte as the original rendition
            logger: Optional logger instance
        """
        self.thumbnail_size = thumbnail_size
        self.preview_size = preview_size
        self.quality = quality
        self.strip_metadata = strip_metadata
        self.logger = logger or logging.getLogger(__name__)

    def render(self, source: bytes, filename: Optional[str] = None) -> Dict[str, Rendition]:
        """
        Render all renditions of one source image.

        Args:
            source: Source image bytes
            filename: Original filename, used only in error messages

        Returns:
            Dict mapping 'thumbnail', 'preview' and 'original' to Rendition

        Raises:
            DecodeError: Source is corrupt or unsupported
            EncodeError: A rendition could not be encoded
        """
        img, source_format, orientation = self._decode(source, filename)
        upright = self._convert_color_mode(ImageOps.exif_transpose(img))
        icc_profile = self._icc_profile(img, upright)

        thumbnail = self._encode(self._bounded(upright, self.thumbnail_size), icc_profile, filename)
        preview = self._encode(self._bounded(upright, self.preview_size), icc_profile, filename)

        if self._keep_source(img, source_format, orientation):
            original = Rendition(data=source, width=img.width, height=img.height)
        else:
            original = self._encode(upright, icc_profile, filename)

        self.logger.debug(
            f"Rendered {filename or 'image'}: original {original.width}x{original.height}, "
            f"preview {preview.width}x{preview.height}, "
            f"thumbnail {thumbnail.width}x{thumbnail.height}"
        )

        return {THUMBNAIL: thumbnail, PREVIEW: preview, ORIGINAL: original}

    def read_capture_time(self, source: bytes) -> Optional[str]:
        """
        Read the EXIF capture time of a source image.

        Returns:
            ISO 8601 timestamp (no timezone), or None if absent or unreadable
        """
        try:
            with Image.open(io.BytesIO(source)) as img:
                exif = img.getexif()
                raw = exif.get_ifd(EXIF_IFD).get(EXIF_DATETIME_ORIGINAL) or exif.get(EXIF_DATETIME)
        except _DECODE_ERRORS:
            return None

        if not isinstance(raw, str):
            return None
        try:
            return datetime.strptime(raw.strip('\x00 '), '%Y:%m:%d %H:%M:%S').isoformat()
        except ValueError:
            return None

    def _decode(self, source: bytes, filename: Optional[str]) -> Tuple[Image.Image, Optional[str], int]:
        """Fully decode source bytes; return image, format and EXIF orientation."""
        try:
            img = Image.open(io.BytesIO(source))
            img.load()
        except _DECODE_ERRORS as e:
            raise DecodeError(f"Cannot decode {filename or 'image'}: {e}", filename=filename) from e

        orientation = img.getexif().get(EXIF_ORIENTATION, 1)
        return img, img.format, orientation

    def _keep_source(self, img: Image.Image, source_format: Optional[str], orientation: int) -> bool:
        """True if the source can be stored unchanged as the original rendition."""
        if self.strip_metadata:
            return False
        return source_format == 'JPEG' and img.mode in ('RGB', 'L') and orientation == 1

    @staticmethod
    def _icc_profile(source: Image.Image, output: Image.Image) -> Optional[bytes]:
        """Source ICC profile, if it still describes the output colour space."""
        profile = source.info.get('icc_profile')
        if not profile:
            return None
        if _COLOR_SPACE.get(source.mode) != _COLOR_SPACE.get(output.mode):
            return None
        return profile

    @staticmethod
    def _bounded(img: Image.Image, bound: int) -> Image.Image:
        """Scale so the long edge is at most bound, never upscaling."""
        if max(img.size) <= bound:
            return img
        resized = img.copy()
        resized.thumbnail((bound, bound), Image.Resampling.LANCZOS)
        return resized

    def _encode(self, img: Image.Image, icc_profile: Optional[bytes], filename: Optional[str]) -> Rendition:
        """Encode as metadata-free JPEG."""
        output = io.BytesIO()
        params = {'format': 'JPEG', 'quality': self.quality, 'optimize': True, 'subsampling': 0, 'exif': b''}
        if icc_profile:
            params['icc_profile'] = icc_profile
        try:
            img.save(output, **params)
        except (OSError, ValueError) as e:
            raise EncodeError(f"Cannot encode {filename or 'image'}: {e}", filename=filename) from e
        return Rendition(data=output.getvalue(), width=img.width, height=img.height)

    def _convert_color_mode(self, img: Image.Image) -> Image.Image:
        """Convert image to RGB, compositing transparency over white."""
        if img.mode in ('RGBA', 'LA'):
            background = Image.new('RGB', img.size, (255, 255, 255))
            if img.mode == 'LA':
                img = img.convert('RGBA')
            background.paste(img, mask=img.split()[-1])
            return background
        elif img.mode == 'P':
            img = img.convert('RGBA')
            background = Image.new('RGB', img.size, (255, 255, 255))
            background.paste(img, mask=img.split()[-1])
            return background
        elif img.mode not in ('RGB', 'L'):
            return img.convert('RGB')
        return img
