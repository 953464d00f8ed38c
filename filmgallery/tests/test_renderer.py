"""Tests for RenditionRenderer class."""

import io

import pytest
from PIL import Image

from filmgallery.errors import DecodeError
from filmgallery.renderer import RenditionRenderer

from conftest import make_jpeg


def _open(data: bytes) -> Image.Image:
    return Image.open(io.BytesIO(data))


class TestRenditionRenderer:
    """Tests for RenditionRenderer class."""

    def test_init_defaults(self):
        """Test default initialization."""
        renderer = RenditionRenderer()

        assert renderer.thumbnail_size == 400
        assert renderer.preview_size == 2048
        assert renderer.quality == 92
        assert renderer.strip_metadata is True

    def test_render_produces_three_jpegs(self, sample_image_bytes):
        """Test all rendition classes are produced as JPEG."""
        renditions = RenditionRenderer().render(sample_image_bytes)

        assert set(renditions) == {'thumbnail', 'preview', 'original'}
        for rendition in renditions.values():
            assert _open(rendition.data).format == 'JPEG'
            assert rendition.size == len(rendition.data)

    def test_large_source_is_bounded(self):
        """Test a 6000x4000 source is scaled down preserving aspect ratio."""
        source = make_jpeg(6000, 4000, 'gray')

        renditions = RenditionRenderer().render(source)

        thumb = renditions['thumbnail']
        preview = renditions['preview']
        original = renditions['original']
        assert max(thumb.width, thumb.height) == 400
        assert max(preview.width, preview.height) == 2048
        assert (original.width, original.height) == (6000, 4000)
        assert abs(thumb.width / thumb.height - 1.5) < 0.01
        assert abs(preview.width / preview.height - 1.5) < 0.01
        assert _open(thumb.data).size == (thumb.width, thumb.height)

    def test_small_source_is_not_upscaled(self):
        """Test no rendition exceeds a 300x200 source."""
        source = make_jpeg(300, 200)

        renditions = RenditionRenderer().render(source)

        for rendition in renditions.values():
            assert (rendition.width, rendition.height) == (300, 200)

    def test_portrait_bounded_on_long_edge(self):
        """Test the long edge is the bounded one for portrait images."""
        source = make_jpeg(800, 1600)

        renditions = RenditionRenderer(thumbnail_size=400).render(source)

        assert renditions['thumbnail'].height == 400
        assert renditions['thumbnail'].width == 200

    def test_orientation_applied(self):
        """Test EXIF orientation is applied before resizing."""
        exif = Image.Exif()
        exif[0x0112] = 6  # rotate 90 CW on display
        source = make_jpeg(200, 100, exif=exif)

        renditions = RenditionRenderer().render(source)

        assert (renditions['original'].width, renditions['original'].height) == (100, 200)
        assert (renditions['thumbnail'].width, renditions['thumbnail'].height) == (100, 200)

    def test_metadata_stripped(self):
        """Test no EXIF reaches any rendition."""
        exif = Image.Exif()
        exif[0x0112] = 1
        exif[0x0132] = '2024:05:01 10:30:00'
        exif[0x010F] = 'Film Scanner Co'
        source = make_jpeg(200, 100, exif=exif)

        renditions = RenditionRenderer().render(source)

        for rendition in renditions.values():
            img = _open(rendition.data)
            assert 'exif' not in img.info
            assert len(img.getexif()) == 0

    def test_keep_source_when_not_stripping(self, sample_image_bytes):
        """Test a plain upright JPEG original is stored unchanged when metadata is kept."""
        renditions = RenditionRenderer(strip_metadata=False).render(sample_image_bytes)

        assert renditions['original'].data == sample_image_bytes
        assert (renditions['original'].width, renditions['original'].height) == (120, 80)

    def test_rotated_source_reencoded_even_when_not_stripping(self):
        """Test sources needing rotation are always re-encoded."""
        exif = Image.Exif()
        exif[0x0112] = 6
        source = make_jpeg(200, 100, exif=exif)

        renditions = RenditionRenderer(strip_metadata=False).render(source)

        assert renditions['original'].data != source
        assert (renditions['original'].width, renditions['original'].height) == (100, 200)

    def test_png_with_transparency(self, sample_png_bytes):
        """Test transparent PNG sources become RGB JPEG."""
        renditions = RenditionRenderer().render(sample_png_bytes)

        img = _open(renditions['original'].data)
        assert img.format == 'JPEG'
        assert img.mode == 'RGB'

    def test_icc_profile_kept_for_rgb(self):
        """Test an RGB source keeps its colour profile."""
        buffer = io.BytesIO()
        Image.new('RGB', (120, 80), 'red').save(buffer, format='JPEG', icc_profile=b'rgb profile')

        renditions = RenditionRenderer().render(buffer.getvalue())

        for rendition in renditions.values():
            assert _open(rendition.data).info.get('icc_profile') == b'rgb profile'

    def test_cmyk_profile_dropped(self):
        """Test a CMYK profile is not attached to the converted RGB output."""
        buffer = io.BytesIO()
        Image.new('CMYK', (120, 80), (0, 255, 255, 0)).save(
            buffer, format='JPEG', icc_profile=b'cmyk profile')

        renditions = RenditionRenderer().render(buffer.getvalue())

        for rendition in renditions.values():
            img = _open(rendition.data)
            assert img.mode == 'RGB'
            assert 'icc_profile' not in img.info

    def test_quality_setting_used(self):
        """Test higher quality yields larger output."""
        img = Image.effect_noise((400, 300), 64).convert('RGB')
        buffer = io.BytesIO()
        img.save(buffer, format='PNG')
        source = buffer.getvalue()

        low = RenditionRenderer(quality=40).render(source)
        high = RenditionRenderer(quality=92).render(source)

        assert high['original'].size > low['original'].size

    def test_corrupt_input(self):
        """Test corrupt data raises DecodeError naming the file."""
        with pytest.raises(DecodeError) as exc_info:
            RenditionRenderer().render(b'not an image', filename='bad.jpg')

        assert exc_info.value.filename == 'bad.jpg'

    def test_truncated_input(self, sample_image_bytes):
        """Test truncated JPEG data raises DecodeError."""
        with pytest.raises(DecodeError):
            RenditionRenderer().render(sample_image_bytes[:len(sample_image_bytes) // 2])


class TestReadCaptureTime:
    """Tests for EXIF capture time extraction."""

    def test_datetime_tag(self):
        """Test capture time is read and converted to ISO format."""
        exif = Image.Exif()
        exif[0x0132] = '2024:05:01 10:30:00'
        source = make_jpeg(50, 50, exif=exif)

        assert RenditionRenderer().read_capture_time(source) == '2024-05-01T10:30:00'

    def test_missing(self, sample_image_bytes):
        """Test images without EXIF have no capture time."""
        assert RenditionRenderer().read_capture_time(sample_image_bytes) is None

    def test_malformed(self):
        """Test malformed timestamps are ignored."""
        exif = Image.Exif()
        exif[0x0132] = 'yesterday'
        source = make_jpeg(50, 50, exif=exif)

        assert RenditionRenderer().read_capture_time(source) is None

    def test_corrupt_source(self):
        """Test corrupt data yields None rather than raising."""
        assert RenditionRenderer().read_capture_time(b'garbage') is None
