"""Tests for Reporter class."""

import io

import pytest

from filmgallery.deleter import DeleteResult
from filmgallery.ingest_stats import ImageFailure, IngestStats
from filmgallery.ingestor import IngestResult
from filmgallery.reporter import Reporter


@pytest.fixture
def output():
    return io.StringIO()


class TestReporter:
    """Tests for Reporter class."""

    def test_report_upload(self, output, sample_album):
        """Test upload summary lists counts and skipped images."""
        stats = IngestStats(total=3, succeeded=2, bytes_uploaded=4096)
        stats.record_failure(ImageFailure(index=1, filename='broken.jpg', stage='render', error='Cannot decode'))
        result = IngestResult(album_id=sample_album.album_id, album=sample_album, stats=stats)

        Reporter(output=output).report_upload(result)

        text = output.getvalue()
        assert 'UPLOAD COMPLETE' in text
        assert sample_album.album_id in text
        assert '2 stored, 1 skipped, 3 total' in text
        assert 'broken.jpg (render): Cannot decode' in text

    def test_report_upload_failure(self, output):
        """Test failure summary states that no album exists."""
        Reporter(output=output).report_upload_failure('All 2 images failed')

        text = output.getvalue()
        assert 'UPLOAD FAILED' in text
        assert 'No album was created.' in text

    def test_report_delete_nothing(self, output):
        """Test deleting a missing album."""
        Reporter(output=output).report_delete(DeleteResult(album_id='abc'))

        assert 'nothing to delete' in output.getvalue()

    def test_report_delete_partial(self, output):
        """Test failed keys are listed."""
        result = DeleteResult(album_id='abc', removed=5, failed_keys=['abc/originals/x.jpg'])

        Reporter(output=output).report_delete(result)

        text = output.getvalue()
        assert '5 objects removed' in text
        assert 'abc/originals/x.jpg' in text

    def test_report_album(self, output, sample_album):
        """Test album details list every image with dimensions."""
        Reporter(output=output).report_album(sample_album)

        text = output.getvalue()
        assert 'ALBUM: Roll 12' in text
        assert '6000x4000' in text
        assert '267x400' in text
        assert 'frame-02.jpg' in text

    def test_format_duration(self):
        """Test duration formatting."""
        reporter = Reporter()

        assert reporter._format_duration(30) == '30.0 seconds'
        assert reporter._format_duration(90) == '1.5 minutes'
        assert reporter._format_duration(7200) == '2.0 hours'
