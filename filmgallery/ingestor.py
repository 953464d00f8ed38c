"""
Ingestor - Turns source images into a stored album.

Run states: Start -> Processing(i) -> Uploading(i) -> ... -> ManifestWrite -> Done,
with Failed reachable from anywhere. Renditions of every surviving image are
stored before the manifest is written; a manifest never names a rendition
that is not already in the bucket.
"""

import hashlib
import logging
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from dataclasses import dataclass
from typing import Dict, Iterator, List, Optional, Sequence, Tuple

from .errors import (
    EmptyInputError,
    ImageError,
    IngestCancelledError,
    NoImagesSucceededError,
    StoreError,
)
from .ingest_config import IngestConfig
from .ingest_progress import IngestProgress
from .ingest_stats import ImageFailure, IngestStats
from .keys import ORIGINAL, PREVIEW, THUMBNAIL, image_id, manifest_key, new_album_id, object_key
from .manifest import Album, ImageEntry, serialize
from .renderer import Rendition, RenditionRenderer
from .s3_client import S3Client
from .sources import SourceImage

# Originals first: a stalled run leaves the most valuable bytes behind.
UPLOAD_ORDER = (ORIGINAL, PREVIEW, THUMBNAIL)


@dataclass
class IngestResult:
    """
    Outcome of a finished upload.

    Attributes:
        album_id: Id of the new album
        album: The manifest that was written
        stats: Succeeded/skipped counts and failure details
    """
    album_id: str
    album: Album
    stats: IngestStats


@dataclass
class _Rendered:
    index: int
    source: SourceImage
    image_id: str
    renditions: Dict[str, Rendition]
    captured_at: Optional[str]
    file_hash: str


class Ingestor:
    """
    Uploads a set of source images as a new album.

    Decode/encode runs on a pool bounded by CPU count; uploads run on a
    separate pool so slow links do not hold CPU workers. Each image has one
    result slot, filled from the coordinating thread only.
    """

    def __init__(
        self,
        store: S3Client,
        renderer: Optional[RenditionRenderer] = None,
        config: Optional[IngestConfig] = None,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize ingestor.

        Args:
            store: Object store client
            renderer: Rendition renderer (default: built from config)
            config: Failure policy and worker bounds
            logger: Optional logger instance
        """
        self.store = store
        self.config = config or IngestConfig()
        self.logger = logger or logging.getLogger(__name__)
        self.renderer = renderer or RenditionRenderer(
            thumbnail_size=self.config.thumbnail_size,
            preview_size=self.config.preview_size,
            quality=self.config.quality,
            strip_metadata=self.config.strip_metadata,
            logger=self.logger,
        )
        self._stop_requested = False

    def stop(self) -> None:
        """Request the current run to stop; no manifest will be written."""
        self._stop_requested = True

    def upload(
        self,
        name: str,
        sources: Sequence[SourceImage],
        progress: Optional[IngestProgress] = None
    ) -> IngestResult:
        """
        Create a new album from source images.

        Args:
            name: Album display name
            sources: Source images in album order
            progress: Optional progress tracker

        Returns:
            IngestResult for the finished album

        Raises:
            EmptyInputError: No sources given
            ImageError: A per-image failure under the fail-fast policy
            StoreError: A fatal store error, or any manifest upload failure
            NoImagesSucceededError: Every image failed
            IngestCancelledError: stop() was called before the manifest write
        """
        if not sources:
            raise EmptyInputError("No images to upload")

        self._stop_requested = False
        album_id = new_album_id()
        stats = IngestStats(total=len(sources))
        slots: List[Optional[ImageEntry]] = [None] * len(sources)

        policy = "fail-fast" if self.config.fail_fast else "skip-and-continue"
        self.logger.info(f"Starting upload of {len(sources)} images to album {album_id} ({policy})")

        self._run_workers(album_id, sources, slots, stats, progress)

        if self._stop_requested:
            raise IngestCancelledError(
                f"Upload of album {album_id} stopped before the manifest was written", stats=stats
            )

        entries = [entry for entry in slots if entry is not None]
        if not entries:
            raise NoImagesSucceededError(
                f"All {len(sources)} images failed; no album created", stats=stats
            )

        if self.config.sort_by_capture_time:
            entries = self._sort_by_capture_time(entries)

        album = Album.create_new(album_id, name)
        for entry in entries:
            album.add_image(entry)

        self.logger.info(f"Writing manifest for album {album_id} ({len(entries)} images)")
        self.store.put(manifest_key(album_id), serialize(album), 'application/json')

        self.logger.info(
            f"Upload complete: {stats.succeeded} stored, {stats.skipped} skipped "
            f"({stats.elapsed_seconds:.1f}s)"
        )
        return IngestResult(album_id=album_id, album=album, stats=stats)

    def _run_workers(
        self,
        album_id: str,
        sources: Sequence[SourceImage],
        slots: List[Optional[ImageEntry]],
        stats: IngestStats,
        progress: Optional[IngestProgress]
    ) -> None:
        """
        Render and upload every image; returns once all workers joined.

        At most render_workers + upload_workers images are in flight at a
        time, so rendered bytes waiting for an upload slot stay bounded. The
        next source is fed in only when an image finishes either way.
        """
        render_workers = max(1, self.config.render_workers)
        upload_workers = max(1, self.config.upload_workers)
        queued = iter(enumerate(sources))

        with ThreadPoolExecutor(max_workers=render_workers,
                                thread_name_prefix='render') as render_pool, \
                ThreadPoolExecutor(max_workers=upload_workers,
                                   thread_name_prefix='upload') as upload_pool:
            stages: Dict[Future, tuple] = {}
            pending = set()
            for _ in range(render_workers + upload_workers):
                future = self._submit_render(render_pool, queued, stages)
                if future is None:
                    break
                pending.add(future)

            try:
                while pending:
                    done, pending = wait(pending, return_when=FIRST_COMPLETED)
                    for future in done:
                        stage, index = stages.pop(future)
                        source = sources[index]
                        try:
                            result = future.result()
                        except ImageError as e:
                            self._record_failure(stats, progress, index, source, stage, e)
                            result = None
                        except StoreError as e:
                            if e.fatal:
                                raise
                            self._record_failure(stats, progress, index, source, stage, e)
                            result = None

                        if result is not None and stage == 'render':
                            upload = upload_pool.submit(self._upload, album_id, result)
                            stages[upload] = ('upload', index)
                            pending.add(upload)
                            if progress:
                                progress.on_progress_update(stats)
                            continue

                        if result is not None:
                            slots[index] = result
                            stats.succeeded += 1
                            uploaded = result.size_thumbnail + result.size_preview + result.size_original
                            stats.bytes_uploaded += uploaded
                            if progress:
                                progress.on_image_done(source.filename, success=True, uploaded_bytes=uploaded)
                                progress.on_progress_update(stats)
                            else:
                                self.logger.debug(f"Stored: {source.filename} as {result.id}")

                        # One image finished; refill its place in the window
                        if not self._stop_requested:
                            refill = self._submit_render(render_pool, queued, stages)
                            if refill is not None:
                                pending.add(refill)

                    if self._stop_requested and pending:
                        self.logger.info("Stop requested, cancelling remaining images")
                        break
            except BaseException:
                for future in pending:
                    future.cancel()
                raise

            for future in pending:
                future.cancel()

    def _submit_render(
        self,
        render_pool: ThreadPoolExecutor,
        queued: Iterator[Tuple[int, SourceImage]],
        stages: Dict[Future, tuple]
    ) -> Optional[Future]:
        """Start rendering the next queued source, if any."""
        item = next(queued, None)
        if item is None:
            return None
        index, source = item
        future = render_pool.submit(self._render, index, source)
        stages[future] = ('render', index)
        return future

    def _record_failure(
        self,
        stats: IngestStats,
        progress: Optional[IngestProgress],
        index: int,
        source: SourceImage,
        stage: str,
        error: Exception
    ) -> None:
        """Record a per-image failure, or abort the run under fail-fast."""
        self.logger.warning(f"Skipping {source.filename} ({stage} failed): {error}")
        if self.config.fail_fast:
            raise error
        stats.record_failure(ImageFailure(
            index=index,
            filename=source.filename,
            stage=stage,
            error=str(error),
        ))
        if progress:
            progress.on_image_done(source.filename, success=False, error=str(error))
            progress.on_progress_update(stats)

    def _render(self, index: int, source: SourceImage) -> _Rendered:
        """Worker: read and render one source image."""
        data = source.read()
        renditions = self.renderer.render(data, source.filename)
        return _Rendered(
            index=index,
            source=source,
            image_id=image_id(index, data),
            renditions=renditions,
            captured_at=self.renderer.read_capture_time(data),
            file_hash=hashlib.sha256(data).hexdigest(),
        )

    def _upload(self, album_id: str, rendered: _Rendered) -> ImageEntry:
        """Worker: store the three renditions of one image."""
        for rendition_class in UPLOAD_ORDER:
            key = object_key(album_id, rendition_class, rendered.image_id)
            self.store.put(key, rendered.renditions[rendition_class].data, 'image/jpeg')

        r = rendered.renditions
        return ImageEntry(
            id=rendered.image_id,
            original_filename=rendered.source.filename,
            width_thumbnail=r[THUMBNAIL].width,
            height_thumbnail=r[THUMBNAIL].height,
            width_preview=r[PREVIEW].width,
            height_preview=r[PREVIEW].height,
            width_original=r[ORIGINAL].width,
            height_original=r[ORIGINAL].height,
            size_thumbnail=r[THUMBNAIL].size,
            size_preview=r[PREVIEW].size,
            size_original=r[ORIGINAL].size,
            captured_at=rendered.captured_at,
            file_hash=rendered.file_hash,
        )

    @staticmethod
    def _sort_by_capture_time(entries: List[ImageEntry]) -> List[ImageEntry]:
        """Stable sort by capture time; undated images keep their order at the end."""
        return sorted(entries, key=lambda e: (e.captured_at is None, e.captured_at or ''))
