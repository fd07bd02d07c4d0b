"""Album file ingestion.

Two entry operations share the metadata recorder:

- ``record_manifest``: the browser already uploaded the media elsewhere and
  only sends descriptors; nothing is placed or transcoded.
- ``ingest_uploads``: raw binaries go through the batch scheduler, which works
  in fixed-size windows. Items of one window are placed concurrently, windows
  run one after another, and every item keeps its global index as its order.
"""

import asyncio
import logging
import time
from collections.abc import Callable, Sequence
from dataclasses import dataclass

from eventfold.models.album import AlbumFile
from eventfold.services.file_service import FileCreate
from eventfold.services.placement import Placement, PlacementFailure, PlacementRequest
from eventfold.utils.image import TranscodeResult, transcode_oversized

logger = logging.getLogger(__name__)

DEFAULT_FILE_TYPE = "sheet"

Recorder = Callable[[FileCreate], AlbumFile]
Transcoder = Callable[[bytes], TranscodeResult]


class NoDataReceived(Exception):
    """The request carried neither a manifest nor any binary part."""


@dataclass(frozen=True)
class ManifestEntry:
    file_path: str
    file_type: str = DEFAULT_FILE_TYPE
    order_index: int = 0


@dataclass(frozen=True)
class UploadItem:
    index: int
    filename: str
    data: bytes
    file_type: str = DEFAULT_FILE_TYPE

    @property
    def size(self) -> int:
        return len(self.data)


class BatchScheduler:
    """Places upload items window by window and records each placed file."""

    def __init__(
        self,
        placement: Placement,
        recorder: Recorder,
        transcoder: Transcoder = transcode_oversized,
        window_size: int = 5,
        transcode_threshold: int = 5 * 1024 * 1024,
        placement_timeout: float | None = None,
    ):
        if window_size < 1:
            raise ValueError("window_size must be at least 1")
        self.placement = placement
        self.recorder = recorder
        self.transcoder = transcoder
        self.window_size = window_size
        self.transcode_threshold = transcode_threshold
        self.placement_timeout = placement_timeout or None

    def windows(self, items: Sequence[UploadItem]) -> list[Sequence[UploadItem]]:
        return [items[i:i + self.window_size] for i in range(0, len(items), self.window_size)]

    async def run(self, album_id: str, items: Sequence[UploadItem]) -> list[AlbumFile]:
        """Ingest all items; results follow the items' order.

        The first failing item (by index) of a window aborts the batch once the
        whole window has settled. Records written before that stay in place.
        """
        results: list[AlbumFile] = []
        for number, window in enumerate(self.windows(items), start=1):
            logger.debug("Album %s: window %d with %d item(s)", album_id, number, len(window))
            outcomes = await asyncio.gather(
                *(self._ingest_one(album_id, item) for item in window),
                return_exceptions=True,
            )
            for outcome in outcomes:
                if isinstance(outcome, BaseException):
                    raise outcome
            results.extend(outcomes)
        return results

    async def _ingest_one(self, album_id: str, item: UploadItem) -> AlbumFile:
        data = item.data
        extension = ""
        if item.size > self.transcode_threshold:
            transcoded = await self._transcode(item)
            data = transcoded.data
            extension = transcoded.extension or ""

        request = PlacementRequest(
            album_id=album_id,
            index=item.index,
            filename=item.filename,
            data=data,
            extension=extension,
        )
        try:
            if self.placement_timeout:
                locator = await asyncio.wait_for(self.placement.place(request), self.placement_timeout)
            else:
                locator = await self.placement.place(request)
        except asyncio.TimeoutError as e:
            raise PlacementFailure(
                f"Placement of {item.filename} timed out after {self.placement_timeout}s"
            ) from e

        return self.recorder(FileCreate(
            album_id=album_id,
            file_path=locator,
            file_type=item.file_type,
            order_index=item.index,
        ))

    async def _transcode(self, item: UploadItem) -> TranscodeResult:
        try:
            result = await asyncio.to_thread(self.transcoder, item.data)
        except Exception as e:
            result = TranscodeResult(data=item.data, ok=False, error=str(e))
        if not result.ok:
            logger.warning("Transcode skipped for %s (%d bytes): %s", item.filename, item.size, result.error)
        return result


def record_manifest(album_id: str, entries: Sequence[ManifestEntry], recorder: Recorder) -> list[AlbumFile]:
    """Record files the client already placed on the media host."""
    logger.info("Syncing %d remote asset(s) from client for album %s", len(entries), album_id)
    return [
        recorder(FileCreate(
            album_id=album_id,
            file_path=entry.file_path,
            file_type=entry.file_type,
            order_index=entry.order_index,
        ))
        for entry in entries
    ]


async def ingest_uploads(album_id: str, items: Sequence[UploadItem], scheduler: BatchScheduler) -> list[AlbumFile]:
    """Run raw uploads through the full placement pipeline."""
    if not items:
        raise NoDataReceived(
            "No data received. Use application/json for batch sync or multipart for direct upload."
        )

    logger.info(
        "Processing direct binary upload: %d file(s) for album %s (%s placement)",
        len(items), album_id, "remote" if scheduler.placement.remote else "local",
    )
    started = time.monotonic()
    try:
        records = await scheduler.run(album_id, items)
    except Exception:
        logger.exception("Upload batch for album %s failed", album_id)
        raise
    logger.info("Album %s: %d file(s) ingested in %.2fs", album_id, len(records), time.monotonic() - started)
    return records
