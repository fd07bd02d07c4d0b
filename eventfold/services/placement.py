"""Media placement: durable storage of upload buffers behind a public locator.

Two adapters share one async interface. ``CloudinaryPlacement`` pushes bytes to
the Cloudinary media host; ``LocalDiskPlacement`` writes into the local upload
directory, which the app serves back under ``/uploads``. Which one is used is
decided once at startup by ``build_placement``.
"""

import asyncio
import logging
from dataclasses import dataclass
from io import BytesIO
from pathlib import Path
from typing import Protocol

import cloudinary.uploader

from eventfold.config import RemoteStoreConfig, Settings
from eventfold.utils.storage import local_upload_filename

logger = logging.getLogger(__name__)


class PlacementFailure(Exception):
    """The media buffer could not be stored."""


@dataclass(frozen=True)
class PlacementRequest:
    album_id: str
    index: int
    filename: str
    data: bytes
    extension: str = ""


class Placement(Protocol):
    remote: bool

    async def place(self, request: PlacementRequest) -> str:
        """Store the buffer and return its locator. Raises PlacementFailure."""
        ...


class CloudinaryPlacement:
    remote = True

    def __init__(self, config: RemoteStoreConfig):
        self._config = config

    async def place(self, request: PlacementRequest) -> str:
        try:
            result = await asyncio.to_thread(self._upload, request)
        except Exception as e:
            raise PlacementFailure(f"Cloudinary upload failed: {e}") from e

        url = result.get("secure_url") if isinstance(result, dict) else None
        if not url:
            raise PlacementFailure("Cloudinary response did not include a secure_url")
        return url

    def _upload(self, request: PlacementRequest) -> dict:
        stream = BytesIO(request.data)
        stream.name = request.filename
        return cloudinary.uploader.upload(
            stream,
            folder=self._config.folder,
            resource_type="image",
            cloud_name=self._config.cloud_name,
            api_key=self._config.api_key,
            api_secret=self._config.api_secret,
        )


class LocalDiskPlacement:
    remote = False

    def __init__(self, upload_dir: Path, url_prefix: str = "/uploads"):
        self._upload_dir = upload_dir
        self._url_prefix = url_prefix.rstrip("/")

    async def place(self, request: PlacementRequest) -> str:
        ext = request.extension or Path(request.filename).suffix
        filename = local_upload_filename(request.album_id, request.index, ext)
        target = self._upload_dir / filename
        try:
            await asyncio.to_thread(self._write, target, request.data)
        except OSError as e:
            raise PlacementFailure(f"Could not write {filename}: {e}") from e
        return f"{self._url_prefix}/{filename}"

    @staticmethod
    def _write(target: Path, data: bytes) -> None:
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(data)


def build_placement(settings: Settings) -> Placement:
    """Pick the placement adapter once, from configuration."""
    config = settings.remote_store_config()
    if config is not None:
        logger.info("Placement: Cloudinary (cloud=%s, folder=%s)", config.cloud_name, config.folder)
        return CloudinaryPlacement(config)
    logger.info("Placement: local disk at %s (Cloudinary not configured)", settings.upload_dir)
    return LocalDiskPlacement(settings.upload_dir)
