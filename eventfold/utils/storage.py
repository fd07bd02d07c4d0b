"""Storage utilities: local upload paths."""

import time
from pathlib import Path

from eventfold.config import settings


def local_upload_filename(album_id: str, index: int, extension: str) -> str:
    """Build a collision-free upload filename.

    Structure: <album_id>_<epoch millis>_<global index><ext>
    """
    return f"{album_id}_{int(time.time() * 1000)}_{index}{extension}"


def resolve_upload(filename: str, upload_dir: Path | None = None) -> Path | None:
    """Map a public /uploads/<filename> name back to disk, or None if missing.

    Only the basename is honoured so callers cannot escape the upload directory.
    """
    path = (upload_dir or settings.upload_dir) / Path(filename).name
    if not path.is_file():
        return None
    return path

