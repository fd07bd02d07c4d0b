"""Album file ingestion endpoint.

One route, two bodies: a JSON manifest of files the browser already uploaded
to the media host, or a multipart batch of raw images for the server-side
pipeline. The content type decides which entry operation runs.
"""

from functools import partial

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError
from sqlmodel import Session
from starlette.datastructures import UploadFile

from eventfold.api.albums import file_to_response, get_owned_album
from eventfold.api.deps import get_current_user, get_placement
from eventfold.config import settings
from eventfold.database import get_session
from eventfold.models.album import FILE_TYPES
from eventfold.models.user import User
from eventfold.schemas.album import FileManifestRequest, FileResponse, SyncErrorResponse
from eventfold.services.file_service import record_file
from eventfold.services.ingest_service import (
    DEFAULT_FILE_TYPE,
    BatchScheduler,
    ManifestEntry,
    NoDataReceived,
    UploadItem,
    ingest_uploads,
    record_manifest,
)
from eventfold.services.placement import Placement
from eventfold.utils.image import transcode_oversized

router = APIRouter(prefix="/albums", tags=["files"])


def build_scheduler(placement: Placement, session: Session) -> BatchScheduler:
    return BatchScheduler(
        placement=placement,
        recorder=partial(record_file, session),
        transcoder=partial(
            transcode_oversized,
            max_dimension=settings.transcode_max_dimension,
            quality=settings.transcode_quality,
        ),
        window_size=settings.upload_window_size,
        transcode_threshold=settings.transcode_threshold_bytes,
        placement_timeout=settings.placement_timeout_seconds,
    )


async def read_manifest(request: Request) -> list[ManifestEntry]:
    """Parse a ``{"files": [...]}`` JSON body into manifest entries."""
    try:
        payload = await request.json()
    except ValueError:
        raise NoDataReceived("Request body is not valid JSON.")

    if not isinstance(payload, dict) or not isinstance(payload.get("files"), list):
        raise NoDataReceived("JSON body must contain a 'files' array.")

    try:
        manifest = FileManifestRequest.model_validate(payload)
    except ValidationError as e:
        raise RequestValidationError(e.errors())

    return [
        ManifestEntry(file_path=d.file_path, file_type=d.file_type, order_index=d.order_index)
        for d in manifest.files
    ]


async def read_uploads(request: Request) -> list[UploadItem]:
    """Collect the ``files`` parts and their ``fileType_<i>`` hints."""
    max_bytes = settings.upload_max_file_bytes
    items = []
    async with request.form(max_files=settings.upload_max_files) as form:
        uploads = [f for f in form.getlist("files") if isinstance(f, UploadFile)]
        for index, upload in enumerate(uploads):
            file_type = form.get(f"fileType_{index}") or DEFAULT_FILE_TYPE
            if file_type not in FILE_TYPES:
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail=f"Unknown file type for part {index}: {file_type}",
                )

            if upload.size is not None and upload.size > max_bytes:
                raise HTTPException(
                    status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
                    detail=f"File too large (max {settings.upload_max_file_mb}MB)",
                )
            data = await upload.read()
            if len(data) > max_bytes:
                raise HTTPException(
                    status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
                    detail=f"File too large (max {settings.upload_max_file_mb}MB)",
                )

            items.append(UploadItem(
                index=index,
                filename=upload.filename or f"upload_{index}",
                data=data,
                file_type=file_type,
            ))
    return items


@router.post(
    "/{album_id}/files",
    response_model=list[FileResponse],
    responses={400: {"model": SyncErrorResponse}, 500: {"model": SyncErrorResponse}},
)
async def ingest_files(
    album_id: str,
    request: Request,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
    placement: Placement = Depends(get_placement),
):
    """Add files to an album from a JSON manifest or a multipart upload."""
    album = get_owned_album(album_id, user, session)

    content_type = request.headers.get("content-type", "")
    if "application/json" in content_type:
        entries = await read_manifest(request)
        records = record_manifest(album.id, entries, partial(record_file, session))
    else:
        items = await read_uploads(request)
        records = await ingest_uploads(album.id, items, build_scheduler(placement, session))

    return [file_to_response(r) for r in records]
