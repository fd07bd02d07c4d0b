"""Album API endpoints."""

from fastapi import APIRouter, Depends, Header, HTTPException, status
from sqlmodel import Session

from eventfold.api.deps import get_current_user, get_optional_user
from eventfold.database import get_session
from eventfold.models.album import Album, AlbumFile
from eventfold.models.user import User
from eventfold.schemas.album import (
    AlbumCreateRequest,
    AlbumDetailResponse,
    AlbumResponse,
    FileResponse,
)
from eventfold.services.album_service import (
    InsufficientCredits,
    can_view_album,
    create_album,
    delete_album,
    list_user_albums,
)
from eventfold.services.file_service import delete_file, list_album_files

router = APIRouter(prefix="/albums", tags=["albums"])


def file_to_response(f: AlbumFile) -> FileResponse:
    return FileResponse(
        id=f.id,
        album_id=f.album_id,
        file_path=f.file_path,
        file_type=f.file_type,
        order_index=f.order_index,
    )


def _album_fields(album: Album) -> dict:
    return {
        "id": album.id,
        "user_id": album.user_id,
        "title": album.title,
        "date": album.date,
        "theme": album.theme,
        "has_password": album.password_hash is not None,
        "created_at": album.created_at.isoformat() if album.created_at else "",
    }


def _album_to_detail(album: Album, session: Session) -> AlbumDetailResponse:
    files = list_album_files(album.id, session)
    return AlbumDetailResponse(
        **_album_fields(album),
        files=[file_to_response(f) for f in files],
    )


def get_owned_album(album_id: str, user: User, session: Session) -> Album:
    """Fetch an album the user owns, or raise 404/403."""
    album = session.get(Album, album_id)
    if not album:
        raise HTTPException(status_code=404, detail="Album not found")
    if album.user_id != user.id:
        raise HTTPException(status_code=403, detail="Access denied")
    return album


@router.get("", response_model=list[AlbumDetailResponse])
def list_albums(
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    """List the current user's albums with their files."""
    return [_album_to_detail(a, session) for a in list_user_albums(user.id, session)]


@router.post("", response_model=AlbumResponse, status_code=201)
def create(
    request: AlbumCreateRequest,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    """Create a new album (metadata only). Spends one credit."""
    try:
        album = create_album(
            user,
            title=request.title,
            date=request.date,
            session=session,
            theme=request.theme,
            password=request.password,
        )
    except InsufficientCredits:
        raise HTTPException(
            status_code=status.HTTP_402_PAYMENT_REQUIRED,
            detail="No album credits left. Upgrade your plan to create more albums.",
        )
    return AlbumResponse(**_album_fields(album))


@router.get("/{album_id}", response_model=AlbumDetailResponse)
def get_album(
    album_id: str,
    x_album_password: str | None = Header(default=None),
    user: User | None = Depends(get_optional_user),
    session: Session = Depends(get_session),
):
    """Get an album with its files. Guests must unlock protected albums."""
    album = session.get(Album, album_id)
    if not album:
        raise HTTPException(status_code=404, detail="Album not found")

    if not can_view_album(album, user, x_album_password):
        raise HTTPException(status_code=403, detail="Album is password protected")

    return _album_to_detail(album, session)


@router.delete("/{album_id}", status_code=status.HTTP_204_NO_CONTENT)
def remove_album(
    album_id: str,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    """Delete an album and all of its file records."""
    album = get_owned_album(album_id, user, session)
    delete_album(album, session)


@router.delete("/{album_id}/files/{file_id}", status_code=status.HTTP_204_NO_CONTENT)
def remove_file(
    album_id: str,
    file_id: str,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    """Delete a single file of an album."""
    get_owned_album(album_id, user, session)
    if not delete_file(album_id, file_id, session):
        raise HTTPException(status_code=404, detail="File not found")
