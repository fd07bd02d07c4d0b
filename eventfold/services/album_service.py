"""Album lifecycle: creation against credits, access checks, deletion."""

import logging

from sqlmodel import Session, col, select

from eventfold.models.album import Album
from eventfold.models.user import User
from eventfold.services.file_service import delete_album_files
from eventfold.utils.security import hash_password, verify_password

logger = logging.getLogger(__name__)


class InsufficientCredits(Exception):
    """The user has no album credits left."""


def create_album(
    user: User,
    title: str,
    date: str,
    session: Session,
    theme: str | None = None,
    password: str | None = None,
) -> Album:
    """Create an album, spending one of the user's credits."""
    if user.credits <= 0:
        raise InsufficientCredits(f"User {user.id} has no album credits left")

    album = Album(
        user_id=user.id,
        title=title,
        date=date,
        password_hash=hash_password(password) if password else None,
    )
    if theme:
        album.theme = theme
    user.credits -= 1

    session.add(album)
    session.add(user)
    session.commit()
    session.refresh(album)
    logger.info("Album %s created by %s (%d credit(s) left)", album.id, user.id, user.credits)
    return album


def list_user_albums(user_id: str, session: Session) -> list[Album]:
    """Albums owned by a user, oldest first."""
    return list(session.exec(
        select(Album)
        .where(Album.user_id == user_id)
        .order_by(col(Album.created_at))
    ).all())


def can_view_album(album: Album, viewer: User | None, password: str | None) -> bool:
    """Owners always see their album; guests need the password when one is set."""
    if viewer is not None and viewer.id == album.user_id:
        return True
    if not album.password_hash:
        return True
    return bool(password) and verify_password(password, album.password_hash)


def delete_album(album: Album, session: Session) -> int:
    """Delete an album and its file records. Returns the number of files removed."""
    removed = delete_album_files(album.id, session)
    session.delete(album)
    session.commit()
    logger.info("Album %s deleted with %d file(s)", album.id, removed)
    return removed
