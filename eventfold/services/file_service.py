"""Album file records: creation, listing, deletion."""

import logging
from dataclasses import dataclass

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, col, select

from eventfold.models.album import AlbumFile

logger = logging.getLogger(__name__)


class PersistenceError(Exception):
    """The file record could not be written to the store."""


@dataclass(frozen=True)
class FileCreate:
    album_id: str
    file_path: str
    file_type: str = "sheet"
    order_index: int = 0


def record_file(session: Session, data: FileCreate) -> AlbumFile:
    """Insert one file record and commit it on its own.

    Raises PersistenceError when the store rejects the write.
    """
    record = AlbumFile(
        album_id=data.album_id,
        file_path=data.file_path,
        file_type=data.file_type,
        order_index=data.order_index,
    )
    try:
        session.add(record)
        session.commit()
        session.refresh(record)
    except SQLAlchemyError as e:
        session.rollback()
        logger.error("Failed to record file %s for album %s: %s", data.file_path, data.album_id, e)
        raise PersistenceError(str(e)) from e
    return record


def list_album_files(album_id: str, session: Session) -> list[AlbumFile]:
    """Files of an album in display order."""
    return list(session.exec(
        select(AlbumFile)
        .where(AlbumFile.album_id == album_id)
        .order_by(col(AlbumFile.order_index))
    ).all())


def delete_album_files(album_id: str, session: Session) -> int:
    """Delete every file record of an album. Caller commits."""
    files = list_album_files(album_id, session)
    for record in files:
        session.delete(record)
    return len(files)


def delete_file(album_id: str, file_id: str, session: Session) -> bool:
    """Delete one file of an album (e.g. a superseded sheet)."""
    record = session.get(AlbumFile, file_id)
    if not record or record.album_id != album_id:
        return False
    session.delete(record)
    session.commit()
    return True
