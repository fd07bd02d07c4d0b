"""Eventfold Database Models."""

from eventfold.models.user import User, UserSettings
from eventfold.models.album import Album, AlbumFile

__all__ = [
    "User",
    "UserSettings",
    "Album",
    "AlbumFile",
]
