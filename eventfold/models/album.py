"""Album and album file models."""

import secrets
from datetime import datetime, timezone
from typing import Optional

from sqlmodel import Field, SQLModel

FILE_TYPES = ("cover_front", "cover_back", "sheet")


class Album(SQLModel, table=True):
    __tablename__ = "albums"

    id: str = Field(default_factory=lambda: f"alb_{secrets.token_hex(4)}", primary_key=True)
    user_id: str = Field(foreign_key="users.id", index=True)
    title: str
    date: str
    theme: str = Field(default="royal")
    password_hash: Optional[str] = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class AlbumFile(SQLModel, table=True):
    __tablename__ = "files"

    id: str = Field(default_factory=lambda: f"fil_{secrets.token_hex(6)}", primary_key=True)
    album_id: str = Field(foreign_key="albums.id", index=True, ondelete="CASCADE")
    file_path: str
    file_type: str = Field(default="sheet")  # 'cover_front' | 'cover_back' | 'sheet'
    order_index: int = Field(default=0)
