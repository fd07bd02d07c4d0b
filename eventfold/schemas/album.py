"""Album and file request/response schemas."""

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

FileType = Literal["cover_front", "cover_back", "sheet"]


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class AlbumCreateRequest(CamelModel):
    title: str = Field(min_length=1)
    date: str
    theme: Optional[str] = Field(default=None, max_length=20)
    password: Optional[str] = None


class FileResponse(CamelModel):
    id: str
    album_id: str
    file_path: str
    file_type: str
    order_index: int


class AlbumResponse(CamelModel):
    id: str
    user_id: str
    title: str
    date: str
    theme: str
    has_password: bool
    created_at: str


class AlbumDetailResponse(AlbumResponse):
    files: list[FileResponse]


class FileDescriptor(CamelModel):
    file_path: str = Field(min_length=1)
    file_type: FileType = "sheet"
    order_index: int = Field(default=0, ge=0)

    @field_validator("file_type", mode="before")
    @classmethod
    def blank_type_is_sheet(cls, v):
        return v or "sheet"

    @field_validator("order_index", mode="before")
    @classmethod
    def null_order_is_zero(cls, v):
        return 0 if v is None else v


class FileManifestRequest(CamelModel):
    files: list[FileDescriptor]


class SyncErrorResponse(BaseModel):
    error: str
    message: str
