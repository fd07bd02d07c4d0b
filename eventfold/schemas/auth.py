"""Auth request/response schemas."""

from typing import Optional

from pydantic import BaseModel


class TokenResponse(BaseModel):
    user_id: str
    access_token: str
    refresh_token: str
    is_new_user: bool


class RefreshRequest(BaseModel):
    refresh_token: str


class RefreshResponse(BaseModel):
    access_token: str


class UserProfileResponse(BaseModel):
    id: str
    email: str
    name: str
    avatar: Optional[str]
    plan: str
    credits: int
