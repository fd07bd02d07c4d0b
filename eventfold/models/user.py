"""User and business settings models."""

import secrets
from datetime import datetime, timezone
from typing import Optional

from sqlmodel import Field, SQLModel


class User(SQLModel, table=True):
    __tablename__ = "users"

    id: str = Field(default_factory=lambda: f"usr_{secrets.token_hex(4)}", primary_key=True)
    google_id: Optional[str] = Field(default=None, unique=True, index=True)
    email: str = Field(unique=True, index=True)
    name: str
    avatar: Optional[str] = None
    plan: str = Field(default="free")  # 'free' | 'pro' | 'studio'
    credits: int = Field(default=0)  # albums the user may still create
    stripe_customer_id: Optional[str] = None
    subscription_id: Optional[str] = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class UserSettings(SQLModel, table=True):
    __tablename__ = "user_settings"

    user_id: str = Field(foreign_key="users.id", primary_key=True)
    business_name: Optional[str] = None
    business_logo: Optional[str] = None
    contact_whatsapp: Optional[str] = None
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
