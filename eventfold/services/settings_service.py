"""Per-user business settings shown on shared albums."""

from datetime import datetime, timezone

from sqlmodel import Session

from eventfold.models.user import User, UserSettings


def get_user_settings(user: User, session: Session) -> UserSettings:
    """Business settings of a user, created empty on first access."""
    user_settings = session.get(UserSettings, user.id)
    if user_settings is None:
        user_settings = UserSettings(user_id=user.id)
        session.add(user_settings)
        session.commit()
        session.refresh(user_settings)
    return user_settings


def update_user_settings(user: User, changes: dict, session: Session) -> UserSettings:
    """Apply the given fields; keys not present are left untouched."""
    user_settings = get_user_settings(user, session)
    for key, value in changes.items():
        setattr(user_settings, key, value)
    user_settings.updated_at = datetime.now(timezone.utc)
    session.add(user_settings)
    session.commit()
    session.refresh(user_settings)
    return user_settings
