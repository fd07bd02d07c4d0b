"""Sign-in and token refresh business logic.

The OAuth dance itself happens outside this service; once a provider has
vouched for an identity, ``sign_in_identity`` maps it onto a local user and
issues tokens.
"""

import logging

from sqlmodel import Session, select

from eventfold.config import settings
from eventfold.models.user import User
from eventfold.utils.security import (
    create_access_token,
    create_refresh_token,
    decode_token,
)

logger = logging.getLogger(__name__)

LOCAL_IDENTITY = {
    "google_id": "local",
    "email": "owner@localhost",
    "name": "Local Owner",
}


def find_or_create_user(
    session: Session,
    google_id: str,
    email: str,
    name: str,
    avatar: str | None = None,
) -> tuple[User, bool]:
    """Look the user up by OAuth subject, then by email, else create one.

    Returns (user, created).
    """
    user = session.exec(select(User).where(User.google_id == google_id)).first()
    if user:
        return user, False

    user = session.exec(select(User).where(User.email == email)).first()
    if user:
        # Link the OAuth subject to the existing email account
        if not user.google_id:
            user.google_id = google_id
            session.add(user)
            session.commit()
            session.refresh(user)
        return user, False

    user = User(
        google_id=google_id,
        email=email,
        name=name,
        avatar=avatar,
        plan="free",
        credits=settings.starting_credits,
    )
    session.add(user)
    session.commit()
    session.refresh(user)
    logger.info("New user %s (%s) with %d credit(s)", user.id, email, user.credits)
    return user, True


def sign_in_identity(
    session: Session,
    google_id: str,
    email: str,
    name: str,
    avatar: str | None = None,
) -> dict:
    """Resolve a verified identity and issue tokens."""
    user, created = find_or_create_user(session, google_id, email, name, avatar)
    return {
        "user_id": user.id,
        "access_token": create_access_token(user.id, user.plan),
        "refresh_token": create_refresh_token(user.id),
        "is_new_user": created,
    }


def local_sign_in(session: Session) -> dict:
    """Sign in the fixed local identity (localhost development)."""
    return sign_in_identity(session, **LOCAL_IDENTITY)


def refresh_access_token(refresh_token_str: str, session: Session) -> str:
    """Validate refresh token and issue new access token."""
    try:
        payload = decode_token(refresh_token_str)
    except Exception:
        raise ValueError("Invalid or expired refresh token")

    if payload.get("type") != "refresh":
        raise ValueError("Invalid token type")

    user = session.get(User, payload.get("sub"))
    if not user:
        raise ValueError("User not found")

    return create_access_token(user.id, user.plan)
