"""Common API dependencies: current user extraction, ingestion wiring."""

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlmodel import Session

from eventfold.config import settings
from eventfold.database import get_session
from eventfold.models.user import User
from eventfold.services.placement import Placement, build_placement
from eventfold.utils.security import decode_token

bearer_scheme = HTTPBearer(auto_error=False)


def _user_from_token(token: str, session: Session) -> User:
    try:
        payload = decode_token(token)
    except Exception:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
        )

    if payload.get("type") != "access":
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token type",
        )

    user = session.get(User, payload["sub"])
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found",
        )
    return user


def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    session: Session = Depends(get_session),
) -> User:
    """Extract and validate user from JWT access token."""
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return _user_from_token(credentials.credentials, session)


def get_optional_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    session: Session = Depends(get_session),
) -> User | None:
    """Like get_current_user, but anonymous guests resolve to None."""
    if credentials is None:
        return None
    return _user_from_token(credentials.credentials, session)


def get_placement(request: Request) -> Placement:
    """Placement adapter chosen at startup."""
    placement = getattr(request.app.state, "placement", None)
    if placement is None:
        placement = build_placement(settings)
        request.app.state.placement = placement
    return placement
