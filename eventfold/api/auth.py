"""Authentication API endpoints."""

from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlmodel import Session

from eventfold.api.deps import get_current_user
from eventfold.database import get_session
from eventfold.models.user import User
from eventfold.schemas.auth import (
    RefreshRequest,
    RefreshResponse,
    TokenResponse,
    UserProfileResponse,
)
from eventfold.services.auth_service import local_sign_in, refresh_access_token

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/local", response_model=TokenResponse)
def local_auth(request_obj: Request, session: Session = Depends(get_session)):
    """Sign in as the local owner from localhost, without OAuth."""
    client_ip = request_obj.client.host if request_obj.client else ""
    if client_ip not in ("127.0.0.1", "::1", "localhost"):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Local access only",
        )
    return TokenResponse(**local_sign_in(session))


@router.post("/refresh", response_model=RefreshResponse)
def refresh_token(request: RefreshRequest, session: Session = Depends(get_session)):
    """Refresh an access token using a refresh token."""
    try:
        new_token = refresh_access_token(request.refresh_token, session)
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(e),
        )
    return RefreshResponse(access_token=new_token)


@router.get("/me", response_model=UserProfileResponse)
def get_my_profile(user: User = Depends(get_current_user)):
    """Get current user's profile."""
    return UserProfileResponse(
        id=user.id,
        email=user.email,
        name=user.name,
        avatar=user.avatar,
        plan=user.plan,
        credits=user.credits,
    )
