"""Business settings API endpoints."""

from fastapi import APIRouter, Depends
from sqlmodel import Session

from eventfold.api.deps import get_current_user
from eventfold.database import get_session
from eventfold.models.user import User, UserSettings
from eventfold.schemas.settings import SettingsResponse, SettingsUpdateRequest
from eventfold.services.settings_service import get_user_settings, update_user_settings

router = APIRouter(prefix="/settings", tags=["settings"])


def _settings_to_response(s: UserSettings) -> SettingsResponse:
    return SettingsResponse(
        business_name=s.business_name,
        business_logo=s.business_logo,
        contact_whatsapp=s.contact_whatsapp,
    )


@router.get("", response_model=SettingsResponse)
def read_settings(
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    return _settings_to_response(get_user_settings(user, session))


@router.patch("", response_model=SettingsResponse)
def patch_settings(
    request: SettingsUpdateRequest,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    """Update only the fields present in the request body."""
    changes = request.model_dump(exclude_unset=True)
    return _settings_to_response(update_user_settings(user, changes, session))
