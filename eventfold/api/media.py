"""Signed parameters for browser-side uploads to the media host."""

import time

import cloudinary.utils
from fastapi import APIRouter, Depends, HTTPException, status

from eventfold.api.deps import get_current_user
from eventfold.config import settings
from eventfold.models.user import User
from eventfold.schemas.media import SignatureResponse

router = APIRouter(prefix="/media", tags=["media"])


@router.get("/signature", response_model=SignatureResponse)
def upload_signature(user: User = Depends(get_current_user)):
    """Sign a direct Cloudinary upload; the client then posts a JSON manifest."""
    config = settings.remote_store_config()
    if config is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Remote media store is not configured",
        )

    timestamp = int(time.time())
    signature = cloudinary.utils.api_sign_request(
        {"timestamp": timestamp, "folder": config.folder},
        config.api_secret,
    )
    return SignatureResponse(
        signature=signature,
        timestamp=timestamp,
        cloud_name=config.cloud_name,
        api_key=config.api_key,
        folder=config.folder,
    )
