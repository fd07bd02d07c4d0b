"""System status API endpoints."""

import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlmodel import Session, func, select

from eventfold.api.deps import get_placement
from eventfold.database import get_session
from eventfold.models.album import Album
from eventfold.services.placement import Placement

logger = logging.getLogger(__name__)

router = APIRouter(tags=["system"])


@router.get("/health")
def health(
    session: Session = Depends(get_session),
    placement: Placement = Depends(get_placement),
):
    """Health check (no auth required): database reachability and placement mode."""
    try:
        album_count = session.exec(select(func.count()).select_from(Album)).one()
    except Exception as e:
        logger.error("Health check failure: %s", e)
        return JSONResponse(
            status_code=500,
            content={"status": "error", "database": "disconnected", "error": str(e)},
        )
    return {
        "status": "ok",
        "database": "connected",
        "albums": album_count,
        "remoteStore": placement.remote,
    }
