"""Eventfold Server - FastAPI Application Entry Point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse

from eventfold.config import settings
from eventfold.database import init_db
from eventfold.logging_config import configure_logging
from eventfold.services.file_service import PersistenceError
from eventfold.services.ingest_service import NoDataReceived
from eventfold.services.placement import PlacementFailure, build_placement
from eventfold.utils.storage import resolve_upload

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialize logging, database and media placement on startup."""
    configure_logging(settings.debug)
    init_db()
    app.state.placement = build_placement(settings)
    yield


app = FastAPI(
    title="Eventfold",
    description="Flipbook wedding albums: album metadata and media ingestion",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# --- Error mapping ---

@app.exception_handler(NoDataReceived)
async def no_data_handler(request: Request, exc: NoDataReceived):
    return JSONResponse(
        status_code=400,
        content={"error": "Sync Error: No data received", "message": str(exc)},
    )


@app.exception_handler(PlacementFailure)
@app.exception_handler(PersistenceError)
async def sync_failure_handler(request: Request, exc: Exception):
    logger.error("Critical upload failure on %s: %s", request.url.path, exc)
    return JSONResponse(
        status_code=500,
        content={"error": "Server synchronization failed", "message": str(exc)},
    )


# --- Register API routers ---
from eventfold.api.albums import router as albums_router  # noqa: E402
from eventfold.api.auth import router as auth_router  # noqa: E402
from eventfold.api.files import router as files_router  # noqa: E402
from eventfold.api.media import router as media_router  # noqa: E402
from eventfold.api.settings import router as settings_router  # noqa: E402
from eventfold.api.system import router as system_router  # noqa: E402

API_PREFIX = "/api/v1"

app.include_router(auth_router, prefix=API_PREFIX)
app.include_router(albums_router, prefix=API_PREFIX)
app.include_router(files_router, prefix=API_PREFIX)
app.include_router(media_router, prefix=API_PREFIX)
app.include_router(settings_router, prefix=API_PREFIX)
app.include_router(system_router, prefix=API_PREFIX)


@app.get("/")
def root():
    """Server info."""
    return {
        "name": settings.server_name,
        "version": "0.1.0",
        "status": "running",
    }


# --- Locally placed media ---

@app.get("/uploads/{filename}")
def serve_upload(filename: str):
    """Serve a file written by local-disk placement."""
    path = resolve_upload(filename)
    if path is None:
        raise HTTPException(status_code=404, detail="File not found")
    return FileResponse(str(path))
