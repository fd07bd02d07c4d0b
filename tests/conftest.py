"""Shared test fixtures and test doubles."""

import asyncio
import os
import secrets
import tempfile
from io import BytesIO

# Setup environment for testing (before eventfold.config is imported)
os.environ["EVENTFOLD_DATA_DIR"] = tempfile.mkdtemp()
os.environ["EVENTFOLD_UPLOAD_DIR"] = tempfile.mkdtemp()
os.environ["EVENTFOLD_DB_PATH"] = os.path.join(os.environ["EVENTFOLD_DATA_DIR"], "test.db")
os.environ["EVENTFOLD_DATABASE_URL"] = ""
os.environ["EVENTFOLD_CLOUDINARY_CLOUD_NAME"] = ""
os.environ["EVENTFOLD_CLOUDINARY_API_KEY"] = ""
os.environ["EVENTFOLD_CLOUDINARY_API_SECRET"] = ""

import pytest
from fastapi.testclient import TestClient
from PIL import Image
from sqlmodel import Session

from eventfold.api.deps import get_placement
from eventfold.database import engine, init_db
from eventfold.main import app
from eventfold.models.album import AlbumFile
from eventfold.models.user import User
from eventfold.services.file_service import FileCreate
from eventfold.services.placement import PlacementFailure, PlacementRequest
from eventfold.utils.security import create_access_token

init_db()


def make_image(width: int, height: int, fmt: str = "PNG", color=(180, 40, 90)) -> bytes:
    buf = BytesIO()
    Image.new("RGB", (width, height), color).save(buf, fmt)
    return buf.getvalue()


def make_oversized_image() -> bytes:
    """Uncompressed 3600x1200 bitmap, well above the 5 MiB transcode threshold."""
    return make_image(3600, 1200, fmt="BMP")


class FakePlacement:
    """Placement double: records calls, optional per-index delays, can fail on the Nth call."""

    def __init__(self, delays: dict[int, float] | None = None, fail_on_call: int | None = None, remote: bool = False):
        self.remote = remote
        self.delays = delays or {}
        self.fail_on_call = fail_on_call
        self.calls = 0
        self.requests: list[PlacementRequest] = []
        self.events: list[tuple[str, int]] = []

    async def place(self, request: PlacementRequest) -> str:
        self.calls += 1
        call_number = self.calls
        self.events.append(("start", request.index))
        await asyncio.sleep(self.delays.get(request.index, 0))
        self.events.append(("end", request.index))
        if call_number == self.fail_on_call:
            raise PlacementFailure(f"remote store rejected upload #{call_number}")
        self.requests.append(request)
        return f"https://media.test/{request.album_id}/{request.index}"


class ListRecorder:
    """Recorder double keeping created records in memory."""

    def __init__(self):
        self.records: list[AlbumFile] = []

    def __call__(self, data: FileCreate) -> AlbumFile:
        record = AlbumFile(
            album_id=data.album_id,
            file_path=data.file_path,
            file_type=data.file_type,
            order_index=data.order_index,
        )
        self.records.append(record)
        return record


@pytest.fixture
def client():
    with TestClient(app) as c:
        yield c


@pytest.fixture
def session():
    with Session(engine) as s:
        yield s


@pytest.fixture
def placement():
    fake = FakePlacement()
    app.dependency_overrides[get_placement] = lambda: fake
    yield fake
    app.dependency_overrides.pop(get_placement, None)


@pytest.fixture
def make_user(session):
    """Factory: persist a user and return (user, auth headers)."""

    def _make(credits: int = 3) -> tuple[User, dict]:
        suffix = secrets.token_hex(4)
        user = User(
            google_id=f"g-{suffix}",
            email=f"{suffix}@example.com",
            name=f"Planner {suffix}",
            credits=credits,
        )
        session.add(user)
        session.commit()
        session.refresh(user)
        token = create_access_token(user.id, user.plan)
        return user, {"Authorization": f"Bearer {token}"}

    return _make


@pytest.fixture
def album_for(client):
    """Factory: create an album through the API and return its id."""

    def _create(headers: dict, **fields) -> str:
        body = {"title": "Aisha & Omar", "date": "2026-06-14", **fields}
        r = client.post("/api/v1/albums", json=body, headers=headers)
        assert r.status_code == 201, f"album create failed: {r.status_code} {r.text}"
        return r.json()["id"]

    return _create
