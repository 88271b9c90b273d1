import uuid
from collections.abc import AsyncGenerator

import pytest
from httpx import ASGITransport, AsyncClient

from statebook.config import settings
from statebook.db.base import Base
from statebook.db.models import *  # noqa: F401,F403 - ensure all models loaded
from statebook.db.session import Database

# Smallest valid PNG (1x1, transparent)
PNG_BYTES = bytes.fromhex(
    "89504e470d0a1a0a0000000d4948445200000001000000010806000000"
    "1f15c4890000000d49444154789c636460f80f0000020101005f0d4a8f"
    "0000000049454e44ae426082"
)
FIGMA_URL = "https://www.figma.com/file/AbC123/Design-System?node-id=120-880"


@pytest.fixture(autouse=True)
def test_settings(tmp_path, monkeypatch):
    """Point uploads at a temp dir and keep the upload limit and debounce small."""
    monkeypatch.setattr(settings, "STORAGE_BACKEND", "local")
    monkeypatch.setattr(settings, "STORAGE_LOCAL_PATH", str(tmp_path / "storage"))
    monkeypatch.setattr(settings, "UPLOAD_MAX_SIZE_MB", 6)
    monkeypatch.setattr(settings, "AUTOSAVE_DEBOUNCE_MS", 50)
    return settings


@pytest.fixture
async def test_database(tmp_path) -> AsyncGenerator[Database, None]:
    database = Database(url=f"sqlite+aiosqlite:///{tmp_path / 'test.db'}", echo=False)
    async with database.engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield database
    await database.dispose()


@pytest.fixture
def app(test_database):
    from statebook.api.deps import get_db
    from statebook.main import app

    # One session per request, committed like the real dependency, so
    # concurrent requests from the editor never share a session.
    async def override_get_db():
        async with test_database.session() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    yield app
    app.dependency_overrides.clear()


@pytest.fixture
async def client(app):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def create_element(client):
    async def _create(
        figma_url: str = FIGMA_URL,
        title: str = "Login Form",
        project_id: uuid.UUID | str | None = None,
        image: bytes = PNG_BYTES,
        filename: str = "login form.png",
        content_type: str = "image/png",
    ) -> dict:
        data = {"figmaUrl": figma_url, "title": title}
        if project_id:
            data["projectId"] = str(project_id)
        response = await client.post(
            "/api/v1/elements",
            data=data,
            files={"image": (filename, image, content_type)},
        )
        assert response.status_code == 201, response.text
        return response.json()

    return _create


@pytest.fixture
def create_state(client):
    async def _create(element_id: str, **fields) -> dict:
        body = {"type": "error", "title": "Required", "message": "This field is required."}
        body.update(fields)
        response = await client.post(f"/api/v1/elements/{element_id}/states", json=body)
        assert response.status_code == 201, response.text
        return response.json()

    return _create
