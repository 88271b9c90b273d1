import httpx
import pytest

from statebook.common.exceptions import UploadError
from statebook.integrations.storage import BlobClient, UploadStore, safe_extension, sanitize_file_name


def test_sanitize_file_name():
    assert sanitize_file_name("Login Form (final)") == "login-form-final-"
    assert sanitize_file_name("already-safe_name") == "already-safe_name"


def test_safe_extension_falls_back_to_content_type():
    assert safe_extension("shot.PNG", "image/png") == ".PNG"
    assert safe_extension("blob", "image/svg+xml") == ".svg"
    assert safe_extension("blob", "application/octet-stream") == ""


@pytest.mark.asyncio
async def test_store_writes_local_file(test_settings, tmp_path):
    stored = await UploadStore().store(content=b"gif", name="спиннер.gif", content_type="image/gif")

    assert stored.name == "спиннер.gif"
    assert stored.type == "image/gif"
    assert stored.size == 3
    # non-ascii base name collapses to a single dash
    assert stored.path.startswith("/storage/--")
    filename = stored.path.rsplit("/", 1)[1]
    assert (tmp_path / "storage" / filename).read_bytes() == b"gif"


@pytest.mark.asyncio
async def test_limit_is_read_per_call(test_settings, monkeypatch):
    store = UploadStore()
    content = b"x" * (2 * 1024 * 1024)
    await store.store(content=content, name="a.png", content_type="image/png")

    monkeypatch.setattr(test_settings, "UPLOAD_MAX_SIZE_MB", 1)
    with pytest.raises(UploadError) as exc:
        await store.store(content=content, name="a.png", content_type="image/png")
    assert exc.value.status_code == 413
    assert exc.value.detail == "File exceeds 1MB limit."


def test_rejects_unknown_type():
    with pytest.raises(UploadError) as exc:
        UploadStore().validate("doc.pdf", "application/pdf", 10)
    assert exc.value.status_code == 400


class FailingBlob(BlobClient):
    async def put(self, filename, content, content_type):
        raise httpx.ConnectError("blob store unreachable")


@pytest.mark.asyncio
async def test_backend_failure_is_upload_error():
    with pytest.raises(UploadError) as exc:
        await UploadStore(blob=FailingBlob()).store(content=b"x", name="a.png", content_type="image/png")
    assert exc.value.status_code == 502


@pytest.mark.asyncio
async def test_remote_put(test_settings, monkeypatch):
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["auth"] = request.headers["authorization"]
        seen["type"] = request.headers["x-content-type"]
        return httpx.Response(200, json={"url": "https://blob.example/a-1.png", "pathname": "a-1.png"})

    monkeypatch.setattr(test_settings, "STORAGE_BACKEND", "blob")
    monkeypatch.setattr(test_settings, "BLOB_READ_WRITE_TOKEN", "token-123")
    monkeypatch.setattr(test_settings, "BLOB_API_URL", "https://blob.example")

    real_client = httpx.AsyncClient

    def mock_client(**kwargs):
        return real_client(transport=httpx.MockTransport(handler), **kwargs)

    monkeypatch.setattr(httpx, "AsyncClient", mock_client)
    stored = await UploadStore().store(content=b"png", name="a.png", content_type="image/png")

    assert stored.path == "https://blob.example/a-1.png"
    assert seen["url"].startswith("https://blob.example/a-")
    assert seen["auth"] == "Bearer token-123"
    assert seen["type"] == "image/png"
