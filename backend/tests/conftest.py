"""
Test configuration and fixtures.
The Sanity store is replaced by an in-memory fake; no network access.
"""
import io
import os
import uuid as uuid_module

# Set test environment before any imports
os.environ["SANITY_PROJECT_ID"] = "testproj"
os.environ["SANITY_DATASET"] = "test"
os.environ["SANITY_API_TOKEN"] = "test-token"
os.environ["ENVIRONMENT"] = "test"

import pytest
from typing import AsyncGenerator, Optional

from fastapi import FastAPI
from httpx import AsyncClient, ASGITransport
from PIL import Image
from pillow_heif import register_heif_opener

from app.config import Settings
from app.storage.sanity_client import SanityError

register_heif_opener()


class FakeSanityStore:
    """
    In-memory stand-in for SanityClient.

    Records every call as (operation, args) so tests can assert on
    ordering and on the absence of calls.
    """

    def __init__(self, events: Optional[dict] = None):
        self.events = events or {}  # slug -> event _id
        self.calls = []
        self.assets = {}
        self.documents = {}
        self.deleted = []
        self.fail_on = set()

    def operations(self) -> list:
        return [operation for operation, _ in self.calls]

    def _record(self, operation: str, args: dict):
        self.calls.append((operation, args))
        if operation in self.fail_on:
            raise SanityError(operation, f"{operation} failed", status_code=500)

    async def fetch(self, query, params=None):
        self._record("fetch", {"query": query, "params": params})
        event_id = self.events.get((params or {}).get("slug"))
        return {"_id": event_id} if event_id else None

    async def upload_asset(self, kind, data, filename=None, content_type=None):
        self._record("upload_asset", {
            "kind": kind,
            "size": len(data),
            "filename": filename,
            "content_type": content_type
        })
        asset_id = f"image-{uuid_module.uuid4().hex}-8x8-jpg"
        self.assets[asset_id] = data
        return {"_id": asset_id, "_type": "sanity.imageAsset", "originalFilename": filename}

    async def create(self, document):
        self._record("create", {"document": document})
        doc_id = str(uuid_module.uuid4())
        created = {**document, "_id": doc_id}
        self.documents[doc_id] = created
        return created

    async def delete(self, document_id):
        self._record("delete", {"id": document_id})
        self.deleted.append(document_id)
        self.assets.pop(document_id, None)

    async def ping(self):
        self._record("ping", {})
        return len(self.events)


def make_jpeg(
    datetime_original: Optional[str] = None,
    offset: Optional[str] = None,
    in_exif_ifd: bool = True,
    format: str = "JPEG"
) -> bytes:
    """Build a small image (JPEG by default), optionally carrying DateTimeOriginal."""
    image = Image.new("RGB", (64, 64), color=(200, 30, 30))
    buffer = io.BytesIO()

    tags = {}
    if datetime_original:
        tags[0x9003] = datetime_original
    if offset:
        tags[0x9011] = offset

    if tags:
        exif = Image.Exif()
        if in_exif_ifd:
            exif[0x8769] = tags
        else:
            for tag, value in tags.items():
                exif[tag] = value
        image.save(buffer, format=format, exif=exif.tobytes())
    else:
        image.save(buffer, format=format)
    return buffer.getvalue()


def build_settings(**overrides) -> Settings:
    values = {
        "sanity_project_id": "testproj",
        "sanity_dataset": "test",
        "sanity_api_token": "test-token",
        "cors_allowed_origins": ["http://localhost:3000"],
        "environment": "test",
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


@pytest.fixture
def settings() -> Settings:
    return build_settings()


@pytest.fixture
def fake_store() -> FakeSanityStore:
    """Fake store with one known event."""
    return FakeSanityStore(events={"summer-fair": "event-summer-fair"})


@pytest.fixture
def jpeg_with_exif() -> bytes:
    return make_jpeg("2023:08:01 10:00:00")


@pytest.fixture
def jpeg_without_exif() -> bytes:
    return make_jpeg()


def get_test_app(settings: Settings, store: FakeSanityStore) -> FastAPI:
    """Create a test FastAPI app with the store dependency overridden."""
    from app.main import create_app
    from app.api.deps import get_store

    app = create_app(settings)
    app.dependency_overrides[get_store] = lambda: store
    return app


@pytest.fixture
def make_client():
    """Factory for clients bound to custom settings."""
    async def _make(settings: Settings, store: FakeSanityStore) -> AsyncClient:
        app = get_test_app(settings, store)
        return AsyncClient(transport=ASGITransport(app=app), base_url="http://test")
    return _make


@pytest.fixture
async def client(settings: Settings, fake_store: FakeSanityStore) -> AsyncGenerator[AsyncClient, None]:
    """Create async HTTP client for API testing."""
    app = get_test_app(settings, fake_store)

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()
