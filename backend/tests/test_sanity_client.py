"""
Tests for the Sanity HTTP client against httpx.MockTransport.
"""
import json

import httpx
import pytest

from app.storage.sanity_client import SanityClient, SanityError
from conftest import build_settings


def _client(handler, **kwargs) -> SanityClient:
    return SanityClient(
        project_id="abc123",
        dataset="production",
        token="secret-token",
        transport=httpx.MockTransport(handler),
        **kwargs
    )


class TestSanityClientSetup:
    """Tests for URL and auth configuration."""

    def test_base_url(self):
        client = _client(lambda request: httpx.Response(200, json={}))
        assert client.base_url == "https://abc123.api.sanity.io/v2023-08-03"

    def test_cdn_host(self):
        client = _client(lambda request: httpx.Response(200, json={}), use_cdn=True)
        assert client.base_url == "https://abc123.apicdn.sanity.io/v2023-08-03"

    def test_from_settings(self):
        settings = build_settings(sanity_api_version="v2021-10-21")
        client = SanityClient.from_settings(settings, transport=httpx.MockTransport(lambda r: httpx.Response(200)))
        assert client.base_url == "https://testproj.api.sanity.io/v2021-10-21"
        assert client.dataset == "test"


class TestSanityClientFetch:
    """Tests for GROQ queries."""

    @pytest.mark.asyncio
    async def test_fetch_sends_query_and_params(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["request"] = request
            return httpx.Response(200, json={"result": {"_id": "event-1"}, "ms": 3})

        client = _client(handler)
        result = await client.fetch('*[slug.current == $slug][0]{ _id }', {"slug": "summer-fair"})

        request = seen["request"]
        assert result == {"_id": "event-1"}
        assert request.method == "GET"
        assert request.url.path == "/v2023-08-03/data/query/production"
        assert request.url.params["query"] == '*[slug.current == $slug][0]{ _id }'
        assert request.url.params["$slug"] == '"summer-fair"'
        assert request.headers["authorization"] == "Bearer secret-token"

    @pytest.mark.asyncio
    async def test_fetch_no_match_returns_none(self):
        client = _client(lambda request: httpx.Response(200, json={"result": None}))
        assert await client.fetch("*[false][0]") is None

    @pytest.mark.asyncio
    async def test_fetch_http_error(self):
        client = _client(lambda request: httpx.Response(401, json={"error": "Unauthorized"}))

        with pytest.raises(SanityError) as exc_info:
            await client.fetch("*")

        assert exc_info.value.status_code == 401
        assert exc_info.value.operation == "fetch"

    @pytest.mark.asyncio
    async def test_fetch_transport_error(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        client = _client(handler)
        with pytest.raises(SanityError) as exc_info:
            await client.fetch("*")

        assert exc_info.value.status_code is None

    @pytest.mark.asyncio
    async def test_fetch_invalid_json(self):
        client = _client(lambda request: httpx.Response(200, content=b"<html>"))

        with pytest.raises(SanityError):
            await client.fetch("*")


class TestSanityClientAssets:
    """Tests for asset uploads."""

    @pytest.mark.asyncio
    async def test_upload_asset(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["request"] = request
            return httpx.Response(200, json={"document": {"_id": "image-abc-8x8-jpg", "url": "https://cdn/x.jpg"}})

        client = _client(handler)
        asset = await client.upload_asset("image", b"\xff\xd8data", filename="IMG 1.jpg", content_type="image/jpeg")

        request = seen["request"]
        assert asset["_id"] == "image-abc-8x8-jpg"
        assert request.method == "POST"
        assert request.url.path == "/v2023-08-03/assets/images/production"
        assert request.url.params["filename"] == "IMG 1.jpg"
        assert request.headers["content-type"] == "image/jpeg"
        assert request.content == b"\xff\xd8data"

    @pytest.mark.asyncio
    async def test_upload_asset_default_content_type(self):
        seen = {}

        def handler(request):
            seen["request"] = request
            return httpx.Response(200, json={"document": {"_id": "image-1"}})

        await _client(handler).upload_asset("image", b"data")
        assert seen["request"].headers["content-type"] == "application/octet-stream"
        assert "filename" not in seen["request"].url.params

    @pytest.mark.asyncio
    async def test_upload_asset_missing_document(self):
        client = _client(lambda request: httpx.Response(200, json={}))

        with pytest.raises(SanityError):
            await client.upload_asset("image", b"data")

    @pytest.mark.asyncio
    async def test_upload_asset_timeout(self):
        def handler(request):
            raise httpx.ReadTimeout("timed out", request=request)

        with pytest.raises(SanityError) as exc_info:
            await _client(handler).upload_asset("image", b"data")

        assert exc_info.value.operation == "upload_asset"


class TestSanityClientMutations:
    """Tests for create and delete mutations."""

    @pytest.mark.asyncio
    async def test_create_returns_document(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["request"] = request
            body = json.loads(request.content)
            document = {**body["mutations"][0]["create"], "_id": "doc-1", "_rev": "r1"}
            return httpx.Response(200, json={
                "transactionId": "tx",
                "results": [{"id": "doc-1", "operation": "create", "document": document}]
            })

        client = _client(handler)
        created = await client.create({"_type": "photo", "name": "a.jpg"})

        request = seen["request"]
        assert created["_id"] == "doc-1"
        assert created["name"] == "a.jpg"
        assert request.url.path == "/v2023-08-03/data/mutate/production"
        assert request.url.params["returnDocuments"] == "true"
        assert json.loads(request.content) == {"mutations": [{"create": {"_type": "photo", "name": "a.jpg"}}]}

    @pytest.mark.asyncio
    async def test_create_with_ids_only(self):
        client = _client(lambda request: httpx.Response(200, json={
            "results": [{"id": "doc-2", "operation": "create"}]
        }))

        created = await client.create({"_type": "photo"})
        assert created == {"_type": "photo", "_id": "doc-2"}

    @pytest.mark.asyncio
    async def test_create_empty_results(self):
        client = _client(lambda request: httpx.Response(200, json={"results": []}))

        with pytest.raises(SanityError):
            await client.create({"_type": "photo"})

    @pytest.mark.asyncio
    async def test_create_rejected(self):
        client = _client(lambda request: httpx.Response(400, json={"error": {"description": "bad"}}))

        with pytest.raises(SanityError) as exc_info:
            await client.create({"_type": "photo"})

        assert exc_info.value.status_code == 400

    @pytest.mark.asyncio
    async def test_delete(self):
        seen = {}

        def handler(request):
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={"results": [{"id": "image-1", "operation": "delete"}]})

        await _client(handler).delete("image-1")
        assert seen["body"] == {"mutations": [{"delete": {"id": "image-1"}}]}

    @pytest.mark.asyncio
    async def test_ping(self):
        client = _client(lambda request: httpx.Response(200, json={"result": 4}))
        assert await client.ping() == 4
