"""
Sanity content store client.

Thin async wrapper over the Sanity HTTP API using httpx. Covers the four
calls the upload flow needs:

- fetch: GROQ query, returns the `result` value
- upload_asset: binary upload to the asset pipeline
- create: single create mutation, returns the stored document
- delete: single delete mutation (orphan cleanup)

Every failure (transport error, timeout, non-2xx, unreadable body) is raised
as SanityError so callers handle one exception type.
"""
import json
import logging
import time
from typing import Any, Dict, Optional

import httpx

from app.config import Settings
from app.utils.logging import log_store_request, log_store_failure
from app.utils.metrics import (
    store_requests_total,
    store_failures_total,
    store_request_duration_seconds,
)

logger = logging.getLogger(__name__)


class SanityError(Exception):
    """A content store call failed."""

    def __init__(self, operation: str, message: str, status_code: Optional[int] = None):
        self.operation = operation
        self.status_code = status_code
        super().__init__(message)


class SanityClient:
    """
    Async client for one Sanity project/dataset.

    Authenticates with a bearer token on every request. One instance owns
    one connection pool and is shared across requests; call aclose() on
    shutdown.
    """

    def __init__(
        self,
        project_id: str,
        dataset: str,
        token: str,
        api_version: str = "2023-08-03",
        use_cdn: bool = False,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        host = "apicdn.sanity.io" if use_cdn else "api.sanity.io"
        self.project_id = project_id
        self.dataset = dataset
        self.api_version = api_version.lstrip("v")
        self.base_url = f"https://{project_id}.{host}/v{self.api_version}"
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            headers={"Authorization": f"Bearer {token}"},
            timeout=timeout,
            transport=transport
        )

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ) -> "SanityClient":
        """Build a client from application settings."""
        return cls(
            project_id=settings.sanity_project_id,
            dataset=settings.sanity_dataset,
            token=settings.sanity_api_token,
            api_version=settings.sanity_api_version,
            use_cdn=settings.sanity_use_cdn,
            timeout=settings.sanity_timeout_seconds,
            transport=transport
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _request(self, operation: str, method: str, url: str, **kwargs) -> Dict[str, Any]:
        """
        Send one request and decode the JSON body.

        Records latency and failures for every call.

        Raises:
            SanityError: on any transport, HTTP or decoding failure
        """
        store_requests_total.labels(operation=operation).inc()
        start_time = time.time()

        try:
            response = await self._client.request(method, url, **kwargs)
        except httpx.HTTPError as e:
            duration = time.time() - start_time
            store_failures_total.labels(operation=operation).inc()
            log_store_failure(logger, operation, error=repr(e), duration_ms=duration * 1000)
            raise SanityError(operation, f"{operation} request failed: {e!r}") from e

        duration = time.time() - start_time
        store_request_duration_seconds.labels(operation=operation).observe(duration)

        if response.is_error:
            store_failures_total.labels(operation=operation).inc()
            detail = response.text[:500]
            log_store_failure(
                logger,
                operation,
                error=detail,
                duration_ms=duration * 1000,
                status_code=response.status_code
            )
            raise SanityError(
                operation,
                f"{operation} returned HTTP {response.status_code}: {detail}",
                status_code=response.status_code
            )

        try:
            body = response.json()
        except ValueError as e:
            store_failures_total.labels(operation=operation).inc()
            log_store_failure(logger, operation, error="invalid JSON body", status_code=response.status_code)
            raise SanityError(operation, f"{operation} returned invalid JSON", response.status_code) from e

        log_store_request(logger, operation, duration_ms=duration * 1000, status_code=response.status_code)
        return body

    async def fetch(self, query: str, params: Optional[Dict[str, Any]] = None) -> Any:
        """
        Run a GROQ query.

        Args:
            query: GROQ query string
            params: Query parameters, referenced as $name in the query

        Returns:
            The query `result` (None when nothing matches a [0] projection)
        """
        query_params = {"query": query}
        for name, value in (params or {}).items():
            query_params[f"${name}"] = json.dumps(value)

        body = await self._request("fetch", "GET", f"/data/query/{self.dataset}", params=query_params)
        return body.get("result")

    async def upload_asset(
        self,
        kind: str,
        data: bytes,
        filename: Optional[str] = None,
        content_type: Optional[str] = None
    ) -> Dict[str, Any]:
        """
        Upload a binary asset.

        Args:
            kind: "image" or "file"
            data: Raw bytes
            filename: Original filename stored on the asset
            content_type: MIME type sent as Content-Type

        Returns:
            The asset document (has `_id`)
        """
        params = {}
        if filename:
            params["filename"] = filename

        body = await self._request(
            "upload_asset",
            "POST",
            f"/assets/{kind}s/{self.dataset}",
            params=params,
            content=data,
            headers={"Content-Type": content_type or "application/octet-stream"}
        )
        document = body.get("document")
        if not document or not document.get("_id"):
            raise SanityError("upload_asset", "asset response is missing document._id")
        return document

    async def create(self, document: Dict[str, Any]) -> Dict[str, Any]:
        """
        Create a document. The store assigns `_id` unless one is given.

        Returns:
            The created document, always including `_id`
        """
        body = await self._request(
            "create",
            "POST",
            f"/data/mutate/{self.dataset}",
            params={"returnIds": "true", "returnDocuments": "true", "visibility": "sync"},
            json={"mutations": [{"create": document}]}
        )
        results = body.get("results") or []
        if not results:
            raise SanityError("create", "mutation response has no results")

        result = results[0]
        created = dict(result.get("document") or document)
        created.setdefault("_id", result.get("id"))
        if not created.get("_id"):
            raise SanityError("create", "mutation response has no document id")
        return created

    async def delete(self, document_id: str) -> None:
        """Delete a document or asset by id."""
        await self._request(
            "delete",
            "POST",
            f"/data/mutate/{self.dataset}",
            params={"visibility": "sync"},
            json={"mutations": [{"delete": {"id": document_id}}]}
        )

    async def ping(self) -> int:
        """Cheap round trip used by the health check."""
        return await self.fetch('count(*[_type == "event"])')
