"""Client for the JSONBin-compatible document store holding the records.

The store is treated as an opaque dependency: any transport failure or
non-2xx response becomes an ``UpstreamError`` and the response body is never
inspected for partial recovery.  Calls are not retried.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from config import Settings, get_settings
from errors import ConfigurationError, UpstreamError
from models.document import Document

logger = logging.getLogger(__name__)

MASTER_KEY_HEADER = "X-Master-Key"


class DocumentStoreClient:
    """Reads and replaces a single bin in the document store."""

    def __init__(
        self,
        base_url: str,
        bin_id: str,
        master_key: str,
        timeout: float | None = None,
        client: httpx.AsyncClient | None = None,
    ):
        if not master_key:
            raise ConfigurationError("Document store master key is not configured")
        if not bin_id:
            raise ConfigurationError("Document store bin id is not configured")
        self.base_url = base_url.rstrip("/")
        self.bin_id = bin_id
        self._master_key = master_key
        self._client = client or httpx.AsyncClient(timeout=timeout)
        self._owns_client = client is None

    @classmethod
    def from_settings(
        cls, settings: Settings, client: httpx.AsyncClient | None = None
    ) -> "DocumentStoreClient":
        return cls(
            base_url=settings.document_store_url,
            bin_id=settings.document_store_bin_id,
            master_key=settings.document_store_master_key,
            timeout=settings.document_store_timeout_seconds,
            client=client,
        )

    @property
    def _bin_url(self) -> str:
        return f"{self.base_url}/b/{self.bin_id}"

    async def _request(self, method: str, url: str, **kwargs: Any) -> dict[str, Any]:
        headers = kwargs.pop("headers", {})
        headers[MASTER_KEY_HEADER] = self._master_key
        try:
            response = await self._client.request(method, url, headers=headers, **kwargs)
        except httpx.HTTPError as exc:
            logger.error("Document store %s failed: %s", method, exc.__class__.__name__)
            raise UpstreamError("Document store is unreachable") from exc

        if not response.is_success:
            logger.error("Document store %s returned HTTP %d", method, response.status_code)
            raise UpstreamError(
                "Document store returned an error", status_code=response.status_code
            )
        try:
            body = response.json()
        except ValueError as exc:
            raise UpstreamError(
                "Document store returned a non-JSON body", status_code=response.status_code
            ) from exc
        if not isinstance(body, dict):
            raise UpstreamError(
                "Document store returned an unexpected body", status_code=response.status_code
            )
        return body

    async def fetch_latest(self) -> Document:
        """Return the latest version of the stored document."""
        body = await self._request("GET", f"{self._bin_url}/latest")
        return body.get("record")

    async def replace(self, document: Document) -> dict[str, Any]:
        """Overwrite the stored document; returns the store's version metadata."""
        body = await self._request(
            "PUT",
            self._bin_url,
            json=document,
            headers={"Content-Type": "application/json"},
        )
        return body.get("metadata") or {}

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()


_http_client: httpx.AsyncClient | None = None


def get_http_client() -> httpx.AsyncClient:
    """Shared connection pool, created lazily and closed on app shutdown."""
    global _http_client
    if _http_client is None or _http_client.is_closed:
        settings = get_settings()
        _http_client = httpx.AsyncClient(timeout=settings.document_store_timeout_seconds)
    return _http_client


async def close_http_client() -> None:
    global _http_client
    if _http_client is not None:
        await _http_client.aclose()
        _http_client = None


def get_document_store() -> DocumentStoreClient:
    """FastAPI dependency returning a store client on the shared pool."""
    return DocumentStoreClient.from_settings(get_settings(), client=get_http_client())
