"""Notion page creation adapter."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Protocol

import httpx

from ..core.config import Settings, load_settings


@dataclass(frozen=True)
class RecordRef:
    id: str
    url: str | None = None


class RecordCreationError(RuntimeError):
    """Raised when the external service refuses or fails to create a record."""

    def __init__(
        self,
        message: str,
        *,
        code: str | None = None,
        status: int | None = None,
        body: str | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.status = status
        self.body = body


class RecordCreator(Protocol):
    async def create_record(self, collection_id: str, properties: Dict[str, Any]) -> RecordRef:
        ...


class NotionClient:
    """Creates pages in a Notion database through the public REST API."""

    def __init__(self, settings: Settings | None = None, *, transport: httpx.AsyncBaseTransport | None = None):
        self.settings = settings or load_settings()
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def _ensure_client(self) -> httpx.AsyncClient:
        if self._client is None:
            timeout = httpx.Timeout(self.settings.http.timeout_seconds)
            self._client = httpx.AsyncClient(
                base_url=self.settings.api_base_url.rstrip("/"),
                timeout=timeout,
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    def _headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self.settings.notion_token}",
            "Notion-Version": self.settings.notion_version,
            "Content-Type": "application/json",
        }

    async def create_record(self, collection_id: str, properties: Dict[str, Any]) -> RecordRef:
        """Create one page under ``collection_id``. Failures are not retried."""

        client = await self._ensure_client()
        payload = {"parent": {"database_id": collection_id}, "properties": properties}

        try:
            response = await client.post("/pages", headers=self._headers(), json=payload)
        except httpx.HTTPError as exc:
            raise RecordCreationError(str(exc) or exc.__class__.__name__, code="network_error") from exc

        if response.is_error:
            raise _error_from_response(response)

        try:
            data = response.json()
        except ValueError as exc:
            raise RecordCreationError(
                "Notion returned a non-JSON response",
                code="invalid_response",
                status=response.status_code,
                body=response.text,
            ) from exc

        page_id = data.get("id") if isinstance(data, dict) else None
        if not page_id:
            raise RecordCreationError(
                "Notion response did not include a page id",
                code="invalid_response",
                status=response.status_code,
                body=response.text,
            )
        return RecordRef(id=page_id, url=data.get("url"))


def _error_from_response(response: httpx.Response) -> RecordCreationError:
    message = f"Notion responded with HTTP {response.status_code}"
    code = None
    try:
        data = response.json()
    except ValueError:
        data = None

    if isinstance(data, dict):
        message = data.get("message") or message
        code = data.get("code")

    return RecordCreationError(message, code=code, status=response.status_code, body=response.text)


__all__ = ["NotionClient", "RecordCreationError", "RecordCreator", "RecordRef"]
