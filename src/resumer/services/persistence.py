"""Persistence collaborators storing build records.

The autosave controller only depends on :class:`PersistenceClient`. Two
implementations ship here: :class:`HttpPersistenceClient` talking to the
resume build REST API and :class:`InMemoryPersistence` for tests and
offline use.
"""

from __future__ import annotations

import copy
import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Protocol, runtime_checkable

import httpx
from tenacity import AsyncRetrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from ..errors import ErrorCode, NotFoundError, PersistenceError

LOGGER = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(slots=True, frozen=True)
class BuildSummary:
    """One row of the build history listing."""

    build_id: str
    title: str
    updated_at: datetime | None = None
    thumbnail: str | None = None
    template_id: str | None = None


@runtime_checkable
class PersistenceClient(Protocol):
    """Async boundary to wherever build records live."""

    async def create(self, payload: Mapping[str, Any]) -> str:
        ...

    async def update(self, build_id: str, payload: Mapping[str, Any]) -> datetime:
        ...

    async def list(self) -> List[BuildSummary]:
        ...

    async def get(self, build_id: str) -> Dict[str, Any]:
        ...

    async def delete(self, build_id: str) -> None:
        ...


class InMemoryPersistence:
    """Dictionary-backed :class:`PersistenceClient`."""

    def __init__(self) -> None:
        self._records: Dict[str, Dict[str, Any]] = {}
        self._updated: Dict[str, datetime] = {}
        self.calls: List[tuple[str, str | None]] = []

    async def create(self, payload: Mapping[str, Any]) -> str:
        build_id = uuid.uuid4().hex
        self._records[build_id] = copy.deepcopy(dict(payload))
        self._updated[build_id] = _utcnow()
        self.calls.append(("create", build_id))
        return build_id

    async def update(self, build_id: str, payload: Mapping[str, Any]) -> datetime:
        self.calls.append(("update", build_id))
        if build_id not in self._records:
            raise NotFoundError(error_code=ErrorCode.BUILD_NOT_FOUND, message="Resume not found", identifier=build_id)
        self._records[build_id] = copy.deepcopy(dict(payload))
        self._updated[build_id] = _utcnow()
        return self._updated[build_id]

    async def list(self) -> List[BuildSummary]:
        summaries = [
            BuildSummary(
                build_id=build_id,
                title=str(record.get("title") or ""),
                updated_at=self._updated.get(build_id),
                template_id=record.get("template"),
            )
            for build_id, record in self._records.items()
        ]
        summaries.sort(key=lambda summary: summary.updated_at or datetime.min.replace(tzinfo=timezone.utc), reverse=True)
        return summaries

    async def get(self, build_id: str) -> Dict[str, Any]:
        record = self._records.get(build_id)
        if record is None:
            raise NotFoundError(error_code=ErrorCode.BUILD_NOT_FOUND, message="Resume not found", identifier=build_id)
        return copy.deepcopy(record)

    async def delete(self, build_id: str) -> None:
        self._records.pop(build_id, None)
        self._updated.pop(build_id, None)

    def __contains__(self, build_id: object) -> bool:
        return build_id in self._records


class HttpPersistenceClient:
    """:class:`PersistenceClient` for the ``/resume/build`` REST routes.

    Transport errors and timeouts are retried with exponential backoff.
    Anything that still fails surfaces as :class:`PersistenceError`, except a
    404 which raises :class:`NotFoundError`.
    """

    def __init__(
        self,
        base_url: str,
        *,
        token: str | None = None,
        timeout: float = 30.0,
        max_retries: int = 3,
        retry_min_seconds: float = 0.5,
        retry_max_seconds: float = 6.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        headers = {"Accept": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"
        if client is None:
            client = httpx.AsyncClient(base_url=base_url.rstrip("/"), headers=headers, timeout=timeout)
            self._owns_client = True
        else:
            client.headers.update(headers)
            self._owns_client = False
        self._client = client
        self._max_retries = max_retries
        self._retry_min_seconds = retry_min_seconds
        self._retry_max_seconds = retry_max_seconds

    async def create(self, payload: Mapping[str, Any]) -> str:
        data = await self._request("POST", "/resume/build", json=_request_body(payload))
        build_id = data.get("_id") or data.get("id") or data.get("buildId")
        if not build_id:
            raise PersistenceError(message="Create response carried no build id", details={"response": data})
        return str(build_id)

    async def update(self, build_id: str, payload: Mapping[str, Any]) -> datetime:
        data = await self._request("PUT", f"/resume/build/{build_id}", json=_request_body(payload))
        return _parse_timestamp(data.get("updatedAt")) or _utcnow()

    async def list(self) -> List[BuildSummary]:
        data = await self._request("GET", "/resume/build/history")
        rows = data if isinstance(data, list) else []
        return [
            BuildSummary(
                build_id=str(row.get("_id") or row.get("id")),
                title=str(row.get("title") or ""),
                updated_at=_parse_timestamp(row.get("updatedAt")),
                thumbnail=row.get("thumbnail"),
                template_id=row.get("templateId"),
            )
            for row in rows
            if isinstance(row, Mapping)
        ]

    async def get(self, build_id: str) -> Dict[str, Any]:
        data = await self._request("GET", f"/resume/build/{build_id}")
        if not isinstance(data, Mapping):
            raise PersistenceError(message="Unexpected build payload", details={"build_id": build_id})
        content = data.get("content")
        if isinstance(content, Mapping) and "sections" in content:
            payload = dict(content)
            payload.setdefault("title", data.get("title"))
            return payload
        return dict(data)

    async def delete(self, build_id: str) -> None:
        await self._request("DELETE", f"/resume/build/{build_id}")

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def _request(self, method: str, url: str, **kwargs: Any) -> Any:
        try:
            async for attempt in self._retrying():
                with attempt:
                    response = await self._client.request(method, url, **kwargs)
                    if response.status_code >= 500:
                        response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise PersistenceError(
                message=f"{method} {url} failed with status {exc.response.status_code}",
                status_code=exc.response.status_code,
            ) from exc
        except httpx.HTTPError as exc:
            raise PersistenceError(message=f"{method} {url} failed: {exc}") from exc

        if response.status_code == 404:
            raise NotFoundError(error_code=ErrorCode.BUILD_NOT_FOUND, message="Resume not found", identifier=url)
        if response.status_code >= 400:
            raise PersistenceError(
                message=f"{method} {url} failed with status {response.status_code}",
                status_code=response.status_code,
                details={"body": response.text[:500]},
            )
        LOGGER.debug("%s %s -> %s", method, url, response.status_code)
        if not response.content:
            return {}
        try:
            body = response.json()
        except ValueError as exc:
            raise PersistenceError(message=f"{method} {url} returned invalid JSON") from exc
        if isinstance(body, Mapping) and "data" in body:
            return body["data"] if body["data"] is not None else {}
        return body

    def _retrying(self) -> AsyncRetrying:
        return AsyncRetrying(
            reraise=True,
            stop=stop_after_attempt(max(1, self._max_retries)),
            wait=wait_exponential(multiplier=self._retry_min_seconds, max=self._retry_max_seconds),
            retry=retry_if_exception_type((httpx.TransportError, httpx.HTTPStatusError)),
        )


def _request_body(payload: Mapping[str, Any]) -> Dict[str, Any]:
    return {
        "title": payload.get("title"),
        "templateId": payload.get("template"),
        "content": dict(payload),
    }


def _parse_timestamp(value: Any) -> datetime | None:
    if not isinstance(value, str) or not value:
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        LOGGER.debug("Unparseable timestamp %r", value)
        return None


__all__ = [
    "BuildSummary",
    "HttpPersistenceClient",
    "InMemoryPersistence",
    "PersistenceClient",
]
