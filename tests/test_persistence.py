"""Tests for the persistence collaborators."""

from __future__ import annotations

import json
from typing import Any, Callable, List

import httpx
import pytest

from resumer.errors import NotFoundError, PersistenceError
from resumer.services.persistence import HttpPersistenceClient, InMemoryPersistence, PersistenceClient

PAYLOAD = {
    "title": "Ada Lovelace",
    "sections": [{"id": "header", "type": "header", "data": {"fullName": "Ada"}, "locked": True}],
    "sectionOrder": ["header"],
    "sectionSettings": {},
    "style": {"fontSize": 11},
    "template": "basic",
}


def _http_client(handler: Callable[[httpx.Request], httpx.Response], **kwargs: Any) -> HttpPersistenceClient:
    transport = httpx.MockTransport(handler)
    client = httpx.AsyncClient(transport=transport, base_url="http://api.test/api/v1")
    kwargs.setdefault("retry_min_seconds", 0)
    kwargs.setdefault("retry_max_seconds", 0)
    return HttpPersistenceClient("http://api.test/api/v1", client=client, **kwargs)


# =============================================================================
# In-memory
# =============================================================================


class TestInMemoryPersistence:
    def test_is_a_persistence_client(self) -> None:
        assert isinstance(InMemoryPersistence(), PersistenceClient)

    @pytest.mark.asyncio
    async def test_round_trip(self) -> None:
        store = InMemoryPersistence()

        build_id = await store.create(PAYLOAD)
        await store.update(build_id, {**PAYLOAD, "title": "Updated"})
        record = await store.get(build_id)
        summaries = await store.list()

        assert record["title"] == "Updated"
        assert summaries[0].build_id == build_id
        assert summaries[0].template_id == "basic"
        assert store.calls == [("create", build_id), ("update", build_id)]

    @pytest.mark.asyncio
    async def test_records_are_copies(self) -> None:
        store = InMemoryPersistence()
        payload = json.loads(json.dumps(PAYLOAD))
        build_id = await store.create(payload)

        payload["sections"][0]["data"]["fullName"] = "Mutated"

        assert (await store.get(build_id))["sections"][0]["data"]["fullName"] == "Ada"

    @pytest.mark.asyncio
    async def test_unknown_build(self) -> None:
        store = InMemoryPersistence()

        with pytest.raises(NotFoundError):
            await store.get("missing")
        with pytest.raises(NotFoundError):
            await store.update("missing", PAYLOAD)

    @pytest.mark.asyncio
    async def test_delete(self) -> None:
        store = InMemoryPersistence()
        build_id = await store.create(PAYLOAD)

        await store.delete(build_id)

        assert build_id not in store


# =============================================================================
# HTTP
# =============================================================================


class TestHttpPersistenceClient:
    @pytest.mark.asyncio
    async def test_create_posts_content_and_reads_id(self) -> None:
        seen: List[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(201, json={"success": True, "data": {"_id": "abc123"}})

        client = _http_client(handler, token="secret-token")

        build_id = await client.create(PAYLOAD)

        assert build_id == "abc123"
        request = seen[0]
        assert request.method == "POST"
        assert request.url.path == "/api/v1/resume/build"
        assert request.headers["Authorization"] == "Bearer secret-token"
        body = json.loads(request.content)
        assert body["title"] == "Ada Lovelace"
        assert body["templateId"] == "basic"
        assert body["content"]["sectionOrder"] == ["header"]

    @pytest.mark.asyncio
    async def test_update_returns_server_timestamp(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.method == "PUT"
            assert request.url.path == "/api/v1/resume/build/abc"
            return httpx.Response(200, json={"data": {"updatedAt": "2024-05-01T10:00:00Z"}})

        updated_at = await _http_client(handler).update("abc", PAYLOAD)

        assert updated_at.year == 2024 and updated_at.tzinfo is not None

    @pytest.mark.asyncio
    async def test_list_parses_history(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.url.path == "/api/v1/resume/build/history"
            return httpx.Response(
                200,
                json={"data": [{"_id": "a", "title": "One", "templateId": "modern", "updatedAt": "2024-01-02T00:00:00Z"}]},
            )

        summaries = await _http_client(handler).list()

        assert summaries[0].build_id == "a"
        assert summaries[0].template_id == "modern"
        assert summaries[0].updated_at is not None

    @pytest.mark.asyncio
    async def test_get_unwraps_content(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"data": {"_id": "a", "title": "Stored", "content": {"sections": []}}})

        payload = await _http_client(handler).get("a")

        assert payload == {"sections": [], "title": "Stored"}

    @pytest.mark.asyncio
    async def test_server_errors_are_retried(self) -> None:
        attempts = {"count": 0}

        def handler(request: httpx.Request) -> httpx.Response:
            attempts["count"] += 1
            if attempts["count"] < 3:
                return httpx.Response(503)
            return httpx.Response(200, json={"data": {}})

        await _http_client(handler, max_retries=3).update("abc", PAYLOAD)

        assert attempts["count"] == 3

    @pytest.mark.asyncio
    async def test_transport_errors_are_retried(self) -> None:
        attempts = {"count": 0}

        def handler(request: httpx.Request) -> httpx.Response:
            attempts["count"] += 1
            if attempts["count"] == 1:
                raise httpx.ConnectError("connection refused", request=request)
            return httpx.Response(200, json={"data": {"_id": "x"}})

        assert await _http_client(handler).create(PAYLOAD) == "x"
        assert attempts["count"] == 2

    @pytest.mark.asyncio
    async def test_exhausted_retries_raise_persistence_error(self) -> None:
        attempts = {"count": 0}

        def handler(request: httpx.Request) -> httpx.Response:
            attempts["count"] += 1
            return httpx.Response(500)

        with pytest.raises(PersistenceError) as excinfo:
            await _http_client(handler, max_retries=2).update("abc", PAYLOAD)

        assert excinfo.value.status_code == 500
        assert attempts["count"] == 2

    @pytest.mark.asyncio
    async def test_client_errors_are_not_retried(self) -> None:
        attempts = {"count": 0}

        def handler(request: httpx.Request) -> httpx.Response:
            attempts["count"] += 1
            return httpx.Response(400, json={"message": "bad"})

        with pytest.raises(PersistenceError) as excinfo:
            await _http_client(handler).update("abc", PAYLOAD)

        assert excinfo.value.status_code == 400
        assert attempts["count"] == 1

    @pytest.mark.asyncio
    async def test_not_found(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(404, json={"message": "Resume not found"})

        with pytest.raises(NotFoundError):
            await _http_client(handler).get("missing")
