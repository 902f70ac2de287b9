"""
Tests for the engine client wrapper, using a stub in place of AsyncElasticsearch.
"""

from types import SimpleNamespace

import pytest
from elastic_transport import ApiResponseMeta, HttpHeaders, NodeConfig
from elasticsearch import ConnectionError as ESConnectionError
from elasticsearch import NotFoundError as ESNotFoundError

from app.services.search_engine import SearchEngineClient
from app.utils.exceptions import SearchEngineError


def _meta(status: int) -> ApiResponseMeta:
    return ApiResponseMeta(
        status=status,
        http_version="1.1",
        headers=HttpHeaders(),
        duration=0.0,
        node=NodeConfig("http", "localhost", 9200),
    )


class StubElasticsearch:
    def __init__(self, error: Exception = None):
        self.error = error
        self.calls = []

    async def _call(self, name, result=None, **kwargs):
        self.calls.append((name, kwargs))
        if self.error is not None:
            raise self.error
        return SimpleNamespace(body=result or {})

    async def search(self, **kwargs):
        return await self._call("search", result={"hits": {"total": {"value": 0}, "hits": []}}, **kwargs)

    async def index(self, **kwargs):
        return await self._call("index", **kwargs)

    async def update(self, **kwargs):
        return await self._call("update", **kwargs)

    async def delete(self, **kwargs):
        return await self._call("delete", **kwargs)

    async def count(self, **kwargs):
        return await self._call("count", result={"count": 17}, **kwargs)

    async def reindex(self, **kwargs):
        return await self._call("reindex", result={"task": "n1:7"}, **kwargs)

    async def ping(self):
        if self.error is not None:
            raise self.error
        return True


@pytest.mark.asyncio
async def test_calls_are_passed_through():
    stub = StubElasticsearch()
    client = SearchEngineClient(stub)

    raw = await client.search("quckapp_messages", {"query": {"match_all": {}}})
    await client.index_document("quckapp_users", "u1", {"username": "a"})
    await client.update_document("quckapp_users", "u1", {"username": "b"})
    await client.delete_document("quckapp_users", "u1")

    assert raw["hits"]["hits"] == []
    assert await client.count("quckapp_users") == 17
    assert await client.reindex("quckapp_users", "quckapp_users_reindexed") == "n1:7"
    assert await client.ping() is True

    names = [name for name, _ in stub.calls]
    assert names == ["search", "index", "update", "delete", "count", "reindex"]
    assert stub.calls[1][1] == {"index": "quckapp_users", "id": "u1", "document": {"username": "a"}}
    assert stub.calls[2][1]["doc"] == {"username": "b"}
    assert stub.calls[5][1]["wait_for_completion"] is False


@pytest.mark.asyncio
async def test_transport_errors_are_wrapped():
    client = SearchEngineClient(StubElasticsearch(ESConnectionError("connection refused")))

    with pytest.raises(SearchEngineError):
        await client.search("quckapp_messages", {})
    with pytest.raises(SearchEngineError):
        await client.index_document("quckapp_messages", "m1", {})
    with pytest.raises(SearchEngineError):
        await client.count("quckapp_messages")
    assert await client.ping() is False


@pytest.mark.asyncio
async def test_deleting_missing_document_succeeds():
    error = ESNotFoundError("not_found", _meta(404), {"result": "not_found"})
    client = SearchEngineClient(StubElasticsearch(error))

    await client.delete_document("quckapp_messages", "gone")

    with pytest.raises(SearchEngineError):
        await client.search("quckapp_messages", {})
