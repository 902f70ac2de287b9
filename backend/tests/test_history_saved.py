"""
Tests for search history and saved searches.
"""

import pytest

from app.schemas.searches import SavedSearchCreateRequest, SavedSearchUpdateRequest
from app.services.history_service import HistoryService, history_key
from app.services.saved_search_service import SavedSearchService
from app.utils.exceptions import NotFoundError, StorageUnavailableError
from tests.fakes import FailingRedis


@pytest.mark.asyncio
async def test_history_newest_first(history_service):
    for query in ("one", "two", "three"):
        await history_service.record_search("u1", query, "messages", workspace_id="ws", result_count=1)

    history = await history_service.get_history("u1")

    assert [entry.query for entry in history] == ["three", "two", "one"]
    assert history[0].search_type == "messages"
    assert history[0].workspace_id == "ws"


@pytest.mark.asyncio
async def test_history_is_trimmed(fake_redis):
    service = HistoryService(fake_redis, max_entries=3)
    for i in range(5):
        await service.record_search("u1", f"q{i}", "global")

    assert len(fake_redis.lists[history_key("u1")]) == 3
    assert [e.query for e in await service.get_history("u1", limit=10)] == ["q4", "q3", "q2"]


@pytest.mark.asyncio
async def test_history_limit_and_corrupt_entries(history_service, fake_redis):
    await history_service.record_search("u1", "good", "files")
    await fake_redis.lpush(history_key("u1"), b"{corrupt")
    await history_service.record_search("u1", "newer", "files")

    history = await history_service.get_history("u1", limit=0)
    assert [e.query for e in history] == ["newer", "good"]

    assert len(await history_service.get_history("u1", limit=1)) == 1


@pytest.mark.asyncio
async def test_history_delete_item_and_clear(history_service):
    first = await history_service.record_search("u1", "one", "messages")
    await history_service.record_search("u1", "two", "messages")

    assert await history_service.delete_history_item("u1", first.id) is True
    assert await history_service.delete_history_item("u1", "missing") is False
    assert [e.query for e in await history_service.get_history("u1")] == ["two"]

    await history_service.clear_history("u1")
    assert await history_service.get_history("u1") == []


@pytest.mark.asyncio
async def test_history_store_outage_is_silent_for_recording():
    service = HistoryService(FailingRedis())
    assert await service.record_search("u1", "x", "global") is None
    assert await service.get_history("u1") == []
    with pytest.raises(StorageUnavailableError):
        await service.clear_history("u1")


@pytest.mark.asyncio
async def test_saved_search_crud(saved_search_service):
    created = await saved_search_service.create(
        "u1",
        SavedSearchCreateRequest(name="  Reports ", query="quarterly report", search_type="files", filters={"type": "pdf"}),
    )
    assert created.name == "Reports"

    fetched = await saved_search_service.get("u1", created.id)
    assert fetched == created

    updated = await saved_search_service.update("u1", created.id, SavedSearchUpdateRequest(name="Q reports"))
    assert updated.name == "Q reports"
    assert updated.query == "quarterly report"
    assert updated.filters == {"type": "pdf"}
    assert updated.updated_at >= created.updated_at

    listed = await saved_search_service.list_for_user("u1")
    assert [s.id for s in listed] == [created.id]

    await saved_search_service.delete("u1", created.id)
    with pytest.raises(NotFoundError):
        await saved_search_service.get("u1", created.id)
    assert await saved_search_service.list_for_user("u1") == []


@pytest.mark.asyncio
async def test_saved_searches_are_scoped_per_user(saved_search_service):
    created = await saved_search_service.create(
        "u1", SavedSearchCreateRequest(name="Mine", query="x", search_type="global")
    )

    with pytest.raises(NotFoundError):
        await saved_search_service.get("u2", created.id)
    with pytest.raises(NotFoundError):
        await saved_search_service.delete("u2", created.id)
    assert await saved_search_service.list_for_user("u2") == []


@pytest.mark.asyncio
async def test_saved_search_without_store():
    service = SavedSearchService(None)
    with pytest.raises(StorageUnavailableError):
        await service.create("u1", SavedSearchCreateRequest(name="a", query="b", search_type="global"))
    assert await service.list_for_user("u1") == []


@pytest.mark.asyncio
async def test_saved_search_store_outage():
    service = SavedSearchService(FailingRedis())
    with pytest.raises(StorageUnavailableError):
        await service.get("u1", "abc")
