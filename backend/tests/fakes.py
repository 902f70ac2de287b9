"""
In-memory stand-ins for Redis and the search engine.
"""

import fnmatch
from typing import Any, Dict, List, Optional, Set, Tuple

from redis.exceptions import ConnectionError as RedisConnectionError

from app.utils.exceptions import SearchEngineError


def _to_bytes(value: Any) -> bytes:
    if isinstance(value, bytes):
        return value
    return str(value).encode()


class FakeRedis:
    """Subset of ``redis.asyncio.Redis`` used by the service (bytes in, bytes out)."""

    def __init__(self):
        self.values: Dict[str, bytes] = {}
        self.ttls: Dict[str, int] = {}
        self.lists: Dict[str, List[bytes]] = {}
        self.sets: Dict[str, Set[bytes]] = {}

    def _all_keys(self) -> List[str]:
        return list(self.values) + list(self.lists) + list(self.sets)

    async def get(self, key: str) -> Optional[bytes]:
        return self.values.get(key)

    async def set(self, key: str, value: Any) -> bool:
        self.values[key] = _to_bytes(value)
        return True

    async def setex(self, key: str, ttl: int, value: Any) -> bool:
        self.ttls[key] = ttl
        return await self.set(key, value)

    async def delete(self, *keys: Any) -> int:
        removed = 0
        for key in keys:
            key = key.decode() if isinstance(key, bytes) else key
            for store in (self.values, self.lists, self.sets):
                if key in store:
                    del store[key]
                    removed += 1
        return removed

    async def scan_iter(self, match: Optional[str] = None):
        for key in self._all_keys():
            if match is None or fnmatch.fnmatchcase(key, match):
                yield key.encode()

    async def lpush(self, key: str, *values: Any) -> int:
        items = self.lists.setdefault(key, [])
        for value in values:
            items.insert(0, _to_bytes(value))
        return len(items)

    async def ltrim(self, key: str, start: int, end: int) -> bool:
        items = self.lists.get(key, [])
        stop = None if end == -1 else end + 1
        self.lists[key] = items[start:stop]
        return True

    async def lrange(self, key: str, start: int, end: int) -> List[bytes]:
        items = self.lists.get(key, [])
        stop = None if end == -1 else end + 1
        return list(items[start:stop])

    async def lrem(self, key: str, count: int, value: Any) -> int:
        items = self.lists.get(key, [])
        target = _to_bytes(value)
        removed = 0
        kept = []
        for item in items:
            if item == target and (count == 0 or removed < abs(count)):
                removed += 1
                continue
            kept.append(item)
        self.lists[key] = kept
        return removed

    async def sadd(self, key: str, *members: Any) -> int:
        members_set = self.sets.setdefault(key, set())
        before = len(members_set)
        members_set.update(_to_bytes(m) for m in members)
        return len(members_set) - before

    async def smembers(self, key: str) -> Set[bytes]:
        return set(self.sets.get(key, set()))

    async def srem(self, key: str, *members: Any) -> int:
        members_set = self.sets.get(key, set())
        removed = 0
        for member in members:
            member = _to_bytes(member)
            if member in members_set:
                members_set.remove(member)
                removed += 1
        return removed

    async def ping(self) -> bool:
        return True

    async def aclose(self) -> None:
        return None


class FailingRedis:
    """Every call fails as if the server were unreachable."""

    def __getattr__(self, name: str):
        async def fail(*args, **kwargs):
            raise RedisConnectionError("connection refused")
        return fail

    async def scan_iter(self, match: Optional[str] = None):
        raise RedisConnectionError("connection refused")
        yield  # pragma: no cover


def engine_response(hits: List[Dict[str, Any]], total: Optional[int] = None) -> Dict[str, Any]:
    """Raw engine body with the given hits."""
    return {
        "took": 3,
        "hits": {
            "total": {"value": len(hits) if total is None else total, "relation": "eq"},
            "hits": hits,
        },
    }


def engine_hit(index: str, doc_id: str, score: float = 1.0, **source) -> Dict[str, Any]:
    return {"_index": index, "_id": doc_id, "_score": score, "_source": source}


class FakeEngine:
    """Records calls made through the SearchEngineClient interface."""

    def __init__(self):
        self.responses: Dict[str, Any] = {}
        self.failing_indices: Set[str] = set()
        self.fail_writes = False
        self.searches: List[Tuple[str, Dict[str, Any]]] = []
        self.indexed: Dict[Tuple[str, str], Dict[str, Any]] = {}
        self.updated: List[Tuple[str, str, Dict[str, Any]]] = []
        self.deleted: List[Tuple[str, str]] = []
        self.reindexed: List[Tuple[str, str]] = []
        self.counts: Dict[str, int] = {}
        self.healthy = True

    def _check_write(self, index: str) -> None:
        if self.fail_writes or index in self.failing_indices:
            raise SearchEngineError(f"write to {index} failed", detail="cluster unavailable")

    async def search(self, index: str, body: Dict[str, Any]) -> Dict[str, Any]:
        self.searches.append((index, body))
        if index in self.failing_indices:
            raise SearchEngineError(f"search on {index} failed", detail="cluster unavailable")
        return self.responses.get(index, engine_response([]))

    async def index_document(self, index: str, document_id: str, document: Dict[str, Any]) -> None:
        self._check_write(index)
        self.indexed[(index, document_id)] = document

    async def update_document(self, index: str, document_id: str, partial: Dict[str, Any]) -> None:
        self._check_write(index)
        self.updated.append((index, document_id, partial))

    async def delete_document(self, index: str, document_id: str) -> None:
        self._check_write(index)
        self.deleted.append((index, document_id))

    async def count(self, index: str) -> int:
        if index in self.failing_indices:
            raise SearchEngineError(f"count on {index} failed")
        return self.counts.get(index, 0)

    async def reindex(self, source_index: str, dest_index: str) -> Optional[str]:
        self._check_write(source_index)
        self.reindexed.append((source_index, dest_index))
        return "node-1:42"

    async def ping(self) -> bool:
        return self.healthy

    async def close(self) -> None:
        return None
