import os

# Settings are read at import time, so the environment must be in place first.
os.environ.setdefault("APP_ENV", "test")
os.environ.setdefault("REDIS_URL", "redis://localhost:6379/15")
os.environ.setdefault("ALLOWED_ORIGIN", "http://localhost:5173")
os.environ.setdefault("RATE_LIMIT_TIMES", "1000")
os.environ.setdefault("RATE_LIMIT_SECONDS", "60")
os.environ.setdefault("KV_ACCOUNT_ID", "acct-test")
os.environ.setdefault("KV_API_TOKEN", "token-test")

from typing import Any, Dict, List, Optional, Sequence, Set, Tuple  # noqa: E402

import fakeredis  # noqa: E402
import pytest  # noqa: E402

from config import cache  # noqa: E402
from model.kv import KeyInfo, KeyPage  # noqa: E402
from util.errors import KVStoreError  # noqa: E402


class FakeKVStore:
    """
    In-memory stand-in for the KV store API.

    fail_bulk_calls / fail_delete_calls hold 1-based call numbers that should
    fail; fail_gets holds key names whose value fetch fails.
    """

    def __init__(self) -> None:
        self.data: Dict[str, Dict[str, Tuple[str, Optional[dict]]]] = {}
        self.bulk_calls: List[Tuple[str, List[dict]]] = []
        self.delete_calls: List[Tuple[str, List[str]]] = []
        self.list_calls: List[Tuple[str, Optional[str], int]] = []
        self.fail_bulk_calls: Set[int] = set()
        self.fail_delete_calls: Set[int] = set()
        self.fail_gets: Set[str] = set()
        self.fail_listing = False

    def seed(self, namespace_id: str, pairs: Dict[str, str]) -> None:
        ns = self.data.setdefault(namespace_id, {})
        for k, v in pairs.items():
            ns[k] = (v, None)

    def values(self, namespace_id: str) -> Dict[str, str]:
        return {k: v for k, (v, _) in self.data.get(namespace_id, {}).items()}

    async def list_keys(
        self, namespace_id: str, *, cursor: Optional[str] = None, limit: int = 1000
    ) -> KeyPage:
        self.list_calls.append((namespace_id, cursor, limit))
        if self.fail_listing:
            raise KVStoreError("listing failed", 503)
        names = list(self.data.get(namespace_id, {}))
        start = int(cursor) if cursor else 0
        window = names[start : start + limit]
        nxt = start + limit
        return KeyPage(
            keys=[
                KeyInfo(name=n, metadata=self.data[namespace_id][n][1]) for n in window
            ],
            cursor=str(nxt) if nxt < len(names) else None,
        )

    async def get_value(self, namespace_id: str, key_name: str) -> str:
        if key_name in self.fail_gets:
            raise KVStoreError(f"GET {key_name} failed", 500)
        try:
            return self.data[namespace_id][key_name][0]
        except KeyError:
            raise KVStoreError(f"{key_name} not found", 404)

    async def put_value(
        self,
        namespace_id: str,
        key_name: str,
        value: str,
        *,
        metadata: Optional[Dict[str, Any]] = None,
        expiration_ttl: Optional[int] = None,
    ) -> None:
        self.data.setdefault(namespace_id, {})[key_name] = (value, metadata)

    async def delete_value(self, namespace_id: str, key_name: str) -> None:
        self.data.get(namespace_id, {}).pop(key_name, None)

    async def bulk_write(self, namespace_id: str, entries: Sequence[dict]) -> None:
        self.bulk_calls.append((namespace_id, list(entries)))
        if len(self.bulk_calls) in self.fail_bulk_calls:
            raise KVStoreError("bulk write rejected", 500)
        ns = self.data.setdefault(namespace_id, {})
        for e in entries:
            ns[e["key"]] = (e["value"], e.get("metadata"))

    async def bulk_delete(self, namespace_id: str, key_names: Sequence[str]) -> None:
        self.delete_calls.append((namespace_id, list(key_names)))
        if len(self.delete_calls) in self.fail_delete_calls:
            raise KVStoreError("bulk delete rejected", 500)
        ns = self.data.get(namespace_id, {})
        for k in key_names:
            ns.pop(k, None)


@pytest.fixture
async def redis(monkeypatch):
    client = fakeredis.FakeAsyncRedis(decode_responses=True)
    await client.flushall()
    monkeypatch.setattr(cache, "_client", client)
    yield client
    await client.flushall()
    await client.aclose()


@pytest.fixture
def kv() -> FakeKVStore:
    return FakeKVStore()
