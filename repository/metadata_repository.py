import json
import time
from typing import Any, AsyncIterator, Dict, List, Optional, Tuple
from redis.asyncio import Redis
from config.cache import get_redis
from model.metadata import MetadataRecord
from repository.namespaces import METADATA_INDEX, METADATA_RECORDS
from util.functions import iso_now

_SCAN_PAGE = 500


class MetadataRepository:
    """
    Flow:
    - One hash per (namespace_id, key_name) holding JSON-encoded tags/custom_metadata.
    - A global zset and a per-namespace zset, both scored by updated_at, drive
      newest-first search without scanning the keyspace.
    - JSON encoding stays in here; callers only see MetadataRecord.
    """

    @staticmethod
    async def _client() -> Redis:
        return await get_redis()

    @classmethod
    def _key(cls, namespace_id: str, key_name: str) -> str:
        # Same encoded pair as the index member so ("a", "b:c") and ("a:b", "c") stay apart
        return f"{METADATA_RECORDS}:{cls._member(namespace_id, key_name)}"

    @staticmethod
    def _ns_index(namespace_id: str) -> str:
        return f"{METADATA_INDEX}:{namespace_id}"

    @staticmethod
    def _member(namespace_id: str, key_name: str) -> str:
        # Key names may contain ':' so the member is a JSON pair, not a joined string
        return json.dumps([namespace_id, key_name], separators=(",", ":"))

    @staticmethod
    def _decode(namespace_id: str, key_name: str, h: Dict[str, str]) -> MetadataRecord:
        tags = json.loads(h["tags"]) if h.get("tags") else []
        custom = json.loads(h["custom_metadata"]) if h.get("custom_metadata") else {}
        return MetadataRecord(
            namespace_id=namespace_id,
            key_name=key_name,
            tags=tags,
            custom_metadata=custom,
            created_at=h.get("created_at") or None,
            updated_at=h.get("updated_at") or None,
        )

    async def get(self, namespace_id: str, key_name: str) -> Optional[MetadataRecord]:
        r = await self._client()
        h = await r.hgetall(self._key(namespace_id, key_name))
        if not h:
            return None
        return self._decode(namespace_id, key_name, h)

    async def upsert(
        self,
        namespace_id: str,
        key_name: str,
        *,
        tags: Optional[List[str]] = None,
        custom_metadata: Optional[Dict[str, Any]] = None,
    ) -> None:
        """
        Insert-or-update in one MULTI/EXEC. Supplied fields are replaced whole,
        omitted ones are left as stored. created_at is written only once.
        """
        key = self._key(namespace_id, key_name)
        now = iso_now()
        score = time.time() * 1000
        mapping: Dict[str, str] = {"updated_at": now}
        if tags is not None:
            mapping["tags"] = json.dumps(list(tags))
        if custom_metadata is not None:
            mapping["custom_metadata"] = json.dumps(custom_metadata)

        member = self._member(namespace_id, key_name)
        r = await self._client()
        async with r.pipeline(transaction=True) as pipe:
            pipe.hsetnx(key, "created_at", now)
            pipe.hset(key, mapping=mapping)
            pipe.zadd(METADATA_INDEX, {member: score})
            pipe.zadd(self._ns_index(namespace_id), {member: score})
            await pipe.execute()

    async def iter_recent(
        self, namespace_id: Optional[str] = None
    ) -> AsyncIterator[MetadataRecord]:
        """Yield records newest-updated first, optionally within one namespace."""
        index = self._ns_index(namespace_id) if namespace_id else METADATA_INDEX
        r = await self._client()
        start = 0
        while True:
            members: List[str] = await r.zrevrange(index, start, start + _SCAN_PAGE - 1)
            if not members:
                return
            pairs: List[Tuple[str, str]] = [tuple(json.loads(m)) for m in members]
            async with r.pipeline(transaction=False) as pipe:
                for ns, name in pairs:
                    pipe.hgetall(self._key(ns, name))
                rows = await pipe.execute()
            for (ns, name), h in zip(pairs, rows):
                if h:
                    yield self._decode(ns, name, h)
            start += _SCAN_PAGE
