import logging
from typing import List
from redis.asyncio import Redis
from config.cache import get_redis
from model.audit import AuditEntry
from repository.namespaces import AUDIT

logger = logging.getLogger(__name__)


class AuditRepository:
    """
    Append-only audit trail, one Redis list per namespace (RPUSH, oldest first).

    append() is best-effort: a failed write is logged and swallowed so it
    never fails the operation it describes.
    """

    @staticmethod
    async def _client() -> Redis:
        return await get_redis()

    @staticmethod
    def _key(namespace_id: str) -> str:
        return f"{AUDIT}:{namespace_id}"

    async def append(self, entry: AuditEntry) -> bool:
        try:
            r = await self._client()
            await r.rpush(self._key(entry.namespace_id), entry.model_dump_json())
        except Exception:
            logger.exception(
                "audit.append.error ns=%s op=%s", entry.namespace_id, entry.operation
            )
            return False
        return True

    async def recent(self, namespace_id: str, limit: int = 50) -> List[AuditEntry]:
        r = await self._client()
        vals = await r.lrange(self._key(namespace_id), -limit, -1)
        out: List[AuditEntry] = []
        for raw in reversed(vals or []):
            try:
                out.append(AuditEntry.model_validate_json(raw))
            except ValueError:
                # Skip malformed entries instead of failing the whole read
                logger.warning("audit.decode.skip ns=%s", namespace_id)
        return out
