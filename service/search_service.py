import logging
from typing import List, Optional, Sequence
from config.settings import settings
from model.metadata import MetadataRecord, SearchResult
from repository.metadata_repository import MetadataRepository

logger = logging.getLogger(__name__)


def matches(
    record: MetadataRecord,
    *,
    query: Optional[str],
    namespace_id: Optional[str],
    tags: Sequence[str],
) -> bool:
    # Case-sensitive substring; tags are any-of, not all-of
    if query and query not in record.key_name:
        return False
    if namespace_id and record.namespace_id != namespace_id:
        return False
    if tags and not set(tags).intersection(record.tags):
        return False
    return True


class SearchService:
    def __init__(
        self, metadata: MetadataRepository, *, limit: int = settings.SEARCH_RESULT_LIMIT
    ) -> None:
        self._metadata = metadata
        self._limit = limit

    async def search(
        self,
        query: Optional[str] = None,
        namespace_id: Optional[str] = None,
        tags: Optional[Sequence[str]] = None,
    ) -> List[SearchResult]:
        wanted = [t for t in (tags or []) if t]
        out: List[SearchResult] = []
        async for record in self._metadata.iter_recent(namespace_id):
            if not matches(record, query=query, namespace_id=namespace_id, tags=wanted):
                continue
            out.append(
                SearchResult(
                    namespace_id=record.namespace_id,
                    key_name=record.key_name,
                    tags=record.tags,
                    custom_metadata=record.custom_metadata,
                )
            )
            if len(out) >= self._limit:
                break
        logger.info(
            "search.done query=%r ns=%s tags=%d hits=%d",
            query or "",
            namespace_id or "*",
            len(wanted),
            len(out),
        )
        return out
