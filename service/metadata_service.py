import logging
from typing import List, Sequence
from model.metadata import MetadataRecord, MetadataUpdate
from repository.metadata_repository import MetadataRepository
from util.enums import TagOperation
from util.functions import dedupe

logger = logging.getLogger(__name__)


def apply_tag_operation(
    existing: Sequence[str], supplied: Sequence[str], operation: TagOperation
) -> List[str]:
    """
    - replace: exactly `supplied`
    - add: union of both, existing order first
    - remove: existing minus supplied
    """
    if operation is TagOperation.REPLACE:
        return dedupe(supplied)
    if operation is TagOperation.ADD:
        return dedupe([*existing, *supplied])
    drop = set(supplied)
    return [t for t in existing if t not in drop]


class MetadataService:
    def __init__(self, metadata: MetadataRepository) -> None:
        self._metadata = metadata

    async def get(self, namespace_id: str, key_name: str) -> MetadataRecord:
        record = await self._metadata.get(namespace_id, key_name)
        if record is None:
            return MetadataRecord(namespace_id=namespace_id, key_name=key_name)
        return record

    async def upsert(
        self, namespace_id: str, key_name: str, update: MetadataUpdate
    ) -> None:
        await self._metadata.upsert(
            namespace_id,
            key_name,
            tags=update.tags,
            custom_metadata=update.custom_metadata,
        )
        logger.info(
            "metadata.upsert ns=%s tags=%s custom=%s",
            namespace_id,
            update.tags is not None,
            update.custom_metadata is not None,
        )

    async def bulk_tag(
        self,
        namespace_id: str,
        keys: Sequence[str],
        tags: Sequence[str],
        operation: TagOperation,
    ) -> int:
        """Apply `operation` to each key in turn; returns how many keys were written."""
        for key_name in keys:
            if operation is TagOperation.REPLACE:
                existing: List[str] = []
            else:
                current = await self._metadata.get(namespace_id, key_name)
                existing = current.tags if current else []
            await self._metadata.upsert(
                namespace_id,
                key_name,
                tags=apply_tag_operation(existing, tags, operation),
            )
        logger.info(
            "metadata.bulk_tag ns=%s op=%s keys=%d tags=%d",
            namespace_id,
            operation.value,
            len(keys),
            len(tags),
        )
        return len(keys)
