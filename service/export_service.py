import logging
from typing import List, Optional
from config.settings import settings
from core.kv_client import KVStoreClient
from core.payload import serialize_export
from model.api import ExportPayload
from model.audit import AuditEntry
from model.kv import KeyRecord
from repository.audit_repository import AuditRepository
from repository.job_repository import JobRepository
from service.job_service import mark_failed
from util.enums import ExportFormat
from util.errors import KVStoreError
from util.logger import JobLogAdapter, job_logger
from util.timing import timed

logger = logging.getLogger(__name__)


class ExportService:
    def __init__(
        self,
        kv: KVStoreClient,
        jobs: JobRepository,
        audit: AuditRepository,
        *,
        page_size: int = settings.KV_LIST_PAGE_SIZE,
    ) -> None:
        self._kv = kv
        self._jobs = jobs
        self._audit = audit
        self._page_size = page_size

    async def export(
        self, namespace_id: str, fmt: ExportFormat, user_email: str
    ) -> ExportPayload:
        """
        Enumerate every key, fetch each value and serialize the lot.

        Keys whose value fetch fails are logged and left out; the export
        has inclusion/omission only, no error_count. Listing failures are
        fatal and mark the job failed.
        """
        job = await self._jobs.create(
            namespace_id=namespace_id, operation_type="export", user_email=user_email
        )
        log = job_logger(logger, job.job_id)
        log.info("export.start ns=%s format=%s", namespace_id, fmt.value)

        try:
            with timed(logger, "export.run", job=job.job_id, format=fmt.value) as tags:
                records = await self._collect(namespace_id, log)
                body = serialize_export(records, fmt)
                tags["keys"] = len(records)
        except Exception:
            await mark_failed(self._jobs, job.job_id, log)
            raise

        count = len(records)
        await self._jobs.finalize(
            job.job_id, "completed", total_keys=count, processed_keys=count
        )
        await self._audit.append(
            AuditEntry(
                namespace_id=namespace_id,
                operation="export",
                user_email=user_email,
                details={"format": fmt.value, "key_count": count, "job_id": job.job_id},
            )
        )
        return ExportPayload(job_id=job.job_id, format=fmt, key_count=count, body=body)

    async def _collect(self, namespace_id: str, log: JobLogAdapter) -> List[KeyRecord]:
        records: List[KeyRecord] = []
        omitted = 0
        cursor: Optional[str] = None
        while True:
            page = await self._kv.list_keys(
                namespace_id, cursor=cursor, limit=self._page_size
            )
            for key in page.keys:
                try:
                    value = await self._kv.get_value(namespace_id, key.name)
                except KVStoreError as e:
                    omitted += 1
                    log.warning(
                        "export.fetch.skip key=%r status=%s", key.name, e.status_code
                    )
                    continue
                records.append(
                    KeyRecord(name=key.name, value=value, metadata=key.metadata or {})
                )
            if page.is_last:
                break
            cursor = page.cursor
        if omitted:
            log.warning("export.omitted count=%d", omitted)
        return records
