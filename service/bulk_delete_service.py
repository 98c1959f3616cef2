import logging
from typing import List, Sequence
from config.settings import settings
from core.batching import run_in_batches
from core.kv_client import KVStoreClient
from model.api import TransferResult
from model.audit import AuditEntry
from repository.audit_repository import AuditRepository
from repository.job_repository import JobRepository
from service.job_service import mark_failed
from util.logger import job_logger
from util.timing import timed

logger = logging.getLogger(__name__)


class BulkDeleteService:
    """
    Batched key deletion. Same chunking and continue-on-error policy as
    import, and error_count is tracked the same way.
    """

    def __init__(
        self,
        kv: KVStoreClient,
        jobs: JobRepository,
        audit: AuditRepository,
        *,
        batch_size: int = settings.KV_BULK_BATCH_SIZE,
    ) -> None:
        self._kv = kv
        self._jobs = jobs
        self._audit = audit
        self._batch_size = batch_size

    async def delete_keys(
        self, namespace_id: str, key_names: Sequence[str], user_email: str
    ) -> TransferResult:
        names = list(key_names)
        total = len(names)
        job = await self._jobs.create(
            namespace_id=namespace_id,
            operation_type="bulk_delete",
            user_email=user_email,
            total_keys=total,
        )
        log = job_logger(logger, job.job_id)
        log.info("bulk_delete.start ns=%s keys=%d", namespace_id, total)

        async def _delete(batch: List[str]) -> None:
            await self._kv.bulk_delete(namespace_id, batch)

        try:
            with timed(logger, "bulk_delete.run", job=job.job_id, keys=total):
                outcome = await run_in_batches(
                    names,
                    size=self._batch_size,
                    send=_delete,
                    jobs=self._jobs,
                    job_id=job.job_id,
                    log=log,
                    label="bulk_delete",
                )
        except Exception:
            await mark_failed(self._jobs, job.job_id, log)
            raise

        final = await self._jobs.finalize(
            job.job_id,
            "completed",
            total_keys=total,
            processed_keys=outcome["processed"],
            error_count=outcome["errors"],
        )
        await self._audit.append(
            AuditEntry(
                namespace_id=namespace_id,
                operation="bulk_delete",
                user_email=user_email,
                details={
                    "total": total,
                    "processed": outcome["processed"],
                    "errors": outcome["errors"],
                    "job_id": job.job_id,
                },
            )
        )
        return TransferResult(
            job_id=final.job_id,
            status=final.status,
            total_keys=total,
            processed_keys=outcome["processed"],
            error_count=outcome["errors"],
        )
