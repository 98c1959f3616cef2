import logging
from typing import List
from config.settings import settings
from core.batching import run_in_batches
from core.kv_client import KVStoreClient
from core.payload import parse_import_payload, to_bulk_entry
from model.api import ImportResult
from model.audit import AuditEntry
from repository.audit_repository import AuditRepository
from repository.job_repository import JobRepository
from service.job_service import mark_failed
from util.enums import CollisionPolicy
from util.logger import job_logger
from util.timing import timed
from util.types import BulkWriteEntry

logger = logging.getLogger(__name__)


class ImportService:
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

    async def import_payload(
        self,
        namespace_id: str,
        body: str,
        user_email: str,
        collision: CollisionPolicy = CollisionPolicy.OVERWRITE,
    ) -> ImportResult:
        """
        Parse (JSON array, else NDJSON), then bulk-write in order, one call
        per chunk of at most batch_size.

        - A parse failure raises PayloadParseError before any job exists.
        - A failed chunk adds its size to error_count; later chunks still run.
        - The job finishes "completed" even with errors; error_count carries it.
        - `collision` is accepted and recorded but every chunk goes through
          the store's default write, which overwrites.
        """
        parsed = parse_import_payload(body)
        total = len(parsed.records)

        job = await self._jobs.create(
            namespace_id=namespace_id,
            operation_type="import",
            user_email=user_email,
            total_keys=total,
        )
        log = job_logger(logger, job.job_id)
        log.info(
            "import.start ns=%s format=%s records=%d collision=%s",
            namespace_id,
            parsed.format.value,
            total,
            collision.value,
        )

        entries = [to_bulk_entry(r) for r in parsed.records]

        async def _write(batch: List[BulkWriteEntry]) -> None:
            await self._kv.bulk_write(namespace_id, batch)

        try:
            with timed(logger, "import.run", job=job.job_id, records=total) as tags:
                outcome = await run_in_batches(
                    entries,
                    size=self._batch_size,
                    send=_write,
                    jobs=self._jobs,
                    job_id=job.job_id,
                    log=log,
                    label="import",
                )
                tags["errors"] = outcome["errors"]
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
                operation="import",
                user_email=user_email,
                details={
                    "total": total,
                    "processed": outcome["processed"],
                    "errors": outcome["errors"],
                    "job_id": job.job_id,
                },
            )
        )
        return ImportResult(
            job_id=final.job_id,
            status=final.status,
            total_keys=total,
            processed_keys=outcome["processed"],
            error_count=outcome["errors"],
            format=parsed.format,
            collision=collision,
        )
