import logging
from typing import Optional
from model.job import Job, JobPage, JobStatus, OperationType
from repository.job_repository import JobRepository
from util.enums import ErrorMessage
from util.errors import AppError

logger = logging.getLogger(__name__)


class JobService:
    """Read side of the job ledger for the HTTP layer."""

    def __init__(self, jobs: JobRepository) -> None:
        self._jobs = jobs

    async def get(self, job_id: str) -> Job:
        job = await self._jobs.get(job_id)
        if job is None:
            logger.info("jobs.get.miss job=%s", job_id)
            raise AppError.of(ErrorMessage.JOB_NOT_FOUND)
        return job

    async def list(
        self,
        *,
        status: Optional[JobStatus] = None,
        operation_type: Optional[OperationType] = None,
        limit: int = 20,
        offset: int = 0,
    ) -> JobPage:
        return await self._jobs.list(
            status=status, operation_type=operation_type, limit=limit, offset=offset
        )


async def mark_failed(jobs: JobRepository, job_id: str, log: logging.LoggerAdapter) -> None:
    """
    Best-effort finalize(failed) after a pipeline blew up. If the ledger
    itself is the thing failing the job stays in its last known state.
    """
    try:
        await jobs.finalize(job_id, "failed")
    except Exception:
        log.exception("job.finalize_failed.error")
