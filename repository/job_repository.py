import time
from typing import Dict, Final, List, Optional
from uuid import uuid4
from redis.asyncio import Redis
from config.cache import get_redis
from model.job import TRANSITIONS, Job, JobPage, JobStatus, OperationType
from repository.namespaces import JOBS, JOBS_INDEX
from util.errors import JobTransitionError
from util.functions import iso_now

KEY_PREFIX: Final[str] = JOBS

_INT_FIELDS: Final[tuple] = ("total_keys", "processed_keys", "error_count")


def new_job_id(operation_type: OperationType) -> str:
    # Millisecond prefix keeps ids roughly time-ordered; the suffix makes them unique
    return f"{operation_type}-{int(time.time() * 1000)}-{uuid4().hex[:10]}"


class JobRepository:
    """
    Job ledger. One Redis hash per job plus a zset index by start time.

    Only the pipeline that created a job writes to it, so reads-then-writes
    need no WATCH; counters still go through HINCRBY.
    """

    @staticmethod
    async def _client() -> Redis:
        return await get_redis()

    @staticmethod
    def _key(job_id: str) -> str:
        return f"{KEY_PREFIX}:{job_id}"

    @staticmethod
    def _decode(h: Dict[str, str]) -> Job:
        data: Dict[str, object] = dict(h)
        for field in _INT_FIELDS:
            raw = h.get(field)
            data[field] = int(raw) if raw not in (None, "") else None
        data["completed_at"] = h.get("completed_at") or None
        return Job.model_validate(data)

    # ---------------- Core ledger ops ----------------

    async def create(
        self,
        *,
        namespace_id: str,
        operation_type: OperationType,
        user_email: str,
        total_keys: Optional[int] = None,
        initial_status: JobStatus = "running",
    ) -> Job:
        if initial_status not in ("queued", "running"):
            raise ValueError(f"jobs cannot start as {initial_status}")
        job = Job(
            job_id=new_job_id(operation_type),
            namespace_id=namespace_id,
            operation_type=operation_type,
            status=initial_status,
            total_keys=total_keys,
            processed_keys=0,
            error_count=0,
            started_at=iso_now(),
            user_email=user_email,
        )
        r = await self._client()
        mapping = {
            "job_id": job.job_id,
            "namespace_id": job.namespace_id,
            "operation_type": job.operation_type,
            "status": job.status,
            "total_keys": "" if total_keys is None else str(total_keys),
            "processed_keys": "0",
            "error_count": "0",
            "started_at": job.started_at,
            "completed_at": "",
            "user_email": job.user_email,
        }
        async with r.pipeline(transaction=True) as pipe:
            pipe.hset(self._key(job.job_id), mapping=mapping)
            pipe.zadd(JOBS_INDEX, {job.job_id: int(time.time() * 1000)})
            await pipe.execute()
        return job

    async def get(self, job_id: str) -> Optional[Job]:
        if not job_id:
            return None
        r = await self._client()
        h = await r.hgetall(self._key(job_id))
        if not h:
            return None
        return self._decode(h)

    async def _require(self, job_id: str) -> Job:
        job = await self.get(job_id)
        if job is None:
            raise KeyError(job_id)
        return job

    async def advance(
        self, job_id: str, *, processed_delta: int = 0, error_delta: int = 0
    ) -> Job:
        """Add to the running counters of a live job and return the new state."""
        job = await self._require(job_id)
        if job.is_terminal:
            raise JobTransitionError(job_id, job.status, job.status)
        if (
            job.total_keys is not None
            and (job.processed_keys or 0) + processed_delta > job.total_keys
        ):
            raise ValueError(f"job {job_id} would exceed total_keys={job.total_keys}")

        r = await self._client()
        async with r.pipeline(transaction=True) as pipe:
            pipe.hincrby(self._key(job_id), "processed_keys", processed_delta)
            pipe.hincrby(self._key(job_id), "error_count", error_delta)
            processed, errors = await pipe.execute()
        return job.model_copy(
            update={"processed_keys": int(processed), "error_count": int(errors)}
        )

    async def finalize(
        self,
        job_id: str,
        status: JobStatus,
        *,
        total_keys: Optional[int] = None,
        processed_keys: Optional[int] = None,
        error_count: Optional[int] = None,
    ) -> Job:
        """
        Move a job into a terminal state, optionally overwriting its counters.
        Counters left as None keep whatever advance() accumulated.
        """
        job = await self._require(job_id)
        if status not in TRANSITIONS[job.status] or status in ("queued", "running"):
            raise JobTransitionError(job_id, job.status, status)

        updates: Dict[str, object] = {"status": status, "completed_at": iso_now()}
        if total_keys is not None:
            updates["total_keys"] = total_keys
        if processed_keys is not None:
            updates["processed_keys"] = processed_keys
        if error_count is not None:
            updates["error_count"] = error_count

        final = Job.model_validate({**job.model_dump(), **updates})
        r = await self._client()
        await r.hset(
            self._key(job_id), mapping={k: str(v) for k, v in updates.items()}
        )
        return final

    # ---------------- Listing ----------------

    async def list(
        self,
        *,
        status: Optional[JobStatus] = None,
        operation_type: Optional[OperationType] = None,
        limit: int = 20,
        offset: int = 0,
    ) -> JobPage:
        """Newest first. Filters are applied before paging so `total` counts matches."""
        r = await self._client()
        ids: List[str] = await r.zrevrange(JOBS_INDEX, 0, -1)
        async with r.pipeline(transaction=False) as pipe:
            for job_id in ids:
                pipe.hgetall(self._key(job_id))
            rows = await pipe.execute() if ids else []

        matches: List[Job] = []
        for h in rows:
            if not h:
                continue
            job = self._decode(h)
            if status and job.status != status:
                continue
            if operation_type and job.operation_type != operation_type:
                continue
            matches.append(job)
        return JobPage(
            jobs=matches[offset : offset + limit],
            total=len(matches),
            limit=limit,
            offset=offset,
        )
