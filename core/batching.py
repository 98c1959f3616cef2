# core/batching.py
import logging
from typing import Awaitable, Callable, List, Sequence, TypeVar
from repository.job_repository import JobRepository
from util.errors import KVStoreError
from util.functions import chunked
from util.types import BulkOutcome

T = TypeVar("T")


async def run_in_batches(
    items: Sequence[T],
    *,
    size: int,
    send: Callable[[List[T]], Awaitable[None]],
    jobs: JobRepository,
    job_id: str,
    log: logging.LoggerAdapter,
    label: str,
) -> BulkOutcome:
    """
    Send `items` in order, one awaited call per chunk of at most `size`.

    A chunk whose call raises KVStoreError counts all its items as errors and
    the loop moves on; there is no retry. Progress is pushed into the ledger
    after every chunk. Any other exception propagates.
    """
    processed = errors = 0
    total_batches = -(-len(items) // size) if items else 0
    for n, batch in enumerate(chunked(items, size), start=1):
        try:
            await send(batch)
        except KVStoreError as e:
            errors += len(batch)
            log.warning(
                "%s.batch.failed batch=%d/%d size=%d status=%s",
                label,
                n,
                total_batches,
                len(batch),
                e.status_code,
            )
            await jobs.advance(job_id, error_delta=len(batch))
            continue
        processed += len(batch)
        log.debug("%s.batch.ok batch=%d/%d size=%d", label, n, total_batches, len(batch))
        await jobs.advance(job_id, processed_delta=len(batch))
    return {"processed": processed, "errors": errors}
