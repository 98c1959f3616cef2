import asyncio

import pytest

from repository.job_repository import JobRepository
from util.errors import JobTransitionError


async def test_create_starts_running_with_zeroed_counters(redis):
    jobs = JobRepository()
    job = await jobs.create(
        namespace_id="ns1", operation_type="import", user_email="a@b.c", total_keys=5
    )

    stored = await jobs.get(job.job_id)
    assert stored is not None
    assert stored.status == "running"
    assert stored.total_keys == 5
    assert stored.processed_keys == 0
    assert stored.error_count == 0
    assert stored.completed_at is None
    assert stored.job_id.startswith("import-")


async def test_job_ids_are_unique(redis):
    jobs = JobRepository()
    ids = {
        (await jobs.create(namespace_id="ns", operation_type="export", user_email="x")).job_id
        for _ in range(20)
    }
    assert len(ids) == 20


async def test_unknown_total_reads_back_as_none(redis):
    jobs = JobRepository()
    job = await jobs.create(namespace_id="ns", operation_type="export", user_email="x")
    assert (await jobs.get(job.job_id)).total_keys is None


async def test_get_unknown_returns_none(redis):
    assert await JobRepository().get("nope") is None


async def test_advance_accumulates(redis):
    jobs = JobRepository()
    job = await jobs.create(
        namespace_id="ns", operation_type="import", user_email="x", total_keys=10
    )
    await jobs.advance(job.job_id, processed_delta=4)
    after = await jobs.advance(job.job_id, processed_delta=3, error_delta=2)

    assert after.processed_keys == 7
    assert after.error_count == 2
    assert (await jobs.get(job.job_id)).processed_keys == 7


async def test_advance_cannot_pass_total(redis):
    jobs = JobRepository()
    job = await jobs.create(
        namespace_id="ns", operation_type="import", user_email="x", total_keys=2
    )
    with pytest.raises(ValueError):
        await jobs.advance(job.job_id, processed_delta=3)


async def test_finalize_sets_completed_at_and_counts(redis):
    jobs = JobRepository()
    job = await jobs.create(namespace_id="ns", operation_type="export", user_email="x")
    final = await jobs.finalize(job.job_id, "completed", total_keys=3, processed_keys=3)

    stored = await jobs.get(job.job_id)
    assert final.status == stored.status == "completed"
    assert stored.completed_at is not None
    assert (stored.total_keys, stored.processed_keys) == (3, 3)


async def test_terminal_jobs_do_not_move(redis):
    jobs = JobRepository()
    job = await jobs.create(namespace_id="ns", operation_type="export", user_email="x")
    await jobs.finalize(job.job_id, "failed")

    with pytest.raises(JobTransitionError):
        await jobs.finalize(job.job_id, "completed")
    with pytest.raises(JobTransitionError):
        await jobs.advance(job.job_id, processed_delta=1)


async def test_finalize_refuses_non_terminal_target(redis):
    jobs = JobRepository()
    job = await jobs.create(
        namespace_id="ns", operation_type="export", user_email="x", initial_status="queued"
    )
    with pytest.raises(JobTransitionError):
        await jobs.finalize(job.job_id, "running")


async def test_list_filters_and_orders_newest_first(redis):
    jobs = JobRepository()
    first = await jobs.create(namespace_id="ns", operation_type="import", user_email="x")
    await asyncio.sleep(0.005)
    second = await jobs.create(namespace_id="ns", operation_type="export", user_email="x")
    await asyncio.sleep(0.005)
    third = await jobs.create(namespace_id="ns", operation_type="import", user_email="x")
    await jobs.finalize(third.job_id, "completed")

    everything = await jobs.list()
    assert [j.job_id for j in everything.jobs] == [third.job_id, second.job_id, first.job_id]

    imports = await jobs.list(operation_type="import")
    assert imports.total == 2

    done = await jobs.list(status="completed")
    assert [j.job_id for j in done.jobs] == [third.job_id]

    paged = await jobs.list(limit=1, offset=1)
    assert paged.total == 3
    assert [j.job_id for j in paged.jobs] == [second.job_id]
