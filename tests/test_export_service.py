import json

import pytest

from repository.audit_repository import AuditRepository
from repository.job_repository import JobRepository
from service.export_service import ExportService
from service.import_service import ImportService
from util.enums import ExportFormat
from util.errors import KVStoreError


@pytest.fixture
def service(redis, kv):
    return ExportService(kv, JobRepository(), AuditRepository(), page_size=2)


async def test_ndjson_scenario(service, kv):
    kv.seed("ns1", {"k1": "v1", "k2": "v2"})

    export = await service.export("ns1", ExportFormat.NDJSON, "x")

    assert export.body.split("\n") == [
        '{"name":"k1","value":"v1","metadata":{}}',
        '{"name":"k2","value":"v2","metadata":{}}',
    ]
    assert export.filename("ns1") == "ns1-export.ndjson"


async def test_pagination_follows_cursor_to_the_end(service, kv):
    kv.seed("ns", {f"k{i}": str(i) for i in range(5)})

    export = await service.export("ns", ExportFormat.JSON, "x")

    assert [c[1] for c in kv.list_calls] == [None, "2", "4"]
    assert all(c[2] == 2 for c in kv.list_calls)
    assert [o["name"] for o in json.loads(export.body)] == [f"k{i}" for i in range(5)]


async def test_failed_fetch_is_omitted_not_counted(service, kv):
    kv.seed("ns", {"a": "1", "b": "2", "c": "3"})
    kv.fail_gets = {"b"}

    export = await service.export("ns", ExportFormat.JSON, "x")

    assert [o["name"] for o in json.loads(export.body)] == ["a", "c"]
    job = await JobRepository().get(export.job_id)
    assert job.status == "completed"
    assert (job.total_keys, job.processed_keys, job.error_count) == (2, 2, 0)


async def test_listing_failure_marks_job_failed(service, kv):
    kv.fail_listing = True

    with pytest.raises(KVStoreError):
        await service.export("ns", ExportFormat.JSON, "x")

    [job] = (await JobRepository().list()).jobs
    assert job.status == "failed"
    assert job.completed_at is not None


async def test_audit_records_format_and_count(service, kv):
    kv.seed("ns", {"a": "1"})
    export = await service.export("ns", ExportFormat.NDJSON, "ops@example.com")

    [entry] = await AuditRepository().recent("ns")
    assert entry.operation == "export"
    assert entry.details == {"format": "ndjson", "key_count": 1, "job_id": export.job_id}


async def test_store_metadata_is_exported_when_listed(service, kv):
    await kv.put_value("ns", "tagged", "v", metadata={"env": "prod"})

    export = await service.export("ns", ExportFormat.JSON, "x")

    assert json.loads(export.body) == [
        {"name": "tagged", "value": "v", "metadata": {"env": "prod"}}
    ]


@pytest.mark.parametrize("fmt", [ExportFormat.JSON, ExportFormat.NDJSON])
async def test_export_then_import_round_trips(redis, kv, fmt):
    kv.seed("src", {"alpha": "1", "beta": "two", "gamma": '{"nested": true}'})
    exporter = ExportService(kv, JobRepository(), AuditRepository())
    importer = ImportService(kv, JobRepository(), AuditRepository())

    export = await exporter.export("src", fmt, "x")
    result = await importer.import_payload("dst", export.body, "x")

    assert result.format is fmt
    assert kv.values("dst") == kv.values("src")
