from fastapi import Depends, Request
from fastapi_limiter.depends import RateLimiter
from config.settings import settings
from core.kv_client import KVStoreClient
from repository.audit_repository import AuditRepository
from repository.job_repository import JobRepository
from repository.metadata_repository import MetadataRepository
from service.bulk_delete_service import BulkDeleteService
from service.export_service import ExportService
from service.import_service import ImportService
from service.job_service import JobService
from service.metadata_service import MetadataService
from service.search_service import SearchService
from util.enums import ErrorMessage
from util.errors import AppError

rate_limiter = RateLimiter(
    times=settings.RATE_LIMIT_TIMES, seconds=settings.RATE_LIMIT_SECONDS
)


def get_kv_client(request: Request) -> KVStoreClient:
    # Built once in main.lifespan
    return request.app.state.kv_client


def get_user_email(request: Request) -> str:
    # Identity is asserted by the access proxy in front of the app
    email = request.headers.get(settings.USER_EMAIL_HEADER, "").strip()
    return email or settings.DEFAULT_USER_EMAIL


def get_export_service(kv: KVStoreClient = Depends(get_kv_client)) -> ExportService:
    return ExportService(kv, JobRepository(), AuditRepository())


def get_import_service(kv: KVStoreClient = Depends(get_kv_client)) -> ImportService:
    return ImportService(kv, JobRepository(), AuditRepository())


def get_bulk_delete_service(
    kv: KVStoreClient = Depends(get_kv_client),
) -> BulkDeleteService:
    return BulkDeleteService(kv, JobRepository(), AuditRepository())


def get_job_service() -> JobService:
    return JobService(JobRepository())


def get_metadata_service() -> MetadataService:
    return MetadataService(MetadataRepository())


def get_search_service() -> SearchService:
    return SearchService(MetadataRepository())


def get_audit_repository() -> AuditRepository:
    return AuditRepository()


async def read_import_body(request: Request) -> str:
    MAX_BYTES = settings.MAX_IMPORT_MB * 1024 * 1024
    too_large = f"Import body exceeds {settings.MAX_IMPORT_MB} MB"
    # Fast pre-check via Content-Length if present
    cl = request.headers.get("content-length")
    if cl and cl.isdigit() and int(cl) > MAX_BYTES:
        raise AppError.of(ErrorMessage.PAYLOAD_TOO_LARGE, too_large)

    # Hard cap while streaming (works even if no Content-Length)
    buf = bytearray()
    async for chunk in request.stream():
        buf.extend(chunk)
        if len(buf) > MAX_BYTES:
            raise AppError.of(ErrorMessage.PAYLOAD_TOO_LARGE, too_large)
    try:
        return buf.decode("utf-8-sig")
    except UnicodeDecodeError:
        raise AppError.of(ErrorMessage.INVALID_PAYLOAD, "Import body is not UTF-8 text")
