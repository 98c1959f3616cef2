from fastapi import APIRouter, Depends, Query, Response
from controller.controller_dependencies import (
    get_export_service,
    get_import_service,
    get_user_email,
    rate_limiter,
    read_import_body,
)
from model.api import Envelope, ImportResult
from service.export_service import ExportService
from service.import_service import ImportService
from util.constants import InternalURIs
from util.enums import CollisionPolicy, ExportFormat

transfer_router = APIRouter(dependencies=[Depends(rate_limiter)])


@transfer_router.get(InternalURIs.EXPORT)
async def export_namespace(
    namespace_id: str,
    format: ExportFormat = Query(default=ExportFormat.JSON),
    user_email: str = Depends(get_user_email),
    service: ExportService = Depends(get_export_service),
) -> Response:
    export = await service.export(namespace_id, format, user_email)
    return Response(
        content=export.body,
        media_type=format.media_type,
        headers={
            "Content-Disposition": f'attachment; filename="{export.filename(namespace_id)}"',
            "X-Job-Id": export.job_id,
        },
    )


@transfer_router.post(InternalURIs.IMPORT, response_model=Envelope[ImportResult])
async def import_namespace(
    namespace_id: str,
    collision: CollisionPolicy = Query(default=CollisionPolicy.OVERWRITE),
    body: str = Depends(read_import_body),
    user_email: str = Depends(get_user_email),
    service: ImportService = Depends(get_import_service),
) -> Envelope[ImportResult]:
    result = await service.import_payload(
        namespace_id, body, user_email, collision=collision
    )
    return Envelope(result=result)
