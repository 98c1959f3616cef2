from fastapi import APIRouter, Depends
from controller.controller_dependencies import (
    get_bulk_delete_service,
    get_user_email,
    rate_limiter,
)
from model.api import BulkDeleteRequest, Envelope, TransferResult
from service.bulk_delete_service import BulkDeleteService
from util.constants import InternalURIs

keys_router = APIRouter(dependencies=[Depends(rate_limiter)])


@keys_router.post(InternalURIs.BULK_DELETE, response_model=Envelope[TransferResult])
async def bulk_delete(
    namespace_id: str,
    payload: BulkDeleteRequest,
    user_email: str = Depends(get_user_email),
    service: BulkDeleteService = Depends(get_bulk_delete_service),
) -> Envelope[TransferResult]:
    result = await service.delete_keys(namespace_id, payload.keys, user_email)
    return Envelope(result=result)
