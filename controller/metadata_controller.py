from fastapi import APIRouter, Depends
from controller.controller_dependencies import get_metadata_service, rate_limiter
from model.api import Envelope
from model.metadata import BulkTagRequest, BulkTagResult, MetadataRecord, MetadataUpdate
from service.metadata_service import MetadataService
from util.constants import InternalURIs

metadata_router = APIRouter()


@metadata_router.post(
    InternalURIs.BULK_TAG,
    response_model=Envelope[BulkTagResult],
    dependencies=[Depends(rate_limiter)],
)
async def bulk_tag(
    namespace_id: str,
    payload: BulkTagRequest,
    service: MetadataService = Depends(get_metadata_service),
) -> Envelope[BulkTagResult]:
    processed = await service.bulk_tag(
        namespace_id, payload.keys, payload.tags, payload.operation
    )
    return Envelope(result=BulkTagResult(processed_keys=processed))


@metadata_router.get(InternalURIs.METADATA, response_model=Envelope[MetadataRecord])
async def get_metadata(
    namespace_id: str,
    key_name: str,
    service: MetadataService = Depends(get_metadata_service),
) -> Envelope[MetadataRecord]:
    return Envelope(result=await service.get(namespace_id, key_name))


@metadata_router.put(
    InternalURIs.METADATA,
    response_model=Envelope[None],
    response_model_exclude_none=True,
    dependencies=[Depends(rate_limiter)],
)
async def put_metadata(
    namespace_id: str,
    key_name: str,
    payload: MetadataUpdate,
    service: MetadataService = Depends(get_metadata_service),
) -> Envelope[None]:
    await service.upsert(namespace_id, key_name, payload)
    return Envelope()
