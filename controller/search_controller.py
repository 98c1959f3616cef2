from typing import Optional
from fastapi import APIRouter, Depends, Query
from controller.controller_dependencies import get_search_service
from model.api import Envelope
from model.metadata import SearchResult
from service.search_service import SearchService
from util.constants import InternalURIs

search_router = APIRouter()


@search_router.get(InternalURIs.SEARCH, response_model=Envelope[list[SearchResult]])
async def search(
    query: Optional[str] = None,
    namespace_id: Optional[str] = Query(default=None, alias="namespaceId"),
    tags: Optional[str] = Query(default=None, description="comma separated, any-of"),
    service: SearchService = Depends(get_search_service),
) -> Envelope[list[SearchResult]]:
    wanted = [t.strip() for t in tags.split(",")] if tags else []
    return Envelope(result=await service.search(query, namespace_id, wanted))
