from typing import Optional
from fastapi import APIRouter, Depends, Query
from controller.controller_dependencies import get_job_service
from model.api import Envelope
from model.job import Job, JobPage, JobStatus, OperationType
from service.job_service import JobService
from util.constants import InternalURIs

job_router = APIRouter()


@job_router.get(InternalURIs.JOBS, response_model=Envelope[JobPage])
async def list_jobs(
    status: Optional[JobStatus] = None,
    operation_type: Optional[OperationType] = None,
    limit: int = Query(default=20, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
    service: JobService = Depends(get_job_service),
) -> Envelope[JobPage]:
    page = await service.list(
        status=status, operation_type=operation_type, limit=limit, offset=offset
    )
    return Envelope(result=page)


@job_router.get(InternalURIs.JOB, response_model=Envelope[Job])
async def get_job(
    job_id: str, service: JobService = Depends(get_job_service)
) -> Envelope[Job]:
    return Envelope(result=await service.get(job_id))
