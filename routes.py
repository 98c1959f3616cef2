# routes.py
from fastapi import FastAPI
from controller.audit_controller import audit_router
from controller.job_controller import job_router
from controller.keys_controller import keys_router
from controller.metadata_controller import metadata_router
from controller.search_controller import search_router
from controller.transfer_controller import transfer_router


def register_routes(app: FastAPI) -> None:
    """Register & Access control controllers here."""
    app.include_router(transfer_router)
    app.include_router(job_router)
    app.include_router(keys_router)
    app.include_router(metadata_router)
    app.include_router(search_router)
    app.include_router(audit_router)
