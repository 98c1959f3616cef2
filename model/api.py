from typing import Generic, Optional, TypeVar
from pydantic import BaseModel
from model.job import JobStatus
from util.enums import CollisionPolicy, ExportFormat

T = TypeVar("T")


class Envelope(BaseModel, Generic[T]):
    success: bool = True
    result: Optional[T] = None


class ErrorResponse(BaseModel):
    error: str


class TransferResult(BaseModel):
    job_id: str
    status: JobStatus
    total_keys: int
    processed_keys: int
    error_count: int


class ImportResult(TransferResult):
    format: ExportFormat
    collision: CollisionPolicy


class BulkDeleteRequest(BaseModel):
    keys: list[str]


class ExportPayload(BaseModel):
    job_id: str
    format: ExportFormat
    key_count: int
    body: str

    @property
    def extension(self) -> str:
        return self.format.value

    def filename(self, namespace_id: str) -> str:
        return f"{namespace_id}-export.{self.extension}"

