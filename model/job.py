from typing import Dict, FrozenSet, Literal, Optional
from pydantic import BaseModel, model_validator

JobStatus = Literal[
    "queued",
    "running",
    "completed",
    "failed",
    # Reserved for an asynchronous runner; nothing in this service sets it.
    "cancelled",
]

OperationType = Literal[
    "export",
    "import",
    "bulk_copy",
    "bulk_delete",
    "bulk_ttl_update",
    "bulk_tag",
]

TERMINAL_STATUSES: FrozenSet[str] = frozenset({"completed", "failed", "cancelled"})

# Allowed forward moves; anything else is rejected by the ledger.
TRANSITIONS: Dict[str, FrozenSet[str]] = {
    "queued": frozenset({"running", "failed", "cancelled"}),
    "running": frozenset({"completed", "failed", "cancelled"}),
    "completed": frozenset(),
    "failed": frozenset(),
    "cancelled": frozenset(),
}


class Job(BaseModel):
    job_id: str
    namespace_id: str
    operation_type: OperationType
    status: JobStatus
    total_keys: Optional[int] = None
    processed_keys: Optional[int] = None
    error_count: Optional[int] = None
    started_at: str
    completed_at: Optional[str] = None
    user_email: str

    @model_validator(mode="after")
    def _check_invariants(self) -> "Job":
        if (
            self.total_keys is not None
            and self.processed_keys is not None
            and self.processed_keys > self.total_keys
        ):
            raise ValueError("processed_keys exceeds total_keys")
        if (self.status in TERMINAL_STATUSES) != (self.completed_at is not None):
            raise ValueError("completed_at must be set exactly for terminal jobs")
        return self

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES


class JobPage(BaseModel):
    jobs: list[Job]
    total: int
    limit: int
    offset: int
