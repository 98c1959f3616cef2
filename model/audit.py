from typing import Any, Dict
from pydantic import BaseModel, Field
from util.functions import iso_now


class AuditEntry(BaseModel):
    namespace_id: str
    operation: str
    user_email: str
    details: Dict[str, Any] = Field(default_factory=dict)
    timestamp: str = Field(default_factory=iso_now)
