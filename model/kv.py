import json
from typing import Any, Dict, Optional
from pydantic import BaseModel, Field, field_validator


class KeyRecord(BaseModel):
    """One exported/imported entry: key name, opaque value, optional extras."""

    name: str = Field(min_length=1)
    value: str
    metadata: Optional[Dict[str, Any]] = None
    expiration_ttl: Optional[int] = Field(default=None, gt=0)

    # Values are opaque text; structured JSON values are stored as their JSON text
    @field_validator("value", mode="before")
    @classmethod
    def _value_as_text(cls, v: Any) -> Any:
        if v is None or isinstance(v, str):
            return v
        return json.dumps(v, separators=(",", ":"))


class KeyInfo(BaseModel):
    name: str
    expiration: Optional[int] = None
    metadata: Optional[Dict[str, Any]] = None


class KeyPage(BaseModel):
    keys: list[KeyInfo]
    cursor: Optional[str] = None

    @property
    def is_last(self) -> bool:
        return not self.cursor
