from typing import Any, Dict, Optional
from pydantic import BaseModel, Field, field_validator
from util.enums import TagOperation
from util.functions import dedupe


class MetadataRecord(BaseModel):
    namespace_id: str
    key_name: str
    tags: list[str] = Field(default_factory=list)
    custom_metadata: Dict[str, Any] = Field(default_factory=dict)
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    # Tags behave as a set; first-seen order is kept for display
    @field_validator("tags")
    @classmethod
    def _unique_tags(cls, v: list[str]) -> list[str]:
        return dedupe(v)


class MetadataUpdate(BaseModel):
    tags: Optional[list[str]] = None
    custom_metadata: Optional[Dict[str, Any]] = None

    @field_validator("tags")
    @classmethod
    def _unique_tags(cls, v: Optional[list[str]]) -> Optional[list[str]]:
        return None if v is None else dedupe(v)


class BulkTagRequest(BaseModel):
    keys: list[str]
    tags: list[str]
    operation: TagOperation = TagOperation.REPLACE


class BulkTagResult(BaseModel):
    processed_keys: int


class SearchResult(BaseModel):
    namespace_id: str
    key_name: str
    tags: list[str] = Field(default_factory=list)
    custom_metadata: Dict[str, Any] = Field(default_factory=dict)
