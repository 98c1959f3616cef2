from typing import Any, Dict, TypedDict


# Flow: Narrow types for the store's bulk endpoints.
class BulkWriteEntry(TypedDict, total=False):
    key: str
    value: str
    metadata: Dict[str, Any]
    expiration_ttl: int


class BulkOutcome(TypedDict):
    processed: int
    errors: int
