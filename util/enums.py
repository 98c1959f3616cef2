# util/enums.py
from enum import Enum
from typing import NamedTuple
from fastapi import status


class Color(str, Enum):
    RESET = "\033[0m"
    RED = "\033[31m"
    GREEN = "\033[32m"
    YELLOW = "\033[33m"
    BLUE = "\033[34m"
    MAGENTA = "\033[35m"
    CYAN = "\033[36m"
    BOLD = "\033[1m"

    def __str__(self):
        return self.value


class Environment(str, Enum):
    DEV = "dev"
    PROD = "prod"


class ExportFormat(str, Enum):
    JSON = "json"
    NDJSON = "ndjson"

    @property
    def media_type(self) -> str:
        return "application/x-ndjson" if self is ExportFormat.NDJSON else "application/json"


class CollisionPolicy(str, Enum):
    OVERWRITE = "overwrite"
    SKIP = "skip"
    RENAME = "rename"


class TagOperation(str, Enum):
    ADD = "add"
    REMOVE = "remove"
    REPLACE = "replace"


class ErrorInfo(NamedTuple):
    message: str
    http_status: int


class ErrorMessage(Enum):
    JOB_NOT_FOUND = ErrorInfo("Job not found", status.HTTP_404_NOT_FOUND)
    INVALID_PAYLOAD = ErrorInfo("Invalid import payload", status.HTTP_400_BAD_REQUEST)
    INVALID_REQUEST = ErrorInfo("Invalid request", status.HTTP_400_BAD_REQUEST)
    PAYLOAD_TOO_LARGE = ErrorInfo(
        "Payload too large", status.HTTP_413_REQUEST_ENTITY_TOO_LARGE
    )
    INTERNAL_ERROR = ErrorInfo(
        "Internal Server Error", status.HTTP_500_INTERNAL_SERVER_ERROR
    )
