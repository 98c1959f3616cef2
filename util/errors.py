# util/errors.py
from typing import Optional
from fastapi import HTTPException, status
from util.enums import ErrorMessage


class AppError(HTTPException):
    # Flow: raise AppError to short-circuit with a typed status & message.
    def __init__(
        self, message: str, http_status: int = status.HTTP_400_BAD_REQUEST
    ) -> None:
        super().__init__(status_code=http_status, detail=message)

    @classmethod
    def of(cls, error: ErrorMessage, message: Optional[str] = None) -> "AppError":
        return cls(message or error.value.message, error.value.http_status)


class KVStoreError(Exception):
    """Transport failure or non-2xx answer from the key-value store API."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class PayloadParseError(ValueError):
    """Import body is neither a JSON array nor valid NDJSON."""

    def __init__(self, message: str, line: Optional[int] = None) -> None:
        super().__init__(message)
        self.line = line


class JobTransitionError(RuntimeError):
    def __init__(self, job_id: str, current: str, target: str) -> None:
        super().__init__(f"job {job_id} cannot move from {current} to {target}")
        self.job_id = job_id
        self.current = current
        self.target = target
