from datetime import datetime, timezone
from typing import Iterator, List, Sequence, TypeVar

T = TypeVar("T")


def chunked(items: Sequence[T], size: int) -> Iterator[List[T]]:
    """
    - Yield consecutive slices of `items`, each at most `size` long.
    - Order is preserved and every item lands in exactly one slice.
    """
    if size < 1:
        raise ValueError("chunk size must be positive")
    for start in range(0, len(items), size):
        yield list(items[start : start + size])


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def iso_now() -> str:
    return utc_now().isoformat()


def dedupe(values: Sequence[str]) -> List[str]:
    # First occurrence wins; keeps caller order stable for display.
    return list(dict.fromkeys(values))
