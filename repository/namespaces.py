# repository/namespaces.py
from typing import Final

ROOT: Final[str] = "kvmanager"

JOBS: Final[str] = f"{ROOT}:jobs"
JOBS_INDEX: Final[str] = f"{JOBS}:index"  # zset job_id -> started_at (ms)
METADATA: Final[str] = f"{ROOT}:metadata"
METADATA_INDEX: Final[str] = f"{METADATA}:index"  # zset member -> updated_at (ms)
METADATA_RECORDS: Final[str] = f"{METADATA}:record"  # hash per (namespace_id, key_name)
AUDIT: Final[str] = f"{ROOT}:audit"
