import os
import sys
from dotenv import load_dotenv
from pydantic import ValidationError, Field, field_validator
from pydantic_settings import BaseSettings
from util.enums import Environment
import logging


if os.getenv("APP_ENV", Environment.DEV) == Environment.DEV:
    load_dotenv()

_log = logging.getLogger("config.settings")

# Hard ceiling of the store's bulk write/delete endpoints.
KV_BULK_LIMIT = 10_000


class Settings(BaseSettings):
    # App
    APP_ENV: str = Field(..., validation_alias="APP_ENV")
    REDIS_URL: str = Field(..., validation_alias="REDIS_URL")

    # CORS & Limits
    ALLOWED_ORIGIN: str = Field(..., validation_alias="ALLOWED_ORIGIN")
    RATE_LIMIT_TIMES: int = Field(..., validation_alias="RATE_LIMIT_TIMES")
    RATE_LIMIT_SECONDS: int = Field(..., validation_alias="RATE_LIMIT_SECONDS")
    MAX_IMPORT_MB: int = Field(default=100, validation_alias="MAX_IMPORT_MB")
    TRUST_PROXY: bool = Field(default=False, validation_alias="TRUST_PROXY")

    # Key-value store API
    KV_API_BASE_URL: str = Field(
        default="https://api.cloudflare.com/client/v4",
        validation_alias="KV_API_BASE_URL",
    )
    KV_ACCOUNT_ID: str = Field(..., validation_alias="KV_ACCOUNT_ID")
    KV_API_TOKEN: str = Field(..., validation_alias="KV_API_TOKEN")
    KV_REQUEST_TIMEOUT_SECONDS: float = Field(
        default=30.0, validation_alias="KV_REQUEST_TIMEOUT_SECONDS"
    )
    KV_BULK_BATCH_SIZE: int = Field(
        default=KV_BULK_LIMIT, validation_alias="KV_BULK_BATCH_SIZE"
    )
    KV_LIST_PAGE_SIZE: int = Field(default=1000, validation_alias="KV_LIST_PAGE_SIZE")

    # Search
    SEARCH_RESULT_LIMIT: int = Field(default=100, validation_alias="SEARCH_RESULT_LIMIT")

    # Identity forwarded by the access proxy in front of the app
    USER_EMAIL_HEADER: str = Field(
        default="cf-access-authenticated-user-email",
        validation_alias="USER_EMAIL_HEADER",
    )
    DEFAULT_USER_EMAIL: str = Field(
        default="unknown", validation_alias="DEFAULT_USER_EMAIL"
    )

    # Logging knobs
    LOGGER_NAME: str = "kv-manager"
    LOG_LEVEL: str = Field(default="INFO", validation_alias="LOG_LEVEL")
    LOG_TO_FILE: bool = Field(default=False, validation_alias="LOG_TO_FILE")
    LOG_DIR: str = Field(default="logs", validation_alias="LOG_DIR")
    LOG_FILE_NAME: str = Field(default="app.log", validation_alias="LOG_FILE_NAME")
    LOG_MAX_BYTES: int = Field(
        default=50 * 1024 * 1024, validation_alias="LOG_MAX_BYTES"
    )
    LOG_BACKUP_COUNT: int = Field(default=5, validation_alias="LOG_BACKUP_COUNT")

    @field_validator("KV_BULK_BATCH_SIZE")
    @classmethod
    def _within_store_limit(cls, v: int) -> int:
        if not 1 <= v <= KV_BULK_LIMIT:
            raise ValueError(f"must be between 1 and {KV_BULK_LIMIT}")
        return v

    @field_validator("KV_LIST_PAGE_SIZE")
    @classmethod
    def _valid_page_size(cls, v: int) -> int:
        if not 10 <= v <= 1000:
            raise ValueError("must be between 10 and 1000")
        return v


try:
    settings = Settings()
except ValidationError as e:
    print("❌ Missing/invalid environment variables:", file=sys.stderr)
    for err in e.errors():
        loc = ".".join(str(x) for x in err.get("loc", []))
        msg = err.get("msg", "")
        print(f" - {loc}: {msg}", file=sys.stderr)
    sys.exit(1)
except Exception as e:
    print(f"❌ Settings initialization failed: {e}", file=sys.stderr)
    sys.exit(1)
