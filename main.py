# main.py
import logging
from fastapi_limiter import FastAPILimiter
import routes
from contextlib import asynccontextmanager
from util.enums import Environment, Color, ErrorMessage
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.cors import CORSMiddleware
from config.settings import settings
from config.cache import close_redis, get_redis, redis_ok
from core.kv_client import CloudflareKVClient
from fastapi.responses import JSONResponse
from model.api import ErrorResponse
from util.errors import PayloadParseError
from util.logger import init_logger

logger = logging.getLogger(__name__)


async def _real_ip(request: Request) -> str:
    if settings.TRUST_PROXY:
        fwd = request.headers.get("x-forwarded-for")
        if fwd:
            return fwd.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


@asynccontextmanager
async def lifespan(fastApi: FastAPI):
    try:
        init_logger()
        print(f"{Color.GREEN}Initializing...{Color.RESET}")
        redis = await get_redis()
        await FastAPILimiter.init(redis, identifier=_real_ip)
        fastApi.state.kv_client = CloudflareKVClient()
        print(f"{Color.BLUE}Server Started{Color.RESET}")
    except Exception as e:
        print("Failed to initialize:", e)
        raise

    try:
        yield
    finally:
        try:
            await fastApi.state.kv_client.aclose()
            await close_redis()
        except Exception as e:
            print("Error during shutdown:", e)

        print(f"{Color.RED}Server Shutdown{Color.RESET}")


app: FastAPI = FastAPI(lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.ALLOWED_ORIGIN],
    allow_credentials=True,  # Allow cookies and other credentials
    allow_methods=["GET", "POST", "PUT"],  # Allowed HTTP Methods
    allow_headers=["Authorization", "Content-Type", "Accept"],  # Allowed HTTP Headers
    expose_headers=["Content-Disposition", "X-Job-Id"],
)


def _error(message: str, http_status: int, headers: dict | None = None) -> JSONResponse:
    return JSONResponse(
        status_code=http_status,
        content=ErrorResponse(error=message).model_dump(),
        headers=headers,
    )


@app.get("/healthz")
async def healthz():
    if not await redis_ok():
        return JSONResponse(status_code=503, content={"ok": False, "redis": False})
    return {"ok": True}


@app.exception_handler(429)
async def ratelimit_handler(request: Request, exc):
    return _error(
        "Too many requests. Try again in 60s.",
        status.HTTP_429_TOO_MANY_REQUESTS,
        headers={"Retry-After": "60"},
    )


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return _error(str(exc.detail), exc.status_code, headers=exc.headers)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    first = exc.errors()[0] if exc.errors() else {}
    field = ".".join(str(x) for x in first.get("loc", ()))
    message = f"{ErrorMessage.INVALID_REQUEST.value.message}: {field} {first.get('msg', '')}"
    return _error(message.strip(), ErrorMessage.INVALID_REQUEST.value.http_status)


@app.exception_handler(PayloadParseError)
async def payload_error_handler(request: Request, exc: PayloadParseError):
    logger.warning("import.parse.rejected line=%s", exc.line)
    return _error(
        f"{ErrorMessage.INVALID_PAYLOAD.value.message}: {exc}",
        ErrorMessage.INVALID_PAYLOAD.value.http_status,
    )


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception):
    logger.exception("request.unhandled path=%s", request.url.path)
    return _error(
        ErrorMessage.INTERNAL_ERROR.value.message,
        ErrorMessage.INTERNAL_ERROR.value.http_status,
    )


routes.register_routes(app)

if __name__ == "__main__":
    import uvicorn

    reload = settings.APP_ENV == Environment.DEV
    uvicorn.run("main:app", host="127.0.0.1", port=8000, reload=reload)
