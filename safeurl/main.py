"""FastAPI application entry point for the URL policy-check service."""

import json
import logging
import os
import traceback
from datetime import datetime, timezone

from fastapi import FastAPI, Request, Response
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from starlette.middleware.base import BaseHTTPMiddleware

from safeurl import __version__
from safeurl.api.routes import router, limiter


# ── Structured JSON logging ──────────────────────────────────────────────────

# Attributes every LogRecord carries; anything else came in through ``extra``
_STANDARD_RECORD_KEYS = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", None, None))
) | {"message", "asctime", "taskName"}


class JsonFormatter(logging.Formatter):
    """One JSON object per line, with ``extra`` fields merged in at top level."""

    def format(self, record: logging.LogRecord) -> str:
        log: dict = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        log.update(
            (key, value)
            for key, value in vars(record).items()
            if key not in _STANDARD_RECORD_KEYS
        )
        if record.exc_info and record.exc_info[0]:
            log.setdefault("exc_type", record.exc_info[0].__name__)
        return json.dumps(log, default=str)


def configure_logging(level: str | None = None) -> None:
    """Route all logging through a single JSON stream handler."""
    handler = logging.StreamHandler()
    handler.setFormatter(JsonFormatter())
    logging.basicConfig(
        level=(level or os.environ.get("LOG_LEVEL", "INFO")).upper(),
        handlers=[handler],
        force=True,
    )


configure_logging()

logger = logging.getLogger(__name__)


# ── App ───────────────────────────────────────────────────────────────────────

app = FastAPI(title="SafeURL", version=__version__)

app.state.limiter = limiter


@app.exception_handler(RateLimitExceeded)
async def rate_limit_handler(request: Request, exc: RateLimitExceeded):
    return JSONResponse(status_code=429, content={"detail": str(exc.detail)})


# ── Security headers ──────────────────────────────────────────────────────────
class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        response: Response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "no-referrer"
        response.headers["X-API-Version"] = __version__
        return response


app.add_middleware(SecurityHeadersMiddleware)


# ── API key auth ──────────────────────────────────────────────────────────────
_API_KEY = os.environ.get("API_KEY", "").strip()

_AUTH_EXEMPT = {"/api/health/ready"}


class ApiKeyMiddleware(BaseHTTPMiddleware):
    def __init__(self, app, api_key: str = "") -> None:
        super().__init__(app)
        self.api_key = api_key

    async def dispatch(self, request: Request, call_next):
        if not self.api_key:
            return await call_next(request)
        if request.url.path in _AUTH_EXEMPT:
            return await call_next(request)
        key = request.headers.get("X-Api-Key", "")
        if key != self.api_key:
            return JSONResponse(
                status_code=401,
                content={"detail": "Unauthorized: X-Api-Key required"},
            )
        return await call_next(request)


app.add_middleware(ApiKeyMiddleware, api_key=_API_KEY)

app.include_router(router, prefix="/api")


# ── Global error sanitization ─────────────────────────────────────────────────
@app.exception_handler(Exception)
async def _global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Return a sanitized error response; never expose internal details."""
    logger.error(
        "unhandled_exception",
        extra={
            "path": request.url.path,
            "method": request.method,
            "exc_type": type(exc).__name__,
            "detail": traceback.format_exc(),
        },
    )
    return JSONResponse(
        status_code=500,
        content={"error": "Internal server error"},
    )
