"""API endpoints for URL validation."""

import logging
import os

from fastapi import APIRouter, Request
from slowapi import Limiter
from slowapi.util import get_remote_address

from safeurl.api.models import ValidateRequest, ValidateResponse
from safeurl.validator import Validator

logger = logging.getLogger(__name__)
router = APIRouter()

RATE_LIMIT = os.environ.get("SAFEURL_RATE_LIMIT", "60/minute")
limiter = Limiter(key_func=get_remote_address)

validator = Validator.from_env()


@router.post("/validate")
@limiter.limit(RATE_LIMIT)
def validate_url(request: Request, body: ValidateRequest) -> ValidateResponse:
    """Check whether the service may request ``body.url``.

    Runs in the threadpool since it may block on DNS.
    """
    result = validator.validate(body.url, **body.overrides())
    if not result.ok:
        logger.info(
            "url_rejected",
            extra={"url": body.url, "reason": result.reason.value},
        )
    return ValidateResponse(
        url=body.url,
        allowed=result.ok,
        reason=result.reason.value if result.reason else None,
    )


@router.get("/health/ready")
async def health_ready() -> dict:
    """Readiness probe."""
    return {"status": "ready"}
