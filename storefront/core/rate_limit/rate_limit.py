# storefront/core/rate_limit/rate_limit.py

"""
Rate Limiting
=============
slowapi limiter guarding the brute-forceable account routes
(password change, MFA verification).
"""

import logging

from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from starlette.requests import Request
from starlette.responses import JSONResponse

from storefront.core.config import config
from storefront.core.i18n import resolve_language, translate

logger = logging.getLogger(__name__)


# ═══════════════════════════════════════════════════════════
# CONFIGURATION
# ═══════════════════════════════════════════════════════════

def get_storage_uri() -> str:
    """Returns the limiter storage URI"""
    if config.RATE_LIMIT_STORAGE_URI:
        return config.RATE_LIMIT_STORAGE_URI
    return "memory://"


def get_identifier(request: Request) -> str:
    """Identifies the client by forwarded IP or socket address"""
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        ip = forwarded.split(",")[0].strip()
    else:
        ip = request.client.host if request.client else "unknown"

    return f"ip:{ip}"


limiter = Limiter(
    key_func=get_identifier,
    storage_uri=get_storage_uri(),
    enabled=config.RATE_LIMIT_ENABLED,
    swallow_errors=True,
)

RATE_LIMITS = {
    "password_change": "5/minute",
    "mfa_verify": "5/minute",
    "mfa_setup": "10/minute",
}


# ═══════════════════════════════════════════════════════════
# EXCEPTION HANDLER
# ═══════════════════════════════════════════════════════════

async def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """Handler for exceeded rate limits"""
    logger.warning(
        f"🚨 RATE LIMIT EXCEEDED\n"
        f"   ├─ Path: {request.method} {request.url.path}\n"
        f"   └─ Identifier: {get_identifier(request)}"
    )

    language = resolve_language(
        request.query_params.get("lang") or request.headers.get("accept-language"),
        config.DEFAULT_LANGUAGE,
    )

    return JSONResponse(
        status_code=429,
        content={"detail": translate("too_many_requests", language)},
        headers={"Retry-After": "60"},
    )
