"""
CSRF Protection
===============
Double-submit cookie pattern: the token lives in an httpOnly cookie and must
be echoed back in the X-CSRF-Token header (or `csrfToken` in the JSON body)
on every state-changing request.
"""

import hmac
import json
import logging
import secrets
from typing import Optional

from fastapi import Request, status
from starlette.responses import Response

from storefront.core.config import config
from storefront.core.i18n import localized_http_exception, resolve_language

logger = logging.getLogger(__name__)

PROTECTED_METHODS = ("POST", "PUT", "PATCH", "DELETE")


def generate_csrf_token() -> str:
    """32 random bytes, hex encoded"""
    return secrets.token_hex(32)


def verify_csrf(cookie_token: Optional[str], request_token: Optional[str]) -> bool:
    """Constant-time comparison of the cookie token and the submitted token"""
    if not cookie_token or not request_token:
        return False
    return hmac.compare_digest(cookie_token.encode(), request_token.encode())


async def _token_from_body(request: Request) -> Optional[str]:
    if "application/json" not in request.headers.get("content-type", ""):
        return None
    try:
        body = json.loads(await request.body() or b"{}")
    except ValueError:
        return None
    if isinstance(body, dict):
        token = body.get("csrfToken")
        return token if isinstance(token, str) else None
    return None


async def require_csrf(request: Request) -> None:
    """
    FastAPI dependency enforcing CSRF on state-changing methods.

    Raises:
        HTTPException 403 with the localized session-expired message
    """
    if request.method.upper() not in PROTECTED_METHODS:
        return

    cookie_token = request.cookies.get(config.CSRF_COOKIE_NAME)
    request_token = request.headers.get(config.CSRF_HEADER_NAME) or await _token_from_body(request)

    if not verify_csrf(cookie_token, request_token):
        logger.warning(f"⚠️ CSRF check failed on {request.method} {request.url.path}")
        language = resolve_language(
            request.query_params.get("lang") or request.headers.get("accept-language"),
            config.DEFAULT_LANGUAGE,
        )
        raise localized_http_exception(status.HTTP_403_FORBIDDEN, "csrf_invalid", language)


def set_csrf_cookie(response: Response, token: Optional[str] = None) -> str:
    """Assigns the CSRF cookie to the response and returns the token"""
    csrf = token or generate_csrf_token()
    response.set_cookie(
        key=config.CSRF_COOKIE_NAME,
        value=csrf,
        httponly=True,
        secure=config.is_production,
        samesite="strict" if config.is_production else "lax",
        max_age=config.CSRF_COOKIE_MAX_AGE,
        path="/",
    )
    return csrf
