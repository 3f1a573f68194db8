# storefront/core/security/auth_token.py

import logging
from typing import Any, Mapping, Optional
from urllib.parse import unquote

import jwt
from jwt import InvalidTokenError

from storefront.core.config import config

logger = logging.getLogger(__name__)

# ═══════════════════════════════════════════════════════════
# TOKEN SOURCES
# ═══════════════════════════════════════════════════════════

AUTH_COOKIE_NAMES = ("token", "__Host-token")
AUTH_COOKIES_TO_CLEAR = AUTH_COOKIE_NAMES + ("mfa-temp-token",)


def get_auth_token(
        authorization: Optional[str],
        cookies: Mapping[str, str],
) -> Optional[str]:
    """
    Resolves the customer's auth token.

    Lookup order: `Authorization: Bearer <token>` header, then the `token`
    cookie, then the `__Host-token` cookie. Cookie values are URL-decoded.

    Args:
        authorization: Raw Authorization header (may be None)
        cookies: Request cookies

    Returns:
        The token, or None when no source carries one
    """
    if authorization:
        scheme, _, value = authorization.partition(" ")
        if scheme.lower() == "bearer" and value.strip():
            return value.strip()

    for name in AUTH_COOKIE_NAMES:
        value = cookies.get(name)
        if value:
            return unquote(value)

    return None


def decode_user_token(token: str) -> Optional[dict[str, Any]]:
    """
    Verifies an HS256 customer JWT.

    Issuer and audience are not enforced because the commerce backend does
    not include them.

    Returns:
        The decoded payload, or None if the token is invalid or expired
    """
    try:
        return jwt.decode(
            token,
            config.USER_JWT_SECRET.strip(),
            algorithms=[config.JWT_ALGORITHM],
        )
    except InvalidTokenError as e:
        logger.info(f"🔒 Token rejected: {type(e).__name__}")
        return None
