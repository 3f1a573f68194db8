# storefront/core/dependencies.py

from dataclasses import dataclass
from typing import Annotated, Any, Optional

from fastapi import Depends, HTTPException, Request, status

from storefront.api.services.account_service import AccountService
from storefront.api.services.backend_client import StorefrontBackendClient
from storefront.api.services.cart_service import CartRegistry
from storefront.api.services.review_reconciler import ReviewReconciler
from storefront.core.config import config
from storefront.core.i18n import Language, localized_http_exception, resolve_language
from storefront.core.security.auth_token import decode_user_token, get_auth_token
from storefront.core.security.csrf import require_csrf


@dataclass
class CustomerSession:
    token: str
    claims: dict[str, Any]

    @property
    def user_id(self) -> Optional[str]:
        return str(self.claims.get("userId") or self.claims.get("sub") or "") or None

    @property
    def is_admin(self) -> bool:
        return str(self.claims.get("role", "")).upper() == "ADMIN"


def get_language(request: Request) -> Language:
    """`lang` query param first, then Accept-Language, then the configured default"""
    return resolve_language(
        request.query_params.get("lang") or request.headers.get("accept-language"),
        config.DEFAULT_LANGUAGE,
    )


GetLanguageDep = Annotated[Language, Depends(get_language)]


def get_backend_client(request: Request) -> StorefrontBackendClient:
    return request.app.state.backend_client


GetBackendClientDep = Annotated[StorefrontBackendClient, Depends(get_backend_client)]


def get_account_service(backend: GetBackendClientDep) -> AccountService:
    return AccountService(backend)


GetAccountServiceDep = Annotated[AccountService, Depends(get_account_service)]


def get_cart_registry(request: Request) -> CartRegistry:
    return request.app.state.cart_registry


GetCartRegistryDep = Annotated[CartRegistry, Depends(get_cart_registry)]


def get_review_reconciler(request: Request) -> ReviewReconciler:
    return request.app.state.review_reconciler


GetReviewReconcilerDep = Annotated[ReviewReconciler, Depends(get_review_reconciler)]


# ═══════════════════════════════════════════════════════════
# AUTHENTICATION
# ═══════════════════════════════════════════════════════════

def get_current_session(request: Request, language: GetLanguageDep) -> CustomerSession:
    """
    Resolves and verifies the customer token.

    Raises:
        HTTPException 401 with the localized session-expired message
    """
    token = get_auth_token(request.headers.get("authorization"), request.cookies)
    claims = decode_user_token(token) if token else None

    if not claims:
        raise localized_http_exception(
            status.HTTP_401_UNAUTHORIZED,
            "session_expired",
            language,
            headers={"WWW-Authenticate": "Bearer"},
        )

    return CustomerSession(token=token, claims=claims)


GetCurrentSessionDep = Annotated[CustomerSession, Depends(get_current_session)]


def get_optional_session(request: Request) -> Optional[CustomerSession]:
    token = get_auth_token(request.headers.get("authorization"), request.cookies)
    claims = decode_user_token(token) if token else None
    return CustomerSession(token=token, claims=claims) if claims else None


GetOptionalSessionDep = Annotated[Optional[CustomerSession], Depends(get_optional_session)]


def get_admin_session(session: GetCurrentSessionDep) -> CustomerSession:
    if not session.is_admin:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admin access required")
    return session


GetAdminSessionDep = Annotated[CustomerSession, Depends(get_admin_session)]


# ═══════════════════════════════════════════════════════════
# CSRF
# ═══════════════════════════════════════════════════════════

async def get_csrf_token(request: Request, _: Annotated[None, Depends(require_csrf)]) -> str:
    """Verified CSRF token, forwarded to the backend on mutations"""
    return request.headers.get(config.CSRF_HEADER_NAME) or request.cookies.get(config.CSRF_COOKIE_NAME, "")


GetCSRFTokenDep = Annotated[str, Depends(get_csrf_token)]
