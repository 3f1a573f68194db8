# storefront/api/services/backend_client.py
"""
Commerce Backend Client
=======================

Async HTTP client for the external commerce API (products, orders,
profile, MFA, reviews, admin CRUD). Every call forwards the customer's
bearer token, the CSRF token on state-changing calls and the request
correlation id.

Failures are raised once, without retries:
- 401 -> BackendUnauthorizedError
- other >= 400 -> BackendError carrying the backend's message
- timeouts / connection errors -> BackendUnavailableError
"""

import logging
from typing import Any, Optional
from urllib.parse import quote

import httpx

from storefront.api.schemas.product.product import Product
from storefront.api.schemas.review.review import CustomerReview
from storefront.api.schemas.shared.envelope import unwrap_envelope
from storefront.core.config import config
from storefront.core.middleware.correlation import CORRELATION_HEADER, get_correlation_id

logger = logging.getLogger(__name__)

ADMIN_RESOURCES = {
    "products": "product",
    "categories": "category",
    "users": "user",
    "reviews": "review",
}


class BackendError(Exception):
    def __init__(self, status_code: int, message: str = ""):
        super().__init__(message or f"Backend responded {status_code}")
        self.status_code = status_code
        self.message = message


class BackendUnauthorizedError(BackendError):
    def __init__(self, message: str = ""):
        super().__init__(401, message)


class BackendUnavailableError(BackendError):
    def __init__(self, message: str = ""):
        super().__init__(503, message)


def _error_message(response: httpx.Response) -> str:
    try:
        data = response.json()
    except ValueError:
        return response.text[:200]
    if isinstance(data, dict):
        return str(data.get("error") or data.get("message") or "")
    return ""


def _segment(value: str) -> str:
    """Quotes a value as a single path segment so it cannot reach another backend route"""
    segment = quote(str(value), safe="")
    if segment in (".", ".."):
        return segment.replace(".", "%2E")
    return segment


def dedupe_orders(orders: list[dict]) -> list[dict]:
    """Drops repeated orders, identified by `id` or else `orderNumber`"""
    seen = set()
    unique = []
    for order in orders:
        order_key = order.get("id") or order.get("orderNumber")
        if order_key in seen:
            continue
        seen.add(order_key)
        unique.append(order)
    return unique


class StorefrontBackendClient:

    def __init__(
            self,
            base_url: Optional[str] = None,
            timeout: Optional[float] = None,
            transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = (base_url or config.BACKEND_API_URL).rstrip("/")
        self.timeout = httpx.Timeout(timeout or config.BACKEND_TIMEOUT_SECONDS)
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self.timeout,
            transport=transport,
        )

    async def aclose(self):
        await self._client.aclose()

    # ═══════════════════════════════════════════════════════════
    # TRANSPORT
    # ═══════════════════════════════════════════════════════════

    def _headers(self, token: Optional[str], csrf_token: Optional[str]) -> dict[str, str]:
        headers = {
            "user-agent": "Storefront-BFF/1.0",
            CORRELATION_HEADER: get_correlation_id(),
        }
        if token:
            headers["Authorization"] = f"Bearer {token}"
        if csrf_token:
            headers[config.CSRF_HEADER_NAME] = csrf_token
        return headers

    async def _request(
            self,
            method: str,
            path: str,
            token: Optional[str] = None,
            csrf_token: Optional[str] = None,
            **kwargs,
    ) -> httpx.Response:
        try:
            response = await self._client.request(
                method,
                path,
                headers=self._headers(token, csrf_token),
                **kwargs,
            )
        except httpx.TimeoutException:
            logger.error(f"⏱️ Timeout on [{method}] {path}")
            raise BackendUnavailableError("timeout")
        except httpx.TransportError as e:
            logger.error(f"❌ Connection error on [{method}] {path}: {type(e).__name__}")
            raise BackendUnavailableError("connection failed")

        logger.info(f"🔗 [{method}] {path} → {response.status_code}")

        if response.status_code == 401:
            raise BackendUnauthorizedError(_error_message(response))

        if response.status_code >= 400:
            raise BackendError(response.status_code, _error_message(response))

        return response

    async def _json(self, method: str, path: str, **kwargs) -> Any:
        response = await self._request(method, path, **kwargs)
        if not response.content:
            return {}
        try:
            return response.json()
        except ValueError:
            raise BackendError(502, "invalid JSON from backend")

    # ═══════════════════════════════════════════════════════════
    # CATALOG
    # ═══════════════════════════════════════════════════════════

    async def get_product(self, slug: str) -> Product:
        payload = await self._json("GET", f"/api/products/{_segment(slug)}")
        return Product.model_validate(unwrap_envelope(payload, "product"))

    # ═══════════════════════════════════════════════════════════
    # ORDERS
    # ═══════════════════════════════════════════════════════════

    async def list_orders(self, token: str) -> list[dict]:
        payload = await self._json("GET", "/api/account/orders", token=token)
        orders = unwrap_envelope(payload, "orders")
        return dedupe_orders(orders if isinstance(orders, list) else [])

    async def get_order(self, token: str, order_id: str) -> dict:
        payload = await self._json("GET", f"/api/account/orders/{_segment(order_id)}", token=token)
        return unwrap_envelope(payload, "order")

    async def download_invoice(self, token: str, order_id: str, lang: str) -> tuple[bytes, str]:
        """Returns (pdf bytes, content type)"""
        response = await self._request(
            "GET",
            f"/api/account/orders/{_segment(order_id)}/invoice",
            token=token,
            params={"lang": lang, "format": "pdf"},
        )
        return response.content, response.headers.get("content-type", "application/pdf")

    # ═══════════════════════════════════════════════════════════
    # PROFILE
    # ═══════════════════════════════════════════════════════════

    async def update_profile(self, token: str, csrf_token: str, data: dict) -> dict:
        payload = await self._json(
            "PATCH", "/api/account/profile",
            token=token, csrf_token=csrf_token,
            json={**data, "csrfToken": csrf_token},
        )
        return unwrap_envelope(payload, "user")

    async def upload_avatar(
            self,
            token: str,
            csrf_token: str,
            filename: str,
            content: bytes,
            content_type: str,
    ) -> dict:
        payload = await self._json(
            "POST", "/api/account/profile/avatar",
            token=token, csrf_token=csrf_token,
            files={"avatar": (filename, content, content_type)},
            data={"csrfToken": csrf_token},
        )
        return unwrap_envelope(payload)

    # ═══════════════════════════════════════════════════════════
    # AUTH / MFA
    # ═══════════════════════════════════════════════════════════

    async def change_password(self, token: str, csrf_token: str, current_password: str, new_password: str) -> dict:
        return await self._json(
            "PUT", "/api/auth/password",
            token=token, csrf_token=csrf_token,
            json={
                "currentPassword": current_password,
                "newPassword": new_password,
                "csrfToken": csrf_token,
            },
        )

    async def mfa_status(self, token: str) -> dict:
        return unwrap_envelope(await self._json("GET", "/api/auth/mfa/status", token=token))

    async def mfa_setup(self, token: str, csrf_token: Optional[str] = None) -> dict:
        return unwrap_envelope(await self._json(
            "POST", "/api/auth/mfa/setup", token=token, csrf_token=csrf_token, json={},
        ))

    async def mfa_verify_setup(self, token: str, code: str, csrf_token: Optional[str] = None) -> dict:
        return unwrap_envelope(await self._json(
            "POST", "/api/auth/mfa/verify-setup", token=token, csrf_token=csrf_token, json={"code": code},
        ))

    async def mfa_toggle(self, token: str, enabled: bool, code: Optional[str] = None,
                         csrf_token: Optional[str] = None) -> dict:
        body: dict[str, Any] = {"enabled": enabled}
        if code:
            body["code"] = code
        return unwrap_envelope(await self._json(
            "POST", "/api/auth/mfa/toggle", token=token, csrf_token=csrf_token, json=body,
        ))

    # ═══════════════════════════════════════════════════════════
    # REVIEWS
    # ═══════════════════════════════════════════════════════════

    async def list_reviews(self, limit: int = 50) -> list[CustomerReview]:
        payload = await self._json("GET", "/api/customer-reviews", params={"limit": limit})
        rows = unwrap_envelope(payload, "reviews")
        return [CustomerReview.model_validate(row) for row in (rows if isinstance(rows, list) else [])]

    async def create_review(self, token: str, csrf_token: str, data: dict) -> Optional[CustomerReview]:
        payload = await self._json(
            "POST", "/api/customer-reviews",
            token=token, csrf_token=csrf_token,
            json={**data, "csrfToken": csrf_token},
        )
        review = unwrap_envelope(payload, "review")
        if isinstance(review, dict) and review.get("id"):
            return CustomerReview.model_validate(review)
        return None

    # ═══════════════════════════════════════════════════════════
    # ADMIN CRUD
    # ═══════════════════════════════════════════════════════════

    @staticmethod
    def _admin_path(resource: str, entity_id: Optional[str] = None) -> str:
        if resource not in ADMIN_RESOURCES:
            raise ValueError(f"Unknown admin resource: {resource}")
        return f"/api/admin/{resource}" + (f"/{_segment(entity_id)}" if entity_id else "")

    async def admin_list(self, resource: str, token: str, params: Optional[dict] = None) -> Any:
        payload = await self._json("GET", self._admin_path(resource), token=token, params=params or {})
        return unwrap_envelope(payload, resource)

    async def admin_get(self, resource: str, entity_id: str, token: str) -> Any:
        payload = await self._json("GET", self._admin_path(resource, entity_id), token=token)
        return unwrap_envelope(payload, ADMIN_RESOURCES[resource])

    async def admin_create(self, resource: str, token: str, csrf_token: str, data: dict) -> Any:
        payload = await self._json(
            "POST", self._admin_path(resource),
            token=token, csrf_token=csrf_token, json={**data, "csrfToken": csrf_token},
        )
        return unwrap_envelope(payload, ADMIN_RESOURCES[resource])

    async def admin_update(self, resource: str, entity_id: str, token: str, csrf_token: str, data: dict) -> Any:
        # users are replaced with PUT, the other resources are patched
        method = "PUT" if resource == "users" else "PATCH"
        payload = await self._json(
            method, self._admin_path(resource, entity_id),
            token=token, csrf_token=csrf_token, json={**data, "csrfToken": csrf_token},
        )
        return unwrap_envelope(payload, ADMIN_RESOURCES[resource])

    async def admin_delete(self, resource: str, entity_id: str, token: str, csrf_token: str,
                           force: bool = False) -> Any:
        params = {"force": "true"} if force else {}
        return unwrap_envelope(await self._json(
            "DELETE", self._admin_path(resource, entity_id),
            token=token, csrf_token=csrf_token, params=params,
        ))
