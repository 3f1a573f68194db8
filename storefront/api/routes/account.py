# storefront/api/routes/account.py
import logging

from fastapi import APIRouter, File, Request, Response, UploadFile, status

from storefront.api.schemas.auth.auth import (
    MessageOut,
    MfaSetupOut,
    MfaStatusOut,
    MfaToggleRequest,
    MfaVerifyRequest,
    PasswordChangeRequest,
    PasswordStrengthOut,
    PasswordStrengthRequest,
    ProfileUpdateRequest,
)
from storefront.core.config import config
from storefront.core.dependencies import (
    GetAccountServiceDep,
    GetBackendClientDep,
    GetCSRFTokenDep,
    GetCurrentSessionDep,
    GetLanguageDep,
)
from storefront.core.i18n import Language, localized_http_exception, translate
from storefront.core.rate_limit.rate_limit import RATE_LIMITS, limiter
from storefront.core.security.auth_token import AUTH_COOKIES_TO_CLEAR
from storefront.core.utils.validators import ValidationResult, password_strength

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/account", tags=["Account"])

AVATAR_MAX_BYTES = 5 * 1024 * 1024
AVATAR_CONTENT_TYPES = ("image/jpeg", "image/png", "image/webp", "image/gif")


def _raise_invalid(result: ValidationResult, language: Language):
    raise localized_http_exception(
        status.HTTP_400_BAD_REQUEST, result.error_key, language, **result.params,
    )


def clear_auth_cookies(response: Response):
    """Signs the browser out; `__Host-` cookies can only be cleared as secure"""
    for name in AUTH_COOKIES_TO_CLEAR:
        response.delete_cookie(
            key=name,
            path="/",
            secure=name.startswith("__Host-") or config.is_production,
            httponly=True,
        )


# ═══════════════════════════════════════════════════════════
# PASSWORD
# ═══════════════════════════════════════════════════════════

@router.put("/password", response_model=MessageOut)
@limiter.limit(RATE_LIMITS["password_change"])
async def change_password(
        request: Request,
        response: Response,
        payload: PasswordChangeRequest,
        session: GetCurrentSessionDep,
        account: GetAccountServiceDep,
        language: GetLanguageDep,
        csrf_token: GetCSRFTokenDep,
):
    """
    Changes the password and signs the customer out of every device.

    The confirmation, strength and reuse checks run before the backend is
    contacted.
    """
    result = await account.change_password(session.token, csrf_token, payload)
    if not result.valid:
        _raise_invalid(result, language)

    clear_auth_cookies(response)
    return MessageOut(message=translate("password_changed", language))


@router.post("/password/strength", response_model=PasswordStrengthOut)
def check_password_strength(payload: PasswordStrengthRequest, language: GetLanguageDep):
    strength = password_strength(payload.password)
    return PasswordStrengthOut(
        score=strength.score,
        label=strength.label(language),
        checks=strength.checks,
    )


# ═══════════════════════════════════════════════════════════
# MFA
# ═══════════════════════════════════════════════════════════

@router.get("/mfa/status", response_model=MfaStatusOut)
async def mfa_status(session: GetCurrentSessionDep, account: GetAccountServiceDep):
    data = await account.mfa_status(session.token)
    return MfaStatusOut(
        enabled=bool(data.get("enabled", data.get("mfaEnabled", False))),
        setup_pending=bool(data.get("setupPending", False)),
    )


@router.post("/mfa/setup", response_model=MfaSetupOut)
@limiter.limit(RATE_LIMITS["mfa_setup"])
async def mfa_setup(
        request: Request,
        session: GetCurrentSessionDep,
        account: GetAccountServiceDep,
        csrf_token: GetCSRFTokenDep,
):
    data = await account.mfa_setup(session.token, csrf_token)
    return MfaSetupOut(
        qr_code=data.get("qrCode") or data.get("qrCodeUrl"),
        secret=data.get("secret"),
    )


@router.post("/mfa/verify-setup", response_model=MessageOut)
@limiter.limit(RATE_LIMITS["mfa_verify"])
async def mfa_verify_setup(
        request: Request,
        payload: MfaVerifyRequest,
        session: GetCurrentSessionDep,
        account: GetAccountServiceDep,
        language: GetLanguageDep,
        csrf_token: GetCSRFTokenDep,
):
    result = await account.verify_mfa_setup(session.token, payload.code, csrf_token)
    if not result.valid:
        _raise_invalid(result, language)

    logger.info(f"🔐 MFA enabled for user {session.user_id}")
    return MessageOut(message=translate("mfa_enabled", language))


@router.post("/mfa/toggle", response_model=MessageOut)
@limiter.limit(RATE_LIMITS["mfa_verify"])
async def mfa_toggle(
        request: Request,
        payload: MfaToggleRequest,
        session: GetCurrentSessionDep,
        account: GetAccountServiceDep,
        language: GetLanguageDep,
        csrf_token: GetCSRFTokenDep,
):
    result = await account.toggle_mfa(session.token, payload.enabled, payload.code, csrf_token)
    if not result.valid:
        _raise_invalid(result, language)

    return MessageOut(message=translate("mfa_enabled" if payload.enabled else "mfa_disabled", language))


# ═══════════════════════════════════════════════════════════
# PROFILE
# ═══════════════════════════════════════════════════════════

@router.patch("/profile")
async def update_profile(
        payload: ProfileUpdateRequest,
        session: GetCurrentSessionDep,
        account: GetAccountServiceDep,
        language: GetLanguageDep,
        csrf_token: GetCSRFTokenDep,
):
    changes = payload.model_dump(by_alias=True, exclude_none=True)
    result, user = await account.update_profile(session.token, csrf_token, changes)
    if not result.valid:
        _raise_invalid(result, language)

    return {"success": True, "message": translate("profile_updated", language), "user": user}


@router.post("/profile/avatar")
async def upload_avatar(
        session: GetCurrentSessionDep,
        backend: GetBackendClientDep,
        language: GetLanguageDep,
        csrf_token: GetCSRFTokenDep,
        avatar: UploadFile = File(...),
):
    if avatar.content_type not in AVATAR_CONTENT_TYPES:
        raise localized_http_exception(status.HTTP_400_BAD_REQUEST, "request_failed", language)

    content = await avatar.read()
    if len(content) > AVATAR_MAX_BYTES:
        raise localized_http_exception(status.HTTP_413_REQUEST_ENTITY_TOO_LARGE, "request_failed", language)

    data = await backend.upload_avatar(
        session.token,
        csrf_token,
        avatar.filename or "avatar",
        content,
        avatar.content_type,
    )
    return {"success": True, "message": translate("profile_updated", language), "data": data}


# ═══════════════════════════════════════════════════════════
# ORDERS
# ═══════════════════════════════════════════════════════════

@router.get("/orders")
async def list_orders(session: GetCurrentSessionDep, backend: GetBackendClientDep):
    orders = await backend.list_orders(session.token)
    return {"success": True, "data": {"orders": orders}}


@router.get("/orders/{order_id}")
async def get_order(order_id: str, session: GetCurrentSessionDep, backend: GetBackendClientDep):
    order = await backend.get_order(session.token, order_id)
    return {"success": True, "data": {"order": order}}


@router.get("/orders/{order_id}/invoice")
async def download_invoice(
        order_id: str,
        session: GetCurrentSessionDep,
        backend: GetBackendClientDep,
        language: GetLanguageDep,
):
    content, content_type = await backend.download_invoice(session.token, order_id, language.value)
    return Response(
        content=content,
        media_type=content_type or "application/pdf",
        headers={"Content-Disposition": f'attachment; filename="invoice-{order_id}-{language.value}.pdf"'},
    )
