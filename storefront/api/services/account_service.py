# storefront/api/services/account_service.py
import logging
from typing import Optional

from storefront.api.schemas.auth.auth import PasswordChangeRequest
from storefront.api.services.backend_client import BackendError, BackendUnauthorizedError, StorefrontBackendClient
from storefront.core.utils.validators import (
    OK,
    ValidationResult,
    validate_email,
    validate_mfa_code,
    validate_password,
    validate_username,
)

logger = logging.getLogger(__name__)


class AccountService:
    """Password, MFA and profile flows for the signed-in customer"""

    def __init__(self, backend: StorefrontBackendClient):
        self.backend = backend

    # ═══════════════════════════════════════════════════════════
    # PASSWORD
    # ═══════════════════════════════════════════════════════════

    @staticmethod
    def check_password_change(current: str, new: str, confirm: str) -> ValidationResult:
        """
        Local checks run before the backend is called.

        Order: confirmation mismatch, strength rules, reuse of the current
        password.
        """
        if new != confirm:
            return ValidationResult(valid=False, error_key="passwords_mismatch")

        strength = validate_password(new)
        if not strength.valid:
            return strength

        if current == new:
            return ValidationResult(valid=False, error_key="password_must_differ")

        return OK

    async def change_password(self, token: str, csrf_token: str, request: PasswordChangeRequest) -> ValidationResult:
        """
        Changes the password. The caller signs the customer out of every
        device when the result is valid.

        Raises:
            BackendUnauthorizedError: session expired
            BackendError: any other backend refusal
        """
        result = self.check_password_change(
            request.current_password,
            request.new_password,
            request.confirm_password,
        )
        if not result.valid:
            return result

        try:
            await self.backend.change_password(token, csrf_token, request.current_password, request.new_password)
        except BackendUnauthorizedError:
            raise
        except BackendError as e:
            if "different" in e.message.lower():
                return ValidationResult(valid=False, error_key="password_must_differ")
            raise

        logger.info("🔑 Password changed, signing out all devices")
        return OK

    # ═══════════════════════════════════════════════════════════
    # MFA
    # ═══════════════════════════════════════════════════════════

    async def mfa_status(self, token: str) -> dict:
        return await self.backend.mfa_status(token)

    async def mfa_setup(self, token: str, csrf_token: Optional[str] = None) -> dict:
        return await self.backend.mfa_setup(token, csrf_token)

    async def verify_mfa_setup(self, token: str, code: str, csrf_token: Optional[str] = None) -> ValidationResult:
        """Six-digit format is checked before anything is sent"""
        code = (code or "").strip()
        result = validate_mfa_code(code)
        if not result.valid:
            return result

        try:
            await self.backend.mfa_verify_setup(token, code, csrf_token)
        except BackendUnauthorizedError:
            raise
        except BackendError as e:
            if e.status_code == 400:
                return ValidationResult(valid=False, error_key="mfa_verification_failed")
            raise

        return OK

    async def toggle_mfa(
            self,
            token: str,
            enabled: bool,
            code: Optional[str] = None,
            csrf_token: Optional[str] = None,
    ) -> ValidationResult:
        if code is not None:
            code = code.strip()
            result = validate_mfa_code(code)
            if not result.valid:
                return result

        await self.backend.mfa_toggle(token, enabled, code, csrf_token)
        return OK

    # ═══════════════════════════════════════════════════════════
    # PROFILE
    # ═══════════════════════════════════════════════════════════

    async def update_profile(self, token: str, csrf_token: str, changes: dict) -> tuple[ValidationResult, Optional[dict]]:
        if changes.get("email") is not None:
            result = validate_email(changes["email"])
            if not result.valid:
                return result, None

        if changes.get("username") is not None:
            result = validate_username(changes["username"])
            if not result.valid:
                return result, None
            changes = {**changes, "username": changes["username"].strip()}

        user = await self.backend.update_profile(token, csrf_token, changes)
        return OK, user
