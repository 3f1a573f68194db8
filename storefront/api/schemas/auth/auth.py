# storefront/api/schemas/auth/auth.py

from typing import Optional

from storefront.api.schemas.shared.base import AppBaseModel


class PasswordChangeRequest(AppBaseModel):
    current_password: str
    new_password: str
    confirm_password: str
    csrf_token: Optional[str] = None


class PasswordStrengthRequest(AppBaseModel):
    password: str


class PasswordStrengthOut(AppBaseModel):
    score: int
    label: str
    checks: dict[str, bool]


class MfaVerifyRequest(AppBaseModel):
    code: str


class MfaToggleRequest(AppBaseModel):
    enabled: bool
    code: Optional[str] = None


class MfaStatusOut(AppBaseModel):
    enabled: bool = False
    setup_pending: bool = False


class MfaSetupOut(AppBaseModel):
    qr_code: Optional[str] = None
    secret: Optional[str] = None


class ProfileUpdateRequest(AppBaseModel):
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    username: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    newsletter: Optional[bool] = None


class MessageOut(AppBaseModel):
    success: bool = True
    message: str
