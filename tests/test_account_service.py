"""
Account flow tests
==================
The backend client is an AsyncMock; only the service decisions are checked.
"""

import asyncio
from unittest.mock import AsyncMock

import pytest

from storefront.api.schemas.auth.auth import PasswordChangeRequest
from storefront.api.services.account_service import AccountService
from storefront.api.services.backend_client import BackendError, BackendUnauthorizedError


@pytest.fixture
def backend():
    return AsyncMock()


@pytest.fixture
def account(backend):
    return AccountService(backend)


def password_request(current="Old!Pass1", new="New!Pass2", confirm=None):
    return PasswordChangeRequest(
        current_password=current,
        new_password=new,
        confirm_password=new if confirm is None else confirm,
    )


class TestChangePassword:

    def test_success_calls_backend(self, account, backend):
        result = asyncio.run(account.change_password("tok", "csrf", password_request()))

        assert result.valid is True
        backend.change_password.assert_awaited_once_with("tok", "csrf", "Old!Pass1", "New!Pass2")

    def test_local_failure_skips_backend(self, account, backend):
        result = asyncio.run(account.change_password("tok", "csrf", password_request(confirm="Nope!Pass3")))

        assert result.error_key == "passwords_mismatch"
        backend.change_password.assert_not_awaited()

    def test_backend_reuse_message_mapped(self, account, backend):
        backend.change_password.side_effect = BackendError(400, "Password must be different from the old one")
        result = asyncio.run(account.change_password("tok", "csrf", password_request()))
        assert result.error_key == "password_must_differ"

    def test_expired_session_propagates(self, account, backend):
        backend.change_password.side_effect = BackendUnauthorizedError("expired")
        with pytest.raises(BackendUnauthorizedError):
            asyncio.run(account.change_password("tok", "csrf", password_request()))


class TestMfa:

    def test_bad_format_never_sent(self, account, backend):
        result = asyncio.run(account.verify_mfa_setup("tok", "12ab56"))

        assert result.error_key == "mfa_code_invalid"
        backend.mfa_verify_setup.assert_not_awaited()

    def test_rejected_code(self, account, backend):
        backend.mfa_verify_setup.side_effect = BackendError(400, "Invalid code")
        result = asyncio.run(account.verify_mfa_setup("tok", " 123456 "))

        assert result.error_key == "mfa_verification_failed"
        backend.mfa_verify_setup.assert_awaited_once_with("tok", "123456", None)

    def test_toggle_without_code(self, account, backend):
        result = asyncio.run(account.toggle_mfa("tok", False))

        assert result.valid is True
        backend.mfa_toggle.assert_awaited_once_with("tok", False, None, None)


class TestProfile:

    def test_invalid_email_rejected(self, account, backend):
        result, user = asyncio.run(account.update_profile("tok", "csrf", {"email": "not-an-email"}))

        assert result.error_key == "email_invalid"
        assert user is None
        backend.update_profile.assert_not_awaited()

    def test_update_forwarded(self, account, backend):
        backend.update_profile.return_value = {"id": "u1", "firstName": "Sara"}
        result, user = asyncio.run(account.update_profile("tok", "csrf", {"firstName": "Sara"}))

        assert result.valid is True
        assert user == {"id": "u1", "firstName": "Sara"}

    def test_invalid_username_rejected(self, account, backend):
        result, user = asyncio.run(account.update_profile("tok", "csrf", {"username": "sara.k"}))

        assert result.error_key == "username_format"
        assert user is None
        backend.update_profile.assert_not_awaited()

    def test_username_trimmed_before_forwarding(self, account, backend):
        backend.update_profile.return_value = {"id": "u1", "username": "sara_99"}
        result, _ = asyncio.run(account.update_profile("tok", "csrf", {"username": "  sara_99 "}))

        assert result.valid is True
        backend.update_profile.assert_awaited_once_with("tok", "csrf", {"username": "sara_99"})
