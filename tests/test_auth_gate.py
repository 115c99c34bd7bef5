from __future__ import annotations

from datetime import UTC, datetime
from unittest.mock import AsyncMock

import pytest

from identity_admin.auth.gate import AuthGate, extract_bearer
from identity_admin.auth.models import DecodedToken
from identity_admin.auth.policy import AdminPolicy
from identity_admin.auth.verifier import TokenVerifier
from identity_admin.errors import AuthenticationError, AuthorizationError

ISSUED = datetime(2026, 5, 1, tzinfo=UTC)


def _gate(provider: AsyncMock, admins=("admin@example.com",)) -> AuthGate:
    return AuthGate(verifier=TokenVerifier(provider), policy=AdminPolicy(admins))


def test_extract_bearer_accepts_any_case_prefix() -> None:
    assert extract_bearer("Bearer abc") == "abc"
    assert extract_bearer("bearer abc ") == "abc"


@pytest.mark.parametrize("header", [None, "", "abc", "Token abc", "Bearer", "Bearer  "])
def test_extract_bearer_rejects_missing_token(header) -> None:
    with pytest.raises(AuthenticationError) as exc:
        extract_bearer(header)
    assert exc.value.reason == "NO_TOKEN"
    assert exc.value.status_code == 401


def test_policy_is_case_insensitive() -> None:
    policy = AdminPolicy([" Admin@Example.com ", ""])

    assert policy.is_admin("admin@example.COM")
    assert not policy.is_admin("someone@example.com")
    assert not policy.is_admin(None)


def test_policy_rejects_token_without_email() -> None:
    policy = AdminPolicy(["admin@example.com"])

    with pytest.raises(AuthorizationError):
        policy.authorize(DecodedToken(principal_id="u1", email=None, issued_at=ISSUED))


@pytest.mark.asyncio
async def test_missing_header_never_reaches_provider() -> None:
    provider = AsyncMock()

    with pytest.raises(AuthenticationError):
        await _gate(provider).admit(None)

    provider.verify_token.assert_not_called()


@pytest.mark.asyncio
async def test_admin_is_admitted_with_revocation_check() -> None:
    provider = AsyncMock()
    provider.verify_token.return_value = DecodedToken(
        principal_id="a1", email="Admin@example.com", issued_at=ISSUED
    )

    ctx = await _gate(provider).admit("Bearer good")

    assert ctx.principal_id == "a1"
    assert ctx.email == "Admin@example.com"
    provider.verify_token.assert_awaited_once_with("good", check_revoked=True)


@pytest.mark.asyncio
async def test_non_admin_is_forbidden() -> None:
    provider = AsyncMock()
    provider.verify_token.return_value = DecodedToken(
        principal_id="u1", email="user@example.com", issued_at=ISSUED
    )

    with pytest.raises(AuthorizationError) as exc:
        await _gate(provider).admit("Bearer good")
    assert exc.value.status_code == 403


@pytest.mark.asyncio
async def test_revoked_admin_token_is_rejected() -> None:
    provider = AsyncMock()
    provider.verify_token.side_effect = AuthenticationError(
        "Token has been revoked", reason="TOKEN_REVOKED", should_sign_out=True
    )

    with pytest.raises(AuthenticationError) as exc:
        await _gate(provider).admit("Bearer stale")
    assert exc.value.reason == "TOKEN_REVOKED"


@pytest.mark.asyncio
async def test_token_without_subject_is_rejected() -> None:
    provider = AsyncMock()
    provider.verify_token.return_value = DecodedToken(
        principal_id="", email="admin@example.com", issued_at=ISSUED
    )

    with pytest.raises(AuthenticationError):
        await _gate(provider).authenticate("Bearer x")
