"""
identity_admin.services.probe

Session validity probe for any authenticated client.

Responsibilities:
- Answer "is my session still valid?" with an unambiguous sign-out reason otherwise.

Check order:
1. token signature/expiry   -> TOKEN_REVOKED
2. tombstone present        -> USER_DELETED
3. principal missing        -> USER_NOT_FOUND
4. disabled / revoked token -> TOKEN_REVOKED

Issued tokens cannot be recalled, so clients re-run this before sensitive actions and
clear local session state on any sign-out answer.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass

from identity_admin.auth.gate import extract_bearer
from identity_admin.auth.verifier import TokenVerifier
from identity_admin.errors import AuthenticationError
from identity_admin.observability.logging import get_logger
from identity_admin.providers.base import IdentityProvider
from identity_admin.services.revocation_store import RevocationStore

log = get_logger(__name__)


class SignOutReason(enum.StrEnum):
    no_token = "NO_TOKEN"
    token_revoked = "TOKEN_REVOKED"
    user_deleted = "USER_DELETED"
    user_not_found = "USER_NOT_FOUND"


_MESSAGES: dict[SignOutReason, str] = {
    SignOutReason.no_token: "No token provided",
    SignOutReason.token_revoked: "Invalid or revoked token",
    SignOutReason.user_deleted: "User account has been deleted",
    SignOutReason.user_not_found: "User account no longer exists",
}


@dataclass(frozen=True, slots=True)
class SessionCheck:
    valid: bool
    reason: SignOutReason | None = None
    principal_id: str | None = None
    email: str | None = None

    @property
    def should_sign_out(self) -> bool:
        return not self.valid

    @property
    def message(self) -> str | None:
        return _MESSAGES[self.reason] if self.reason is not None else None


class RevocationProbe:
    def __init__(
        self,
        *,
        verifier: TokenVerifier,
        identity: IdentityProvider,
        revocations: RevocationStore,
    ) -> None:
        self._verifier = verifier
        self._identity = identity
        self._revocations = revocations

    async def check_authorization(self, authorization: str | None) -> SessionCheck:
        try:
            token = extract_bearer(authorization)
        except AuthenticationError:
            return SessionCheck(valid=False, reason=SignOutReason.no_token)
        return await self.check_session(token)

    async def check_session(self, token: str) -> SessionCheck:
        try:
            decoded = await self._verifier.verify(token, check_revoked=False)
        except AuthenticationError as e:
            log.info("session_rejected", reason=SignOutReason.token_revoked.value, error=e.message)
            return SessionCheck(valid=False, reason=SignOutReason.token_revoked)

        pid, email = decoded.principal_id, decoded.email

        # Store failures propagate: a probe never answers "valid" when it could not check.
        if await self._revocations.get_tombstone(pid) is not None:
            return self._reject(SignOutReason.user_deleted, pid, email)

        principal = await self._identity.get_principal(pid)
        if principal is None:
            return self._reject(SignOutReason.user_not_found, pid, email)

        if principal.disabled or principal.tokens_revoked_for(decoded.issued_at):
            return self._reject(SignOutReason.token_revoked, pid, email)

        return SessionCheck(valid=True, principal_id=pid, email=email)

    @staticmethod
    def _reject(reason: SignOutReason, pid: str, email: str | None) -> SessionCheck:
        log.info("session_rejected", reason=reason.value, principal_id=pid)
        return SessionCheck(valid=False, reason=reason, principal_id=pid, email=email)
