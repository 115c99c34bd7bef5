"""
identity_admin.auth.gate

Request-level admission control for administrative endpoints.

Responsibilities:
- Extract the bearer token from an `Authorization` header.
- Verify it via `TokenVerifier` (authentication).
- Check the decoded email against `AdminPolicy` (authorization).
"""

from __future__ import annotations

from identity_admin.auth.models import AdminContext, DecodedToken
from identity_admin.auth.policy import AdminPolicy
from identity_admin.auth.verifier import TokenVerifier
from identity_admin.errors import AuthenticationError

_BEARER_PREFIX = "bearer "


def extract_bearer(authorization: str | None) -> str:
    # No provider call happens before this succeeds.
    if not authorization or not authorization.lower().startswith(_BEARER_PREFIX):
        raise AuthenticationError("No token provided", reason="NO_TOKEN")
    token = authorization[len(_BEARER_PREFIX) :].strip()
    if not token:
        raise AuthenticationError("No token provided", reason="NO_TOKEN")
    return token


class AuthGate:
    def __init__(
        self,
        *,
        verifier: TokenVerifier,
        policy: AdminPolicy,
        check_revoked: bool = True,
    ) -> None:
        self._verifier = verifier
        self._policy = policy
        self._check_revoked = check_revoked

    async def authenticate(
        self, authorization: str | None, *, check_revoked: bool = False
    ) -> DecodedToken:
        """
        Steps 1-2 only: any authenticated caller passes.
        """

        token = extract_bearer(authorization)
        return await self._verifier.verify(token, check_revoked=check_revoked)

    async def admit(self, authorization: str | None) -> AdminContext:
        decoded = await self.authenticate(authorization, check_revoked=self._check_revoked)
        return self._policy.authorize(decoded)


# --- Module Notes -----------------------------------------------------------
# Admin admission verifies with revocation checking enabled, so a disabled or revoked
# admin cannot keep administering with an older token. The session probe deliberately
# skips it and performs its own revocation analysis to report a precise reason.
