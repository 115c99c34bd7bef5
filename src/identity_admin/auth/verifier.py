from __future__ import annotations

from identity_admin.auth.models import DecodedToken
from identity_admin.errors import AuthenticationError
from identity_admin.providers.base import IdentityProvider


class TokenVerifier:
    """
    Validates a bearer credential against the identity provider.
    """

    def __init__(self, provider: IdentityProvider) -> None:
        self._provider = provider

    async def verify(self, token: str, *, check_revoked: bool = False) -> DecodedToken:
        if not token:
            raise AuthenticationError("No token provided", reason="NO_TOKEN")
        decoded = await self._provider.verify_token(token, check_revoked=check_revoked)
        if not decoded.principal_id:
            raise AuthenticationError("Invalid token subject")
        return decoded
