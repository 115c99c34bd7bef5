from __future__ import annotations

from collections.abc import Iterable

from identity_admin.auth.models import AdminContext, DecodedToken
from identity_admin.errors import AuthorizationError


class AdminPolicy:
    """
    Static allow-list of administrator emails, injected at construction.

    Emails are compared case-insensitively; a token without an email is never admin.
    """

    def __init__(self, admin_emails: Iterable[str]) -> None:
        self._admins = frozenset(e.strip().lower() for e in admin_emails if e and e.strip())

    def is_admin(self, email: str | None) -> bool:
        return bool(email) and email.strip().lower() in self._admins

    def authorize(self, decoded: DecodedToken) -> AdminContext:
        if not self.is_admin(decoded.email):
            raise AuthorizationError(details={"email": decoded.email})
        return AdminContext(principal_id=decoded.principal_id, email=str(decoded.email))
