from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from identity_admin.errors import NotFoundError, ProviderError
from identity_admin.observability.logging import get_logger
from identity_admin.providers.base import DocumentStore, IdentityProvider, Principal

log = get_logger(__name__)


class UserDirectory:
    """
    Read-only admin views over the identity provider and document store.
    """

    def __init__(
        self,
        *,
        identity: IdentityProvider,
        documents: DocumentStore,
        profile_collections: Sequence[str] = ("userProfiles", "users"),
        list_limit: int = 1000,
    ) -> None:
        self._identity = identity
        self._documents = documents
        self._profile_collections = tuple(profile_collections)
        self._list_limit = list_limit

    async def list_users(self, *, limit: int | None = None) -> list[Principal]:
        capped = min(limit or self._list_limit, self._list_limit)
        return await self._identity.list_principals(limit=capped)

    async def get_user(self, principal_id: str) -> dict[str, Any]:
        principal = await self._identity.get_principal(principal_id)
        if principal is None:
            raise NotFoundError(details={"principal_id": principal_id})
        return {"auth": principal.to_public(), "profile": await self._profile(principal_id)}

    async def _profile(self, principal_id: str) -> dict[str, Any] | None:
        # First collection holding a document wins; profile is informational only.
        try:
            for collection in self._profile_collections:
                doc = await self._documents.get_document(collection, principal_id)
                if doc is not None:
                    return doc
        except ProviderError as e:
            log.warning("profile_read_failed", principal_id=principal_id, error=str(e))
        return None
