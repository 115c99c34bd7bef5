"""
identity_admin.providers.sql_identity

SQL-backed identity provider (bundled reference implementation).

Responsibilities:
- Store principals and issue/verify HS256 bearer tokens for them.
- Record revocation as `tokens_valid_after`; tokens issued at or before it are revoked.
- Translate driver failures into `ProviderError`.
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from identity_admin.auth.jwt import JwtConfig, JwtValidationError, decode_and_validate, issue_token
from identity_admin.auth.models import DecodedToken
from identity_admin.db.models import PrincipalRecord, utcnow
from identity_admin.db.session import transaction
from identity_admin.errors import AuthenticationError, NotFoundError, RequestValidationFailed
from identity_admin.observability.logging import get_logger
from identity_admin.providers.base import Principal

log = get_logger(__name__)

_PROVIDER = "identity"


def _to_principal(rec: PrincipalRecord) -> Principal:
    return Principal(
        id=rec.id,
        email=rec.email,
        disabled=rec.disabled,
        creation_time=rec.created_at,
        last_sign_in_time=rec.last_sign_in_at,
        display_name=rec.display_name,
        email_verified=rec.email_verified,
        tokens_valid_after=rec.tokens_valid_after,
    )


def _normalize_email(email: str | None) -> str | None:
    return email.strip().lower() if email else None


class SqlIdentityProvider:
    def __init__(
        self,
        *,
        session_factory: async_sessionmaker[AsyncSession],
        jwt_cfg: JwtConfig,
        token_ttl: timedelta = timedelta(hours=1),
    ) -> None:
        self._sessions = session_factory
        self._jwt = jwt_cfg
        self._token_ttl = token_ttl

    # -- tokens -------------------------------------------------------------

    async def issue_token(self, principal_id: str, *, ttl: timedelta | None = None) -> str:
        """
        Sign-in: mint a token for an enabled principal and stamp its last sign-in.
        """

        async with transaction(self._sessions, provider=_PROVIDER) as session:
            rec = await session.get(PrincipalRecord, principal_id)
            if rec is None:
                raise NotFoundError(details={"principal_id": principal_id})
            if rec.disabled:
                raise AuthenticationError("User account is disabled", reason="USER_DISABLED")
            now = datetime.now(tz=UTC)
            rec.last_sign_in_at = now.replace(tzinfo=None)
            email = rec.email
        return issue_token(
            cfg=self._jwt,
            subject=principal_id,
            email=email,
            ttl=ttl or self._token_ttl,
            now=now,
        )

    async def verify_token(self, token: str, *, check_revoked: bool = False) -> DecodedToken:
        try:
            payload = decode_and_validate(cfg=self._jwt, token=token)
        except JwtValidationError as e:
            raise AuthenticationError(
                f"Invalid token: {e}", reason="INVALID_TOKEN", should_sign_out=True
            ) from e

        decoded = DecodedToken(
            principal_id=str(payload.get("sub", "")),
            email=payload.get("email"),
            issued_at=datetime.fromtimestamp(float(payload["iat"]), tz=UTC),
        )
        if not check_revoked:
            return decoded

        principal = await self.get_principal(decoded.principal_id)
        if principal is None:
            raise AuthenticationError(
                "User account no longer exists", reason="USER_NOT_FOUND", should_sign_out=True
            )
        if principal.disabled:
            raise AuthenticationError(
                "User account is disabled", reason="USER_DISABLED", should_sign_out=True
            )
        if principal.tokens_revoked_for(decoded.issued_at):
            raise AuthenticationError(
                "Token has been revoked", reason="TOKEN_REVOKED", should_sign_out=True
            )
        return decoded

    async def revoke_tokens(self, principal_id: str) -> None:
        async with transaction(self._sessions, provider=_PROVIDER) as session:
            rec = await session.get(PrincipalRecord, principal_id)
            if rec is None:
                raise NotFoundError(details={"principal_id": principal_id})
            rec.tokens_valid_after = utcnow()
        log.info("tokens_revoked", principal_id=principal_id)

    # -- principals ---------------------------------------------------------

    async def create_principal(
        self,
        *,
        email: str,
        display_name: str | None = None,
        email_verified: bool = False,
        disabled: bool = False,
        principal_id: str | None = None,
    ) -> Principal:
        normalized = _normalize_email(email)
        async with transaction(self._sessions, provider=_PROVIDER) as session:
            stmt = select(PrincipalRecord.id).where(PrincipalRecord.email == normalized)
            if (await session.execute(stmt)).first() is not None:
                raise RequestValidationFailed(
                    "Email already registered", details={"email": normalized}
                )
            rec = PrincipalRecord(
                email=normalized,
                display_name=display_name,
                email_verified=email_verified,
                disabled=disabled,
            )
            if principal_id:
                rec.id = principal_id
            session.add(rec)
            await session.flush()
            return _to_principal(rec)

    async def get_principal(self, principal_id: str) -> Principal | None:
        async with transaction(self._sessions, provider=_PROVIDER) as session:
            rec = await session.get(PrincipalRecord, principal_id)
            return _to_principal(rec) if rec is not None else None

    async def get_principal_by_email(self, email: str) -> Principal | None:
        async with transaction(self._sessions, provider=_PROVIDER) as session:
            stmt = select(PrincipalRecord).where(
                func.lower(PrincipalRecord.email) == _normalize_email(email)
            )
            rec = (await session.execute(stmt)).scalar_one_or_none()
            return _to_principal(rec) if rec is not None else None

    async def list_principals(self, *, limit: int) -> list[Principal]:
        async with transaction(self._sessions, provider=_PROVIDER) as session:
            stmt = select(PrincipalRecord).order_by(PrincipalRecord.created_at).limit(limit)
            return [_to_principal(r) for r in (await session.execute(stmt)).scalars().all()]

    async def update_principal(self, principal_id: str, *, disabled: bool) -> Principal:
        async with transaction(self._sessions, provider=_PROVIDER) as session:
            rec = await session.get(PrincipalRecord, principal_id, with_for_update=True)
            if rec is None:
                raise NotFoundError(details={"principal_id": principal_id})
            rec.disabled = disabled
            await session.flush()
            return _to_principal(rec)

    async def delete_principal(self, principal_id: str) -> None:
        async with transaction(self._sessions, provider=_PROVIDER) as session:
            rec = await session.get(PrincipalRecord, principal_id)
            if rec is None:
                raise NotFoundError(details={"principal_id": principal_id})
            await session.delete(rec)


# --- Module Notes -----------------------------------------------------------
# Every method opens its own transaction: the provider is an independent store from the
# tombstone table even when both share one database.
