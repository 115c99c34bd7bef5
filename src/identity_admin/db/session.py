"""
identity_admin.db.session

Async SQLAlchemy engine + session factory helpers.

Responsibilities:
- Create the async engine from settings.
- Create the async sessionmaker with safe defaults.
- Provide a per-operation transaction scope that maps driver errors to `ProviderError`.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from sqlalchemy import make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from identity_admin.errors import ProviderError
from identity_admin.settings import Settings


def create_engine(settings: Settings) -> AsyncEngine:
    url = make_url(settings.database_url)
    connect_args: dict[str, object] = {}
    if url.get_backend_name() == "sqlite":
        # Concurrent bulk workers share one file; wait on the write lock instead of failing.
        connect_args["timeout"] = settings.db_busy_timeout_seconds
    return create_async_engine(url, pool_pre_ping=True, connect_args=connect_args)


def create_sessionmaker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    # expire_on_commit=False avoids surprising lazy loads after commits.
    return async_sessionmaker(
        bind=engine,
        expire_on_commit=False,
        autoflush=False,
    )


@asynccontextmanager
async def transaction(
    session_factory: async_sessionmaker[AsyncSession],
    *,
    provider: str,
) -> AsyncIterator[AsyncSession]:
    """
    One committed unit of work per store operation.

    Each store (tombstones, identity, documents) commits independently, so a later
    failure in another store never rolls back an earlier write.
    """

    try:
        async with session_factory() as session, session.begin():
            yield session
    except SQLAlchemyError as e:
        raise ProviderError(provider, str(e), details={"error_type": type(e).__name__}) from e
