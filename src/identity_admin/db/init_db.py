"""
identity_admin.db.init_db

Schema bootstrap for dev/test. Deployed environments run `alembic upgrade head`.
"""

from __future__ import annotations

from sqlalchemy import inspect
from sqlalchemy.ext.asyncio import AsyncEngine

from identity_admin.db import models  # noqa: F401  # register tables on Base.metadata
from identity_admin.db.base import Base
from identity_admin.observability.logging import get_logger

log = get_logger(__name__)


async def init_db(engine: AsyncEngine) -> list[str]:
    """Create missing tables and return the names that were created."""

    async with engine.begin() as conn:
        existing = set(await conn.run_sync(lambda sync: inspect(sync).get_table_names()))
        await conn.run_sync(Base.metadata.create_all)

    created = sorted(set(Base.metadata.tables) - existing)
    if created:
        log.info("schema_created", tables=created)
    return created
