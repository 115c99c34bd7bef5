from __future__ import annotations

from collections.abc import AsyncIterator
from dataclasses import dataclass

import httpx
import pytest
import pytest_asyncio
from fastapi import FastAPI
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from identity_admin.api.app import create_app
from identity_admin.auth.jwt import JwtConfig
from identity_admin.container import Services, build_services
from identity_admin.db.init_db import init_db
from identity_admin.db.session import create_engine, create_sessionmaker
from identity_admin.providers.sql_documents import SqlDocumentStore
from identity_admin.providers.sql_identity import SqlIdentityProvider
from identity_admin.services.revocation_store import RevocationStore
from identity_admin.settings import Settings
from tests.support import (
    ADMIN_EMAIL,
    ScriptedDocumentStore,
    ScriptedIdentityProvider,
    make_settings,
)


@pytest.fixture
def settings(tmp_path) -> Settings:
    return make_settings(tmp_path)


@pytest_asyncio.fixture
async def session_factory(settings: Settings) -> AsyncIterator[async_sessionmaker[AsyncSession]]:
    engine = create_engine(settings)
    await init_db(engine)
    try:
        yield create_sessionmaker(engine)
    finally:
        await engine.dispose()


@pytest.fixture
def identity(settings, session_factory) -> ScriptedIdentityProvider:
    return ScriptedIdentityProvider(
        SqlIdentityProvider(
            session_factory=session_factory, jwt_cfg=JwtConfig.from_settings(settings)
        )
    )


@pytest.fixture
def documents(session_factory) -> ScriptedDocumentStore:
    return ScriptedDocumentStore(SqlDocumentStore(session_factory=session_factory))


@pytest.fixture
def revocations(session_factory) -> RevocationStore:
    return RevocationStore(session_factory=session_factory)


@pytest.fixture
def services(settings, session_factory, identity, documents) -> Services:
    return build_services(
        settings=settings,
        session_factory=session_factory,
        identity=identity,
        documents=documents,
    )


@dataclass
class ApiHarness:
    app: FastAPI
    client: httpx.AsyncClient
    identity: ScriptedIdentityProvider
    documents: ScriptedDocumentStore
    admin_token: str

    @property
    def services(self) -> Services:
        return self.app.state.services

    def admin_headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.admin_token}"}

    async def create_user(self, email: str, **kwargs) -> tuple[str, str]:
        principal = await self.identity.create_principal(email=email, **kwargs)
        token = await self.identity.issue_token(principal.id)
        return principal.id, token


@pytest_asyncio.fixture
async def api(settings: Settings) -> AsyncIterator[ApiHarness]:
    app = create_app(settings=settings)

    # httpx ASGITransport does not manage lifespan; drive it explicitly.
    async with app.router.lifespan_context(app):
        bundled = app.state.services.identity
        identity = ScriptedIdentityProvider(bundled)
        documents = ScriptedDocumentStore(app.state.services.documents)
        app.state.services = build_services(
            settings=settings,
            session_factory=app.state.sessionmaker,
            identity=identity,
            documents=documents,
        )

        admin = await bundled.create_principal(email=ADMIN_EMAIL)
        admin_token = await bundled.issue_token(admin.id)

        transport = httpx.ASGITransport(app=app)
        async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
            yield ApiHarness(
                app=app,
                client=client,
                identity=identity,
                documents=documents,
                admin_token=admin_token,
            )
