"""Fixtures for API integration tests: a minimal app wired to the in-memory database and outbound fakes."""

from collections.abc import AsyncGenerator, Callable

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from election_cycle.api.router import create_router
from election_cycle.core.config import Settings, get_settings
from election_cycle.core.dependencies import get_async_session, get_external_services
from election_cycle.lib.ballot_service import ExternalServices
from election_cycle.main import register_exception_handlers


@pytest.fixture
def app(
    settings: Settings,
    session_factory: async_sessionmaker[AsyncSession],
    external: ExternalServices,
) -> FastAPI:
    app = FastAPI()
    register_exception_handlers(app)
    app.include_router(create_router(settings))

    async def _session() -> AsyncGenerator[AsyncSession]:
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_async_session] = _session
    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_external_services] = lambda: external
    return app


@pytest.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient]:
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


@pytest.fixture
def auth_headers(member_token_factory: Callable[[str], str]) -> Callable[[str], dict[str, str]]:
    """Bearer headers for a member identity."""

    def _headers(identity: str) -> dict[str, str]:
        return {"Authorization": f"Bearer {member_token_factory(identity)}"}

    return _headers


@pytest.fixture
async def operator_headers(operator_token: str, make_accounts: Callable) -> dict[str, str]:
    """Bearer headers for the operator; the operator account exists."""
    await make_accounts("election", role="operator")
    return {"Authorization": f"Bearer {operator_token}"}
