"""Shared test fixtures: async database, recording outbound fakes, accounts, and election setup."""

import uuid
from collections.abc import AsyncGenerator, Callable
from datetime import UTC, datetime, timedelta
from decimal import Decimal

import pytest
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from election_cycle.core.config import Settings
from election_cycle.core.security import create_access_token
from election_cycle.lib.ballot_service import BaseBallotService, BaseLedger, ExternalServiceError, ExternalServices
from election_cycle.lib.cycle import CyclePolicy
from election_cycle.models.account import Account
from election_cycle.models.base import Base
from election_cycle.models.election import ElectionRecord
from election_cycle.services import election_service

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=UTC)


class RecordingBallotService(BaseBallotService):
    """Ballot service fake that records every call in order.

    Set ``fail_on`` to the name of a method to make it raise ExternalServiceError.
    """

    def __init__(self) -> None:
        self.calls: list[tuple] = []
        self.fail_on: str | None = None

    def _record(self, name: str, *args: object) -> None:
        if self.fail_on == name:
            raise ExternalServiceError("ballot_service", f"{name} failed")
        self.calls.append((name, *args))

    def named(self, name: str) -> list[tuple]:
        return [call for call in self.calls if call[0] == name]

    async def register_voter(self, voter: str, treasury_symbol: str, referrer: str) -> None:
        self._record("register_voter", voter, treasury_symbol, referrer)

    async def create_ballot(
        self,
        ballot_id: int,
        *,
        category: str,
        publisher: str,
        treasury_symbol: str,
        voting_method: str,
        options: list[str],
    ) -> None:
        self._record("create_ballot", ballot_id, category, publisher, treasury_symbol, voting_method, list(options))

    async def set_ballot_details(self, ballot_id: int, title: str, description: str, content: str) -> None:
        self._record("set_ballot_details", ballot_id, title, description, content)

    async def set_weighting_mode(self, ballot_id: int, mode: str) -> None:
        self._record("set_weighting_mode", ballot_id, mode)

    async def open_voting(self, ballot_id: int, end_time: datetime) -> None:
        self._record("open_voting", ballot_id, end_time)

    async def synchronize_voter(self, voter: str) -> None:
        self._record("synchronize_voter", voter)

    async def rebalance_ballot(self, voter: str, ballot_id: int, worker: str) -> None:
        self._record("rebalance_ballot", voter, ballot_id, worker)

    async def close_voting(self, ballot_id: int, *, broadcast: bool = False) -> None:
        self._record("close_voting", ballot_id, broadcast)


class RecordingLedger(BaseLedger):
    """Ledger fake that records fee payments."""

    def __init__(self) -> None:
        self.payments: list[tuple[str, Decimal, str, str]] = []

    async def pay_fixed_fee(self, recipient: str, amount: Decimal, symbol: str, memo: str) -> None:
        self.payments.append((recipient, amount, symbol, memo))


@pytest.fixture
def settings() -> Settings:
    """Test application settings."""
    return Settings(
        database_url="sqlite+aiosqlite:///:memory:",
        jwt_secret_key="test-secret-key-not-for-production",
        jwt_algorithm="HS256",
        jwt_access_token_expire_minutes=30,
        jwt_refresh_token_expire_days=7,
    )


@pytest.fixture
async def async_engine() -> AsyncGenerator[AsyncEngine]:
    """Create an in-memory async SQLite engine for testing."""
    engine = create_async_engine("sqlite+aiosqlite:///:memory:", echo=False)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture
def session_factory(async_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(async_engine, expire_on_commit=False)


@pytest.fixture
async def async_session(session_factory: async_sessionmaker[AsyncSession]) -> AsyncGenerator[AsyncSession]:
    """Create a per-test async session."""
    async with session_factory() as session:
        yield session


@pytest.fixture
def ballots() -> RecordingBallotService:
    return RecordingBallotService()


@pytest.fixture
def ledger() -> RecordingLedger:
    return RecordingLedger()


@pytest.fixture
def external(ballots: RecordingBallotService, ledger: RecordingLedger) -> ExternalServices:
    return ExternalServices(ballots=ballots, ledger=ledger)


@pytest.fixture
def policy() -> CyclePolicy:
    return CyclePolicy()


@pytest.fixture
def make_accounts(async_session: AsyncSession) -> Callable:
    """Return a coroutine that inserts active member accounts for the given identities."""

    async def _make(*identities: str, role: str = "member") -> list[Account]:
        accounts = [
            Account(id=uuid.uuid4(), identity=identity, hashed_password="not-a-real-hash", role=role)
            for identity in identities
        ]
        async_session.add_all(accounts)
        await async_session.commit()
        return accounts

    return _make


@pytest.fixture
async def clean_election(
    async_session: AsyncSession,
    external: ExternalServices,
    policy: CyclePolicy,
    ballots: RecordingBallotService,
) -> ElectionRecord:
    """An election that went through setup and is in ``clean``."""
    record = await election_service.setup_election(async_session, external, policy)
    ballots.calls.clear()
    return record


@pytest.fixture
async def created_election(async_session: AsyncSession, clean_election: ElectionRecord) -> ElectionRecord:
    """A cycle created at NOW with one-hour windows starting one hour out."""
    return await election_service.create_cycle(
        async_session,
        title="Board Election",
        description="Elect the board",
        content="https://example.com/board",
        nomination_open=NOW + timedelta(hours=1),
        nomination_close=NOW + timedelta(hours=2),
        voting_open=NOW + timedelta(hours=3),
        voting_close=NOW + timedelta(hours=4),
        now=NOW,
    )


@pytest.fixture
def operator_token(settings: Settings) -> str:
    """Generate a JWT access token for the operator."""
    return create_access_token(
        subject="election",
        role="operator",
        secret_key=settings.jwt_secret_key,
        algorithm=settings.jwt_algorithm,
    )


@pytest.fixture
def member_token_factory(settings: Settings) -> Callable[[str], str]:
    """Generate JWT access tokens for member identities."""

    def _token(identity: str) -> str:
        return create_access_token(
            subject=identity,
            role="member",
            secret_key=settings.jwt_secret_key,
            algorithm=settings.jwt_algorithm,
        )

    return _token
