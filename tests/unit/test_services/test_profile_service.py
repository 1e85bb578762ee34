"""Tests for the nominee profile service."""

from datetime import UTC, datetime, timedelta

import pytest

from election_cycle.lib.cycle import PhaseViolation, PreconditionViolation, RecordNotFoundError
from election_cycle.services import election_service, nomination_service, profile_service
from election_cycle.services.profile_service import validate_profile

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=UTC)
DURING = NOW + timedelta(minutes=90)


@pytest.fixture
async def nominees(async_session, created_election, external, policy, make_accounts):
    """Alice self-nominated (accepted); bob nominated by alice (unaccepted)."""
    await make_accounts("alice", "bob", "carol")
    await election_service.advance(async_session, external, policy, now=NOW + timedelta(hours=1))
    await nomination_service.submit_nomination(
        async_session, external, policy, nominator="alice", nominee="alice", now=DURING
    )
    await nomination_service.submit_nomination(
        async_session, external, policy, nominator="alice", nominee="bob", now=DURING
    )


class TestValidateProfile:
    """Tests for profile field validation."""

    def test_valid_profile(self) -> None:
        validate_profile(name="Alice", descriptor="x" * 2000, picture="https://example.com/a.png", telegram="@alice")

    @pytest.mark.parametrize(
        ("fields", "message"),
        [
            ({"name": ""}, "Name is required"),
            ({"name": "x" * 100}, "Name must be at most 99 characters"),
            ({"name": "A", "descriptor": "x" * 2001}, "Descriptor must be at most 2000 characters"),
            ({"name": "A", "picture": "http://" + "x" * 250}, "Picture URL must be at most 256 characters"),
            ({"name": "A", "picture": "ftp://example.com/a.png"}, "Picture URL must begin with 'http'"),
            ({"name": "A", "telegram": "x" * 100}, "Telegram handle"),
            ({"name": "A", "twitter": "x" * 100}, "Twitter handle"),
            ({"name": "A", "wechat": "x" * 100}, "Wechat handle"),
        ],
    )
    def test_invalid_fields(self, fields: dict, message: str) -> None:
        with pytest.raises(PreconditionViolation, match=message):
            validate_profile(**fields)

    def test_empty_picture_allowed(self) -> None:
        validate_profile(name="Alice", picture="")


class TestUpsertProfile:
    """Tests for upsert_profile."""

    async def test_create_and_replace(self, async_session, nominees, external, policy) -> None:
        created = await profile_service.upsert_profile(
            async_session, external, policy, owner="alice", name="Alice", descriptor="First", now=DURING
        )
        assert created.name == "Alice"

        replaced = await profile_service.upsert_profile(
            async_session, external, policy, owner="alice", name="Alice A.", twitter="@alice", now=DURING
        )

        assert replaced.name == "Alice A."
        assert replaced.descriptor == ""
        assert replaced.twitter == "@alice"
        assert [p.owner for p in await profile_service.list_profiles(async_session)] == ["alice"]

    async def test_not_nominated(self, async_session, nominees, external, policy) -> None:
        with pytest.raises(RecordNotFoundError, match="'carol' is not nominated"):
            await profile_service.upsert_profile(async_session, external, policy, owner="carol", name="C", now=DURING)

    async def test_unaccepted_nomination(self, async_session, nominees, external, policy) -> None:
        with pytest.raises(PreconditionViolation, match="not accepted"):
            await profile_service.upsert_profile(async_session, external, policy, owner="bob", name="Bob", now=DURING)

    async def test_invalid_field_writes_nothing(self, async_session, nominees, external, policy) -> None:
        with pytest.raises(PreconditionViolation):
            await profile_service.upsert_profile(
                async_session, external, policy, owner="alice", name="Alice", picture="javascript:x", now=DURING
            )
        assert await profile_service.get_profile(async_session, "alice") is None

    async def test_locked_once_voting_starts(self, async_session, nominees, external, policy) -> None:
        await nomination_service.decide_nomination(
            async_session, external, policy, nominee="bob", accept=True, now=DURING
        )
        await election_service.advance(async_session, external, policy, now=NOW + timedelta(hours=2))
        await profile_service.upsert_profile(
            async_session, external, policy, owner="alice", name="Alice", now=NOW + timedelta(minutes=150)
        )
        await election_service.advance(async_session, external, policy, now=NOW + timedelta(hours=3))

        with pytest.raises(PhaseViolation, match="Voting has already commenced"):
            await profile_service.upsert_profile(
                async_session, external, policy, owner="alice", name="Changed", now=NOW + timedelta(hours=3)
            )
        with pytest.raises(PhaseViolation):
            await profile_service.delete_profile(
                async_session, external, policy, owner="alice", now=NOW + timedelta(hours=3)
            )


class TestDeleteProfile:
    """Tests for delete_profile."""

    async def test_delete(self, async_session, nominees, external, policy) -> None:
        await profile_service.upsert_profile(async_session, external, policy, owner="alice", name="Alice", now=DURING)

        await profile_service.delete_profile(async_session, external, policy, owner="alice", now=DURING)

        assert await profile_service.get_profile(async_session, "alice") is None

    async def test_delete_missing(self, async_session, nominees, external, policy) -> None:
        with pytest.raises(RecordNotFoundError, match="No profile found for 'alice'"):
            await profile_service.delete_profile(async_session, external, policy, owner="alice", now=DURING)
