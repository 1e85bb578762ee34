"""Tests for the voter registration service."""

from datetime import UTC, datetime, timedelta

import pytest

from election_cycle.lib.ballot_service import ExternalServiceError
from election_cycle.lib.cycle import ElectionPhase, RecordNotFoundError
from election_cycle.services import election_service, voter_service

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=UTC)


class TestRegisterVoter:
    """Tests for register_voter."""

    async def test_first_registration(
        self, async_session, clean_election, external, policy, ballots, make_accounts
    ) -> None:
        await make_accounts("alice")

        registration, created = await voter_service.register_voter(
            async_session, external, policy, voter="alice", now=NOW
        )

        assert created is True
        assert registration.voter == "alice"
        assert registration.referrer == "election"
        assert registration.treasury == "8,VOTE"
        assert ballots.calls == [("register_voter", "alice", "8,VOTE", "election")]
        record = await election_service.load_election(async_session)
        assert record.pending_voters == ["alice"]
        assert record.synced_voters == []

    async def test_repeat_registration_is_idempotent(
        self, async_session, clean_election, external, policy, ballots, make_accounts
    ) -> None:
        await make_accounts("alice")
        await voter_service.register_voter(async_session, external, policy, voter="alice", now=NOW)

        registration, created = await voter_service.register_voter(
            async_session, external, policy, voter="alice", now=NOW
        )

        assert created is False
        assert registration.voter == "alice"
        assert len(ballots.named("register_voter")) == 1
        state = await election_service.get_election_state(async_session)
        assert state.pending_voter_count == 1

    async def test_unknown_identity(self, async_session, clean_election, external, policy) -> None:
        with pytest.raises(RecordNotFoundError, match="Voter identity 'ghost' does not exist"):
            await voter_service.register_voter(async_session, external, policy, voter="ghost", now=NOW)

    async def test_joins_synced_after_synchronization(
        self, async_session, clean_election, external, policy, make_accounts
    ) -> None:
        await make_accounts("alice")
        record = await election_service.load_election(async_session)
        record.phase = ElectionPhase.VOTING_CONCLUDED
        record.synced_voters = ["bob"]
        await async_session.commit()

        await voter_service.register_voter(async_session, external, policy, voter="alice", now=NOW)

        record = await election_service.load_election(async_session)
        assert record.pending_voters == []
        assert record.synced_voters == ["bob", "alice"]

    async def test_joins_pending_while_both_populated(
        self, async_session, clean_election, external, policy, make_accounts
    ) -> None:
        await make_accounts("alice")
        record = await election_service.load_election(async_session)
        record.phase = ElectionPhase.CLEANING
        record.pending_voters = ["carol"]
        record.synced_voters = ["bob"]
        await async_session.commit()

        # registration also runs one cleanup step
        await voter_service.register_voter(async_session, external, policy, voter="alice", now=NOW)

        record = await election_service.load_election(async_session)
        assert sorted(record.synced_voters) == ["alice", "bob", "carol"]
        assert record.pending_voters == []

    async def test_registration_advances_election(
        self, async_session, created_election, external, policy, make_accounts
    ) -> None:
        await make_accounts("alice")

        await voter_service.register_voter(
            async_session, external, policy, voter="alice", now=NOW + timedelta(hours=1)
        )

        state = await election_service.get_election_state(async_session)
        assert state.phase == ElectionPhase.NOMINATING

    async def test_failed_enrollment_rolls_back(
        self, async_session, clean_election, external, policy, ballots, make_accounts
    ) -> None:
        await make_accounts("alice")
        ballots.fail_on = "register_voter"

        with pytest.raises(ExternalServiceError):
            await voter_service.register_voter(async_session, external, policy, voter="alice", now=NOW)

        assert await voter_service.get_registration(async_session, "alice") is None
        state = await election_service.get_election_state(async_session)
        assert state.pending_voter_count == 0
