"""Tests for election phases and the transition table."""

import pytest

from election_cycle.lib.cycle import TRANSITIONS, ElectionPhase, PhaseViolation, can_transition, validate_transition


class TestTransitionTable:
    """Every phase has an entry and the loop is closed."""

    def test_every_phase_has_outgoing_transitions(self) -> None:
        assert set(TRANSITIONS) == set(ElectionPhase)
        assert all(TRANSITIONS[phase] for phase in ElectionPhase)

    @pytest.mark.parametrize(
        ("current", "target"),
        [
            (ElectionPhase.UNINITIALIZED, ElectionPhase.CLEAN),
            (ElectionPhase.CLEAN, ElectionPhase.CREATED),
            (ElectionPhase.CREATED, ElectionPhase.NOMINATING),
            (ElectionPhase.NOMINATING, ElectionPhase.NOMINATIONS_CLOSED),
            (ElectionPhase.NOMINATIONS_CLOSED, ElectionPhase.VOTING),
            (ElectionPhase.VOTING, ElectionPhase.VOTING_CONCLUDED),
            (ElectionPhase.VOTING_CONCLUDED, ElectionPhase.CLEANING),
            (ElectionPhase.CLEANING, ElectionPhase.CLEAN),
            (ElectionPhase.CREATED, ElectionPhase.CLEANING),
            (ElectionPhase.NOMINATING, ElectionPhase.CLEANING),
        ],
    )
    def test_allowed(self, current: ElectionPhase, target: ElectionPhase) -> None:
        assert can_transition(current, target)
        validate_transition(current, target)

    @pytest.mark.parametrize(
        ("current", "target"),
        [
            (ElectionPhase.CLEAN, ElectionPhase.UNINITIALIZED),
            (ElectionPhase.CLEAN, ElectionPhase.VOTING),
            (ElectionPhase.NOMINATIONS_CLOSED, ElectionPhase.CLEANING),
            (ElectionPhase.VOTING, ElectionPhase.CLEANING),
            (ElectionPhase.VOTING, ElectionPhase.NOMINATING),
            (ElectionPhase.CLEANING, ElectionPhase.CREATED),
            (ElectionPhase.UNINITIALIZED, ElectionPhase.CREATED),
        ],
    )
    def test_rejected(self, current: ElectionPhase, target: ElectionPhase) -> None:
        assert not can_transition(current, target)
        with pytest.raises(PhaseViolation, match="Cannot move election"):
            validate_transition(current, target)


class TestPhaseProperties:
    def test_accepts_nominations(self) -> None:
        accepting = {p for p in ElectionPhase if p.accepts_nominations}
        assert accepting == {ElectionPhase.CREATED, ElectionPhase.NOMINATING}

    def test_cancellable_matches_nomination_phases(self) -> None:
        assert {p for p in ElectionPhase if p.cancellable} == {ElectionPhase.CREATED, ElectionPhase.NOMINATING}

    def test_precedes_voting(self) -> None:
        assert ElectionPhase.NOMINATIONS_CLOSED.precedes_voting
        assert ElectionPhase.CLEAN.precedes_voting
        assert not ElectionPhase.VOTING.precedes_voting
        assert not ElectionPhase.CLEANING.precedes_voting
        assert not ElectionPhase.UNINITIALIZED.precedes_voting

    def test_values_are_stable_strings(self) -> None:
        assert ElectionPhase("nominations_closed") is ElectionPhase.NOMINATIONS_CLOSED
        assert str(ElectionPhase.VOTING_CONCLUDED) == "voting_concluded"
