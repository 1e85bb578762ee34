"""Election phases and the transitions allowed between them."""

import enum

from election_cycle.lib.cycle.errors import PhaseViolation


class ElectionPhase(enum.StrEnum):
    """Phase of the current election cycle, in forward order."""

    UNINITIALIZED = "uninitialized"
    CLEAN = "clean"
    CREATED = "created"
    NOMINATING = "nominating"
    NOMINATIONS_CLOSED = "nominations_closed"
    VOTING = "voting"
    VOTING_CONCLUDED = "voting_concluded"
    CLEANING = "cleaning"

    @property
    def accepts_nominations(self) -> bool:
        return self in (ElectionPhase.CREATED, ElectionPhase.NOMINATING)

    @property
    def precedes_voting(self) -> bool:
        """True while nominee profiles may still change."""
        return self in (
            ElectionPhase.CLEAN,
            ElectionPhase.CREATED,
            ElectionPhase.NOMINATING,
            ElectionPhase.NOMINATIONS_CLOSED,
        )

    @property
    def cancellable(self) -> bool:
        """True before any irreversible ballot-service call was issued."""
        return self in (ElectionPhase.CREATED, ElectionPhase.NOMINATING)


TRANSITIONS: dict[ElectionPhase, frozenset[ElectionPhase]] = {
    ElectionPhase.UNINITIALIZED: frozenset({ElectionPhase.CLEAN}),
    ElectionPhase.CLEAN: frozenset({ElectionPhase.CREATED}),
    ElectionPhase.CREATED: frozenset({ElectionPhase.NOMINATING, ElectionPhase.CLEANING}),
    ElectionPhase.NOMINATING: frozenset({ElectionPhase.NOMINATIONS_CLOSED, ElectionPhase.CLEANING}),
    ElectionPhase.NOMINATIONS_CLOSED: frozenset({ElectionPhase.VOTING}),
    ElectionPhase.VOTING: frozenset({ElectionPhase.VOTING_CONCLUDED}),
    ElectionPhase.VOTING_CONCLUDED: frozenset({ElectionPhase.CLEANING}),
    ElectionPhase.CLEANING: frozenset({ElectionPhase.CLEAN}),
}


def can_transition(current: ElectionPhase, target: ElectionPhase) -> bool:
    """Check whether ``current -> target`` is in the transition table."""
    return target in TRANSITIONS.get(current, frozenset())


def validate_transition(current: ElectionPhase, target: ElectionPhase) -> None:
    """Raise PhaseViolation unless ``current -> target`` is allowed."""
    if not can_transition(current, target):
        msg = f"Cannot move election from '{current}' to '{target}'"
        raise PhaseViolation(msg)
