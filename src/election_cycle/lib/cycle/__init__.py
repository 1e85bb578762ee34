"""Election cycle core library.

Public API:
    - ElectionPhase: Closed enumeration of cycle phases
    - validate_transition / can_transition: Transition table checks
    - drain / DrainResult: Bounded, resumable pool migration
    - enroll: Pool placement of a newly registered voter
    - CyclePolicy: Identities, fee and batch caps used by the state machine
    - PreconditionViolation and subclasses: Rejected-command errors
"""

from election_cycle.lib.cycle.errors import (
    CapacityExceededError,
    PhaseViolation,
    PreconditionViolation,
    RecordNotFoundError,
)
from election_cycle.lib.cycle.phases import TRANSITIONS, ElectionPhase, can_transition, validate_transition
from election_cycle.lib.cycle.policy import CyclePolicy
from election_cycle.lib.cycle.pools import DrainResult, drain, enroll

__all__ = [
    "TRANSITIONS",
    "CapacityExceededError",
    "CyclePolicy",
    "DrainResult",
    "ElectionPhase",
    "PhaseViolation",
    "PreconditionViolation",
    "RecordNotFoundError",
    "can_transition",
    "drain",
    "enroll",
    "validate_transition",
]
