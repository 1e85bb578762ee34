"""Error taxonomy for election cycle operations.

Every rejected command raises a ``PreconditionViolation`` before anything is
written; the caller sees the reason synchronously and state is unchanged.
"""


class PreconditionViolation(ValueError):
    """Raised when a command's preconditions do not hold."""


class PhaseViolation(PreconditionViolation):
    """Raised when a command is issued in a phase that does not allow it."""


class RecordNotFoundError(PreconditionViolation):
    """Raised when a required record or identity does not exist."""


class CapacityExceededError(PreconditionViolation):
    """Raised when a bounded counter would overflow."""
