"""Voter pool primitives.

An election keeps two ordered pools of voter identities: ``pending`` (awaiting
synchronization this cycle) and ``synced`` (already synchronized, eligible
again next cycle).  Synchronization and cleanup migration both move identities
from one pool to the other, a capped number per invocation.  The helpers here
work on copies so the caller can issue side effects for the moved items and
then write both pools back in one go.
"""

from collections.abc import Sequence
from dataclasses import dataclass


@dataclass(frozen=True)
class DrainResult:
    """Outcome of one bounded drain step."""

    source: list[str]
    sink: list[str]
    moved: list[str]

    @property
    def remaining(self) -> int:
        return len(self.source)

    @property
    def exhausted(self) -> bool:
        return not self.source


def drain(source: Sequence[str], sink: Sequence[str], limit: int) -> DrainResult:
    """Move up to ``limit`` items from the tail of ``source`` onto ``sink``.

    Items are taken last-in first-out and appended to ``sink`` in the order
    they were taken.  Neither input is modified.

    Args:
        source: Pool to take from.
        sink: Pool to append to.
        limit: Maximum number of items to move; must be positive.

    Returns:
        New source and sink lists plus the items moved, in move order.
    """
    if limit <= 0:
        msg = f"limit must be positive, got {limit}"
        raise ValueError(msg)
    remaining = list(source)
    moved: list[str] = []
    while remaining and len(moved) < limit:
        moved.append(remaining.pop())
    return DrainResult(source=remaining, sink=[*sink, *moved], moved=moved)


def enroll(pending: Sequence[str], synced: Sequence[str], voter: str) -> tuple[list[str], list[str]]:
    """Place a newly registered voter into exactly one pool.

    While a synchronization is in flight (both pools populated) the voter joins
    the pending batch.  Once a synchronization has settled (pending empty,
    synced populated) the voter joins the synced pool and is picked up by the
    next cleanup migration.  Before any synchronization ran the voter is
    pending.

    Returns:
        New ``(pending, synced)`` lists.
    """
    if synced and not pending:
        return list(pending), [*synced, voter]
    return [*pending, voter], list(synced)
