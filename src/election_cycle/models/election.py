"""Election cycle ORM models.

Provides the singleton ElectionRecord that the state machine reads and writes
wholesale, and the append-only ElectionEvent log of its phase transitions.
"""

from datetime import datetime

from sqlalchemy import CheckConstraint, Enum, Index, Integer, SmallInteger, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from election_cycle.lib.cycle.phases import ElectionPhase
from election_cycle.models.base import Base, JSONList, UTCDateTime, UUIDMixin, utcnow

ELECTION_RECORD_ID = 1

PhaseColumn = Enum(
    ElectionPhase,
    name="election_phase",
    native_enum=False,
    length=24,
    values_callable=lambda phases: [p.value for p in phases],
    validate_strings=True,
)


class ElectionRecord(Base):
    """The one election of this deployment: phase, windows and voter pools."""

    __tablename__ = "election_records"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, default=ELECTION_RECORD_ID)
    ballot_id: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    phase: Mapped[ElectionPhase] = mapped_column(PhaseColumn, nullable=False, default=ElectionPhase.UNINITIALIZED)
    title: Mapped[str] = mapped_column(Text, nullable=False, default="")
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    content: Mapped[str] = mapped_column(Text, nullable=False, default="")
    nomination_count: Mapped[int] = mapped_column(SmallInteger, nullable=False, default=0)
    pending_voters: Mapped[list[str]] = mapped_column(JSONList, nullable=False, default=list)
    synced_voters: Mapped[list[str]] = mapped_column(JSONList, nullable=False, default=list)
    nomination_open: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)
    nomination_close: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)
    voting_open: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)
    voting_close: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)

    __table_args__ = (
        CheckConstraint(f"id = {ELECTION_RECORD_ID}", name="ck_election_record_singleton"),
        CheckConstraint("nomination_count BETWEEN 0 AND 255", name="ck_election_nomination_count"),
    )


class ElectionEvent(Base, UUIDMixin):
    """Immutable record of one phase transition. Write-only."""

    __tablename__ = "election_events"

    occurred_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False, default=utcnow)
    ballot_id: Mapped[int] = mapped_column(Integer, nullable=False)
    from_phase: Mapped[ElectionPhase] = mapped_column(PhaseColumn, nullable=False)
    to_phase: Mapped[ElectionPhase] = mapped_column(PhaseColumn, nullable=False)
    actor: Mapped[str | None] = mapped_column(String(64), nullable=True)
    detail: Mapped[dict | None] = mapped_column(JSONList, nullable=True)

    __table_args__ = (
        Index("idx_election_events_occurred_at", "occurred_at"),
        Index("idx_election_events_ballot_id", "ballot_id"),
    )
