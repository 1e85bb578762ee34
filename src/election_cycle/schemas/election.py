"""Election cycle Pydantic v2 schemas.

Defines request/response schemas for cycle creation, state inspection,
advancement and the transition event log.
"""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

from election_cycle.lib.cycle.phases import ElectionPhase
from election_cycle.schemas.common import PaginationMeta


class ElectionCreateRequest(BaseModel):
    """Request to open a new election cycle.

    Window ordering and non-empty text are checked by the service so that
    every entry point (API, CLI) rejects them the same way.
    """

    title: str = Field(description="Election title")
    description: str = Field(description="Election description")
    content: str = Field(default="", description="Link or reference to further details")
    nomination_open: datetime = Field(description="Nominations open at (UTC)")
    nomination_close: datetime = Field(description="Nominations close at (UTC)")
    voting_open: datetime = Field(description="Voting opens at (UTC)")
    voting_close: datetime = Field(description="Voting closes at (UTC)")


class ElectionStateResponse(BaseModel):
    """Snapshot of the election record."""

    ballot_id: int
    phase: ElectionPhase
    title: str
    description: str
    content: str
    nomination_count: int
    pending_voter_count: int
    synced_voter_count: int
    nomination_open: datetime | None = None
    nomination_close: datetime | None = None
    voting_open: datetime | None = None
    voting_close: datetime | None = None


class AdvanceResponse(BaseModel):
    """Result of one advance step."""

    phase: ElectionPhase
    previous_phase: ElectionPhase
    changed: bool = Field(description="Whether the phase moved during this call")
    pending_voter_count: int


class ElectionEventResponse(BaseModel):
    """One phase transition from the event log."""

    id: UUID
    occurred_at: datetime
    ballot_id: int
    from_phase: ElectionPhase
    to_phase: ElectionPhase
    actor: str | None = None
    detail: dict | None = None

    model_config = {"from_attributes": True}


class PaginatedElectionEventResponse(BaseModel):
    """Paginated list of transition events, newest first."""

    items: list[ElectionEventResponse]
    pagination: PaginationMeta
