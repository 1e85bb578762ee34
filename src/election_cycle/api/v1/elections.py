"""Election state machine API endpoints.

GET /election: current state (public)
GET /election/events: transition log (public)
POST /election/advance: run one advance step (public)
POST /election/setup: one-time setup (operator)
POST /election/cycles: open a new cycle (operator)
POST /election/cycles/cancel: cancel before the ballot exists (operator)
POST /election/end: move a concluded cycle into cleanup (operator)
POST /election/cleanup: run one cleanup step (operator)
"""

import math
from typing import Annotated

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from election_cycle.core.dependencies import (
    get_async_session,
    get_cycle_policy,
    get_external_services,
    require_role,
)
from election_cycle.lib.ballot_service import ExternalServices
from election_cycle.lib.cycle import CyclePolicy
from election_cycle.models.account import Account
from election_cycle.schemas.common import PaginationMeta
from election_cycle.schemas.election import (
    AdvanceResponse,
    ElectionCreateRequest,
    ElectionEventResponse,
    ElectionStateResponse,
    PaginatedElectionEventResponse,
)
from election_cycle.services import election_service

elections_router = APIRouter(prefix="/election", tags=["election"])


@elections_router.get("", response_model=ElectionStateResponse)
async def get_election(
    session: Annotated[AsyncSession, Depends(get_async_session)],
) -> ElectionStateResponse:
    """Current election state. Public endpoint."""
    return await election_service.get_election_state(session)


@elections_router.get("/events", response_model=PaginatedElectionEventResponse)
async def list_events(
    session: Annotated[AsyncSession, Depends(get_async_session)],
    ballot_id: int | None = Query(default=None, description="Only events of this ballot"),
    page: int = Query(default=1, ge=1, description="Page number"),
    page_size: int = Query(default=20, ge=1, le=100, description="Results per page"),
) -> PaginatedElectionEventResponse:
    """Phase transitions, newest first. Public endpoint."""
    events, total = await election_service.list_events(session, ballot_id=ballot_id, page=page, page_size=page_size)
    return PaginatedElectionEventResponse(
        items=[ElectionEventResponse.model_validate(e) for e in events],
        pagination=PaginationMeta(
            total=total,
            page=page,
            page_size=page_size,
            total_pages=max(1, math.ceil(total / page_size)) if total > 0 else 0,
        ),
    )


@elections_router.post("/advance", response_model=AdvanceResponse)
async def advance_election(
    session: Annotated[AsyncSession, Depends(get_async_session)],
    external: Annotated[ExternalServices, Depends(get_external_services)],
    policy: Annotated[CyclePolicy, Depends(get_cycle_policy)],
) -> AdvanceResponse:
    """Run one advance step. Anyone may call this; redundant calls are no-ops."""
    return await election_service.advance(session, external, policy)


@elections_router.post("/setup", response_model=ElectionStateResponse)
async def setup_election(
    current_account: Annotated[Account, Depends(require_role("operator"))],
    session: Annotated[AsyncSession, Depends(get_async_session)],
    external: Annotated[ExternalServices, Depends(get_external_services)],
    policy: Annotated[CyclePolicy, Depends(get_cycle_policy)],
) -> ElectionStateResponse:
    """Enroll the operator with the ballot service and move to ``clean``."""
    record = await election_service.setup_election(session, external, policy, actor=current_account.identity)
    return election_service.build_state_response(record)


@elections_router.post("/cycles", response_model=ElectionStateResponse, status_code=201)
async def create_cycle(
    request: ElectionCreateRequest,
    current_account: Annotated[Account, Depends(require_role("operator"))],
    session: Annotated[AsyncSession, Depends(get_async_session)],
) -> ElectionStateResponse:
    """Open a new election cycle."""
    record = await election_service.create_cycle(
        session,
        title=request.title,
        description=request.description,
        content=request.content,
        nomination_open=request.nomination_open,
        nomination_close=request.nomination_close,
        voting_open=request.voting_open,
        voting_close=request.voting_close,
        actor=current_account.identity,
    )
    return election_service.build_state_response(record)


@elections_router.post("/cycles/cancel", response_model=ElectionStateResponse)
async def cancel_cycle(
    current_account: Annotated[Account, Depends(require_role("operator"))],
    session: Annotated[AsyncSession, Depends(get_async_session)],
) -> ElectionStateResponse:
    """Cancel the running cycle before its ballot is created."""
    record = await election_service.cancel_cycle(session, actor=current_account.identity)
    return election_service.build_state_response(record)


@elections_router.post("/end", response_model=ElectionStateResponse)
async def end_cycle(
    current_account: Annotated[Account, Depends(require_role("operator"))],
    session: Annotated[AsyncSession, Depends(get_async_session)],
    external: Annotated[ExternalServices, Depends(get_external_services)],
    policy: Annotated[CyclePolicy, Depends(get_cycle_policy)],
) -> ElectionStateResponse:
    """Move a concluded cycle into cleanup."""
    record = await election_service.end_cycle(session, external, policy, actor=current_account.identity)
    return election_service.build_state_response(record)


@elections_router.post("/cleanup", response_model=ElectionStateResponse)
async def cleanup_step(
    current_account: Annotated[Account, Depends(require_role("operator"))],
    session: Annotated[AsyncSession, Depends(get_async_session)],
    policy: Annotated[CyclePolicy, Depends(get_cycle_policy)],
) -> ElectionStateResponse:
    """Run one bounded cleanup step."""
    record = await election_service.cleanup_step(session, policy, actor=current_account.identity)
    return election_service.build_state_response(record)
