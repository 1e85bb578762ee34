"""Nomination registry API endpoints.

GET /nominations: list nominations (public)
POST /nominations: nominate an identity (authenticated)
POST /nominations/decision: accept or decline the caller's nomination
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession

from election_cycle.core.dependencies import (
    get_async_session,
    get_current_account,
    get_cycle_policy,
    get_external_services,
)
from election_cycle.lib.ballot_service import ExternalServices
from election_cycle.lib.cycle import CyclePolicy
from election_cycle.models.account import Account
from election_cycle.schemas.nomination import NominationDecisionRequest, NominationRequest, NominationResponse
from election_cycle.services import nomination_service

nominations_router = APIRouter(prefix="/nominations", tags=["nominations"])


@nominations_router.get("", response_model=list[NominationResponse])
async def list_nominations(
    session: Annotated[AsyncSession, Depends(get_async_session)],
    accepted: bool | None = Query(default=None, description="Filter by acceptance"),
) -> list[NominationResponse]:
    """List the current cycle's nominations. Public endpoint."""
    nominations = await nomination_service.list_nominations(session, accepted=accepted)
    return [NominationResponse.model_validate(n) for n in nominations]


@nominations_router.post("", response_model=NominationResponse, status_code=201)
async def submit_nomination(
    request: NominationRequest,
    current_account: Annotated[Account, Depends(get_current_account)],
    session: Annotated[AsyncSession, Depends(get_async_session)],
    external: Annotated[ExternalServices, Depends(get_external_services)],
    policy: Annotated[CyclePolicy, Depends(get_cycle_policy)],
) -> NominationResponse:
    """Nominate ``nominee`` (possibly yourself)."""
    nomination = await nomination_service.submit_nomination(
        session,
        external,
        policy,
        nominator=current_account.identity,
        nominee=request.nominee,
    )
    return NominationResponse.model_validate(nomination)


@nominations_router.post(
    "/decision",
    response_model=NominationResponse,
    responses={204: {"description": "Nomination declined and removed"}},
)
async def decide_nomination(
    request: NominationDecisionRequest,
    current_account: Annotated[Account, Depends(get_current_account)],
    session: Annotated[AsyncSession, Depends(get_async_session)],
    external: Annotated[ExternalServices, Depends(get_external_services)],
    policy: Annotated[CyclePolicy, Depends(get_cycle_policy)],
) -> NominationResponse | Response:
    """Accept or decline your own nomination."""
    nomination = await nomination_service.decide_nomination(
        session,
        external,
        policy,
        nominee=current_account.identity,
        accept=request.accept,
    )
    if nomination is None:
        return Response(status_code=204)
    return NominationResponse.model_validate(nomination)
