"""Voter registration API endpoints.

POST /voters/register: register the caller as a voter
GET /voters/{identity}: registration of one voter (public)
"""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Response, status
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
from election_cycle.schemas.voter import VoterRegistrationResponse
from election_cycle.services import voter_service

voters_router = APIRouter(prefix="/voters", tags=["voters"])


@voters_router.post("/register", response_model=VoterRegistrationResponse)
async def register_voter(
    response: Response,
    current_account: Annotated[Account, Depends(get_current_account)],
    session: Annotated[AsyncSession, Depends(get_async_session)],
    external: Annotated[ExternalServices, Depends(get_external_services)],
    policy: Annotated[CyclePolicy, Depends(get_cycle_policy)],
) -> VoterRegistrationResponse:
    """Register yourself as a voter. Repeat calls return the existing registration."""
    registration, created = await voter_service.register_voter(
        session,
        external,
        policy,
        voter=current_account.identity,
    )
    if created:
        response.status_code = status.HTTP_201_CREATED
    result = VoterRegistrationResponse.model_validate(registration)
    result.newly_registered = created
    return result


@voters_router.get("/{identity}", response_model=VoterRegistrationResponse)
async def get_registration(
    identity: str,
    session: Annotated[AsyncSession, Depends(get_async_session)],
) -> VoterRegistrationResponse:
    """Registration of one voter. Public endpoint."""
    registration = await voter_service.get_registration(session, identity)
    if registration is None:
        raise HTTPException(status_code=404, detail="Voter not registered.")
    return VoterRegistrationResponse.model_validate(registration)
