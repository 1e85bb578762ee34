"""Nominee profile API endpoints.

GET /nominees: list published profiles (public)
GET /nominees/{identity}: one profile (public)
PUT /nominees/me: create or replace the caller's profile
DELETE /nominees/me: withdraw the caller's profile
"""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Response
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
from election_cycle.schemas.nomination import NomineeProfileRequest, NomineeProfileResponse
from election_cycle.services import profile_service

nominees_router = APIRouter(prefix="/nominees", tags=["nominees"])


@nominees_router.get("", response_model=list[NomineeProfileResponse])
async def list_profiles(
    session: Annotated[AsyncSession, Depends(get_async_session)],
) -> list[NomineeProfileResponse]:
    """List nominee profiles. Public endpoint."""
    profiles = await profile_service.list_profiles(session)
    return [NomineeProfileResponse.model_validate(p) for p in profiles]


@nominees_router.get("/{identity}", response_model=NomineeProfileResponse)
async def get_profile(
    identity: str,
    session: Annotated[AsyncSession, Depends(get_async_session)],
) -> NomineeProfileResponse:
    """Get one nominee profile. Public endpoint."""
    profile = await profile_service.get_profile(session, identity)
    if profile is None:
        raise HTTPException(status_code=404, detail="Profile not found.")
    return NomineeProfileResponse.model_validate(profile)


@nominees_router.put("/me", response_model=NomineeProfileResponse)
async def upsert_profile(
    request: NomineeProfileRequest,
    current_account: Annotated[Account, Depends(get_current_account)],
    session: Annotated[AsyncSession, Depends(get_async_session)],
    external: Annotated[ExternalServices, Depends(get_external_services)],
    policy: Annotated[CyclePolicy, Depends(get_cycle_policy)],
) -> NomineeProfileResponse:
    """Create or replace your profile. Requires an accepted nomination."""
    profile = await profile_service.upsert_profile(
        session,
        external,
        policy,
        owner=current_account.identity,
        **request.model_dump(),
    )
    return NomineeProfileResponse.model_validate(profile)


@nominees_router.delete("/me", status_code=204)
async def delete_profile(
    current_account: Annotated[Account, Depends(get_current_account)],
    session: Annotated[AsyncSession, Depends(get_async_session)],
    external: Annotated[ExternalServices, Depends(get_external_services)],
    policy: Annotated[CyclePolicy, Depends(get_cycle_policy)],
) -> Response:
    """Withdraw your profile."""
    await profile_service.delete_profile(session, external, policy, owner=current_account.identity)
    return Response(status_code=204)
