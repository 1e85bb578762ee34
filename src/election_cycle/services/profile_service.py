"""Nominee profile service.

Accepted nominees may publish, replace or withdraw a profile until voting
begins.
"""

from datetime import datetime

from loguru import logger
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from election_cycle.core.database import unit_of_work
from election_cycle.lib.ballot_service import ExternalServices
from election_cycle.lib.cycle import CyclePolicy, PhaseViolation, PreconditionViolation, RecordNotFoundError
from election_cycle.models.election import ElectionRecord
from election_cycle.models.nomination import Nomination, NomineeProfile
from election_cycle.services import election_service

MAX_NAME_LENGTH = 99
MAX_DESCRIPTOR_LENGTH = 2000
MAX_PICTURE_LENGTH = 256
MAX_CONTACT_LENGTH = 99
PICTURE_PREFIX = "http"


def validate_profile(
    *,
    name: str,
    descriptor: str = "",
    picture: str = "",
    telegram: str = "",
    twitter: str = "",
    wechat: str = "",
) -> None:
    """Check profile field lengths and the picture URL scheme.

    Raises:
        PreconditionViolation: On the first field that fails.
    """
    if not name:
        msg = "Name is required"
        raise PreconditionViolation(msg)
    if len(name) > MAX_NAME_LENGTH:
        msg = f"Name must be at most {MAX_NAME_LENGTH} characters"
        raise PreconditionViolation(msg)
    if len(descriptor) > MAX_DESCRIPTOR_LENGTH:
        msg = f"Descriptor must be at most {MAX_DESCRIPTOR_LENGTH} characters"
        raise PreconditionViolation(msg)
    if len(picture) > MAX_PICTURE_LENGTH:
        msg = f"Picture URL must be at most {MAX_PICTURE_LENGTH} characters"
        raise PreconditionViolation(msg)
    if picture and not picture.startswith(PICTURE_PREFIX):
        msg = f"Picture URL must begin with '{PICTURE_PREFIX}'"
        raise PreconditionViolation(msg)
    for field_name, value in (("telegram", telegram), ("twitter", twitter), ("wechat", wechat)):
        if len(value) > MAX_CONTACT_LENGTH:
            msg = f"{field_name.capitalize()} handle must be at most {MAX_CONTACT_LENGTH} characters"
            raise PreconditionViolation(msg)


async def _require_editable(session: AsyncSession, owner: str) -> ElectionRecord:
    record = await election_service.load_election(session)
    if not record.phase.precedes_voting:
        msg = "Voting has already commenced"
        raise PhaseViolation(msg)
    nomination = await session.get(Nomination, owner)
    if nomination is None:
        msg = f"'{owner}' is not nominated"
        raise RecordNotFoundError(msg)
    if not nomination.accepted:
        msg = f"Nomination of '{owner}' is not accepted"
        raise PreconditionViolation(msg)
    return record


async def upsert_profile(
    session: AsyncSession,
    external: ExternalServices,
    policy: CyclePolicy,
    *,
    owner: str,
    name: str,
    descriptor: str = "",
    picture: str = "",
    telegram: str = "",
    twitter: str = "",
    wechat: str = "",
    now: datetime | None = None,
) -> NomineeProfile:
    """Create or replace ``owner``'s profile.

    Raises:
        PhaseViolation: If voting has begun.
        RecordNotFoundError: If ``owner`` is not nominated.
        PreconditionViolation: If the nomination is unaccepted or a field is invalid.
    """
    async with unit_of_work(session):
        record = await _require_editable(session, owner)
        validate_profile(
            name=name,
            descriptor=descriptor,
            picture=picture,
            telegram=telegram,
            twitter=twitter,
            wechat=wechat,
        )
        profile = await session.get(NomineeProfile, owner)
        if profile is None:
            profile = NomineeProfile(owner=owner)
            session.add(profile)
        profile.name = name
        profile.descriptor = descriptor
        profile.picture = picture
        profile.telegram = telegram
        profile.twitter = twitter
        profile.wechat = wechat
        await session.flush()
        logger.info("Saved profile for {}", owner)

        await election_service.refresh_state(session, record, external, policy, now=now, actor=owner)
    await session.refresh(profile)
    return profile


async def delete_profile(
    session: AsyncSession,
    external: ExternalServices,
    policy: CyclePolicy,
    *,
    owner: str,
    now: datetime | None = None,
) -> None:
    """Withdraw ``owner``'s profile.

    Raises:
        PhaseViolation: If voting has begun.
        RecordNotFoundError: If ``owner`` is not nominated or has no profile.
        PreconditionViolation: If the nomination is unaccepted.
    """
    async with unit_of_work(session):
        record = await _require_editable(session, owner)
        profile = await session.get(NomineeProfile, owner)
        if profile is None:
            msg = f"No profile found for '{owner}'"
            raise RecordNotFoundError(msg)
        await session.delete(profile)
        logger.info("Deleted profile for {}", owner)

        await election_service.refresh_state(session, record, external, policy, now=now, actor=owner)


async def get_profile(session: AsyncSession, owner: str) -> NomineeProfile | None:
    return await session.get(NomineeProfile, owner)


async def list_profiles(session: AsyncSession) -> list[NomineeProfile]:
    result = await session.execute(select(NomineeProfile).order_by(NomineeProfile.owner))
    return list(result.scalars().all())
