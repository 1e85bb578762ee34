"""Nomination registry service.

Candidacies are submitted while a cycle is in ``created`` or ``nominating``
and accepted or declined by the nominee.  The registry is bounded: once the
nomination total reaches the purge threshold every unaccepted nomination is
swept before the next one is inserted.  Each command ends with one election
advance step inside the same unit of work.
"""

from datetime import datetime

from loguru import logger
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from election_cycle.core.database import unit_of_work
from election_cycle.lib.ballot_service import ExternalServices
from election_cycle.lib.cycle import (
    CapacityExceededError,
    CyclePolicy,
    ElectionPhase,
    PhaseViolation,
    PreconditionViolation,
    RecordNotFoundError,
)
from election_cycle.models.election import ElectionRecord
from election_cycle.models.nomination import Nomination, NomineeProfile
from election_cycle.services import election_service
from election_cycle.services.auth_service import identity_exists


def _check_nominations_open(record: ElectionRecord) -> None:
    if record.phase.accepts_nominations:
        return
    if record.phase in (ElectionPhase.UNINITIALIZED, ElectionPhase.CLEAN):
        msg = "No election is currently running"
    else:
        msg = "Nomination period has already closed"
    raise PhaseViolation(msg)


async def _purge_unaccepted(session: AsyncSession) -> int:
    result = await session.execute(delete(Nomination).where(Nomination.accepted.is_(False)))
    return result.rowcount or 0


async def submit_nomination(
    session: AsyncSession,
    external: ExternalServices,
    policy: CyclePolicy,
    *,
    nominator: str,
    nominee: str,
    now: datetime | None = None,
) -> Nomination:
    """Nominate ``nominee`` on behalf of ``nominator``.

    Self-nominations are accepted immediately while the nomination total is
    below the self-accept limit; nominations of somebody else start
    unaccepted.

    Args:
        session: Database session.
        external: Ballot service and ledger.
        policy: Cycle constants.
        nominator: Authenticated caller.
        nominee: Identity being nominated.
        now: Wall-clock time for the advance step.

    Returns:
        The created Nomination.

    Raises:
        PhaseViolation: If nominations are not open.
        PreconditionViolation: If ``nominee`` is already nominated.
        RecordNotFoundError: If ``nominee`` is not a known identity.
        CapacityExceededError: If the nomination counter is full.
    """
    async with unit_of_work(session):
        record = await election_service.load_election(session)
        _check_nominations_open(record)
        if await session.get(Nomination, nominee) is not None:
            msg = f"'{nominee}' is already nominated"
            raise PreconditionViolation(msg)
        if not await identity_exists(session, nominee):
            msg = f"Nominated identity '{nominee}' does not exist"
            raise RecordNotFoundError(msg)

        if record.nomination_count >= policy.purge_threshold:
            purged = await _purge_unaccepted(session)
            record.nomination_count = max(record.nomination_count - purged, 0)
            logger.warning("Purged {} unaccepted nomination(s)", purged)
        if record.nomination_count >= policy.nomination_ceiling:
            msg = "Nomination registry is full"
            raise CapacityExceededError(msg)

        accepted = nominator == nominee and record.nomination_count < policy.self_accept_limit
        nomination = Nomination(nominee=nominee, nominator=nominator, accepted=accepted)
        session.add(nomination)
        record.nomination_count += 1
        await session.flush()
        logger.info("{} nominated {} (accepted={})", nominator, nominee, accepted)

        await election_service.refresh_state(session, record, external, policy, now=now, actor=nominator)
    return nomination


async def decide_nomination(
    session: AsyncSession,
    external: ExternalServices,
    policy: CyclePolicy,
    *,
    nominee: str,
    accept: bool,
    now: datetime | None = None,
) -> Nomination | None:
    """Accept or decline the caller's own nomination.

    Declining removes the nomination and any profile the nominee published.

    Returns:
        The accepted Nomination, or None if it was declined.

    Raises:
        PhaseViolation: If nominations are not open.
        RecordNotFoundError: If ``nominee`` has no nomination.
    """
    async with unit_of_work(session):
        record = await election_service.load_election(session)
        _check_nominations_open(record)
        nomination = await session.get(Nomination, nominee)
        if nomination is None:
            msg = f"No nomination found for '{nominee}'"
            raise RecordNotFoundError(msg)

        result: Nomination | None
        if accept:
            nomination.accepted = True
            result = nomination
            logger.info("{} accepted their nomination", nominee)
        else:
            await session.delete(nomination)
            await session.execute(delete(NomineeProfile).where(NomineeProfile.owner == nominee))
            record.nomination_count = max(record.nomination_count - 1, 0)
            result = None
            logger.info("{} declined their nomination", nominee)
        await session.flush()

        await election_service.refresh_state(session, record, external, policy, now=now, actor=nominee)
    return result


async def list_nominations(session: AsyncSession, *, accepted: bool | None = None) -> list[Nomination]:
    """List nominations ordered by nominee, optionally filtered by acceptance."""
    query = select(Nomination)
    if accepted is not None:
        query = query.where(Nomination.accepted.is_(accepted))
    result = await session.execute(query.order_by(Nomination.nominee))
    return list(result.scalars().all())


async def get_nomination(session: AsyncSession, nominee: str) -> Nomination | None:
    return await session.get(Nomination, nominee)
