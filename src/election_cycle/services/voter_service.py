"""Voter registration service.

Registration is idempotent: the first call records the voter, enrolls them
with the ballot service and places them in one of the election's voter pools;
later calls only run the election advance step.
"""

from datetime import datetime

from loguru import logger
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from election_cycle.core.database import unit_of_work
from election_cycle.lib.ballot_service import ExternalServices
from election_cycle.lib.cycle import CyclePolicy, RecordNotFoundError, enroll
from election_cycle.models.voter_registration import VoterRegistration
from election_cycle.services import election_service
from election_cycle.services.auth_service import identity_exists


async def get_registration(session: AsyncSession, voter: str) -> VoterRegistration | None:
    result = await session.execute(select(VoterRegistration).where(VoterRegistration.voter == voter).limit(1))
    return result.scalar_one_or_none()


async def register_voter(
    session: AsyncSession,
    external: ExternalServices,
    policy: CyclePolicy,
    *,
    voter: str,
    now: datetime | None = None,
) -> tuple[VoterRegistration, bool]:
    """Register ``voter`` if they are not registered yet.

    Args:
        session: Database session.
        external: Ballot service and ledger.
        policy: Cycle constants.
        voter: Authenticated caller.
        now: Wall-clock time for the advance step.

    Returns:
        Tuple of (registration, whether it was created by this call).

    Raises:
        RecordNotFoundError: If ``voter`` is not a known identity.
    """
    async with unit_of_work(session):
        record = await election_service.load_election(session)
        if not await identity_exists(session, voter):
            msg = f"Voter identity '{voter}' does not exist"
            raise RecordNotFoundError(msg)

        registration = await get_registration(session, voter)
        created = registration is None
        if registration is None:
            registration = VoterRegistration(voter=voter, referrer=policy.operator, treasury=policy.treasury_symbol)
            session.add(registration)
            await session.flush()
            await external.ballots.register_voter(voter, policy.treasury_symbol, policy.operator)
            record.pending_voters, record.synced_voters = enroll(record.pending_voters, record.synced_voters, voter)
            logger.info(
                "Registered voter {} ({} pending, {} synced)",
                voter,
                len(record.pending_voters),
                len(record.synced_voters),
            )

        await election_service.refresh_state(session, record, external, policy, now=now, actor=voter)
    return registration, created
