"""Election state machine service.

Owns the singleton election record: cycle creation and cancellation, the
``advance`` step that moves the cycle forward when a time window has been
reached, batched voter synchronization once voting has closed, and the
resumable cleanup that prepares the next cycle.

Every public command runs as one unit of work: the record is loaded with a row
lock, mutated, and committed together with any registry changes and the
transition event.  Outbound calls happen inside that unit of work, so a failed
call rolls the local state back.  ``refresh_state`` is the shared advance step;
nomination, profile and voter commands call it after their own mutation.
"""

import asyncio
from datetime import UTC, datetime

from loguru import logger
from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from election_cycle.core.database import unit_of_work
from election_cycle.lib.ballot_service import ExternalServices
from election_cycle.lib.cycle import (
    CyclePolicy,
    ElectionPhase,
    PhaseViolation,
    PreconditionViolation,
    drain,
    validate_transition,
)
from election_cycle.models.election import ELECTION_RECORD_ID, ElectionEvent, ElectionRecord
from election_cycle.models.nomination import Nomination, NomineeProfile
from election_cycle.schemas.election import AdvanceResponse, ElectionStateResponse


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def _resolve_now(now: datetime | None) -> datetime:
    return datetime.now(UTC) if now is None else _as_utc(now)


def _reached(now: datetime, moment: datetime | None) -> bool:
    return moment is not None and now >= moment


async def load_election(session: AsyncSession) -> ElectionRecord:
    """Load the election record for update, creating it on first access.

    The row is locked for the rest of the transaction and re-read from the
    database even if an instance is already in the session.

    Args:
        session: Database session.

    Returns:
        The ElectionRecord, in phase ``uninitialized`` if it was just created.
    """
    result = await session.execute(
        select(ElectionRecord)
        .where(ElectionRecord.id == ELECTION_RECORD_ID)
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    record = result.scalar_one_or_none()
    if record is None:
        record = ElectionRecord(
            id=ELECTION_RECORD_ID,
            ballot_id=0,
            phase=ElectionPhase.UNINITIALIZED,
            title="",
            description="",
            content="",
            nomination_count=0,
            pending_voters=[],
            synced_voters=[],
        )
        session.add(record)
        await session.flush()
        logger.info("Created election record")
    return record


async def get_election(session: AsyncSession) -> ElectionRecord | None:
    """Read the election record without locking it."""
    result = await session.execute(select(ElectionRecord).where(ElectionRecord.id == ELECTION_RECORD_ID))
    return result.scalar_one_or_none()


def _transition(
    session: AsyncSession,
    record: ElectionRecord,
    target: ElectionPhase,
    *,
    actor: str | None = None,
    detail: dict | None = None,
) -> None:
    validate_transition(record.phase, target)
    session.add(
        ElectionEvent(
            ballot_id=record.ballot_id,
            from_phase=record.phase,
            to_phase=target,
            actor=actor,
            detail=detail,
        )
    )
    logger.info("Election {} moved {} -> {}", record.ballot_id, record.phase, target)
    record.phase = target


async def _close_nominations(
    session: AsyncSession,
    record: ElectionRecord,
    external: ExternalServices,
    policy: CyclePolicy,
    actor: str | None,
) -> None:
    result = await session.execute(
        select(Nomination.nominee).where(Nomination.accepted.is_(True)).order_by(Nomination.nominee)
    )
    options = list(result.scalars().all())
    if len(options) < policy.min_ballot_options:
        logger.debug(
            "Nominations closed for ballot {} but only {} accepted; waiting",
            record.ballot_id,
            len(options),
        )
        return

    await external.ledger.pay_fixed_fee(policy.fee_recipient, policy.fee_amount, policy.fee_symbol, policy.fee_memo)
    await external.ballots.create_ballot(
        record.ballot_id,
        category=policy.ballot_category,
        publisher=policy.operator,
        treasury_symbol=policy.treasury_symbol,
        voting_method=policy.voting_method,
        options=options,
    )
    await external.ballots.set_ballot_details(record.ballot_id, record.title, record.description, record.content)
    await external.ballots.set_weighting_mode(record.ballot_id, policy.weighting_mode)
    _transition(session, record, ElectionPhase.NOMINATIONS_CLOSED, actor=actor, detail={"options": options})


async def _synchronize_voters(
    session: AsyncSession,
    record: ElectionRecord,
    external: ExternalServices,
    policy: CyclePolicy,
    actor: str | None,
) -> None:
    step = drain(record.pending_voters, record.synced_voters, policy.sync_batch_size)
    for voter in step.moved:
        await external.ballots.synchronize_voter(voter)
        await external.ballots.rebalance_ballot(voter, record.ballot_id, policy.operator)
    if step.moved:
        record.pending_voters = step.source
        record.synced_voters = step.sink
        logger.info(
            "Synchronized {} voter(s) for ballot {}, {} remaining",
            len(step.moved),
            record.ballot_id,
            step.remaining,
        )
    if step.exhausted:
        await external.ballots.close_voting(record.ballot_id, broadcast=False)
        _transition(session, record, ElectionPhase.VOTING_CONCLUDED, actor=actor)


async def _run_cleanup(
    session: AsyncSession,
    record: ElectionRecord,
    policy: CyclePolicy,
    actor: str | None,
) -> None:
    await session.execute(delete(NomineeProfile))
    await session.execute(delete(Nomination))
    if record.nomination_count:
        record.nomination_count = 0

    pending, synced = record.pending_voters, record.synced_voters
    if synced and pending:
        step = drain(pending, synced, policy.cleanup_batch_size)
        record.pending_voters = step.source
        record.synced_voters = step.sink
        logger.info("Cleanup migrated {} voter(s), {} remaining", len(step.moved), step.remaining)
        return

    if synced:
        record.pending_voters = list(synced)
        record.synced_voters = []
        logger.info("Cleanup recycled {} voter(s) for the next cycle", len(synced))
    _transition(session, record, ElectionPhase.CLEAN, actor=actor)


async def refresh_state(
    session: AsyncSession,
    record: ElectionRecord,
    external: ExternalServices,
    policy: CyclePolicy,
    *,
    now: datetime | None = None,
    actor: str | None = None,
) -> ElectionPhase:
    """Run one advance step against ``record``.

    Performs at most one transition.  When no guard holds the record is left
    untouched.  Does not commit; the caller owns the unit of work.

    Args:
        session: Database session holding ``record``.
        record: The locked election record.
        external: Ballot service and ledger.
        policy: Cycle constants.
        now: Wall-clock time to evaluate windows against (default: now).
        actor: Identity that triggered the step, recorded on events.

    Returns:
        The phase after the step.
    """
    current = _resolve_now(now)
    phase = record.phase
    if phase == ElectionPhase.CREATED:
        if _reached(current, record.nomination_open):
            _transition(session, record, ElectionPhase.NOMINATING, actor=actor)
    elif phase == ElectionPhase.NOMINATING:
        if _reached(current, record.nomination_close):
            await _close_nominations(session, record, external, policy, actor)
    elif phase == ElectionPhase.NOMINATIONS_CLOSED:
        if _reached(current, record.voting_open) and record.voting_close is not None:
            await external.ballots.open_voting(record.ballot_id, record.voting_close)
            _transition(session, record, ElectionPhase.VOTING, actor=actor)
    elif phase == ElectionPhase.VOTING:
        if _reached(current, record.voting_close):
            await _synchronize_voters(session, record, external, policy, actor)
    elif phase == ElectionPhase.CLEANING:
        await _run_cleanup(session, record, policy, actor)
    return record.phase


async def setup_election(
    session: AsyncSession,
    external: ExternalServices,
    policy: CyclePolicy,
    *,
    actor: str | None = None,
) -> ElectionRecord:
    """One-time system setup: enroll the operator and move to ``clean``.

    Raises:
        PhaseViolation: If setup already ran.
    """
    async with unit_of_work(session):
        record = await load_election(session)
        if record.phase != ElectionPhase.UNINITIALIZED:
            msg = "Election is already set up"
            raise PhaseViolation(msg)
        await external.ballots.register_voter(policy.operator, policy.treasury_symbol, policy.operator)
        _transition(session, record, ElectionPhase.CLEAN, actor=actor)
    return record


def _check_ready_for_cycle(phase: ElectionPhase) -> None:
    if phase == ElectionPhase.UNINITIALIZED:
        msg = "Election is not set up"
    elif phase == ElectionPhase.VOTING_CONCLUDED:
        msg = "Cleanup required before a new cycle"
    elif phase == ElectionPhase.CLEANING:
        msg = "Cleanup in progress"
    elif phase != ElectionPhase.CLEAN:
        msg = "An election is already running"
    else:
        return
    raise PhaseViolation(msg)


def _check_windows(now: datetime, windows: tuple[datetime, datetime, datetime, datetime]) -> None:
    nomination_open, nomination_close, voting_open, voting_close = windows
    if now > nomination_open:
        msg = "Election dates need to be in the future"
    elif nomination_open >= nomination_close:
        msg = "Nomination period must have a positive duration"
    elif nomination_close >= voting_open:
        msg = "Voting period can't overlap with the nomination period"
    elif voting_open >= voting_close:
        msg = "Voting period must have a positive duration"
    else:
        return
    raise PreconditionViolation(msg)


async def create_cycle(
    session: AsyncSession,
    *,
    title: str,
    description: str,
    content: str,
    nomination_open: datetime,
    nomination_close: datetime,
    voting_open: datetime,
    voting_close: datetime,
    now: datetime | None = None,
    actor: str | None = None,
) -> ElectionRecord:
    """Open a new election cycle and reserve the next ballot id.

    Timestamps without a time zone are taken as UTC.

    Raises:
        PhaseViolation: If the election is not in ``clean``.
        PreconditionViolation: If title/description are empty or the windows
            are not strictly increasing future times.
    """
    async with unit_of_work(session):
        record = await load_election(session)
        _check_ready_for_cycle(record.phase)
        if not title.strip():
            msg = "Title is required"
            raise PreconditionViolation(msg)
        if not description.strip():
            msg = "Description is required"
            raise PreconditionViolation(msg)
        windows = (
            _as_utc(nomination_open),
            _as_utc(nomination_close),
            _as_utc(voting_open),
            _as_utc(voting_close),
        )
        _check_windows(_resolve_now(now), windows)

        record.ballot_id += 1
        record.title = title
        record.description = description
        record.content = content
        record.nomination_open, record.nomination_close, record.voting_open, record.voting_close = windows
        _transition(session, record, ElectionPhase.CREATED, actor=actor, detail={"title": title})
    return record


async def cancel_cycle(session: AsyncSession, *, actor: str | None = None) -> ElectionRecord:
    """Cancel the running cycle before its ballot exists.

    Releases the reserved ballot id and routes through cleanup.

    Raises:
        PhaseViolation: If no cycle is running or its ballot was already created.
    """
    async with unit_of_work(session):
        record = await load_election(session)
        if not record.phase.cancellable:
            if record.phase in (ElectionPhase.UNINITIALIZED, ElectionPhase.CLEAN):
                msg = "No election is running"
            else:
                msg = "Can't cancel once the ballot is created"
            raise PhaseViolation(msg)
        _transition(session, record, ElectionPhase.CLEANING, actor=actor, detail={"cancelled": True})
        record.ballot_id -= 1
    return record


async def advance(
    session: AsyncSession,
    external: ExternalServices,
    policy: CyclePolicy,
    *,
    now: datetime | None = None,
    actor: str | None = None,
) -> AdvanceResponse:
    """Run one advance step as its own unit of work. Safe to call redundantly."""
    async with unit_of_work(session):
        record = await load_election(session)
        previous = record.phase
        await refresh_state(session, record, external, policy, now=now, actor=actor)
    return AdvanceResponse(
        phase=record.phase,
        previous_phase=previous,
        changed=record.phase != previous,
        pending_voter_count=len(record.pending_voters),
    )


async def end_cycle(
    session: AsyncSession,
    external: ExternalServices,
    policy: CyclePolicy,
    *,
    now: datetime | None = None,
    actor: str | None = None,
) -> ElectionRecord:
    """Move a concluded cycle into cleanup and run the first cleanup step.

    Raises:
        PhaseViolation: If voting has not concluded.
    """
    async with unit_of_work(session):
        record = await load_election(session)
        if record.phase != ElectionPhase.VOTING_CONCLUDED:
            msg = "Voting needs to have concluded"
            raise PhaseViolation(msg)
        _transition(session, record, ElectionPhase.CLEANING, actor=actor)
        await refresh_state(session, record, external, policy, now=now, actor=actor)
    return record


async def cleanup_step(session: AsyncSession, policy: CyclePolicy, *, actor: str | None = None) -> ElectionRecord:
    """Run one bounded cleanup step.

    Raises:
        PhaseViolation: If the election is not in ``cleaning``.
    """
    async with unit_of_work(session):
        record = await load_election(session)
        if record.phase != ElectionPhase.CLEANING:
            msg = "No cleanup in progress"
            raise PhaseViolation(msg)
        await _run_cleanup(session, record, policy, actor)
    return record


async def reset_election(session: AsyncSession) -> ElectionPhase | None:
    """Administrative reset: delete the election record.

    Nominations and profiles are removed with it.  Voter registrations and the
    event log are kept.  The next access recreates the record as
    ``uninitialized``.

    Returns:
        The phase the deleted record was in, or None if there was none.
    """
    async with unit_of_work(session):
        record = await get_election(session)
        if record is None:
            return None
        previous = record.phase
        await session.execute(delete(NomineeProfile))
        await session.execute(delete(Nomination))
        await session.delete(record)
    logger.warning("Election record reset (was {})", previous)
    return previous


async def get_election_state(session: AsyncSession) -> ElectionStateResponse:
    """Snapshot of the election record; an absent record reads as uninitialized."""
    record = await get_election(session)
    if record is None:
        return ElectionStateResponse(
            ballot_id=0,
            phase=ElectionPhase.UNINITIALIZED,
            title="",
            description="",
            content="",
            nomination_count=0,
            pending_voter_count=0,
            synced_voter_count=0,
        )
    return build_state_response(record)


def build_state_response(record: ElectionRecord) -> ElectionStateResponse:
    return ElectionStateResponse(
        ballot_id=record.ballot_id,
        phase=record.phase,
        title=record.title,
        description=record.description,
        content=record.content,
        nomination_count=record.nomination_count,
        pending_voter_count=len(record.pending_voters),
        synced_voter_count=len(record.synced_voters),
        nomination_open=record.nomination_open,
        nomination_close=record.nomination_close,
        voting_open=record.voting_open,
        voting_close=record.voting_close,
    )


async def list_events(
    session: AsyncSession,
    *,
    ballot_id: int | None = None,
    page: int = 1,
    page_size: int = 20,
) -> tuple[list[ElectionEvent], int]:
    """List transition events newest first.

    Returns:
        Tuple of (events list, total count).
    """
    query = select(ElectionEvent)
    count_query = select(func.count(ElectionEvent.id))
    if ballot_id is not None:
        query = query.where(ElectionEvent.ballot_id == ballot_id)
        count_query = count_query.where(ElectionEvent.ballot_id == ballot_id)

    total = (await session.execute(count_query)).scalar_one()
    offset = (page - 1) * page_size
    result = await session.execute(
        query.order_by(ElectionEvent.occurred_at.desc()).offset(offset).limit(page_size)
    )
    return list(result.scalars().all()), total


async def election_advance_loop(
    interval: int,
    external: ExternalServices,
    policy: CyclePolicy,
) -> None:
    """Background asyncio loop that advances the election periodically.

    Args:
        interval: Seconds between advance calls.
        external: Ballot service and ledger.
        policy: Cycle constants.
    """
    from election_cycle.core.database import get_session_factory

    logger.info("Election auto-advance loop started (interval={}s)", interval)

    while True:
        try:
            await asyncio.sleep(interval)
            factory = get_session_factory()
            async with factory() as session:
                result = await advance(session, external, policy, actor=policy.operator)
                if result.changed:
                    logger.info("Auto-advance moved election {} -> {}", result.previous_phase, result.phase)
        except asyncio.CancelledError:
            logger.info("Election auto-advance loop cancelled")
            break
        except Exception:
            logger.exception("Election auto-advance loop error")
