"""CLI commands for the election cycle.

Operator commands (setup, create, cancel, end, cleanup, reset) run under the
configured operator identity; ``advance`` and ``status`` are open to anyone.
"""

import asyncio
from collections.abc import Awaitable, Callable
from datetime import datetime
from typing import TYPE_CHECKING, Annotated, Any

import typer
from loguru import logger

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from election_cycle.lib.ballot_service import ExternalServices
    from election_cycle.lib.cycle import CyclePolicy

    Operation = Callable[[AsyncSession, ExternalServices, CyclePolicy], Awaitable[Any]]

election_app = typer.Typer()


def _parse_datetime(value: str, option: str) -> datetime:
    try:
        return datetime.fromisoformat(value)
    except ValueError as e:
        typer.echo(f"Error: {option} must be an ISO 8601 timestamp, got '{value}'", err=True)
        raise typer.Exit(code=1) from e


async def _run(operation: "Operation") -> Any:
    """Run ``operation`` against a fresh engine and the configured outbound clients.

    Rejected commands and outbound failures are reported and exit with code 1.
    """
    from election_cycle.core.config import get_settings
    from election_cycle.core.database import dispose_engine, get_session_factory, init_engine
    from election_cycle.lib.ballot_service import ExternalServiceError, build_external_services
    from election_cycle.lib.cycle import CyclePolicy, PreconditionViolation

    settings = get_settings()
    init_engine(settings.database_url, echo=False, schema=settings.database_schema)
    external = build_external_services(settings)

    try:
        factory = get_session_factory()
        async with factory() as session:
            return await operation(session, external, CyclePolicy.from_settings(settings))
    except (PreconditionViolation, ExternalServiceError) as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1) from e
    finally:
        await external.close()
        await dispose_engine()


def _echo_state(state: Any) -> None:
    typer.echo(f"Ballot:       {state.ballot_id}")
    typer.echo(f"Phase:        {state.phase}")
    if state.title:
        typer.echo(f"Title:        {state.title}")
    typer.echo(f"Nominations:  {state.nomination_count}")
    typer.echo(f"Voters:       {state.pending_voter_count} pending, {state.synced_voter_count} synced")
    for label, value in (
        ("Nominations open", state.nomination_open),
        ("Nominations close", state.nomination_close),
        ("Voting opens", state.voting_open),
        ("Voting closes", state.voting_close),
    ):
        if value is not None:
            typer.echo(f"{label + ':':<18} {value.isoformat()}")


@election_app.command("setup")
def setup() -> None:
    """One-time setup: enroll the operator with the ballot service."""
    asyncio.run(_setup_impl())


async def _setup_impl() -> None:
    from election_cycle.services import election_service

    async def operation(session, external, policy):  # noqa: ANN001, ANN202
        return await election_service.setup_election(session, external, policy, actor=policy.operator)

    record = await _run(operation)
    typer.echo(f"Election set up, phase '{record.phase}'")


@election_app.command("create")
def create(
    title: Annotated[str, typer.Option("--title", help="Election title")],
    description: Annotated[str, typer.Option("--description", help="Election description")],
    nomination_open: Annotated[str, typer.Option("--nomination-open", help="ISO timestamp nominations open")],
    nomination_close: Annotated[str, typer.Option("--nomination-close", help="ISO timestamp nominations close")],
    voting_open: Annotated[str, typer.Option("--voting-open", help="ISO timestamp voting opens")],
    voting_close: Annotated[str, typer.Option("--voting-close", help="ISO timestamp voting closes")],
    content: Annotated[str, typer.Option("--content", help="Link to further details")] = "",
) -> None:
    """Open a new election cycle. Timestamps without an offset are UTC."""
    windows = (
        _parse_datetime(nomination_open, "--nomination-open"),
        _parse_datetime(nomination_close, "--nomination-close"),
        _parse_datetime(voting_open, "--voting-open"),
        _parse_datetime(voting_close, "--voting-close"),
    )
    asyncio.run(_create_impl(title, description, content, windows))


async def _create_impl(
    title: str,
    description: str,
    content: str,
    windows: tuple[datetime, datetime, datetime, datetime],
) -> None:
    from election_cycle.services import election_service

    async def operation(session, external, policy):  # noqa: ANN001, ANN202
        return await election_service.create_cycle(
            session,
            title=title,
            description=description,
            content=content,
            nomination_open=windows[0],
            nomination_close=windows[1],
            voting_open=windows[2],
            voting_close=windows[3],
            actor=policy.operator,
        )

    record = await _run(operation)
    typer.echo(f"Created election cycle for ballot {record.ballot_id}: {record.title}")


@election_app.command("cancel")
def cancel() -> None:
    """Cancel the running cycle before its ballot is created."""
    asyncio.run(_cancel_impl())


async def _cancel_impl() -> None:
    from election_cycle.services import election_service

    async def operation(session, external, policy):  # noqa: ANN001, ANN202
        return await election_service.cancel_cycle(session, actor=policy.operator)

    record = await _run(operation)
    typer.echo(f"Cycle cancelled, phase '{record.phase}'")


@election_app.command("advance")
def advance(
    steps: Annotated[int, typer.Option("--steps", min=1, help="Maximum advance calls to make")] = 1,
) -> None:
    """Run advance steps until one changes neither the phase nor the pending voters."""
    asyncio.run(_advance_impl(steps))


async def _advance_impl(steps: int) -> None:
    from election_cycle.services import election_service

    async def operation(session, external, policy):  # noqa: ANN001, ANN202
        results = []
        for _ in range(steps):
            result = await election_service.advance(session, external, policy)
            if results and not result.changed and result.pending_voter_count == results[-1].pending_voter_count:
                break
            results.append(result)
        return results

    results = await _run(operation)
    last = results[-1]
    logger.debug("Ran {} advance step(s)", len(results))
    typer.echo(f"Phase '{results[0].previous_phase}' -> '{last.phase}' ({last.pending_voter_count} voters pending)")


@election_app.command("end")
def end() -> None:
    """Move a concluded cycle into cleanup."""
    asyncio.run(_end_impl())


async def _end_impl() -> None:
    from election_cycle.services import election_service

    async def operation(session, external, policy):  # noqa: ANN001, ANN202
        return await election_service.end_cycle(session, external, policy, actor=policy.operator)

    record = await _run(operation)
    typer.echo(f"Cycle ended, phase '{record.phase}'")


@election_app.command("cleanup")
def cleanup() -> None:
    """Run one cleanup step."""
    asyncio.run(_cleanup_impl())


async def _cleanup_impl() -> None:
    from election_cycle.services import election_service

    async def operation(session, external, policy):  # noqa: ANN001, ANN202
        return await election_service.cleanup_step(session, policy, actor=policy.operator)

    record = await _run(operation)
    typer.echo(
        f"Cleanup step done, phase '{record.phase}' "
        f"({len(record.pending_voters)} pending, {len(record.synced_voters)} synced)"
    )


@election_app.command("status")
def status() -> None:
    """Show the current election state."""
    asyncio.run(_status_impl())


async def _status_impl() -> None:
    from election_cycle.services import election_service

    async def operation(session, external, policy):  # noqa: ANN001, ANN202
        return await election_service.get_election_state(session)

    _echo_state(await _run(operation))


@election_app.command("reset")
def reset(
    yes: Annotated[bool, typer.Option("--yes", help="Skip the confirmation prompt")] = False,
) -> None:
    """Delete the election record, its nominations and profiles."""
    if not yes:
        typer.confirm("This deletes the election record. Continue?", abort=True)
    asyncio.run(_reset_impl())


async def _reset_impl() -> None:
    from election_cycle.services import election_service

    async def operation(session, external, policy):  # noqa: ANN001, ANN202
        return await election_service.reset_election(session)

    previous = await _run(operation)
    if previous is None:
        typer.echo("No election record to reset")
    else:
        typer.echo(f"Election record reset (was '{previous}')")
