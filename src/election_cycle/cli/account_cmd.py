"""Account management CLI commands."""

import asyncio

import typer

account_app = typer.Typer()


@account_app.command("create")
def create_account(
    identity: str = typer.Option(..., prompt=True, help="Account identity"),
    password: str = typer.Option(..., prompt=True, hide_input=True, confirmation_prompt=True, help="Password"),
    role: str = typer.Option("member", prompt=True, help="Account role (operator/member)"),
    if_not_exists: bool = typer.Option(
        False,
        "--if-not-exists",
        help="Exit successfully if the identity already exists (idempotent mode)",
    ),
) -> None:
    """Create a new account interactively."""
    asyncio.run(_create_account(identity, password, role, if_not_exists=if_not_exists))


async def _create_account(
    identity: str,
    password: str,
    role: str,
    *,
    if_not_exists: bool = False,
) -> None:
    """Async implementation of account creation."""
    from pydantic import ValidationError

    from election_cycle.core.config import get_settings
    from election_cycle.core.database import dispose_engine, get_session_factory, init_engine
    from election_cycle.schemas.auth import AccountCreateRequest
    from election_cycle.services.auth_service import create_account

    try:
        request = AccountCreateRequest(identity=identity, password=password, role=role)
    except ValidationError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1) from e

    settings = get_settings()
    init_engine(settings.database_url, schema=settings.database_schema)

    try:
        factory = get_session_factory()
        async with factory() as session:
            account = await create_account(session, request)
            typer.echo(f"Account '{account.identity}' created with role '{account.role}'")
    except ValueError as e:
        if if_not_exists and "already exists" in str(e):
            typer.echo(f"Account '{identity}' already exists, skipping (--if-not-exists)")
            return
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1) from e
    finally:
        await dispose_engine()


@account_app.command("list")
def list_accounts() -> None:
    """List all accounts."""
    asyncio.run(_list_accounts())


async def _list_accounts() -> None:
    """Async implementation of account listing."""
    from election_cycle.core.config import get_settings
    from election_cycle.core.database import dispose_engine, get_session_factory, init_engine
    from election_cycle.services.auth_service import list_accounts

    settings = get_settings()
    init_engine(settings.database_url, schema=settings.database_schema)

    try:
        factory = get_session_factory()
        async with factory() as session:
            accounts, total = await list_accounts(session, page_size=1000)
            typer.echo(f"{'Identity':<24} {'Role':<10} {'Active':<8}")
            typer.echo("-" * 44)
            for account in accounts:
                typer.echo(f"{account.identity:<24} {account.role:<10} {account.is_active!s:<8}")
            typer.echo(f"\nTotal: {total}")
    finally:
        await dispose_engine()
