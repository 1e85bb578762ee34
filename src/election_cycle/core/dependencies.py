"""FastAPI dependency injection for database sessions, auth, and election collaborators.

Provides get_async_session, get_current_account, the require_role factory, and
the cycle policy and external service bundle every election command needs.
"""

from collections.abc import AsyncGenerator, Callable
from typing import Annotated, Any

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.ext.asyncio import AsyncSession

from election_cycle.core.config import Settings, get_settings
from election_cycle.core.database import get_session_factory
from election_cycle.core.security import ACCESS_TOKEN_TYPE, decode_token
from election_cycle.lib.ballot_service import ExternalServices
from election_cycle.lib.cycle import CyclePolicy
from election_cycle.models.account import Account

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="api/v1/auth/login")


async def get_async_session() -> AsyncGenerator[AsyncSession]:
    """Yield an async database session with per-request lifecycle."""
    factory = get_session_factory()
    async with factory() as session:
        yield session


async def get_current_account(
    token: Annotated[str, Depends(oauth2_scheme)],
    session: Annotated[AsyncSession, Depends(get_async_session)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> Account:
    """Decode the bearer token and return the authenticated account.

    Raises:
        HTTPException: 401 if the token is invalid or the account is unknown or inactive.
    """
    from election_cycle.services.auth_service import get_account_by_identity

    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    try:
        payload = decode_token(token, settings.jwt_secret_key, settings.jwt_algorithm)
        identity: str | None = payload.get("sub")
        if identity is None or payload.get("type") != ACCESS_TOKEN_TYPE:
            raise credentials_exception
    except Exception as exc:
        raise credentials_exception from exc

    account = await get_account_by_identity(session, identity)
    if account is None or not account.is_active:
        raise credentials_exception
    return account


def require_role(*roles: str) -> Callable[..., Any]:
    """Factory that creates a dependency requiring specific account roles.

    Args:
        *roles: Allowed role names ("operator", "member").

    Returns:
        A FastAPI dependency function that validates the account's role.
    """

    async def role_checker(
        current_account: Annotated[Account, Depends(get_current_account)],
    ) -> Account:
        if current_account.role not in roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Role '{current_account.role}' does not have access to this resource",
            )
        return current_account

    return role_checker


def get_cycle_policy(settings: Annotated[Settings, Depends(get_settings)]) -> CyclePolicy:
    return CyclePolicy.from_settings(settings)


def get_external_services(request: Request) -> ExternalServices:
    """Return the ballot service and ledger clients created at startup."""
    return request.app.state.external_services
