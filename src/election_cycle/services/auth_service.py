"""Authentication and account management service.

Handles account authentication, creation, token generation and refresh, and
the "known identity" lookups the election commands depend on.
"""

from datetime import UTC, datetime

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from election_cycle.core.config import Settings
from election_cycle.core.security import (
    REFRESH_TOKEN_TYPE,
    create_access_token,
    create_refresh_token,
    decode_token,
    hash_password,
    verify_password,
)
from election_cycle.models.account import Account
from election_cycle.schemas.auth import AccountCreateRequest, TokenResponse


async def authenticate_account(session: AsyncSession, identity: str, password: str) -> Account | None:
    """Authenticate an account by identity and password.

    Args:
        session: The database session.
        identity: The identity to authenticate.
        password: The plaintext password.

    Returns:
        The Account if authentication succeeds, None otherwise.
    """
    account = await get_account_by_identity(session, identity)
    if account is None or not verify_password(password, account.hashed_password):
        return None
    if not account.is_active:
        return None
    account.last_login_at = datetime.now(UTC)
    await session.commit()
    return account


async def create_account(session: AsyncSession, request: AccountCreateRequest) -> Account:
    """Create a new account.

    Raises:
        ValueError: If the identity is already taken.
    """
    if await get_account_by_identity(session, request.identity) is not None:
        msg = f"Identity '{request.identity}' already exists"
        raise ValueError(msg)

    account = Account(
        identity=request.identity,
        hashed_password=hash_password(request.password),
        role=request.role,
    )
    session.add(account)
    await session.commit()
    await session.refresh(account)
    return account


async def list_accounts(session: AsyncSession, page: int = 1, page_size: int = 20) -> tuple[list[Account], int]:
    """List accounts with pagination.

    Returns:
        Tuple of (accounts list, total count).
    """
    count_result = await session.execute(select(func.count(Account.id)))
    total = count_result.scalar_one()

    offset = (page - 1) * page_size
    result = await session.execute(select(Account).offset(offset).limit(page_size).order_by(Account.created_at))
    return list(result.scalars().all()), total


async def get_account_by_identity(session: AsyncSession, identity: str) -> Account | None:
    result = await session.execute(select(Account).where(Account.identity == identity))
    return result.scalar_one_or_none()


async def identity_exists(session: AsyncSession, identity: str) -> bool:
    """Whether ``identity`` resolves to a real, active account."""
    result = await session.execute(
        select(func.count(Account.id)).where(Account.identity == identity, Account.is_active.is_(True))
    )
    return result.scalar_one() > 0


def generate_tokens(account: Account, settings: Settings) -> TokenResponse:
    """Generate access and refresh tokens for an account.

    Args:
        account: The authenticated account.
        settings: Application settings.

    Returns:
        Token response with access and refresh tokens.
    """
    access_token = create_access_token(
        subject=account.identity,
        role=account.role,
        secret_key=settings.jwt_secret_key,
        algorithm=settings.jwt_algorithm,
        expires_minutes=settings.jwt_access_token_expire_minutes,
    )
    refresh_token = create_refresh_token(
        subject=account.identity,
        secret_key=settings.jwt_secret_key,
        algorithm=settings.jwt_algorithm,
        expires_days=settings.jwt_refresh_token_expire_days,
    )
    return TokenResponse(
        access_token=access_token,
        refresh_token=refresh_token,
        expires_in=settings.jwt_access_token_expire_minutes * 60,
    )


async def refresh_access_token(
    session: AsyncSession,
    refresh_token_str: str,
    settings: Settings,
) -> TokenResponse:
    """Refresh an access token using a refresh token.

    Raises:
        ValueError: If the refresh token is invalid or the account is unknown or inactive.
    """
    try:
        payload = decode_token(refresh_token_str, settings.jwt_secret_key, settings.jwt_algorithm)
    except Exception as e:
        msg = "Invalid refresh token"
        raise ValueError(msg) from e

    if payload.get("type") != REFRESH_TOKEN_TYPE:
        msg = "Token is not a refresh token"
        raise ValueError(msg)

    identity = payload.get("sub")
    if identity is None:
        msg = "Invalid token payload"
        raise ValueError(msg)

    account = await get_account_by_identity(session, identity)
    if account is None or not account.is_active:
        msg = "Account not found or inactive"
        raise ValueError(msg)

    return generate_tokens(account, settings)
