"""Authentication API endpoints.

POST /auth/login, POST /auth/refresh, GET /auth/me,
GET /accounts, POST /accounts, GET /health, GET /info.
"""

import math
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.ext.asyncio import AsyncSession

from election_cycle import __version__
from election_cycle.core.config import Settings, get_settings
from election_cycle.core.dependencies import get_async_session, get_current_account, require_role
from election_cycle.models.account import Account
from election_cycle.schemas.auth import AccountCreateRequest, AccountResponse, RefreshRequest, TokenResponse
from election_cycle.schemas.common import PaginationMeta, PaginationParams
from election_cycle.services import auth_service

router = APIRouter(tags=["auth"])


@router.get("/health", status_code=200)
async def health_check() -> dict:
    """Health check endpoint (no authentication required)."""
    return {"status": "healthy"}


@router.get("/info", status_code=200)
async def info(
    settings: Annotated[Settings, Depends(get_settings)],
) -> dict:
    """Return application version, environment and operator identity."""
    return {
        "version": __version__,
        "environment": settings.environment,
        "operator": settings.operator_identity,
    }


@router.post("/auth/login", response_model=TokenResponse)
async def login(
    form_data: Annotated[OAuth2PasswordRequestForm, Depends()],
    session: Annotated[AsyncSession, Depends(get_async_session)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> TokenResponse:
    """Authenticate an identity and return JWT tokens."""
    account = await auth_service.authenticate_account(session, form_data.username, form_data.password)
    if account is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect identity or password",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return auth_service.generate_tokens(account, settings)


@router.post("/auth/refresh", response_model=TokenResponse)
async def refresh_token(
    request: RefreshRequest,
    session: Annotated[AsyncSession, Depends(get_async_session)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> TokenResponse:
    """Refresh an access token using a refresh token."""
    try:
        return await auth_service.refresh_access_token(session, request.refresh_token, settings)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=str(e)) from e


@router.get("/auth/me", response_model=AccountResponse)
async def get_me(
    current_account: Annotated[Account, Depends(get_current_account)],
) -> Account:
    """Get the currently authenticated account."""
    return current_account


@router.get("/accounts", response_model=dict)
async def list_accounts(
    _current_account: Annotated[Account, Depends(require_role("operator"))],
    session: Annotated[AsyncSession, Depends(get_async_session)],
    pagination: Annotated[PaginationParams, Depends()],
) -> dict:
    """List all accounts (operator only)."""
    accounts, total = await auth_service.list_accounts(session, pagination.page, pagination.page_size)
    return {
        "items": [AccountResponse.model_validate(a) for a in accounts],
        "pagination": PaginationMeta(
            total=total,
            page=pagination.page,
            page_size=pagination.page_size,
            total_pages=max(1, math.ceil(total / pagination.page_size)),
        ),
    }


@router.post("/accounts", response_model=AccountResponse, status_code=201)
async def create_account(
    request: AccountCreateRequest,
    _current_account: Annotated[Account, Depends(require_role("operator"))],
    session: Annotated[AsyncSession, Depends(get_async_session)],
) -> Account:
    """Create a new account (operator only)."""
    try:
        return await auth_service.create_account(session, request)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e)) from e
