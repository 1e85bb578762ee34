"""FastAPI application factory.

Creates the FastAPI app with lifespan management, exception handlers,
and OpenAPI metadata.
"""

import asyncio
import contextlib
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from election_cycle import __version__
from election_cycle.core.config import get_settings
from election_cycle.core.database import dispose_engine, init_engine
from election_cycle.core.logging import setup_logging
from election_cycle.lib.ballot_service import ExternalServiceError, build_external_services
from election_cycle.lib.cycle import CyclePolicy, PhaseViolation, RecordNotFoundError


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
    """Manage application lifecycle: engine, outbound clients and the advance loop."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_dir)
    init_engine(settings.database_url, echo=False, schema=settings.database_schema)
    external = build_external_services(settings)
    app.state.external_services = external

    advance_task = None
    if settings.auto_advance_enabled:
        from election_cycle.services.election_service import election_advance_loop

        advance_task = asyncio.create_task(
            election_advance_loop(settings.auto_advance_interval, external, CyclePolicy.from_settings(settings))
        )

    yield

    if advance_task is not None:
        advance_task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await advance_task

    await external.close()
    await dispose_engine()


def register_exception_handlers(app: FastAPI) -> None:
    """Map rejected election commands and outbound failures to HTTP errors."""

    @app.exception_handler(RecordNotFoundError)
    async def not_found_handler(request: Request, exc: RecordNotFoundError) -> JSONResponse:
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    @app.exception_handler(PhaseViolation)
    async def phase_violation_handler(request: Request, exc: PhaseViolation) -> JSONResponse:
        return JSONResponse(status_code=409, content={"detail": str(exc)})

    @app.exception_handler(ValueError)
    async def value_error_handler(request: Request, exc: ValueError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    @app.exception_handler(ExternalServiceError)
    async def external_service_handler(request: Request, exc: ExternalServiceError) -> JSONResponse:
        return JSONResponse(
            status_code=502,
            content={"detail": f"Upstream {exc.service_name} call failed: {exc.message}"},
        )


def create_app() -> FastAPI:
    """Create and configure the FastAPI application.

    Returns:
        Configured FastAPI application instance.
    """
    settings = get_settings()

    app = FastAPI(
        title="Election Cycle API",
        description="Recurring nomination, ballot, voting and cleanup cycles driven by advance triggers",
        version=__version__,
        lifespan=lifespan,
    )

    register_exception_handlers(app)

    from election_cycle.api.router import create_router, setup_middleware

    setup_middleware(app, settings)
    app.include_router(create_router(settings))

    return app
