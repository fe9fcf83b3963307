import logging
from contextlib import asynccontextmanager

import logfire
from dishka.integrations.fastapi import setup_dishka
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.middleware.sessions import SessionMiddleware

from idlink.application.api.v1.errors import map_idlink_error
from idlink.application.api.v1.routes import auth
from idlink.application.di import create_container
from idlink.config import Config, configure_logging
from idlink.domain.auth.port.registration import RegistrationGateway
from idlink.domain.auth.port.repository import AccountRepository
from idlink.domain.shared.error import ConfigurationError, IdlinkError

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    await app.state.dishka_container.close()


def create_app(
    config: Config | None = None,
    accounts: AccountRepository | None = None,
    registration: RegistrationGateway | None = None,
) -> FastAPI:
    """Create FastAPI application."""
    # Pydantic Settings populates from env vars at runtime
    config = config or Config()  # type: ignore[call-arg]

    # Configure logging early
    configure_logging(config.logging)
    logger.info("Starting %s v%s", config.server.name, config.server.version)

    if not config.auth.session_secret:
        raise ConfigurationError("auth.session_secret must be set", code="missing_session_secret")

    app_instance = FastAPI(
        title=config.server.name,
        description=config.server.description,
        version=config.server.version,
        lifespan=lifespan,
    )

    # Instrument FastAPI for automatic tracing of HTTP requests
    logfire.instrument_httpx()
    logfire.instrument_fastapi(app_instance)

    # Signed cookie session holds flow state and the signed-in account id
    app_instance.add_middleware(
        SessionMiddleware,
        secret_key=config.auth.session_secret,
        same_site="lax",
    )

    # Setup dependency injection
    container = create_container(config, accounts=accounts, registration=registration)
    setup_dishka(container, app_instance)

    app_instance.include_router(auth.router, prefix="/api/v1")

    # Global idlink error handler - maps domain and infrastructure errors to HTTP responses
    @app_instance.exception_handler(IdlinkError)
    async def idlink_error_handler(request: Request, exc: IdlinkError):
        http_exc = map_idlink_error(exc)
        return JSONResponse(
            status_code=http_exc.status_code,
            content=http_exc.detail,
        )

    # Global exception handler - logs all unhandled exceptions
    @app_instance.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.exception(
            "Unhandled exception on %s %s",
            request.method,
            request.url.path,
        )
        return JSONResponse(
            status_code=500,
            content={"detail": "Internal server error"},
        )

    return app_instance
