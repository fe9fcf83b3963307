"""DI provider for auth infrastructure."""

from collections.abc import AsyncIterator

import httpx
from dishka import Provider, Scope, from_context, provide
from starlette.requests import Request

from idlink.config import Config
from idlink.domain.auth.port.provider_registry import ProviderRegistry
from idlink.domain.auth.port.registration import RegistrationGateway
from idlink.domain.auth.port.repository import AccountRepository
from idlink.domain.auth.port.session_store import SessionStore
from idlink.infrastructure.auth.provider_registry import StaticProviderRegistry
from idlink.infrastructure.auth.session import StarletteSessionStore

# HTTP client timeout configuration
_HTTP_TIMEOUT = httpx.Timeout(
    connect=5.0,
    read=10.0,
    write=5.0,
    pool=5.0,
)


class AuthInfraProvider(Provider):
    """DI provider for auth infrastructure adapters."""

    request = from_context(provides=Request, scope=Scope.REQUEST)

    # Host-provided adapters
    accounts = from_context(provides=AccountRepository, scope=Scope.APP)
    registration = from_context(provides=RegistrationGateway, scope=Scope.APP)

    @provide(scope=Scope.APP)
    async def get_auth_http_client(self) -> AsyncIterator[httpx.AsyncClient]:
        """Shared HTTP client for provider calls (connection pooling)."""
        async with httpx.AsyncClient(timeout=_HTTP_TIMEOUT) as client:
            yield client

    @provide(scope=Scope.APP)
    def get_provider_registry(
        self, config: Config, http_client: httpx.AsyncClient
    ) -> ProviderRegistry:
        """Provide ProviderRegistry with every fully configured identity provider."""
        return StaticProviderRegistry.from_config(
            config.providers,
            redirect_uri=config.auth.redirect_uri,
            http_client=http_client,
        )

    @provide(scope=Scope.REQUEST)
    def get_session_store(self, request: Request) -> SessionStore:
        return StarletteSessionStore(request)
