"""DI provider for auth domain."""

from dishka import Provider, Scope, from_context, provide

from idlink.config import AuthConfig, Config
from idlink.domain.auth.command.login import CompleteLoginHandler, StartLoginHandler
from idlink.domain.auth.command.register import RequestRegistrationHandler
from idlink.domain.auth.port.provider_registry import ProviderRegistry
from idlink.domain.auth.port.repository import AccountRepository
from idlink.domain.auth.port.session_store import SessionStore
from idlink.domain.auth.service.connect import ConnectSessionService
from idlink.domain.auth.service.flow import AuthorizationFlowService
from idlink.domain.auth.service.reconciler import IdentityReconciler


class AuthProvider(Provider):
    """DI provider for auth domain services and handlers."""

    config = from_context(provides=Config, scope=Scope.APP)

    # Command Handlers
    start_login_handler = provide(StartLoginHandler, scope=Scope.REQUEST)
    complete_login_handler = provide(CompleteLoginHandler, scope=Scope.REQUEST)
    request_registration_handler = provide(RequestRegistrationHandler, scope=Scope.REQUEST)

    @provide(scope=Scope.APP)
    def get_auth_config(self, config: Config) -> AuthConfig:
        return config.auth

    @provide(scope=Scope.REQUEST)
    def get_flow_service(
        self, config: AuthConfig, registry: ProviderRegistry, sessions: SessionStore
    ) -> AuthorizationFlowService:
        """Provide AuthorizationFlowService."""
        return AuthorizationFlowService(
            _registry=registry,
            _sessions=sessions,
            _key_prefix=config.session_key_prefix,
        )

    @provide(scope=Scope.REQUEST)
    def get_connect_service(
        self, config: AuthConfig, sessions: SessionStore
    ) -> ConnectSessionService:
        """Provide ConnectSessionService."""
        return ConnectSessionService(
            _sessions=sessions,
            _timeout=config.connect_timeout,
            _key_prefix=config.session_key_prefix,
        )

    @provide(scope=Scope.REQUEST)
    def get_reconciler(
        self,
        config: AuthConfig,
        accounts: AccountRepository,
        registry: ProviderRegistry,
        connect: ConnectSessionService,
    ) -> IdentityReconciler:
        """Provide IdentityReconciler."""
        return IdentityReconciler(
            _accounts=accounts,
            _registry=registry,
            _connect=connect,
            _allow_registration=config.allow_registration,
            _sync_provider_email=config.sync_provider_email,
        )
