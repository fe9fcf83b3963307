from dishka import AsyncContainer, make_async_container

from idlink.config import Config
from idlink.domain.auth.port.registration import RegistrationGateway
from idlink.domain.auth.port.repository import AccountRepository
from idlink.domain.auth.util.di import AuthProvider
from idlink.infrastructure.account.memory import (
    InMemoryAccountRepository,
    InMemoryRegistrationGateway,
)
from idlink.infrastructure.auth.di import AuthInfraProvider


def create_container(
    config: Config | None = None,
    accounts: AccountRepository | None = None,
    registration: RegistrationGateway | None = None,
) -> AsyncContainer:
    """Build the DI container.

    The host application hands in its own account store and registration
    step; without them an in-memory store is used.
    """
    # Pydantic Settings populates from env vars at runtime
    config = config or Config()  # type: ignore[call-arg]

    if accounts is None:
        memory = InMemoryAccountRepository()
        accounts = memory
        registration = registration or InMemoryRegistrationGateway(memory)
    if registration is None:
        raise ValueError("A RegistrationGateway is required with a custom AccountRepository")

    return make_async_container(
        AuthProvider(),
        AuthInfraProvider(),
        context={
            Config: config,
            AccountRepository: accounts,
            RegistrationGateway: registration,
        },
    )
