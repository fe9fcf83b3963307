"""Registration handoff port."""

from abc import abstractmethod
from typing import Protocol

from idlink.domain.shared.model.value import ValueObject
from idlink.domain.shared.port import Port


class RegistrationRequest(ValueObject):
    username: str
    email: str
    display_name: str
    password: str
    comments: str = ""


class RegistrationResult(ValueObject):
    success: bool
    account_id: str | None = None
    message: str = ""


class RegistrationGateway(Port, Protocol):
    """The host application's own registration step.

    Receives identity fields from a provider and creates the (unverified)
    account the host's usual way.
    """

    @abstractmethod
    async def request_registration(self, request: RegistrationRequest) -> RegistrationResult: ...
