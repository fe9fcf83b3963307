"""In-memory account store and registration gateway."""

import logging
from uuid import uuid4

from idlink.domain.auth.model.account import Account
from idlink.domain.auth.port.registration import (
    RegistrationGateway,
    RegistrationRequest,
    RegistrationResult,
)
from idlink.domain.auth.port.repository import AccountRepository

logger = logging.getLogger(__name__)


class InMemoryAccountRepository(AccountRepository):
    """Account store kept in a dict. For development and tests.

    Stores copies so callers only change stored accounts through ``save``.
    """

    def __init__(self, accounts: list[Account] | None = None) -> None:
        self._accounts: dict[str, Account] = {}
        for account in accounts or []:
            self._accounts[account.id] = account.model_copy(deep=True)

    async def get(self, account_id: str) -> Account | None:
        return self._copy(self._accounts.get(account_id))

    async def find_by_provider_identity(
        self, provider_name: str, provider_user_id: str
    ) -> Account | None:
        return self._first(lambda a: a.is_linked_to(provider_name, provider_user_id))

    async def find_by_email(self, email: str) -> Account | None:
        if not email:
            return None
        wanted = email.casefold()
        return self._first(lambda a: a.email.casefold() == wanted)

    async def find_by_username(self, username: str) -> Account | None:
        if not username:
            return None
        return self._first(lambda a: a.username == username)

    async def save(self, account: Account) -> None:
        self._accounts[account.id] = account.model_copy(deep=True)

    def _first(self, predicate) -> Account | None:
        return self._copy(next((a for a in self._accounts.values() if predicate(a)), None))

    @staticmethod
    def _copy(account: Account | None) -> Account | None:
        return account.model_copy(deep=True) if account is not None else None


class InMemoryRegistrationGateway(RegistrationGateway):
    """Registers new accounts straight into an InMemoryAccountRepository.

    New accounts start unverified and unapproved, as after a normal
    registration form.
    """

    def __init__(self, accounts: InMemoryAccountRepository) -> None:
        self._accounts = accounts

    async def request_registration(self, request: RegistrationRequest) -> RegistrationResult:
        if await self._accounts.find_by_username(request.username) is not None:
            return RegistrationResult(success=False, message="Username already exists")
        if await self._accounts.find_by_email(request.email) is not None:
            return RegistrationResult(success=False, message="Email address already exists")

        account = Account(
            id=str(uuid4()),
            username=request.username,
            email=request.email,
            real_name=request.display_name,
        )
        await self._accounts.save(account)
        logger.info("Registered new account %s (%s)", account.username, account.id)
        return RegistrationResult(success=True, account_id=account.id)
