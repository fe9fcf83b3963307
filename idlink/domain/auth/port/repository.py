"""Repository ports for the auth domain."""

from abc import abstractmethod
from typing import Protocol

from idlink.domain.auth.model.account import Account
from idlink.domain.shared.port import Port


class AccountRepository(Port, Protocol):
    """Host-owned account store.

    The auth domain only changes an account's provider linkage and its
    last-active timestamp.
    """

    @abstractmethod
    async def get(self, account_id: str) -> Account | None:
        """Get an account by ID."""
        ...

    @abstractmethod
    async def find_by_provider_identity(
        self, provider_name: str, provider_user_id: str
    ) -> Account | None:
        """Get the account linked to a (provider, provider user id) pair."""
        ...

    @abstractmethod
    async def find_by_email(self, email: str) -> Account | None: ...

    @abstractmethod
    async def find_by_username(self, username: str) -> Account | None: ...

    @abstractmethod
    async def save(self, account: Account) -> None:
        """Persist linkage and last-active changes."""
        ...
