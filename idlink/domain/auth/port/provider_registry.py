"""Provider registry port for the auth domain."""

from abc import abstractmethod
from collections.abc import Iterable
from typing import Protocol

from idlink.domain.auth.model.account import Account
from idlink.domain.auth.model.provider import ProviderLabel
from idlink.domain.auth.port.identity_provider import IdentityProvider
from idlink.domain.shared.port import Port


class ProviderRegistry(Port, Protocol):
    """Registry of configured identity providers.

    Only fully configured providers are ever resolvable.
    """

    @abstractmethod
    def resolve(self, name: str) -> IdentityProvider | None:
        """Get an identity provider by name, or None if it is not available."""
        ...

    @abstractmethod
    def available_providers(self) -> list[str]:
        """Names of all available providers."""
        ...

    @abstractmethod
    def list_available(self, registration_only: bool = False) -> list[ProviderLabel]:
        """Available providers as (name, label), sorted by label.

        Args:
            registration_only: Only include providers that support registration
        """
        ...

    def is_available(self, name: str) -> bool:
        return name in self.available_providers()

    def supports_registration(self, name: str) -> bool:
        provider = self.resolve(name)
        return provider is not None and provider.supports_registration

    def labels_for_accounts(
        self, accounts: Iterable[Account], registration_only: bool = False
    ) -> list[ProviderLabel]:
        """Available providers restricted to those the given accounts are linked to."""
        linked = {a.linked_provider_name for a in accounts if a.is_linked}
        return [p for p in self.list_available(registration_only) if p.name in linked]
