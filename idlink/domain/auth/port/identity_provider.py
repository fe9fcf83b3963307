"""Identity provider port for the auth domain."""

from abc import abstractmethod
from typing import Protocol

from idlink.domain.auth.model.flow import AuthorizationRequest
from idlink.domain.auth.model.identity import CanonicalIdentity, ProviderToken
from idlink.domain.auth.model.provider import ProviderConfig
from idlink.domain.shared.port import Port


class IdentityProvider(Port, Protocol):
    """Port for one OAuth2/OIDC identity provider.

    Implementations are adapters in infrastructure/ (e.g. GithubIdentityProvider).
    Each adapter owns a fixed table mapping its provider's profile fields onto
    CanonicalIdentity.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Stable provider name (e.g. 'Github'), used as storage key and URL parameter."""
        ...

    @property
    @abstractmethod
    def config(self) -> ProviderConfig: ...

    @property
    def sign_in_label(self) -> str:
        return self.config.sign_in_label

    @property
    def supports_registration(self) -> bool:
        """False when the provider cannot guarantee both an email and a username."""
        return self.config.supports_registration

    @abstractmethod
    def build_authorization_request(self) -> AuthorizationRequest:
        """Build the redirect to the provider's authorize endpoint.

        Generates a fresh unguessable state and, when the provider is
        configured for PKCE, a verifier whose S256 challenge is sent along.
        """
        ...

    @abstractmethod
    async def exchange_code(self, code: str, pkce_verifier: str | None = None) -> ProviderToken:
        """Exchange an authorization code for an access token.

        Raises:
            ProviderError: If the token endpoint fails or is unreachable
        """
        ...

    @abstractmethod
    async def fetch_identity(self, token: ProviderToken) -> CanonicalIdentity:
        """Fetch the resource owner's profile and map it to a CanonicalIdentity.

        Raises:
            ProviderError: If the resource owner endpoint fails
            IdentityDataError: If the profile lacks a stable user id
        """
        ...
