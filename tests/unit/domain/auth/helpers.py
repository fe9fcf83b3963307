"""Shared factories for auth domain tests."""

from unittest.mock import AsyncMock, MagicMock

from pydantic import SecretStr

from idlink.domain.auth.model.account import Account
from idlink.domain.auth.model.flow import AuthorizationRequest
from idlink.domain.auth.model.identity import CanonicalIdentity, ProviderToken

NOW = 1_700_000_000.0


def make_provider(
    name: str = "Github",
    identity: CanonicalIdentity | None = None,
    supports_registration: bool = True,
    state: str = "stored-state",
    pkce_verifier: str | None = None,
) -> MagicMock:
    """Create a mock identity provider."""
    provider = MagicMock()
    provider.name = name
    provider.sign_in_label = name
    provider.supports_registration = supports_registration
    provider.build_authorization_request = MagicMock(
        return_value=AuthorizationRequest(
            url=f"https://{name.lower()}.example/authorize?state={state}",
            state=state,
            pkce_verifier=pkce_verifier,
        )
    )
    provider.exchange_code = AsyncMock(return_value=make_token())
    provider.fetch_identity = AsyncMock(return_value=identity or make_identity(provider_name=name))
    return provider


def make_registry(*providers: MagicMock) -> MagicMock:
    """Create a mock registry resolving the given providers by name."""
    by_name = {p.name: p for p in providers}
    registry = MagicMock()
    registry.resolve.side_effect = by_name.get
    registry.is_available.side_effect = lambda name: name in by_name
    return registry


def make_token(access_token: str = "gho_access") -> ProviderToken:
    return ProviderToken(access_token=SecretStr(access_token))


def make_identity(
    provider_name: str = "Github",
    provider_user_id: str = "4711",
    username: str = "jane",
    email: str = "jane@example.org",
    display_name: str = "Jane Doe",
) -> CanonicalIdentity:
    return CanonicalIdentity(
        provider_name=provider_name,
        provider_user_id=provider_user_id,
        username=username,
        display_name=display_name,
        email=email,
    )


def make_account(
    id: str = "1",
    username: str = "jane",
    email: str = "jane@example.org",
    email_verified: bool = True,
    account_approved: bool = True,
    last_active_timestamp: int = 0,
    linked_provider_name: str = "",
    linked_provider_user_id: str = "",
) -> Account:
    return Account(
        id=id,
        username=username,
        email=email,
        email_verified=email_verified,
        account_approved=account_approved,
        last_active_timestamp=last_active_timestamp,
        linked_provider_name=linked_provider_name,
        linked_provider_user_id=linked_provider_user_id,
    )
