"""Provider registry implementation."""

import logging
from collections.abc import Mapping
from typing import Any

import httpx

from idlink.domain.auth.model.provider import ProviderLabel
from idlink.domain.auth.port.identity_provider import IdentityProvider
from idlink.domain.auth.port.provider_registry import ProviderRegistry
from idlink.infrastructure.auth.base import OAuth2IdentityProvider
from idlink.infrastructure.auth.dropbox import DropboxIdentityProvider
from idlink.infrastructure.auth.generic import GenericIdentityProvider
from idlink.infrastructure.auth.github import GithubIdentityProvider
from idlink.infrastructure.auth.kanidm import KanidmIdentityProvider
from idlink.infrastructure.auth.spotify import SpotifyIdentityProvider
from idlink.infrastructure.auth.wordpress import WordPressIdentityProvider

logger = logging.getLogger(__name__)

# Every provider adapter this package ships. Add new adapters here.
PROVIDER_CLASSES: tuple[type[OAuth2IdentityProvider], ...] = (
    GenericIdentityProvider,
    GithubIdentityProvider,
    DropboxIdentityProvider,
    SpotifyIdentityProvider,
    WordPressIdentityProvider,
    KanidmIdentityProvider,
)


class StaticProviderRegistry(ProviderRegistry):
    """Provider registry built once at startup from a fixed list of adapter classes.

    Providers whose configuration is incomplete are left out with a warning,
    so optional providers may stay half configured.
    """

    def __init__(self, providers: dict[str, IdentityProvider] | None = None) -> None:
        self._providers: dict[str, IdentityProvider] = providers or {}

    @classmethod
    def from_config(
        cls,
        options: Mapping[str, Mapping[str, Any]],
        redirect_uri: str,
        http_client: httpx.AsyncClient,
        provider_classes: tuple[type[OAuth2IdentityProvider], ...] = PROVIDER_CLASSES,
    ) -> "StaticProviderRegistry":
        registry = cls()
        # Environment variables arrive lowercased (IDLINK_PROVIDERS__GITHUB__... -> "github")
        by_name = {name.casefold(): opts for name, opts in options.items()}
        known = {provider_cls.NAME.casefold() for provider_cls in provider_classes}
        for name in options:
            if name.casefold() not in known:
                logger.warning("Ignoring configuration of unknown provider %s", name)

        for provider_cls in provider_classes:
            provider_options = by_name.get(provider_cls.NAME.casefold()) or {}
            registry.register(provider_cls, provider_options, redirect_uri, http_client)
        return registry

    def register(
        self,
        provider_cls: type[OAuth2IdentityProvider],
        options: Mapping[str, Any],
        redirect_uri: str,
        http_client: httpx.AsyncClient,
    ) -> bool:
        """Create and add a provider if ``options`` hold all its required keys.

        Returns:
            True if the provider was registered
        """
        if not options:
            return False

        missing = provider_cls.missing_config_keys(options)
        if missing:
            logger.warning(
                "Provider %s is not fully configured, missing: %s",
                provider_cls.NAME,
                ", ".join(sorted(missing)),
            )
            return False

        config = provider_cls.build_config(options, redirect_uri)
        self.add(provider_cls(config, http_client))
        logger.debug("Registered authorization provider %s", config.name)
        return True

    def add(self, provider: IdentityProvider) -> None:
        self._providers[provider.name] = provider

    def resolve(self, name: str) -> IdentityProvider | None:
        return self._providers.get(name)

    def available_providers(self) -> list[str]:
        return list(self._providers.keys())

    def list_available(self, registration_only: bool = False) -> list[ProviderLabel]:
        labels = [
            ProviderLabel(name=provider.name, label=provider.sign_in_label)
            for provider in self._providers.values()
            if provider.supports_registration or not registration_only
        ]
        return sorted(labels, key=lambda p: p.label)
