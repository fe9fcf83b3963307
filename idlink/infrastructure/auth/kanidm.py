"""Kanidm (self-hosted OpenID Connect) identity provider adapter.

Endpoints are derived from option ``kanidm_url``; PKCE is on by default.

| CanonicalIdentity  | profile field            |
|--------------------|--------------------------|
| provider_user_id   | ``sub``                  |
| username           | ``preferred_username``   |
| display_name       | ``name``                 |
| email              | ``email``                |
"""

from collections.abc import Mapping
from typing import Any, ClassVar

from idlink.domain.auth.model.identity import CanonicalIdentity
from idlink.infrastructure.auth.base import OAuth2IdentityProvider, text


class KanidmIdentityProvider(OAuth2IdentityProvider):
    NAME: ClassVar[str] = "Kanidm"
    REQUIRED_CONFIG_KEYS: ClassVar[frozenset[str]] = frozenset(
        {"client_id", "client_secret", "kanidm_url", "sign_in_label"}
    )
    DEFAULT_SCOPES: ClassVar[tuple[str, ...]] = ("openid", "email", "profile")
    USE_PKCE: ClassVar[bool] = True

    @classmethod
    def endpoints(cls, options: Mapping[str, Any]) -> tuple[str, str, str]:
        base = str(options["kanidm_url"]).rstrip("/")
        return (
            f"{base}/ui/oauth2",
            f"{base}/oauth2/token",
            f"{base}/oauth2/openid/{options['client_id']}/userinfo",
        )

    def map_identity(self, raw: Mapping[str, Any]) -> CanonicalIdentity:
        return CanonicalIdentity(
            provider_name=self.name,
            provider_user_id=self._require_id(raw, "sub"),
            username=text(raw, "preferred_username"),
            display_name=text(raw, "name"),
            email=text(raw, "email"),
            raw_attributes=dict(raw),
        )
