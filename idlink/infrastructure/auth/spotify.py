"""Spotify identity provider adapter.

Spotify cannot guarantee an email address, so it never registers new accounts.

| CanonicalIdentity  | profile field       |
|--------------------|---------------------|
| provider_user_id   | ``id``              |
| username           | ``"Spt:" + id``     |
| display_name       | ``display_name``    |
| email              | ``email``           |
"""

from collections.abc import Mapping
from typing import Any, ClassVar

from idlink.domain.auth.model.identity import CanonicalIdentity
from idlink.infrastructure.auth.base import OAuth2IdentityProvider, text

USERNAME_PREFIX = "Spt:"


class SpotifyIdentityProvider(OAuth2IdentityProvider):
    NAME: ClassVar[str] = "Spotify"
    AUTHORIZE_URL: ClassVar[str] = "https://accounts.spotify.com/authorize"
    TOKEN_URL: ClassVar[str] = "https://accounts.spotify.com/api/token"
    RESOURCE_OWNER_URL: ClassVar[str] = "https://api.spotify.com/v1/me"
    DEFAULT_SCOPES: ClassVar[tuple[str, ...]] = ("user-read-email",)
    SUPPORTS_REGISTRATION: ClassVar[bool] = False

    def map_identity(self, raw: Mapping[str, Any]) -> CanonicalIdentity:
        user_id = self._require_id(raw, "id")
        return CanonicalIdentity(
            provider_name=self.name,
            provider_user_id=user_id,
            username=f"{USERNAME_PREFIX}{user_id}",
            display_name=text(raw, "display_name"),
            email=text(raw, "email"),
            raw_attributes=dict(raw),
        )
