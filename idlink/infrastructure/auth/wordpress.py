"""WordPress (OpenID Connect plugin) identity provider adapter.

| CanonicalIdentity  | profile field                               |
|--------------------|---------------------------------------------|
| provider_user_id   | ``sub``                                     |
| username           | ``username``, else ``preferred_username``   |
| display_name       | ``display_name``, else ``user_login``       |
| email              | ``email``                                   |
"""

from collections.abc import Mapping
from typing import Any, ClassVar

from idlink.domain.auth.model.identity import CanonicalIdentity
from idlink.infrastructure.auth.base import text
from idlink.infrastructure.auth.generic import GenericIdentityProvider


class WordPressIdentityProvider(GenericIdentityProvider):
    NAME: ClassVar[str] = "WordPress"
    DEFAULT_SCOPES: ClassVar[tuple[str, ...]] = ("openid", "profile", "email")
    ID_FIELD: ClassVar[str] = "sub"

    def map_identity(self, raw: Mapping[str, Any]) -> CanonicalIdentity:
        return CanonicalIdentity(
            provider_name=self.name,
            provider_user_id=self._require_id(raw, self.id_field),
            username=text(raw, "username") or text(raw, "preferred_username"),
            display_name=text(raw, "display_name") or text(raw, "user_login"),
            email=text(raw, "email"),
            raw_attributes=dict(raw),
        )
