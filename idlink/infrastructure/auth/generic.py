"""Generic OAuth2 identity provider adapter.

Every endpoint comes from configuration. Field table:

| CanonicalIdentity  | profile field                                |
|--------------------|----------------------------------------------|
| provider_user_id   | ``id`` (or option ``resource_owner_id_field``) |
| username           | ``username``                                 |
| display_name       | ``name``, else the username                  |
| email              | ``email``                                    |
"""

from collections.abc import Mapping
from typing import Any, ClassVar

from idlink.domain.auth.model.identity import CanonicalIdentity
from idlink.infrastructure.auth.base import OAuth2IdentityProvider, text


class GenericIdentityProvider(OAuth2IdentityProvider):
    NAME: ClassVar[str] = "Generic"
    REQUIRED_CONFIG_KEYS: ClassVar[frozenset[str]] = frozenset(
        {
            "client_id",
            "client_secret",
            "authorize_url",
            "token_url",
            "resource_owner_url",
            "sign_in_label",
        }
    )
    ID_FIELD: ClassVar[str] = "id"

    @property
    def id_field(self) -> str:
        return self.config.extra.get("resource_owner_id_field") or self.ID_FIELD

    def map_identity(self, raw: Mapping[str, Any]) -> CanonicalIdentity:
        username = text(raw, "username")
        return CanonicalIdentity(
            provider_name=self.name,
            provider_user_id=self._require_id(raw, self.id_field),
            username=username,
            display_name=text(raw, "name") or username,
            email=text(raw, "email"),
            raw_attributes=dict(raw),
        )
