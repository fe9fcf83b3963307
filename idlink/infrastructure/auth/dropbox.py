"""Dropbox identity provider adapter.

Dropbox has no username, so the account id stands in for it.

| CanonicalIdentity  | profile field            |
|--------------------|--------------------------|
| provider_user_id   | ``account_id``           |
| username           | ``account_id``           |
| display_name       | ``name.display_name``    |
| email              | ``email``                |
"""

from collections.abc import Mapping
from typing import Any, ClassVar

from idlink.domain.auth.model.identity import CanonicalIdentity, ProviderToken
from idlink.infrastructure.auth.base import OAuth2IdentityProvider, text


class DropboxIdentityProvider(OAuth2IdentityProvider):
    NAME: ClassVar[str] = "Dropbox"
    AUTHORIZE_URL: ClassVar[str] = "https://www.dropbox.com/oauth2/authorize"
    TOKEN_URL: ClassVar[str] = "https://api.dropbox.com/oauth2/token"
    RESOURCE_OWNER_URL: ClassVar[str] = "https://api.dropbox.com/2/users/get_current_account"

    async def fetch_resource_owner(self, token: ProviderToken) -> dict[str, Any]:
        # RPC endpoint: POST with a JSON null body
        response = await self._request(
            "POST",
            self.config.resource_owner_url,
            token,
            content=b"null",
            headers={"Content-Type": "application/json"},
        )
        return self._profile(response)

    def map_identity(self, raw: Mapping[str, Any]) -> CanonicalIdentity:
        account_id = self._require_id(raw, "account_id")
        name = raw.get("name")
        return CanonicalIdentity(
            provider_name=self.name,
            provider_user_id=account_id,
            username=account_id,
            display_name=text(name, "display_name") if isinstance(name, Mapping) else "",
            email=text(raw, "email"),
            raw_attributes=dict(raw),
        )
