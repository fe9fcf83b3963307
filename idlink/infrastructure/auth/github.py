"""GitHub identity provider adapter.

| CanonicalIdentity  | profile field                                          |
|--------------------|--------------------------------------------------------|
| provider_user_id   | ``id``                                                 |
| username           | ``login``                                              |
| display_name       | ``name``                                               |
| email              | ``email``, else the primary verified address of        |
|                    | ``GET /user/emails`` (private email setting)           |
"""

import logging
from collections.abc import Mapping
from typing import Any, ClassVar

from idlink.domain.auth.error import ProviderError
from idlink.domain.auth.model.identity import CanonicalIdentity, ProviderToken
from idlink.infrastructure.auth.base import OAuth2IdentityProvider, text

logger = logging.getLogger(__name__)


class GithubIdentityProvider(OAuth2IdentityProvider):
    NAME: ClassVar[str] = "Github"
    AUTHORIZE_URL: ClassVar[str] = "https://github.com/login/oauth/authorize"
    TOKEN_URL: ClassVar[str] = "https://github.com/login/oauth/access_token"
    RESOURCE_OWNER_URL: ClassVar[str] = "https://api.github.com/user"
    EMAILS_URL: ClassVar[str] = "https://api.github.com/user/emails"
    DEFAULT_SCOPES: ClassVar[tuple[str, ...]] = ("user:email",)
    SCOPE_SEPARATOR: ClassVar[str] = ","

    async def fetch_resource_owner(self, token: ProviderToken) -> dict[str, Any]:
        raw = await super().fetch_resource_owner(token)
        if not raw.get("email"):
            raw["email"] = await self._primary_email(token)
        return raw

    async def _primary_email(self, token: ProviderToken) -> str:
        try:
            response = await self._request("GET", self.EMAILS_URL, token)
            emails = self._json(response)
        except ProviderError as e:
            logger.debug("Could not read GitHub email addresses: %s", e.message)
            return ""

        if not isinstance(emails, list):
            return ""
        for entry in emails:
            if isinstance(entry, dict) and entry.get("primary") and entry.get("verified"):
                return text(entry, "email")
        return ""

    def map_identity(self, raw: Mapping[str, Any]) -> CanonicalIdentity:
        return CanonicalIdentity(
            provider_name=self.name,
            provider_user_id=self._require_id(raw, "id"),
            username=text(raw, "login"),
            display_name=text(raw, "name"),
            email=text(raw, "email"),
            raw_attributes=dict(raw),
        )
