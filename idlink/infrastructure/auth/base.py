"""Shared OAuth2 authorization-code client for all identity provider adapters."""

import base64
import hashlib
import logging
import secrets
from abc import abstractmethod
from collections.abc import Mapping
from typing import Any, ClassVar
from urllib.parse import urlencode

import httpx
from pydantic import TypeAdapter, ValidationError

from idlink.domain.auth.error import IdentityDataError, ProviderError
from idlink.domain.auth.model.flow import AuthorizationRequest
from idlink.domain.auth.model.identity import CanonicalIdentity, ProviderToken
from idlink.domain.auth.model.provider import ProviderConfig
from idlink.domain.auth.port.identity_provider import IdentityProvider
from idlink.domain.shared.error import ConfigurationError

logger = logging.getLogger(__name__)

# 32 random bytes, 256 bits of entropy
STATE_BYTES = 32
PKCE_VERIFIER_BYTES = 48

_BOOL = TypeAdapter(bool)


def generate_state() -> str:
    return secrets.token_urlsafe(STATE_BYTES)


def generate_pkce_verifier() -> str:
    return secrets.token_urlsafe(PKCE_VERIFIER_BYTES)


def pkce_challenge(verifier: str) -> str:
    """S256 code challenge (RFC 7636) for ``verifier``."""
    digest = hashlib.sha256(verifier.encode("ascii")).digest()
    return base64.urlsafe_b64encode(digest).rstrip(b"=").decode("ascii")


def text(raw: Mapping[str, Any], key: str) -> str:
    """Read a profile field as a string; missing or null becomes empty."""
    value = raw.get(key)
    if value is None:
        return ""
    return str(value)


class OAuth2IdentityProvider(IdentityProvider):
    """IdentityProvider implementation for a plain OAuth2 authorization-code flow.

    Subclasses declare their name, fixed endpoints and required options as
    class attributes and implement ``map_identity`` with their field table.
    """

    NAME: ClassVar[str]
    REQUIRED_CONFIG_KEYS: ClassVar[frozenset[str]] = frozenset({"client_id", "client_secret"})
    AUTHORIZE_URL: ClassVar[str] = ""
    TOKEN_URL: ClassVar[str] = ""
    RESOURCE_OWNER_URL: ClassVar[str] = ""
    DEFAULT_SCOPES: ClassVar[tuple[str, ...]] = ()
    SCOPE_SEPARATOR: ClassVar[str] = " "
    SUPPORTS_REGISTRATION: ClassVar[bool] = True
    USE_PKCE: ClassVar[bool] = False

    def __init__(self, config: ProviderConfig, http_client: httpx.AsyncClient) -> None:
        self._config = config
        self._http = http_client

    @property
    def name(self) -> str:
        return self._config.name

    @property
    def config(self) -> ProviderConfig:
        return self._config

    # -------------------------------------------------------------------------
    # Configuration
    # -------------------------------------------------------------------------

    @classmethod
    def missing_config_keys(cls, options: Mapping[str, Any]) -> set[str]:
        return {key for key in cls.REQUIRED_CONFIG_KEYS if not options.get(key)}

    @classmethod
    def endpoints(cls, options: Mapping[str, Any]) -> tuple[str, str, str]:
        """(authorize, token, resource owner) URLs; options override the fixed ones."""
        return (
            options.get("authorize_url") or cls.AUTHORIZE_URL,
            options.get("token_url") or cls.TOKEN_URL,
            options.get("resource_owner_url") or cls.RESOURCE_OWNER_URL,
        )

    @classmethod
    def build_config(cls, options: Mapping[str, Any], redirect_uri: str) -> ProviderConfig:
        """Turn raw configuration options into a ProviderConfig."""
        authorize_url, token_url, resource_owner_url = cls.endpoints(options)
        scopes = options.get("scopes") or cls.DEFAULT_SCOPES
        if isinstance(scopes, str):
            scopes = scopes.replace(",", " ").split()
        known = {
            "client_id",
            "client_secret",
            "authorize_url",
            "token_url",
            "resource_owner_url",
            "sign_in_label",
            "scopes",
            "use_pkce",
        }
        return ProviderConfig(
            name=cls.NAME,
            client_id=str(options["client_id"]),
            client_secret=str(options["client_secret"]),
            authorize_url=authorize_url,
            token_url=token_url,
            resource_owner_url=resource_owner_url,
            redirect_uri=redirect_uri,
            sign_in_label=options.get("sign_in_label") or cls.NAME,
            supports_registration=cls.SUPPORTS_REGISTRATION,
            scopes=tuple(scopes),
            use_pkce=cls._flag(options, "use_pkce", cls.USE_PKCE),
            extra={k: str(v) for k, v in options.items() if k not in known},
        )

    @classmethod
    def _flag(cls, options: Mapping[str, Any], key: str, default: bool) -> bool:
        """Read a boolean option; env and .env sources deliver strings like "false"."""
        value = options.get(key)
        if value is None or value == "":
            return default
        try:
            return _BOOL.validate_python(value)
        except ValidationError as e:
            raise ConfigurationError(
                f"Option {key} of provider {cls.NAME} is not a boolean: {value!r}",
                code="invalid_provider_option",
            ) from e

    # -------------------------------------------------------------------------
    # Authorization-code flow
    # -------------------------------------------------------------------------

    def build_authorization_request(self) -> AuthorizationRequest:
        state = generate_state()
        params = {
            "client_id": self._config.client_id,
            "response_type": "code",
            "redirect_uri": self._config.redirect_uri,
            "state": state,
        }
        if self._config.scopes:
            params["scope"] = self.SCOPE_SEPARATOR.join(self._config.scopes)

        verifier = None
        if self._config.use_pkce:
            verifier = generate_pkce_verifier()
            params["code_challenge"] = pkce_challenge(verifier)
            params["code_challenge_method"] = "S256"

        url = f"{self._config.authorize_url}?{urlencode(params)}"
        logger.debug("Received authorization URL for %s: %s", self.name, self._config.authorize_url)
        return AuthorizationRequest(url=url, state=state, pkce_verifier=verifier)

    async def exchange_code(self, code: str, pkce_verifier: str | None = None) -> ProviderToken:
        data = {
            "client_id": self._config.client_id,
            "client_secret": self._config.client_secret.get_secret_value(),
            "grant_type": "authorization_code",
            "code": code,
            "redirect_uri": self._config.redirect_uri,
        }
        if pkce_verifier:
            data["code_verifier"] = pkce_verifier

        try:
            response = await self._http.post(
                self._config.token_url,
                data=data,
                headers={"Accept": "application/json"},
            )
        except httpx.RequestError as e:
            logger.warning("%s token request failed: %s", self.name, e)
            raise ProviderError(f"Failed to connect to {self.name}") from e

        if response.status_code != 200:
            logger.warning(
                "%s token exchange failed: status=%d, reason=%s",
                self.name,
                response.status_code,
                response.reason_phrase,
            )
            raise ProviderError(
                f"{self.name} token exchange failed",
                status_code=response.status_code,
                reason_phrase=response.reason_phrase,
            )

        payload = self._json(response)
        if not isinstance(payload, dict):
            raise ProviderError(f"{self.name} returned a malformed token response")
        # Some providers report errors with status 200
        if "error" in payload or not payload.get("access_token"):
            logger.warning(
                "%s token response carried no access token: error=%s",
                self.name,
                payload.get("error"),
            )
            raise ProviderError(
                f"{self.name} token response carried no access token: {payload.get('error', '')}"
            )

        try:
            return ProviderToken(
                access_token=payload["access_token"],
                token_type=payload.get("token_type") or "Bearer",
                refresh_token=payload.get("refresh_token"),
                expires_in=payload.get("expires_in"),
                scope=payload.get("scope"),
            )
        except ValidationError as e:
            # Field names only; the input values may hold the token
            fields = sorted({str(err["loc"][0]) for err in e.errors() if err["loc"]})
            logger.warning(
                "%s token response has malformed fields: %s", self.name, ", ".join(fields)
            )
            raise ProviderError(f"{self.name} returned a malformed token response") from e

    async def fetch_identity(self, token: ProviderToken) -> CanonicalIdentity:
        raw = await self.fetch_resource_owner(token)
        return self.map_identity(raw)

    async def fetch_resource_owner(self, token: ProviderToken) -> dict[str, Any]:
        response = await self._request("GET", self._config.resource_owner_url, token)
        return self._profile(response)

    @abstractmethod
    def map_identity(self, raw: Mapping[str, Any]) -> CanonicalIdentity:
        """Apply this provider's field table to a resource-owner payload."""
        ...

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _headers(self, token: ProviderToken) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {token.access_token.get_secret_value()}",
            "Accept": "application/json",
        }

    async def _request(
        self, method: str, url: str, token: ProviderToken, **kwargs: Any
    ) -> httpx.Response:
        headers = self._headers(token) | kwargs.pop("headers", {})
        try:
            response = await self._http.request(method, url, headers=headers, **kwargs)
        except httpx.RequestError as e:
            logger.warning("%s request failed: %s", self.name, e)
            raise ProviderError(f"Failed to connect to {self.name}") from e

        if response.status_code != 200:
            logger.warning(
                "%s resource owner request failed: status=%d, reason=%s",
                self.name,
                response.status_code,
                response.reason_phrase,
            )
            raise ProviderError(
                f"{self.name} resource owner request failed",
                status_code=response.status_code,
                reason_phrase=response.reason_phrase,
            )
        return response

    def _json(self, response: httpx.Response) -> Any:
        try:
            return response.json()
        except ValueError as e:
            raise ProviderError(f"{self.name} returned a non-JSON response") from e

    def _profile(self, response: httpx.Response) -> dict[str, Any]:
        payload = self._json(response)
        if not isinstance(payload, dict):
            raise IdentityDataError(f"{self.name} returned a malformed user profile")
        return payload

    def _require_id(self, raw: Mapping[str, Any], field: str) -> str:
        """Stable provider user id from ``field``; never substituted."""
        value = text(raw, field)
        if not value:
            raise IdentityDataError(f"{self.name} user profile has no '{field}' field")
        return value
