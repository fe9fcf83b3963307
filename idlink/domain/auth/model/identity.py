"""Canonical identity returned by identity providers."""

from typing import Any

from pydantic import Field, SecretStr, field_validator

from idlink.domain.auth.model.value import truncate_field, truncate_username
from idlink.domain.shared.model.value import ValueObject


class ProviderToken(ValueObject):
    """Result of an authorization-code exchange."""

    access_token: SecretStr
    token_type: str = "Bearer"
    refresh_token: SecretStr | None = None
    expires_in: int | None = None
    scope: str | None = None


class CanonicalIdentity(ValueObject):
    """Normalized resource-owner data from an identity provider.

    Invariants:
    - `provider_user_id` is stable and never empty
    - `username`, `display_name` and `email` are never None; an empty value
      means the provider did not deliver it
    """

    provider_name: str
    provider_user_id: str
    username: str = ""
    display_name: str = ""
    email: str = ""
    raw_attributes: dict[str, Any] = Field(default_factory=dict)

    @field_validator("provider_user_id")
    @classmethod
    def validate_provider_user_id(cls, v: str) -> str:
        if not v:
            raise ValueError("provider_user_id must not be empty")
        return v

    def normalized(self) -> "CanonicalIdentity":
        """Return a copy with every field cut to the account store's limits."""
        return self.model_copy(
            update={
                "username": truncate_username(self.username),
                "display_name": truncate_field(self.display_name),
                "email": truncate_field(self.email),
            }
        )

    @property
    def is_sufficient_for_registration(self) -> bool:
        return bool(self.username) and bool(self.email)
