"""Provider configuration for the auth domain."""

from pydantic import Field, SecretStr

from idlink.domain.shared.model.value import ValueObject


class ProviderConfig(ValueObject):
    """Configuration of one identity provider.

    Built from external configuration at startup and never modified afterwards.
    ``extra`` holds provider-specific options (e.g. the base URL of a
    self-hosted Kanidm instance).
    """

    name: str
    client_id: str
    client_secret: SecretStr
    authorize_url: str
    token_url: str
    resource_owner_url: str
    redirect_uri: str
    sign_in_label: str
    supports_registration: bool = True
    scopes: tuple[str, ...] = ()
    use_pkce: bool = False
    extra: dict[str, str] = Field(default_factory=dict)


class ProviderLabel(ValueObject):
    """A provider as offered on a sign-in page."""

    name: str
    label: str
