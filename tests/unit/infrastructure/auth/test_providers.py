"""Unit tests for the per-provider field tables and configuration."""

from unittest.mock import MagicMock

import httpx
import pytest

from idlink.domain.auth.error import IdentityDataError
from idlink.infrastructure.auth.base import OAuth2IdentityProvider
from idlink.infrastructure.auth.dropbox import DropboxIdentityProvider
from idlink.infrastructure.auth.generic import GenericIdentityProvider
from idlink.infrastructure.auth.github import GithubIdentityProvider
from idlink.infrastructure.auth.kanidm import KanidmIdentityProvider
from idlink.infrastructure.auth.spotify import SpotifyIdentityProvider
from idlink.infrastructure.auth.wordpress import WordPressIdentityProvider

REDIRECT_URI = "https://app.example/api/v1/auth/callback"

GENERIC_OPTIONS = {
    "client_id": "cid",
    "client_secret": "secret",
    "authorize_url": "https://idp.example/authorize",
    "token_url": "https://idp.example/token",
    "resource_owner_url": "https://idp.example/userinfo",
    "sign_in_label": "Example IdP",
}


def make(provider_cls: type[OAuth2IdentityProvider], **options) -> OAuth2IdentityProvider:
    opts = {"client_id": "cid", "client_secret": "secret", **options}
    config = provider_cls.build_config(opts, REDIRECT_URI)
    return provider_cls(config, MagicMock(spec=httpx.AsyncClient))


class TestGeneric:
    def test_field_table(self):
        provider = make(GenericIdentityProvider, **GENERIC_OPTIONS)

        identity = provider.map_identity(
            {"id": 17, "username": "jane", "name": "Jane Doe", "email": "jane@example.org"}
        )

        assert identity.provider_name == "Generic"
        assert identity.provider_user_id == "17"
        assert identity.username == "jane"
        assert identity.display_name == "Jane Doe"
        assert identity.email == "jane@example.org"

    def test_display_name_falls_back_to_username(self):
        provider = make(GenericIdentityProvider, **GENERIC_OPTIONS)

        identity = provider.map_identity({"id": "17", "username": "jane"})

        assert identity.display_name == "jane"
        assert identity.email == ""

    def test_configured_id_field(self):
        provider = make(GenericIdentityProvider, **GENERIC_OPTIONS, resource_owner_id_field="uid")

        identity = provider.map_identity({"uid": "abc", "id": "ignored"})

        assert identity.provider_user_id == "abc"

    def test_required_keys(self):
        assert GenericIdentityProvider.missing_config_keys({"client_id": "cid"}) == {
            "client_secret",
            "authorize_url",
            "token_url",
            "resource_owner_url",
            "sign_in_label",
        }


class TestGithub:
    def test_field_table(self):
        provider = make(GithubIdentityProvider)

        identity = provider.map_identity(
            {"id": 583231, "login": "octocat", "name": "The Octocat", "email": "o@github.com"}
        )

        assert identity.provider_user_id == "583231"
        assert identity.username == "octocat"
        assert identity.display_name == "The Octocat"
        assert identity.email == "o@github.com"

    def test_null_name_and_email(self):
        provider = make(GithubIdentityProvider)

        identity = provider.map_identity({"id": 1, "login": "octocat", "name": None, "email": None})

        assert identity.display_name == ""
        assert identity.email == ""

    def test_fixed_endpoints_and_label(self):
        config = make(GithubIdentityProvider).config

        assert config.authorize_url == "https://github.com/login/oauth/authorize"
        assert config.token_url == "https://github.com/login/oauth/access_token"
        assert config.resource_owner_url == "https://api.github.com/user"
        assert config.sign_in_label == "Github"
        assert config.redirect_uri == REDIRECT_URI


class TestDropbox:
    def test_field_table(self):
        provider = make(DropboxIdentityProvider)

        identity = provider.map_identity(
            {
                "account_id": "dbid:AAH4f99",
                "name": {"display_name": "Franz Ferdinand (Personal)"},
                "email": "franz@example.org",
            }
        )

        assert identity.provider_user_id == "dbid:AAH4f99"
        assert identity.username == "dbid:AAH4f99"
        assert identity.display_name == "Franz Ferdinand (Personal)"
        assert identity.email == "franz@example.org"


class TestSpotify:
    def test_field_table(self):
        provider = make(SpotifyIdentityProvider)

        identity = provider.map_identity(
            {"id": "wizzler", "display_name": "JM Wizzler", "email": "w@example.org"}
        )

        assert identity.provider_user_id == "wizzler"
        assert identity.username == "Spt:wizzler"
        assert identity.display_name == "JM Wizzler"

    def test_does_not_support_registration(self):
        assert not make(SpotifyIdentityProvider).supports_registration
        assert make(GithubIdentityProvider).supports_registration


class TestWordPress:
    def test_field_table(self):
        provider = make(WordPressIdentityProvider, **GENERIC_OPTIONS)

        identity = provider.map_identity(
            {"sub": "5", "username": "jane", "display_name": "Jane", "email": "j@example.org"}
        )

        assert identity.provider_user_id == "5"
        assert identity.username == "jane"
        assert identity.display_name == "Jane"

    def test_fallback_fields(self):
        provider = make(WordPressIdentityProvider, **GENERIC_OPTIONS)

        identity = provider.map_identity(
            {"sub": "5", "preferred_username": "jdoe", "user_login": "jdoe_login"}
        )

        assert identity.username == "jdoe"
        assert identity.display_name == "jdoe_login"

    def test_default_scopes(self):
        provider = make(WordPressIdentityProvider, **GENERIC_OPTIONS)

        assert provider.config.scopes == ("openid", "profile", "email")


class TestKanidm:
    def test_field_table(self):
        provider = make(
            KanidmIdentityProvider, kanidm_url="https://idm.example", sign_in_label="Kanidm"
        )

        identity = provider.map_identity(
            {
                "sub": "a1b2",
                "preferred_username": "jane@idm.example",
                "name": "Jane",
                "email": "jane@example.org",
            }
        )

        assert identity.provider_user_id == "a1b2"
        assert identity.username == "jane@idm.example"
        assert identity.display_name == "Jane"

    def test_endpoints_and_pkce(self):
        config = make(
            KanidmIdentityProvider, kanidm_url="https://idm.example/", sign_in_label="Kanidm"
        ).config

        assert config.authorize_url == "https://idm.example/ui/oauth2"
        assert config.token_url == "https://idm.example/oauth2/token"
        assert config.resource_owner_url == "https://idm.example/oauth2/openid/cid/userinfo"
        assert config.use_pkce
        assert config.extra["kanidm_url"] == "https://idm.example/"


@pytest.mark.parametrize(
    ("provider_cls", "options", "payload"),
    [
        (GenericIdentityProvider, GENERIC_OPTIONS, {"username": "jane", "email": "j@example.org"}),
        (GithubIdentityProvider, {}, {"login": "octocat", "id": None}),
        (DropboxIdentityProvider, {}, {"email": "franz@example.org"}),
        (SpotifyIdentityProvider, {}, {"id": "", "display_name": "x"}),
        (WordPressIdentityProvider, GENERIC_OPTIONS, {"id": "5", "username": "jane"}),
        (
            KanidmIdentityProvider,
            {"kanidm_url": "https://idm.example", "sign_in_label": "Kanidm"},
            {"preferred_username": "jane"},
        ),
    ],
)
def test_missing_stable_id_is_identity_data_error(provider_cls, options, payload):
    provider = make(provider_cls, **options)

    with pytest.raises(IdentityDataError) as exc_info:
        provider.map_identity(payload)

    assert exc_info.value.code == "identity_data_error"
