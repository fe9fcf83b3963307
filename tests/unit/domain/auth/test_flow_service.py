"""Unit tests for AuthorizationFlowService."""

import logging

import pytest

from idlink.domain.auth.error import ProviderError, StateMismatchError, UnknownProviderError
from idlink.domain.auth.model.value import ConnectAction
from idlink.domain.auth.service.flow import AuthorizationFlowService
from idlink.infrastructure.auth.session import InMemorySessionStore
from tests.unit.domain.auth.helpers import NOW, make_identity, make_provider, make_registry


def make_flow(*providers, sessions: InMemorySessionStore | None = None) -> AuthorizationFlowService:
    if not providers:
        providers = (make_provider(),)
    return AuthorizationFlowService(
        _registry=make_registry(*providers),
        _sessions=sessions if sessions is not None else InMemorySessionStore(),
        _now=lambda: NOW,
    )


class TestBegin:
    def test_returns_provider_redirect_and_stores_state(self):
        sessions = InMemorySessionStore()
        flow = make_flow(sessions=sessions)

        redirect = flow.begin("Github", return_url="/tree/1", scope_id="tree1")

        assert redirect.url.startswith("https://github.example/authorize")
        stored = flow.pending_state()
        assert stored is not None
        assert stored.state == "stored-state"
        assert stored.provider_name == "Github"
        assert stored.return_url == "/tree/1"
        assert stored.scope_id == "tree1"
        assert stored.created_at == NOW
        assert sessions.has("idlink.state")

    def test_remembers_connect_action_and_pkce_verifier(self):
        flow = make_flow(make_provider(pkce_verifier="verifier"))

        flow.begin("Github", connect_action=ConnectAction.REGISTER)

        stored = flow.pending_state()
        assert stored.connect_action is ConnectAction.REGISTER
        assert stored.pkce_verifier == "verifier"

    def test_unknown_provider(self):
        flow = make_flow()

        with pytest.raises(UnknownProviderError) as exc_info:
            flow.begin("Nope")

        assert exc_info.value.code == "unknown_provider"
        assert flow.pending_state() is None


class TestComplete:
    @pytest.mark.asyncio
    async def test_exchanges_code_and_returns_identity(self):
        provider = make_provider(pkce_verifier="verifier")
        flow = make_flow(provider)
        flow.begin("Github", return_url="/home")

        completed = await flow.complete("auth-code", "stored-state")

        assert completed.identity.provider_user_id == "4711"
        assert completed.authorization.return_url == "/home"
        provider.exchange_code.assert_awaited_once_with("auth-code", "verifier")
        provider.fetch_identity.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_state_is_single_use(self):
        flow = make_flow()
        flow.begin("Github")

        await flow.complete("auth-code", "stored-state")

        with pytest.raises(StateMismatchError):
            await flow.complete("auth-code", "stored-state")

    @pytest.mark.asyncio
    async def test_mismatched_state_discards_stored_state(self):
        provider = make_provider()
        flow = make_flow(provider)
        flow.begin("Github")

        with pytest.raises(StateMismatchError) as exc_info:
            await flow.complete("auth-code", "forged-state")

        assert exc_info.value.user_message == (
            "Invalid state in communication with authorization provider."
        )
        assert flow.pending_state() is None
        provider.exchange_code.assert_not_awaited()

        # The right state no longer works either
        with pytest.raises(StateMismatchError):
            await flow.complete("auth-code", "stored-state")

    @pytest.mark.asyncio
    async def test_blank_state(self):
        flow = make_flow()
        flow.begin("Github")

        with pytest.raises(StateMismatchError):
            await flow.complete("auth-code", "")

        assert flow.pending_state() is None

    @pytest.mark.asyncio
    async def test_no_stored_state(self):
        flow = make_flow()

        with pytest.raises(StateMismatchError):
            await flow.complete("auth-code", "stored-state")

    @pytest.mark.asyncio
    async def test_provider_error_callback_consumes_state(self):
        provider = make_provider()
        flow = make_flow(provider)
        flow.begin("Github")

        with pytest.raises(ProviderError):
            await flow.complete("", "stored-state", error="access_denied")

        assert flow.pending_state() is None
        provider.exchange_code.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_exchange_failure_consumes_state(self):
        provider = make_provider()
        provider.exchange_code.side_effect = ProviderError(
            "token exchange failed", status_code=401, reason_phrase="Unauthorized"
        )
        flow = make_flow(provider)
        flow.begin("Github")

        with pytest.raises(ProviderError) as exc_info:
            await flow.complete("auth-code", "stored-state")

        assert exc_info.value.status_code == 401
        assert "Unauthorized" in exc_info.value.message
        assert "Unauthorized" not in exc_info.value.user_message
        assert flow.pending_state() is None

    @pytest.mark.asyncio
    async def test_identity_is_normalized(self):
        provider = make_provider(identity=make_identity(username="u" * 40))
        flow = make_flow(provider)
        flow.begin("Github")

        completed = await flow.complete("auth-code", "stored-state")

        assert completed.identity.username == "u" * 32

    @pytest.mark.asyncio
    async def test_failure_log_names_last_step_reached(self, caplog: pytest.LogCaptureFixture):
        provider = make_provider()
        provider.fetch_identity.side_effect = ProviderError(
            "user endpoint failed", status_code=502, reason_phrase="Bad Gateway"
        )
        flow = make_flow(provider)
        flow.begin("Github")

        with caplog.at_level(logging.WARNING, logger="idlink.domain.auth.service.flow"):
            with pytest.raises(ProviderError):
                await flow.complete("auth-code", "stored-state")

        assert "flow reached token_exchanged" in caplog.text
