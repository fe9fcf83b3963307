"""Authorization-code flow: issue the redirect, validate the callback."""

import hmac
import logging
import time
from collections.abc import Callable

from idlink.domain.auth.error import ProviderError, StateMismatchError, UnknownProviderError
from idlink.domain.auth.model.flow import (
    AuthorizationState,
    CompletedFlow,
    FlowAttempt,
    RedirectInstruction,
)
from idlink.domain.auth.model.value import ConnectAction, FlowStatus
from idlink.domain.auth.port.identity_provider import IdentityProvider
from idlink.domain.auth.port.provider_registry import ProviderRegistry
from idlink.domain.auth.port.session_store import SessionStore
from idlink.domain.shared.error import IdlinkError
from idlink.domain.shared.service import Service

logger = logging.getLogger(__name__)


class AuthorizationFlowService(Service):
    """Drives one authorization-code flow across its two requests.

    - begin: resolve the provider, remember the state, return the redirect
    - complete: consume the state, exchange the code, fetch the identity

    The stored AuthorizationState is single use. It is removed by the first
    callback that reaches ``complete``, whatever the outcome.
    """

    _registry: ProviderRegistry
    _sessions: SessionStore
    _key_prefix: str = "idlink."
    _now: Callable[[], float] = time.time

    @property
    def state_key(self) -> str:
        return f"{self._key_prefix}state"

    def resolve(self, provider_name: str) -> IdentityProvider:
        provider = self._registry.resolve(provider_name)
        if provider is None:
            raise UnknownProviderError(provider_name)
        return provider

    def begin(
        self,
        provider_name: str,
        return_url: str = "",
        scope_id: str = "",
        connect_action: ConnectAction = ConnectAction.NONE,
    ) -> RedirectInstruction:
        """Start a flow and return where to send the browser.

        Raises:
            UnknownProviderError: If the provider is not available
        """
        provider = self.resolve(provider_name)
        logger.debug("Found the requested authorization provider: %s", provider.name)

        request = provider.build_authorization_request()
        stored = AuthorizationState(
            state=request.state,
            provider_name=provider.name,
            pkce_verifier=request.pkce_verifier,
            return_url=return_url,
            scope_id=scope_id,
            connect_action=connect_action,
            created_at=self._now(),
        )
        # Must be visible before the redirect response goes out
        self._sessions.put(self.state_key, stored.model_dump(mode="json"))

        logger.debug("Redirecting to authorization URL of %s", provider.name)
        return RedirectInstruction(url=request.url)

    def pending_state(self) -> AuthorizationState | None:
        data = self._sessions.get(self.state_key)
        if not data:
            return None
        return AuthorizationState.model_validate(data)

    def discard(self) -> None:
        self._sessions.forget(self.state_key)

    def consume_state(self, callback_state: str) -> AuthorizationState:
        """Take the stored state out of the session and check it against the callback.

        Raises:
            StateMismatchError: If nothing is stored, the callback state is
                blank, or the two differ
        """
        stored = self.pending_state()
        self.discard()

        if stored is None:
            raise StateMismatchError("No authorization state stored in session")
        if not callback_state:
            raise StateMismatchError("Callback carried no state")
        if not hmac.compare_digest(callback_state.encode(), stored.state.encode()):
            raise StateMismatchError("Callback state does not match stored state")
        return stored

    async def complete(
        self,
        code: str,
        callback_state: str,
        error: str = "",
        error_description: str = "",
    ) -> CompletedFlow:
        """Finish the flow started by ``begin``.

        Raises:
            StateMismatchError: If the callback state is not the stored one
            UnknownProviderError: If the stored provider is no longer available
            ProviderError: If the provider reported an error or a call failed
        """
        stored = self.consume_state(callback_state)
        attempt = FlowAttempt(provider_name=stored.provider_name, status=FlowStatus.REDIRECTED)
        attempt.advance(FlowStatus.CALLBACK_RECEIVED)

        try:
            if error:
                raise ProviderError(
                    f"{stored.provider_name} returned error {error}: {error_description}"
                )
            if not code:
                raise ProviderError(f"{stored.provider_name} callback carried no code")

            provider = self.resolve(stored.provider_name)
            token = await provider.exchange_code(code, stored.pkce_verifier)
            attempt.advance(FlowStatus.TOKEN_EXCHANGED)
            logger.debug("Received access token from authorization provider %s", provider.name)

            identity = (await provider.fetch_identity(token)).normalized()
            attempt.advance(FlowStatus.IDENTITY_FETCHED)
        except IdlinkError as e:
            reached = attempt.status
            attempt.fail()
            logger.warning(
                "Failed to get the access token or user details from %s (flow reached %s): %s",
                stored.provider_name,
                reached,
                e.message,
            )
            raise

        logger.debug(
            "Received user data from %s: provider_user_id=%s, username=%s, display_name=%s, email=%s",
            identity.provider_name,
            identity.provider_user_id,
            identity.username,
            identity.display_name,
            identity.email,
        )
        return CompletedFlow(identity=identity, authorization=stored, token=token)
