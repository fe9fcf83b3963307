"""Transient records of an in-progress authorization flow.

Both AuthorizationState and ConnectSession live in the caller's session store
between the redirect to the provider and the callback, so they are plain
JSON-serializable records with explicit timestamps.
"""

from idlink.domain.auth.model.identity import CanonicalIdentity, ProviderToken
from idlink.domain.auth.model.value import (
    CONNECT_TIMEOUT_SECONDS,
    FLOW_TRANSITIONS,
    ConnectAction,
    FlowStatus,
)
from idlink.domain.shared.error import InvalidStateError
from idlink.domain.shared.model.entity import Entity
from idlink.domain.shared.model.value import ValueObject


class AuthorizationRequest(ValueObject):
    """What a provider adapter produces when a flow starts."""

    url: str
    state: str
    pkce_verifier: str | None = None


class RedirectInstruction(ValueObject):
    """Tells the transport layer where to send the browser."""

    url: str


class AuthorizationState(ValueObject):
    """CSRF state of one flow attempt. Single use."""

    state: str
    provider_name: str
    pkce_verifier: str | None = None
    return_url: str = ""
    scope_id: str = ""
    connect_action: ConnectAction = ConnectAction.NONE
    created_at: float


class ConnectSession(ValueObject):
    """An authenticated user's pending request to link a provider.

    Invariants:
    - valid only while `now - created_at <= timeout`
    - bound to exactly one `target_user_id`
    """

    provider_name: str
    target_user_id: str
    created_at: float

    def age(self, now: float) -> float:
        return now - self.created_at

    def is_expired(self, now: float, timeout: float = CONNECT_TIMEOUT_SECONDS) -> bool:
        return self.age(now) > timeout


class FlowAttempt(Entity):
    """Tracks the state machine of one authorization flow attempt.

    START -> REDIRECTED -> CALLBACK_RECEIVED -> TOKEN_EXCHANGED -> IDENTITY_FETCHED,
    with FAILED reachable from every non-terminal state.
    """

    provider_name: str
    status: FlowStatus = FlowStatus.START

    def advance(self, to: FlowStatus) -> None:
        if to not in FLOW_TRANSITIONS[self.status]:
            raise InvalidStateError(
                f"Illegal flow transition {self.status} -> {to}",
                code="illegal_flow_transition",
            )
        self.status = to

    def fail(self) -> None:
        if not self.is_terminal:
            self.advance(FlowStatus.FAILED)

    @property
    def is_terminal(self) -> bool:
        return not FLOW_TRANSITIONS[self.status]


class CompletedFlow(ValueObject):
    """Everything a successful callback yields."""

    identity: CanonicalIdentity
    authorization: AuthorizationState
    token: ProviderToken
