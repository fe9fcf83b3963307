"""Value objects for the auth domain."""

from enum import StrEnum

# Maximum field lengths accepted by the host account store
USERNAME_MAX_LENGTH = 32
PASSWORD_MAX_LENGTH = 128
FIELD_MAX_LENGTH = 64

# Seconds a "connect account to provider" request stays valid
CONNECT_TIMEOUT_SECONDS = 300


class ConnectAction(StrEnum):
    """Intent passed along with a sign-in request."""

    NONE = "none"
    CONNECT = "connect"
    DISCONNECT = "disconnect"
    REGISTER = "register"


class FlowStatus(StrEnum):
    """States of a single authorization-code flow attempt."""

    START = "start"
    REDIRECTED = "redirected"
    CALLBACK_RECEIVED = "callback_received"
    TOKEN_EXCHANGED = "token_exchanged"
    IDENTITY_FETCHED = "identity_fetched"
    FAILED = "failed"


FLOW_TRANSITIONS: dict[FlowStatus, frozenset[FlowStatus]] = {
    FlowStatus.START: frozenset({FlowStatus.REDIRECTED, FlowStatus.FAILED}),
    FlowStatus.REDIRECTED: frozenset({FlowStatus.CALLBACK_RECEIVED, FlowStatus.FAILED}),
    FlowStatus.CALLBACK_RECEIVED: frozenset({FlowStatus.TOKEN_EXCHANGED, FlowStatus.FAILED}),
    FlowStatus.TOKEN_EXCHANGED: frozenset({FlowStatus.IDENTITY_FETCHED, FlowStatus.FAILED}),
    FlowStatus.IDENTITY_FETCHED: frozenset(),
    FlowStatus.FAILED: frozenset(),
}


class DecisionKind(StrEnum):
    """Outcome of reconciling a provider identity with local accounts."""

    DISCONNECT = "disconnect"
    BEGIN_CONNECT = "begin_connect"
    CONNECT_EXISTING = "connect_existing"
    LOGIN = "login"
    REGISTER = "register"
    REJECT = "reject"


class ReasonCode(StrEnum):
    """Why a request was rejected. Equal to the ``code`` of the matching error."""

    UNKNOWN_PROVIDER = "unknown_provider"
    STATE_MISMATCH = "state_mismatch"
    PROVIDER_ERROR = "provider_error"
    IDENTITY_DATA_ERROR = "identity_data_error"
    ACCOUNT_ALREADY_EXISTS = "account_already_exists"
    ACCOUNT_LINK_CONFLICT = "account_link_conflict"
    SECURITY_VIOLATION = "security_violation"
    CONNECT_TIMEOUT = "connect_timeout"
    ACCOUNT_NOT_FOUND = "account_not_found"
    ACCOUNT_NOT_VERIFIED = "account_not_verified"
    ACCOUNT_NOT_APPROVED = "account_not_approved"
    ACCOUNT_NOT_SIGNED_IN = "account_not_signed_in"
    NO_LINKED_ACCOUNT = "no_linked_account"
    REGISTRATION_NOT_SUPPORTED = "registration_not_supported"
    REGISTRATION_DISABLED = "registration_disabled"
    INSUFFICIENT_IDENTITY_DATA = "insufficient_identity_data"
    NOT_AUTHENTICATED = "not_authenticated"
    INTERNAL_ERROR = "internal_error"

    @classmethod
    def for_code(cls, code: str) -> "ReasonCode":
        try:
            return cls(code)
        except ValueError:
            return cls.INTERNAL_ERROR


def truncate(value: str, length: int) -> str:
    """Cut ``value`` down to at most ``length`` characters (prefix truncation)."""
    return value[:length]


def truncate_username(value: str) -> str:
    return truncate(value, USERNAME_MAX_LENGTH)


def truncate_password(value: str) -> str:
    return truncate(value, PASSWORD_MAX_LENGTH)


def truncate_field(value: str) -> str:
    return truncate(value, FIELD_MAX_LENGTH)
