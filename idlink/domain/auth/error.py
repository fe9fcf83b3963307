"""Auth-domain errors.

Each error's ``code`` equals the ``ReasonCode`` reported when the error is
recovered into a structured outcome.
"""

from idlink.domain.shared.error import (
    AuthorizationError,
    ConflictError,
    ExternalServiceError,
    InvalidStateError,
    NotFoundError,
)


class UnknownProviderError(NotFoundError):
    """Provider name is unknown or the provider is not fully configured."""

    def __init__(self, provider_name: str) -> None:
        super().__init__(f"Unknown identity provider: {provider_name}", code="unknown_provider")
        self.provider_name = provider_name

    @property
    def user_message(self) -> str:
        return "The requested sign-in provider is not available."


class StateMismatchError(InvalidStateError):
    """Callback state is missing, blank, already consumed, or does not match."""

    def __init__(self, message: str = "Authorization state mismatch") -> None:
        super().__init__(message, code="state_mismatch")

    @property
    def user_message(self) -> str:
        return "Invalid state in communication with authorization provider."


class ProviderError(ExternalServiceError):
    """Token exchange or identity fetch against the provider failed."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        reason_phrase: str = "",
        code: str = "provider_error",
    ) -> None:
        if status_code is not None:
            message = f"{message} (status={status_code}, reason={reason_phrase})"
        super().__init__(message, code=code)
        self.status_code = status_code
        self.reason_phrase = reason_phrase

    @property
    def user_message(self) -> str:
        return "Communication with the authorization provider failed. Please try again."


class IdentityDataError(ProviderError):
    """Provider returned a profile this system cannot use."""

    def __init__(self, message: str) -> None:
        super().__init__(message, code="identity_data_error")

    @property
    def user_message(self) -> str:
        return "The authorization provider returned unusable account data."


class AccountAlreadyExistsError(ConflictError):
    def __init__(self, message: str = "An account with this identity already exists") -> None:
        super().__init__(message, code="account_already_exists")

    @property
    def user_message(self) -> str:
        return (
            "An account with this email or username already exists. "
            "Sign in with your password and connect the provider from your account page."
        )


class AccountLinkConflictError(ConflictError):
    def __init__(self, message: str = "Provider identity is linked to another account") -> None:
        super().__init__(message, code="account_link_conflict")

    @property
    def user_message(self) -> str:
        return (
            "This provider account is already connected to another user. "
            "Disconnect it there first."
        )


class SecurityViolationError(AuthorizationError):
    """A connect session was used by somebody other than its owner."""

    def __init__(self, message: str = "Connect session does not belong to caller") -> None:
        super().__init__(message, code="security_violation")

    @property
    def user_message(self) -> str:
        return "Security violation. Please start again."


class ConnectTimeoutError(InvalidStateError):
    def __init__(self, message: str = "Connect session expired") -> None:
        super().__init__(message, code="connect_timeout")

    @property
    def user_message(self) -> str:
        return "The request to connect your account timed out. Please start again."


class AccountNotFoundError(NotFoundError):
    def __init__(self, message: str = "Account not found") -> None:
        super().__init__(message, code="account_not_found")


class AccountNotVerifiedError(InvalidStateError):
    def __init__(self, message: str = "Account email address is not verified") -> None:
        super().__init__(message, code="account_not_verified")

    @property
    def user_message(self) -> str:
        return "Your email address has not been verified yet."


class AccountNotApprovedError(InvalidStateError):
    def __init__(self, message: str = "Account has not been approved") -> None:
        super().__init__(message, code="account_not_approved")

    @property
    def user_message(self) -> str:
        return "Your account has not been approved by an administrator yet."


class AccountNotSignedInError(InvalidStateError):
    """Target of a connect request has never signed in and is not linked."""

    def __init__(self, message: str = "Account has not signed in yet") -> None:
        super().__init__(message, code="account_not_signed_in")

    @property
    def user_message(self) -> str:
        return "Sign in with your password once before connecting a provider."


class NoLinkedAccountError(NotFoundError):
    def __init__(self, message: str = "No account is linked to this provider identity") -> None:
        super().__init__(message, code="no_linked_account")

    @property
    def user_message(self) -> str:
        return "No account is connected to this provider account. Register first."


class RegistrationNotSupportedError(InvalidStateError):
    def __init__(self, provider_name: str) -> None:
        super().__init__(
            f"Provider {provider_name} does not support registration",
            code="registration_not_supported",
        )


class RegistrationDisabledError(InvalidStateError):
    def __init__(self, message: str = "Registration of new accounts is disabled") -> None:
        super().__init__(message, code="registration_disabled")


class InsufficientIdentityDataError(InvalidStateError):
    def __init__(self, message: str = "Provider did not supply both email and username") -> None:
        super().__init__(message, code="insufficient_identity_data")

    @property
    def user_message(self) -> str:
        return "The provider did not share an email address and username, which are needed to register."


class NotAuthenticatedError(AuthorizationError):
    def __init__(self, message: str = "Sign in required") -> None:
        super().__init__(message, code="not_authenticated")
