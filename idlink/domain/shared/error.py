"""Error hierarchy for idlink.

- IdlinkError: carries a machine-readable ``code`` and a ``user_message``
  safe to show to the end user; ``message`` is for operators
- DomainError: a sign-in, connect or registration request was refused (4xx)
- InfrastructureError: a provider or the deployment itself failed (503)

Auth-specific errors live in ``idlink.domain.auth.error``.
"""


class IdlinkError(Exception):
    def __init__(self, message: str, code: str | None = None) -> None:
        self.message = message
        self.code = code or self.__class__.__name__
        super().__init__(message)

    @property
    def user_message(self) -> str:
        return self.message


class DomainError(IdlinkError):
    """Request refused by the sign-in rules."""


class NotFoundError(DomainError):
    """Provider or account does not exist."""


class InvalidStateError(DomainError):
    """Flow or connect session is not in a state that allows the step."""


class ConflictError(DomainError):
    """Provider identity or account is already taken."""


class AuthorizationError(DomainError):
    """Caller may not perform the step."""


class InfrastructureError(IdlinkError):
    """Failure outside the sign-in rules."""


class ExternalServiceError(InfrastructureError):
    """Identity provider is unreachable or answered with garbage."""


class ConfigurationError(InfrastructureError):
    """Settings or provider options are unusable."""
