"""Reconciliation decisions."""

from idlink.domain.auth.model.account import Account
from idlink.domain.auth.model.value import DecisionKind, ReasonCode
from idlink.domain.shared.error import IdlinkError
from idlink.domain.shared.model.value import ValueObject


class RegistrationProposal(ValueObject):
    """Identity fields handed to the host's registration step."""

    provider_name: str
    username: str
    email: str
    display_name: str
    password_token: str


class Decision(ValueObject):
    """What the session/login layer should do with a provider identity."""

    kind: DecisionKind
    reason: ReasonCode | None = None
    message: str = ""
    account: Account | None = None
    registration: RegistrationProposal | None = None

    @property
    def is_rejected(self) -> bool:
        return self.kind is DecisionKind.REJECT

    @classmethod
    def reject(cls, error: IdlinkError) -> "Decision":
        return cls(
            kind=DecisionKind.REJECT,
            reason=ReasonCode.for_code(error.code),
            message=error.user_message,
        )
