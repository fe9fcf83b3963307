from idlink.domain.auth.model.account import Account
from idlink.domain.auth.model.decision import Decision, RegistrationProposal
from idlink.domain.auth.model.flow import (
    AuthorizationRequest,
    AuthorizationState,
    CompletedFlow,
    ConnectSession,
    FlowAttempt,
    RedirectInstruction,
)
from idlink.domain.auth.model.identity import CanonicalIdentity, ProviderToken
from idlink.domain.auth.model.provider import ProviderConfig, ProviderLabel

__all__ = [
    "Account",
    "AuthorizationRequest",
    "AuthorizationState",
    "CanonicalIdentity",
    "ConnectSession",
    "CompletedFlow",
    "Decision",
    "FlowAttempt",
    "ProviderConfig",
    "ProviderLabel",
    "ProviderToken",
    "RedirectInstruction",
    "RegistrationProposal",
]
