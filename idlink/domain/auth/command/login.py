"""Sign-in commands: start a provider flow, complete it on callback."""

from dataclasses import dataclass

from idlink.domain.auth.model.account import Account
from idlink.domain.auth.model.decision import Decision, RegistrationProposal
from idlink.domain.auth.model.value import ConnectAction, DecisionKind, ReasonCode
from idlink.domain.auth.port.repository import AccountRepository
from idlink.domain.auth.service.connect import ConnectSessionService
from idlink.domain.auth.service.flow import AuthorizationFlowService
from idlink.domain.auth.service.reconciler import IdentityReconciler
from idlink.domain.shared.command import Command, CommandHandler, Result
from idlink.domain.shared.error import IdlinkError


class LoginOutcome(Result):
    """Structured result of a sign-in step.

    Exactly one of ``redirect_url`` (send the browser to the provider) or
    ``decision`` is set. A rejected step has ``reason`` set.
    """

    redirect_url: str | None = None
    decision: DecisionKind | None = None
    reason: ReasonCode | None = None
    message: str = ""
    account_id: str | None = None
    registration: RegistrationProposal | None = None
    return_url: str = ""
    scope_id: str = ""

    @property
    def ok(self) -> bool:
        return self.reason is None

    @classmethod
    def rejected(cls, error: IdlinkError, return_url: str = "", scope_id: str = "") -> "LoginOutcome":
        return cls.from_decision(Decision.reject(error), return_url, scope_id)

    @classmethod
    def from_decision(
        cls, decision: Decision, return_url: str = "", scope_id: str = ""
    ) -> "LoginOutcome":
        return cls(
            decision=decision.kind,
            reason=decision.reason,
            message=decision.message,
            account_id=decision.account.id if decision.account is not None else None,
            registration=decision.registration,
            return_url=return_url,
            scope_id=scope_id,
        )


async def _load_caller(accounts: AccountRepository, caller_id: str | None) -> Account | None:
    if not caller_id:
        return None
    return await accounts.get(caller_id)


class StartLogin(Command):
    """Command to start a sign-in, connect or disconnect request."""

    provider: str
    connect_action: ConnectAction = ConnectAction.NONE
    return_url: str = ""
    scope_id: str = ""
    caller_id: str | None = None  # Account id of the signed-in caller, if any


@dataclass
class StartLoginHandler(CommandHandler[StartLogin, LoginOutcome]):
    """Handler for StartLogin command."""

    flow: AuthorizationFlowService
    connect: ConnectSessionService
    reconciler: IdentityReconciler
    accounts: AccountRepository

    async def run(self, cmd: StartLogin) -> LoginOutcome:
        caller = await _load_caller(self.accounts, cmd.caller_id)
        try:
            provider = self.flow.resolve(cmd.provider)

            if cmd.connect_action == ConnectAction.DISCONNECT:
                decision = await self.reconciler.disconnect(provider.name, caller)
                return LoginOutcome.from_decision(decision, cmd.return_url, cmd.scope_id)

            if cmd.connect_action == ConnectAction.CONNECT:
                decision = self.reconciler.begin_connect(provider.name, caller)
                if decision.is_rejected:
                    return LoginOutcome.from_decision(decision, cmd.return_url, cmd.scope_id)
            else:
                # A connect request left behind by somebody else, or a stale one
                self.connect.check(caller.id if caller is not None else None)

            redirect = self.flow.begin(
                provider.name, cmd.return_url, cmd.scope_id, cmd.connect_action
            )
        except IdlinkError as e:
            return LoginOutcome.rejected(e, cmd.return_url, cmd.scope_id)

        return LoginOutcome(
            redirect_url=redirect.url,
            return_url=cmd.return_url,
            scope_id=cmd.scope_id,
        )


class CompleteLogin(Command):
    """Command to complete a provider flow from its callback parameters."""

    code: str = ""
    state: str = ""
    error: str = ""
    error_description: str = ""
    caller_id: str | None = None


@dataclass
class CompleteLoginHandler(CommandHandler[CompleteLogin, LoginOutcome]):
    """Handler for CompleteLogin command."""

    flow: AuthorizationFlowService
    connect: ConnectSessionService
    reconciler: IdentityReconciler
    accounts: AccountRepository

    async def run(self, cmd: CompleteLogin) -> LoginOutcome:
        caller = await _load_caller(self.accounts, cmd.caller_id)
        try:
            try:
                pending = self.connect.check(caller.id if caller is not None else None)
            except IdlinkError:
                self.flow.discard()
                raise

            completed = await self.flow.complete(
                cmd.code, cmd.state, cmd.error, cmd.error_description
            )
        except IdlinkError as e:
            return LoginOutcome.rejected(e)

        stored = completed.authorization
        decision = await self.reconciler.reconcile(
            completed.identity,
            caller=caller,
            pending_connect=pending,
            connect_action=stored.connect_action,
            token=completed.token,
        )
        return LoginOutcome.from_decision(decision, stored.return_url, stored.scope_id)
