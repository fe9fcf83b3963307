"""Decide what a provider identity means for the local accounts."""

import hashlib
import logging
import secrets
import time
from collections.abc import Callable

from idlink.domain.auth.error import (
    AccountAlreadyExistsError,
    AccountLinkConflictError,
    AccountNotApprovedError,
    AccountNotFoundError,
    AccountNotSignedInError,
    AccountNotVerifiedError,
    InsufficientIdentityDataError,
    NoLinkedAccountError,
    NotAuthenticatedError,
    RegistrationDisabledError,
    RegistrationNotSupportedError,
    UnknownProviderError,
)
from idlink.domain.auth.model.account import Account
from idlink.domain.auth.model.decision import Decision, RegistrationProposal
from idlink.domain.auth.model.flow import ConnectSession
from idlink.domain.auth.model.identity import CanonicalIdentity, ProviderToken
from idlink.domain.auth.model.value import ConnectAction, DecisionKind, truncate_password
from idlink.domain.auth.port.provider_registry import ProviderRegistry
from idlink.domain.auth.port.repository import AccountRepository
from idlink.domain.auth.service.connect import ConnectSessionService
from idlink.domain.shared.error import IdlinkError
from idlink.domain.shared.service import Service

logger = logging.getLogger(__name__)


class IdentityReconciler(Service):
    """Maps a provider identity onto a local account.

    - disconnect: drop the caller's provider linkage
    - begin_connect: record the caller's intent to link a provider
    - reconcile: connect, log in, propose registration, or reject

    Every rejection is returned as ``Decision.reject``; no IdlinkError
    escapes these methods.
    """

    _accounts: AccountRepository
    _registry: ProviderRegistry
    _connect: ConnectSessionService
    _allow_registration: bool = True
    _sync_provider_email: bool = False
    _now: Callable[[], float] = time.time

    async def disconnect(self, provider_name: str, caller: Account | None) -> Decision:
        try:
            if caller is None:
                raise NotAuthenticatedError()
            if caller.linked_provider_name != provider_name:
                raise NoLinkedAccountError(
                    f"User {caller.username} is not connected to {provider_name}"
                )
            caller.unlink()
            await self._accounts.save(caller)
            self._connect.clear()
        except IdlinkError as e:
            return self._reject(e)

        logger.info("Disconnected user %s from provider %s", caller.username, provider_name)
        return Decision(kind=DecisionKind.DISCONNECT, account=caller)

    def begin_connect(self, provider_name: str, caller: Account | None) -> Decision:
        """Record a connect request. Runs before the redirect to the provider."""
        try:
            if caller is None:
                raise NotAuthenticatedError()
            if not self._registry.is_available(provider_name):
                raise UnknownProviderError(provider_name)
            self._connect.begin(provider_name, caller.id)
        except IdlinkError as e:
            return self._reject(e)
        return Decision(kind=DecisionKind.BEGIN_CONNECT, account=caller)

    async def reconcile(
        self,
        identity: CanonicalIdentity,
        caller: Account | None = None,
        pending_connect: ConnectSession | None = None,
        connect_action: ConnectAction = ConnectAction.NONE,
        token: ProviderToken | None = None,
    ) -> Decision:
        """Decide between ConnectExisting, Login, Register and Reject."""
        identity = identity.normalized()
        try:
            bound = await self._accounts.find_by_provider_identity(
                identity.provider_name, identity.provider_user_id
            )

            if pending_connect is not None:
                if pending_connect.provider_name == identity.provider_name:
                    return await self._connect_existing(identity, caller, pending_connect, bound)
                # Signed in with another provider; the connect request is void
                self._connect.clear()
                logger.info(
                    "Dropped request to connect user %s to %s after sign-in with %s",
                    pending_connect.target_user_id,
                    pending_connect.provider_name,
                    identity.provider_name,
                )

            existing = await self._find_existing(identity)
            if existing is None and bound is None:
                return self._propose_registration(identity, connect_action, token)

            return await self._login(identity, bound)
        except IdlinkError as e:
            return self._reject(e)

    async def _find_existing(self, identity: CanonicalIdentity) -> Account | None:
        existing = None
        if identity.email:
            existing = await self._accounts.find_by_email(identity.email)
        if existing is None and identity.username:
            existing = await self._accounts.find_by_username(identity.username)
        return existing

    async def _connect_existing(
        self,
        identity: CanonicalIdentity,
        caller: Account | None,
        pending: ConnectSession,
        bound: Account | None,
    ) -> Decision:
        if bound is not None and bound.id != pending.target_user_id:
            self._connect.clear()
            raise AccountLinkConflictError(
                f"{identity.provider_name} id {identity.provider_user_id} "
                f"is already linked to user {bound.username}"
            )

        self._connect.validate(pending, caller.id if caller is not None else None)

        target = await self._accounts.get(pending.target_user_id)
        if target is None:
            self._connect.clear()
            raise AccountNotFoundError(f"Account {pending.target_user_id} to connect not found")

        # Never attach a verified external identity to an account nobody has used yet
        if not (target.has_signed_in or target.is_linked):
            self._connect.clear()
            raise AccountNotSignedInError(f"User {target.username} has not signed in yet")

        target.link(identity)
        await self._accounts.save(target)
        self._connect.clear()

        logger.info(
            "Connected existing user %s with provider %s",
            target.username,
            identity.provider_name,
        )
        return Decision(kind=DecisionKind.CONNECT_EXISTING, account=target)

    async def _login(self, identity: CanonicalIdentity, bound: Account | None) -> Decision:
        account = bound
        if account is None and identity.email:
            account = await self._accounts.find_by_email(identity.email)
        if account is None:
            # Only the username matched; it belongs to somebody else
            logger.info(
                "Login failed (username taken): %s %s",
                identity.provider_name,
                identity.provider_user_id,
            )
            raise AccountAlreadyExistsError(f"Username {identity.username} already exists")

        if not account.email_verified:
            logger.info(
                "Login failed (not verified by user): %s %s",
                identity.provider_name,
                identity.provider_user_id,
            )
            raise AccountNotVerifiedError()
        if not account.account_approved:
            logger.info(
                "Login failed (not approved by admin): %s %s",
                identity.provider_name,
                identity.provider_user_id,
            )
            raise AccountNotApprovedError()

        if not account.is_linked:
            if account.has_signed_in:
                raise AccountAlreadyExistsError(
                    f"Login denied, user {account.username} exists and has signed in before"
                )
        elif not account.is_linked_to(identity.provider_name, identity.provider_user_id):
            raise AccountAlreadyExistsError(
                f"Login denied, user {account.username} is linked to another provider identity"
            )

        account.touch(self._now())
        account.link(identity)
        if (
            self._sync_provider_email
            and identity.email
            and account.email != identity.email
        ):
            account.email = identity.email
            logger.info("Updated email for user %s", account.username)
        await self._accounts.save(account)

        logger.info(
            "Login: %s via %s %s",
            account.username,
            identity.provider_name,
            identity.provider_user_id,
        )
        return Decision(kind=DecisionKind.LOGIN, account=account)

    def _propose_registration(
        self,
        identity: CanonicalIdentity,
        connect_action: ConnectAction,
        token: ProviderToken | None,
    ) -> Decision:
        if connect_action != ConnectAction.REGISTER:
            raise NoLinkedAccountError()

        provider = self._registry.resolve(identity.provider_name)
        if provider is None or not provider.supports_registration:
            raise RegistrationNotSupportedError(identity.provider_name)
        if not identity.is_sufficient_for_registration:
            raise InsufficientIdentityDataError()
        if not self._allow_registration:
            raise RegistrationDisabledError()

        logger.debug("Forward %s to registration", identity.username)
        return Decision(
            kind=DecisionKind.REGISTER,
            registration=RegistrationProposal(
                provider_name=identity.provider_name,
                username=identity.username,
                email=identity.email,
                display_name=identity.display_name,
                password_token=self._password_token(token),
            ),
        )

    @staticmethod
    def _password_token(token: ProviderToken | None) -> str:
        """Opaque value derived from the exchange; never the provider token itself."""
        seed = token.access_token.get_secret_value() if token is not None else ""
        digest = hashlib.sha256(f"{seed}{secrets.token_hex(16)}".encode()).hexdigest()
        return truncate_password(digest)

    @staticmethod
    def _reject(error: IdlinkError) -> Decision:
        logger.info("Rejected: reason=%s, %s", error.code, error.message)
        return Decision.reject(error)
