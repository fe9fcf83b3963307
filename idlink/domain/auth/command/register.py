"""Registration handoff command."""

import hashlib
import logging
import time
from dataclasses import dataclass

from idlink.config import AuthConfig
from idlink.domain.auth.error import InsufficientIdentityDataError, RegistrationDisabledError
from idlink.domain.auth.model.value import (
    ReasonCode,
    truncate_field,
    truncate_password,
    truncate_username,
)
from idlink.domain.auth.port.registration import RegistrationGateway, RegistrationRequest
from idlink.domain.shared.command import Command, CommandHandler, Result
from idlink.domain.shared.error import IdlinkError

logger = logging.getLogger(__name__)


class RequestRegistration(Command):
    """Command to request a new account from provider identity fields."""

    username: str
    email: str
    display_name: str = ""
    password_token: str  # Opaque value from a Register decision
    comments: str = ""


class RegistrationOutcome(Result):
    success: bool
    account_id: str | None = None
    reason: ReasonCode | None = None
    message: str = ""


@dataclass
class RequestRegistrationHandler(CommandHandler[RequestRegistration, RegistrationOutcome]):
    """Handler for RequestRegistration command."""

    gateway: RegistrationGateway
    config: AuthConfig

    async def run(self, cmd: RequestRegistration) -> RegistrationOutcome:
        try:
            if not self.config.allow_registration:
                raise RegistrationDisabledError()
            if not cmd.username or not cmd.email:
                raise InsufficientIdentityDataError()

            # The account gets a random password; the user signs in through the provider
            password = hashlib.sha256(f"{cmd.password_token}{time.time()}".encode()).hexdigest()
            result = await self.gateway.request_registration(
                RegistrationRequest(
                    username=truncate_username(cmd.username),
                    email=truncate_field(cmd.email),
                    display_name=truncate_field(cmd.display_name),
                    password=truncate_password(password),
                    comments=cmd.comments,
                )
            )
        except IdlinkError as e:
            logger.info("Registration rejected: reason=%s, %s", e.code, e.message)
            return RegistrationOutcome(
                success=False, reason=ReasonCode.for_code(e.code), message=e.user_message
            )

        logger.info("Registration requested for user %s: success=%s", cmd.username, result.success)
        return RegistrationOutcome(
            success=result.success, account_id=result.account_id, message=result.message
        )
