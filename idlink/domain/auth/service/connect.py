"""Connect sessions: an authenticated user's pending request to link a provider."""

import logging
import time
from collections.abc import Callable

from idlink.domain.auth.error import ConnectTimeoutError, SecurityViolationError
from idlink.domain.auth.model.flow import ConnectSession
from idlink.domain.auth.model.value import CONNECT_TIMEOUT_SECONDS
from idlink.domain.auth.port.session_store import SessionStore
from idlink.domain.shared.service import Service

logger = logging.getLogger(__name__)


class ConnectSessionService(Service):
    _sessions: SessionStore
    _timeout: float = CONNECT_TIMEOUT_SECONDS
    _key_prefix: str = "idlink."
    _now: Callable[[], float] = time.time

    @property
    def session_key(self) -> str:
        return f"{self._key_prefix}connect"

    def begin(self, provider_name: str, target_user_id: str) -> ConnectSession:
        """Record the intent to connect. Supersedes any earlier request."""
        session = ConnectSession(
            provider_name=provider_name,
            target_user_id=target_user_id,
            created_at=self._now(),
        )
        self._sessions.put(self.session_key, session.model_dump(mode="json"))
        logger.debug(
            "Received a request to connect user %s to provider %s", target_user_id, provider_name
        )
        return session

    def load(self) -> ConnectSession | None:
        data = self._sessions.get(self.session_key)
        if not data:
            return None
        return ConnectSession.model_validate(data)

    def clear(self) -> None:
        self._sessions.forget(self.session_key)

    def validate(self, session: ConnectSession, caller_id: str | None) -> ConnectSession:
        """Check ownership and age of ``session``, clearing it when either fails.

        Raises:
            SecurityViolationError: If the caller is not the session's target user
            ConnectTimeoutError: If the session is older than the timeout
        """
        if caller_id is None or caller_id != session.target_user_id:
            self.clear()
            logger.info(
                "Failed security check: connect request for user %s used by caller %s",
                session.target_user_id,
                caller_id,
            )
            raise SecurityViolationError()

        if session.is_expired(self._now(), self._timeout):
            self.clear()
            logger.info(
                "Timeout for connecting user %s with provider %s",
                session.target_user_id,
                session.provider_name,
            )
            raise ConnectTimeoutError()
        return session

    def check(self, caller_id: str | None) -> ConnectSession | None:
        """Validate the stored connect session, if any, for ``caller_id``."""
        session = self.load()
        if session is None:
            return None
        return self.validate(session, caller_id)
