"""Unit tests for ConnectSessionService."""

import pytest

from idlink.domain.auth.error import ConnectTimeoutError, SecurityViolationError
from idlink.domain.auth.service.connect import ConnectSessionService
from idlink.infrastructure.auth.session import InMemorySessionStore
from tests.unit.domain.auth.helpers import NOW


class Clock:
    def __init__(self, now: float = NOW) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


def make_service(clock: Clock | None = None) -> ConnectSessionService:
    return ConnectSessionService(_sessions=InMemorySessionStore(), _now=clock or Clock())


class TestConnectSessionService:
    def test_begin_and_load(self):
        service = make_service()

        service.begin("Github", "7")

        session = service.load()
        assert session is not None
        assert session.provider_name == "Github"
        assert session.target_user_id == "7"
        assert session.created_at == NOW

    def test_new_request_supersedes_old_one(self):
        service = make_service()
        service.begin("Github", "7")

        service.begin("Dropbox", "7")

        assert service.load().provider_name == "Dropbox"

    def test_check_without_session(self):
        assert make_service().check("7") is None

    def test_check_for_owner_within_timeout(self):
        clock = Clock()
        service = make_service(clock)
        service.begin("Github", "7")

        clock.now = NOW + 299
        session = service.check("7")

        assert session is not None
        assert service.load() is not None

    def test_timeout_clears_session(self):
        clock = Clock()
        service = make_service(clock)
        service.begin("Github", "7")

        clock.now = NOW + 301
        with pytest.raises(ConnectTimeoutError) as exc_info:
            service.check("7")

        assert exc_info.value.code == "connect_timeout"
        assert service.load() is None

    @pytest.mark.parametrize("caller_id", ["8", None])
    def test_other_caller_is_security_violation(self, caller_id):
        service = make_service()
        service.begin("Github", "7")

        with pytest.raises(SecurityViolationError):
            service.check(caller_id)

        assert service.load() is None
