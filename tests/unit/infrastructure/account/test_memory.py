"""Unit tests for the in-memory account store and registration gateway."""

import pytest

from idlink.domain.auth.model.account import Account
from idlink.domain.auth.port.registration import RegistrationRequest
from idlink.infrastructure.account.memory import (
    InMemoryAccountRepository,
    InMemoryRegistrationGateway,
)


@pytest.fixture
def repo() -> InMemoryAccountRepository:
    return InMemoryAccountRepository(
        [
            Account(
                id="1",
                username="jane",
                email="Jane@Example.org",
                linked_provider_name="Github",
                linked_provider_user_id="4711",
            ),
            Account(id="2", username="bob", email="bob@example.org"),
        ]
    )


class TestInMemoryAccountRepository:
    @pytest.mark.asyncio
    async def test_get(self, repo: InMemoryAccountRepository):
        account = await repo.get("2")

        assert account is not None
        assert account.username == "bob"
        assert await repo.get("404") is None

    @pytest.mark.asyncio
    async def test_find_by_provider_identity(self, repo: InMemoryAccountRepository):
        account = await repo.find_by_provider_identity("Github", "4711")

        assert account is not None
        assert account.id == "1"
        assert await repo.find_by_provider_identity("Dropbox", "4711") is None

    @pytest.mark.asyncio
    async def test_find_by_email_ignores_case(self, repo: InMemoryAccountRepository):
        account = await repo.find_by_email("jane@example.ORG")

        assert account is not None
        assert account.id == "1"

    @pytest.mark.asyncio
    async def test_empty_lookups_match_nothing(self):
        repo = InMemoryAccountRepository([Account(id="9", username="nomail")])

        assert await repo.find_by_email("") is None
        assert await repo.find_by_username("") is None

    @pytest.mark.asyncio
    async def test_changes_only_stick_after_save(self, repo: InMemoryAccountRepository):
        account = await repo.get("2")
        assert account is not None
        account.touch(1_700_000_000)

        stored = await repo.get("2")
        assert stored is not None
        assert stored.last_active_timestamp == 0

        await repo.save(account)

        stored = await repo.get("2")
        assert stored is not None
        assert stored.last_active_timestamp == 1_700_000_000


class TestInMemoryRegistrationGateway:
    @pytest.mark.asyncio
    async def test_creates_unverified_account(self, repo: InMemoryAccountRepository):
        gateway = InMemoryRegistrationGateway(repo)

        result = await gateway.request_registration(
            RegistrationRequest(
                username="newbie", email="new@example.org", display_name="New", password="x" * 64
            )
        )

        assert result.success
        account = await repo.get(result.account_id)
        assert account is not None
        assert account.username == "newbie"
        assert not account.email_verified
        assert not account.account_approved

    @pytest.mark.asyncio
    async def test_refuses_taken_username(self, repo: InMemoryAccountRepository):
        gateway = InMemoryRegistrationGateway(repo)

        result = await gateway.request_registration(
            RegistrationRequest(
                username="bob", email="other@example.org", display_name="", password="x"
            )
        )

        assert not result.success
        assert result.account_id is None

    @pytest.mark.asyncio
    async def test_refuses_taken_email(self, repo: InMemoryAccountRepository):
        gateway = InMemoryRegistrationGateway(repo)

        result = await gateway.request_registration(
            RegistrationRequest(
                username="robert", email="BOB@example.org", display_name="", password="x"
            )
        )

        assert not result.success
