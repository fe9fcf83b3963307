"""Local account as seen by the auth domain.

Accounts belong to the host application. The auth domain only reads their
status flags and writes the provider linkage and the last-active timestamp.
"""

from idlink.domain.auth.model.identity import CanonicalIdentity
from idlink.domain.shared.model.entity import Entity


class Account(Entity):
    """A host account with its provider linkage.

    Invariants:
    - the three `linked_*` fields are either all empty or describe one
      (provider, provider user id) pair
    - `last_active_timestamp == 0` means the account has never signed in
    """

    id: str
    username: str
    email: str = ""
    real_name: str = ""
    email_verified: bool = False
    account_approved: bool = False
    last_active_timestamp: int = 0
    linked_provider_name: str = ""
    linked_provider_user_id: str = ""
    linked_provider_email: str = ""

    @property
    def is_linked(self) -> bool:
        return self.linked_provider_name != ""

    @property
    def has_signed_in(self) -> bool:
        return self.last_active_timestamp != 0

    def is_linked_to(self, provider_name: str, provider_user_id: str) -> bool:
        return (
            self.linked_provider_name == provider_name
            and self.linked_provider_user_id == provider_user_id
        )

    def link(self, identity: CanonicalIdentity) -> None:
        """Bind this account to the identity's (provider, provider user id)."""
        self.linked_provider_name = identity.provider_name
        self.linked_provider_user_id = identity.provider_user_id
        self.linked_provider_email = identity.email

    def unlink(self) -> None:
        self.linked_provider_name = ""
        self.linked_provider_user_id = ""
        self.linked_provider_email = ""

    def touch(self, timestamp: float) -> None:
        self.last_active_timestamp = int(timestamp)
