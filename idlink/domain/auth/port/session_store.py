"""Session store port for the auth domain."""

from abc import abstractmethod
from typing import Any, Protocol

from idlink.domain.shared.port import Port


class SessionStore(Port, Protocol):
    """String-keyed store scoped to one browser session.

    Values must be JSON-serializable. A value written with ``put`` must be
    visible to the next request of the same session.
    """

    @abstractmethod
    def put(self, key: str, value: Any) -> None: ...

    @abstractmethod
    def get(self, key: str, default: Any = None) -> Any: ...

    @abstractmethod
    def has(self, key: str) -> bool: ...

    @abstractmethod
    def forget(self, key: str) -> None:
        """Remove ``key``. Missing keys are ignored."""
        ...
