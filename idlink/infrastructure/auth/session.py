"""Session store adapters."""

from collections.abc import MutableMapping
from typing import Any

from starlette.requests import Request

from idlink.domain.auth.port.session_store import SessionStore


class InMemorySessionStore(SessionStore):
    """Session store over a mapping; a fresh dict stands for one browser session."""

    def __init__(self, data: MutableMapping[str, Any] | None = None) -> None:
        self._data: MutableMapping[str, Any] = data if data is not None else {}

    def put(self, key: str, value: Any) -> None:
        self._data[key] = value

    def get(self, key: str, default: Any = None) -> Any:
        return self._data.get(key, default)

    def has(self, key: str) -> bool:
        return key in self._data

    def forget(self, key: str) -> None:
        self._data.pop(key, None)


class StarletteSessionStore(InMemorySessionStore):
    """Session store over ``request.session`` of Starlette's SessionMiddleware.

    The middleware signs the session into a cookie when the response is sent,
    so writes are visible to the browser's next request.
    """

    def __init__(self, request: Request) -> None:
        super().__init__(request.session)
