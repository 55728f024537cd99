"""Bearer token slot shared by every request of a client."""

from __future__ import annotations

import threading


class TokenHolder:
    """Holds at most one bearer token; the last write wins.

    The token is read when a request is issued, so an update racing with
    in-flight calls may reach some of them and not others.
    """

    def __init__(self, token: str | None = None) -> None:
        self._lock = threading.Lock()
        self._token = token or None

    def set(self, token: str | None) -> None:
        with self._lock:
            self._token = token or None

    def get(self) -> str | None:
        with self._lock:
            return self._token

    def headers(self) -> dict[str, str]:
        token = self.get()
        if token is None:
            return {}
        return {"Authorization": f"Bearer {token}"}
