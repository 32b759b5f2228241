from __future__ import annotations

import logging
from collections.abc import Callable

logger = logging.getLogger(__name__)

TokenListener = Callable[[str | None], None]


class CredentialStore:
    """In-memory bearer token cache with change listeners."""

    def __init__(self, token: str | None = None) -> None:
        self._token = token
        self._listeners: list[TokenListener] = []

    def get_token(self) -> str | None:
        return self._token

    def set_token(self, token: str | None) -> None:
        if not token:
            self.clear()
            return
        self._token = token
        self._notify()

    def clear(self) -> None:
        self._token = None
        self._notify()

    @property
    def authenticated(self) -> bool:
        return bool(self._token)

    def on_change(self, listener: TokenListener) -> Callable[[], None]:
        """Subscribe to token changes. Returns an unsubscribe function."""

        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        for listener in list(self._listeners):
            try:
                listener(self._token)
            except Exception:
                logger.exception("Credential listener failed")
