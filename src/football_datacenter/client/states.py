from __future__ import annotations

from collections.abc import Callable
from enum import StrEnum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from football_datacenter.client.errors import ApiError


class PollState(StrEnum):
    IDLE = "idle"
    SENT = "sent"
    PROCESSING = "processing"
    SUCCESS = "success"
    UNAUTHORIZED = "unauthorized"
    CLIENT_ERROR = "client_error"
    SERVER_ERROR = "server_error"
    CANCELLED = "cancelled"

    @property
    def terminal(self) -> bool:
        return self not in {PollState.IDLE, PollState.SENT, PollState.PROCESSING}


Listener = Callable[[], None]


class ObservableState:
    """Loading/error/processing observables shared by query and mutation handles."""

    def __init__(self) -> None:
        self.loading = False
        self.error: ApiError | None = None
        self.is_processing = False
        self._listeners: list[Listener] = []

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Call `listener` after every state change. Returns an unsubscribe function."""

        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _emit(self) -> None:
        for listener in list(self._listeners):
            listener()

