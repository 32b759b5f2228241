"""Query-style handle over `PollingClient`.

An `ApiQuery` owns at most one in-flight attempt. Changing the endpoint or the
enabled flag, calling `refetch()`, or closing the handle cancels the current
attempt's token first; a superseded attempt never writes state.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from football_datacenter.client.cancellation import CancelToken
from football_datacenter.client.polling import PollingClient, PollResult
from football_datacenter.client.states import ObservableState, PollState

logger = logging.getLogger(__name__)

_UNSET: Any = object()


class ApiQuery(ObservableState):
    def __init__(
        self,
        client: PollingClient,
        endpoint: str | None,
        *,
        enabled: bool = True,
        authenticated: bool = False,
        initial_data: Any = None,
    ) -> None:
        super().__init__()
        self.client = client
        self.endpoint = endpoint
        self.enabled = enabled
        self.authenticated = authenticated
        self.data: Any = initial_data

        self._token: CancelToken | None = None
        self._task: asyncio.Task[PollResult[Any]] | None = None
        self._closed = False

    @property
    def active(self) -> bool:
        return bool(self.endpoint) and self.enabled and not self._closed

    def start(self) -> None:
        """Begin the first fetch. Must be called from a running event loop."""

        if self.active:
            self._invoke()

    def update(self, *, endpoint: str | None = _UNSET, enabled: bool = _UNSET) -> None:
        """Change the target; re-invokes automatically when anything changed."""

        changed = False
        if endpoint is not _UNSET and endpoint != self.endpoint:
            self.endpoint = endpoint
            changed = True
        if enabled is not _UNSET and enabled != self.enabled:
            self.enabled = enabled
            changed = True
        if not changed:
            return

        if self.active:
            self._invoke()
        else:
            self._cancel_current()

    async def refetch(self) -> PollResult[Any]:
        """Supersede any in-flight attempt and wait for the new one."""

        if not self.active:
            return PollResult(state=PollState.IDLE, data=self.data)
        return await self._invoke()

    async def wait(self) -> PollResult[Any] | None:
        """Wait for the current attempt, if any."""

        if self._task is None:
            return None
        return await self._task

    def close(self) -> None:
        self._closed = True
        self._cancel_current()

    # -----------------------------
    # Internals
    # -----------------------------

    def _cancel_current(self) -> None:
        if self._token is not None:
            self._token.cancel()
        self._token = None
        if self.loading or self.is_processing:
            self.loading = False
            self.is_processing = False
            self._emit()

    def _invoke(self) -> asyncio.Task[PollResult[Any]]:
        if self._token is not None:
            self._token.cancel()

        token = CancelToken()
        self._token = token
        self.loading = True
        self.error = None
        self.is_processing = False
        self._emit()

        self._task = asyncio.create_task(self._run(token, self.endpoint or ""))
        return self._task

    def _set_processing(self, token: CancelToken, processing: bool) -> None:
        if token is not self._token or self.is_processing == processing:
            return
        self.is_processing = processing
        self._emit()

    async def _run(self, token: CancelToken, endpoint: str) -> PollResult[Any]:
        result = await self.client.request(
            "GET",
            endpoint,
            authenticated=self.authenticated,
            cancel=token,
            on_processing=lambda processing: self._set_processing(token, processing),
        )

        if token is not self._token:
            logger.debug("Discarding superseded response for %s", endpoint)
            return result

        if result.ok:
            self.data = result.data
            self.error = None
        elif not result.cancelled:
            self.error = result.error
        self.loading = False
        self.is_processing = False
        self._emit()
        return result
