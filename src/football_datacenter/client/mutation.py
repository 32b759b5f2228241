from __future__ import annotations

from typing import Any

from football_datacenter.client.cancellation import CancelToken
from football_datacenter.client.polling import PollingClient, PollResult
from football_datacenter.client.states import ObservableState


class ApiMutation(ObservableState):
    """Mutation-style handle: explicit triggers, no automatic invocation.

    A new `mutate()` supersedes the previous one; only the latest call writes
    the loading/error/processing observables.
    """

    def __init__(self, client: PollingClient, *, authenticated: bool = False) -> None:
        super().__init__()
        self.client = client
        self.authenticated = authenticated
        self._token: CancelToken | None = None

    async def mutate(
        self, endpoint: str, method: str = "POST", body: Any = None
    ) -> PollResult[Any]:
        if self._token is not None:
            self._token.cancel()

        token = CancelToken()
        self._token = token
        self.loading = True
        self.error = None
        self._emit()

        def on_processing(processing: bool) -> None:
            if token is self._token and self.is_processing != processing:
                self.is_processing = processing
                self._emit()

        result = await self.client.request(
            method,
            endpoint,
            body=body,
            authenticated=self.authenticated,
            cancel=token,
            on_processing=on_processing,
        )

        if token is self._token:
            self._token = None
            if not result.ok and not result.cancelled:
                self.error = result.error
            self.loading = False
            self.is_processing = False
            self._emit()
        return result

    async def post(self, endpoint: str, body: Any = None) -> PollResult[Any]:
        return await self.mutate(endpoint, "POST", body)

    async def delete(self, endpoint: str) -> PollResult[Any]:
        return await self.mutate(endpoint, "DELETE")

    def cancel(self) -> None:
        if self._token is not None:
            self._token.cancel()
