"""Request/retry helper for application endpoints that may answer "processing".

Status contract with the application endpoints:

    200          ready, JSON body              -> SUCCESS with the payload
    204          ready, no content             -> SUCCESS with None
    202          still processing, Retry-After -> wait, then re-issue
    401          credentials invalid/expired   -> clear token, sign-in hook, UNAUTHORIZED
    other 4xx    {"message": ...} optional     -> CLIENT_ERROR
    5xx          {"message": ...} optional     -> SERVER_ERROR

Waits between processing responses are cancellable through a `CancelToken`;
a cancelled attempt settles as CANCELLED and issues no further requests.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

import httpx

from football_datacenter.client.cancellation import CancelToken
from football_datacenter.client.credentials import CredentialStore
from football_datacenter.client.errors import (
    ApiError,
    ApiNetworkError,
    ClientHttpError,
    ProcessingTimeoutError,
    ServerHttpError,
    UnauthorizedError,
)
from football_datacenter.client.states import PollState
from football_datacenter.ingestion.providers.base.client import BaseHttpClient

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_RETRY_SECONDS = 3.0
MAX_RETRIES = 20

ProcessingCallback = Callable[[bool], None]


@dataclass(frozen=True)
class PollResult(Generic[T]):
    state: PollState
    data: T | None = None
    error: ApiError | None = None
    requests_sent: int = 0
    retries_used: int = 0

    @property
    def ok(self) -> bool:
        return self.state is PollState.SUCCESS

    @property
    def cancelled(self) -> bool:
        return self.state is PollState.CANCELLED

    def unwrap(self) -> T | None:
        """Payload on success, raise the error on failure, None when cancelled."""

        if self.error is not None:
            raise self.error
        return self.data


def parse_retry_after(value: str | None, default: float) -> float:
    if value is None:
        return default
    try:
        seconds = float(value.strip())
    except ValueError:
        return default
    if seconds < 0:
        return default
    return seconds


def error_message(response: httpx.Response) -> str:
    fallback = f"HTTP error, status {response.status_code}"
    try:
        body = response.json()
    except ValueError:
        return fallback
    if isinstance(body, dict):
        message = body.get("message")
        if isinstance(message, str) and message:
            return message
        if isinstance(message, list) and message:
            return "; ".join(str(m) for m in message)
    return fallback


def _json_or_none(response: httpx.Response) -> Any:
    if not response.content:
        return None
    return response.json()


@dataclass
class PollingClient:
    http: BaseHttpClient
    credentials: CredentialStore = field(default_factory=CredentialStore)
    on_sign_in_required: Callable[[], None] | None = None
    default_retry_s: float = DEFAULT_RETRY_SECONDS
    max_retries: int = MAX_RETRIES

    def _headers(self, authenticated: bool) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        if authenticated:
            token = self.credentials.get_token()
            if token:
                headers["Authorization"] = f"Bearer {token}"
        return headers

    async def request(
        self,
        method: str,
        endpoint: str,
        *,
        body: Any = None,
        authenticated: bool = False,
        cancel: CancelToken | None = None,
        on_processing: ProcessingCallback | None = None,
    ) -> PollResult[Any]:
        """Run one logical operation to a terminal state.

        Never raises for protocol outcomes; the error (if any) is on the result.
        """
        token = cancel or CancelToken()
        requests_sent = 0
        retries_used = 0

        def settle(
            state: PollState, data: Any = None, error: ApiError | None = None
        ) -> PollResult[Any]:
            if on_processing is not None:
                on_processing(False)
            return PollResult(
                state=state,
                data=data,
                error=error,
                requests_sent=requests_sent,
                retries_used=retries_used,
            )

        while True:
            if token.cancelled:
                return settle(PollState.CANCELLED)

            requests_sent += 1
            try:
                completed, response = await token.guard(
                    self.http.send(
                        method,
                        endpoint,
                        json=body,
                        headers=self._headers(authenticated),
                    )
                )
            except httpx.HTTPError as e:
                return settle(PollState.SERVER_ERROR, error=ApiNetworkError(f"Network error: {e}"))

            if not completed or response is None:
                return settle(PollState.CANCELLED)

            status = response.status_code

            if status == 204:
                return settle(PollState.SUCCESS)

            if status == 202:
                if retries_used >= self.max_retries:
                    return settle(
                        PollState.SERVER_ERROR,
                        error=ProcessingTimeoutError(retries_used=retries_used),
                    )
                delay = parse_retry_after(response.headers.get("Retry-After"), self.default_retry_s)
                logger.debug("%s %s still processing, retrying in %ss", method, endpoint, delay)
                if on_processing is not None:
                    on_processing(True)
                if await token.sleep(delay):
                    return settle(PollState.CANCELLED)
                retries_used += 1
                continue

            if status == 401:
                self.credentials.clear()
                if self.on_sign_in_required is not None:
                    self.on_sign_in_required()
                return settle(
                    PollState.UNAUTHORIZED,
                    error=UnauthorizedError("Unauthorized", status_code=401),
                )

            if status >= 500:
                return settle(
                    PollState.SERVER_ERROR,
                    error=ServerHttpError(error_message(response), status_code=status),
                )

            if status >= 400:
                return settle(
                    PollState.CLIENT_ERROR,
                    error=ClientHttpError(error_message(response), status_code=status),
                )

            if status >= 300:
                return settle(
                    PollState.CLIENT_ERROR,
                    error=ClientHttpError(f"HTTP error, status {status}", status_code=status),
                )

            try:
                data = _json_or_none(response)
            except ValueError:
                return settle(
                    PollState.SERVER_ERROR,
                    error=ServerHttpError("Response was not valid JSON.", status_code=status),
                )
            return settle(PollState.SUCCESS, data=data)

    async def get(
        self, endpoint: str, *, authenticated: bool = False, cancel: CancelToken | None = None
    ) -> Any:
        """Convenience wrapper: payload or raise."""

        result = await self.request("GET", endpoint, authenticated=authenticated, cancel=cancel)
        return result.unwrap()
