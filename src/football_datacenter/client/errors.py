from __future__ import annotations

from football_datacenter.client.states import PollState

TIMEOUT_MESSAGE = "Request timeout. Please try again later."


class ApiError(Exception):
    """Terminal failure of a polled request. Cancellation is never an ApiError."""

    state: PollState = PollState.SERVER_ERROR

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class UnauthorizedError(ApiError):
    state = PollState.UNAUTHORIZED


class ClientHttpError(ApiError):
    state = PollState.CLIENT_ERROR


class ServerHttpError(ApiError):
    state = PollState.SERVER_ERROR


class ApiNetworkError(ApiError):
    state = PollState.SERVER_ERROR


class ProcessingTimeoutError(ApiError):
    """The resource was still processing after the retry cap."""

    state = PollState.SERVER_ERROR

    def __init__(self, message: str = TIMEOUT_MESSAGE, *, retries_used: int = 0) -> None:
        super().__init__(message, status_code=202)
        self.retries_used = retries_used
