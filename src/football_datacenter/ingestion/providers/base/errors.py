from __future__ import annotations

from dataclasses import dataclass


class ProviderError(RuntimeError):
    """Any failure talking to, or making sense of, the data provider."""


class ProviderRequestError(ProviderError):
    """Transport failure, non-2xx status or an unreadable body."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class ProviderRateLimited(ProviderRequestError):
    """HTTP 429. `retry_after` is the provider's reset hint in seconds, when it sent one."""

    def __init__(self, message: str, *, retry_after: float | None = None) -> None:
        super().__init__(message, status_code=429)
        self.retry_after = retry_after


class ProviderResponseError(ProviderError):
    """A 2xx body that carries a provider error code instead of data."""

    def __init__(self, message: str, *, error_code: object = None) -> None:
        super().__init__(message)
        self.error_code = error_code


@dataclass(frozen=True)
class ProviderMappingError(ProviderError):
    """Payload is missing a field the ingestion needs (usually an id)."""

    message: str
    context: dict[str, object] | None = None

    def __str__(self) -> str:
        if not self.context:
            return self.message
        return f"{self.message} | context={self.context}"
