from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping

import httpx

from .errors import ProviderRateLimited, ProviderRequestError

Json = dict[str, Any]

# football-data.org reports the seconds left in the current quota window here.
RESET_HEADERS = ("Retry-After", "X-RequestCounter-Reset")


def reset_hint(headers: httpx.Headers) -> float | None:
    for name in RESET_HEADERS:
        raw = headers.get(name)
        if raw is None:
            continue
        try:
            seconds = float(raw)
        except ValueError:
            continue
        if seconds >= 0:
            return seconds
    return None


def _error_detail(resp: httpx.Response) -> str | None:
    try:
        body = resp.json()
    except ValueError:
        return None
    if isinstance(body, dict) and isinstance(body.get("message"), str):
        return body["message"]
    return None


@dataclass
class BaseHttpClient:
    """
    One pooled `httpx.AsyncClient` per base URL.

    `send` is the raw call (any status comes back as a response) and is what
    the polling client builds on. `request_json` is the provider flavour: it
    turns 429, other non-2xx codes and non-object bodies into provider errors.
    """

    base_url: str
    timeout_s: float = 30.0
    connect_timeout_s: float = 10.0
    headers: Mapping[str, str] = field(default_factory=dict)

    transport: httpx.AsyncBaseTransport | None = None

    def __post_init__(self) -> None:
        self._client = httpx.AsyncClient(
            base_url=self.base_url.rstrip("/") + "/",
            timeout=httpx.Timeout(self.timeout_s, connect=self.connect_timeout_s),
            headers=dict(self.headers),
            transport=self.transport,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> BaseHttpClient:
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    async def send(
        self,
        method: str,
        path: str,
        *,
        params: Mapping[str, Any] | None = None,
        json: Any = None,
        headers: Mapping[str, str] | None = None,
    ) -> httpx.Response:
        return await self._client.request(
            method=method,
            url=path.lstrip("/"),
            params=params,
            json=json,
            headers=headers,
        )

    async def request_json(
        self,
        method: str,
        path: str,
        *,
        params: Mapping[str, Any] | None = None,
        json: Mapping[str, Any] | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> Json:
        try:
            resp = await self.send(method, path, params=params, json=json, headers=headers)
        except httpx.RequestError as e:
            raise ProviderRequestError(f"{method} {path} failed: {e}") from e

        if resp.status_code == 429:
            raise ProviderRateLimited(
                f"Provider rate limited {method} {path} (HTTP 429).",
                retry_after=reset_hint(resp.headers),
            )

        if not resp.is_success:
            detail = _error_detail(resp)
            message = f"HTTP {resp.status_code} for {method} {resp.request.url}"
            raise ProviderRequestError(
                f"{message}: {detail}" if detail else message, status_code=resp.status_code
            )

        try:
            data = resp.json()
        except ValueError as e:
            raise ProviderRequestError(f"{method} {path} returned invalid JSON.") from e

        if not isinstance(data, dict):
            raise ProviderRequestError(f"Expected JSON object from {path}, got {type(data)}")

        return data

    async def get_json(
        self,
        path: str,
        *,
        params: Mapping[str, Any] | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> Json:
        return await self.request_json("GET", path, params=params, headers=headers)
