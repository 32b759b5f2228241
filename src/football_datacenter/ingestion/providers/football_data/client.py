from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import date
from typing import Any

from football_datacenter.ingestion.dates import format_api_date
from football_datacenter.ingestion.governor import RequestGovernor, SleepFn
from football_datacenter.ingestion.providers.base.client import BaseHttpClient
from football_datacenter.ingestion.providers.base.errors import (
    ProviderRateLimited,
    ProviderResponseError,
)

logger = logging.getLogger(__name__)

ApiItem = dict[str, Any]


@dataclass
class FootballDataClient:
    """football-data.org v4 client.

    Every outbound request holds one governor slot for its whole duration, so
    the shared quota is respected no matter how many jobs use the client.
    """

    http: BaseHttpClient
    api_key: str
    governor: RequestGovernor
    rate_limit_retries: int = 3
    rate_limit_retry_s: float = 60.0

    _sleep: SleepFn = field(default=asyncio.sleep, repr=False)

    def _headers(self) -> dict[str, str]:
        return {"X-Auth-Token": self.api_key}

    async def get(self, path: str, params: Mapping[str, Any] | None = None) -> dict[str, Any]:
        attempts = 0
        while True:
            attempts += 1
            logger.debug("GET %s params=%s", path, dict(params or {}))
            try:
                async with self.governor.slot():
                    data = await self.http.get_json(path, params=params, headers=self._headers())
                break
            except ProviderRateLimited as e:
                # Quota is per API key, not per process.
                if attempts > self.rate_limit_retries:
                    raise
                wait_s = e.retry_after if e.retry_after is not None else self.rate_limit_retry_s
                logger.warning(
                    "Provider returned HTTP 429 for %s, retrying in %ss (attempt %s/%s)",
                    path,
                    wait_s,
                    attempts,
                    self.rate_limit_retries,
                )
                await self._sleep(wait_s)

        if data.get("errorCode"):
            raise ProviderResponseError(
                f"football-data returned error {data['errorCode']}: {data.get('message')}",
                error_code=data["errorCode"],
            )

        return data

    async def get_items(
        self, path: str, key: str, params: Mapping[str, Any] | None = None
    ) -> list[ApiItem]:
        payload = await self.get(path, params=params)
        items = payload.get(key)
        if items is None:
            return []
        if not isinstance(items, list):
            raise TypeError(f"Expected '{key}' list, got: {type(items)}")
        return [i for i in items if isinstance(i, dict)]

    # -----------------------------
    # Resources
    # -----------------------------

    async def list_competitions(self) -> list[ApiItem]:
        return await self.get_items("/competitions", "competitions")

    async def list_competition_teams(self, competition_id: int) -> list[ApiItem]:
        return await self.get_items(f"/competitions/{competition_id}/teams", "teams")

    async def get_team(self, team_id: int) -> ApiItem:
        return await self.get(f"/teams/{team_id}")

    async def get_person(self, person_id: int) -> ApiItem:
        return await self.get(f"/persons/{person_id}")

    async def list_competition_matches(
        self, competition_id: int, *, date_from: date, date_to: date
    ) -> list[ApiItem]:
        return await self.get_items(
            f"/competitions/{competition_id}/matches",
            "matches",
            params={"dateFrom": format_api_date(date_from), "dateTo": format_api_date(date_to)},
        )

    async def list_team_matches(
        self, team_id: int, *, date_from: date, date_to: date
    ) -> list[ApiItem]:
        return await self.get_items(
            f"/teams/{team_id}/matches",
            "matches",
            params={"dateFrom": format_api_date(date_from), "dateTo": format_api_date(date_to)},
        )
