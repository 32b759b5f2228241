"""Favourite teams and competitions with optimistic updates.

Every add/remove applies its change locally, then confirms it with the
application endpoint. Any outcome other than success (including cancellation)
undoes that one change; other changes made to the list meanwhile are kept.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from typing import Any

from football_datacenter.client.cancellation import CancelToken
from football_datacenter.client.polling import PollingClient, PollResult
from football_datacenter.db.enums import FavoriteKindEnum

logger = logging.getLogger(__name__)

Favourite = dict[str, Any]

_COLLECTION_ENDPOINTS = {
    FavoriteKindEnum.TEAM: "/user/favteam",
    FavoriteKindEnum.COMPETITION: "/user/favcomp",
}


def favourite_endpoint(kind: FavoriteKindEnum, subject_id: int | None = None) -> str:
    base = _COLLECTION_ENDPOINTS[kind]
    return base if subject_id is None else f"{base}/{subject_id}"


class FavouritesStore:
    def __init__(self, client: PollingClient) -> None:
        self.client = client
        self._items: dict[FavoriteKindEnum, list[Favourite]] = {
            kind: [] for kind in FavoriteKindEnum
        }
        self.loading = False

    @property
    def teams(self) -> list[Favourite]:
        return list(self._items[FavoriteKindEnum.TEAM])

    @property
    def competitions(self) -> list[Favourite]:
        return list(self._items[FavoriteKindEnum.COMPETITION])

    def is_favourite(self, kind: FavoriteKindEnum, subject_id: int | str) -> bool:
        return any(item.get("id") == int(subject_id) for item in self._items[kind])

    async def load(self, *, cancel: CancelToken | None = None) -> None:
        """Fetch both lists; a failure on one side keeps the other."""

        if not self.client.credentials.authenticated:
            self.clear()
            return

        self.loading = True
        kinds = list(_COLLECTION_ENDPOINTS)
        try:
            results = await asyncio.gather(
                *(
                    self.client.request(
                        "GET", favourite_endpoint(kind), authenticated=True, cancel=cancel
                    )
                    for kind in kinds
                )
            )
        finally:
            self.loading = False

        for kind, result in zip(kinds, results):
            if result.ok:
                self._items[kind] = [i for i in (result.data or []) if isinstance(i, dict)]
            elif not result.cancelled:
                logger.error("Failed to fetch favourite %ss: %s", kind.value, result.error)

    def clear(self) -> None:
        for kind in self._items:
            self._items[kind] = []

    async def add(
        self, kind: FavoriteKindEnum, item: Favourite, *, cancel: CancelToken | None = None
    ) -> PollResult[Any]:
        subject_id = int(item["id"])
        already = self.is_favourite(kind, subject_id)

        def apply(items: list[Favourite]) -> list[Favourite]:
            return items if already else [*items, item]

        def revert(items: list[Favourite]) -> list[Favourite]:
            return items if already else [i for i in items if i.get("id") != subject_id]

        return await self._optimistic(
            kind,
            apply,
            revert,
            "POST",
            favourite_endpoint(kind, subject_id),
            body={},
            cancel=cancel,
        )

    async def remove(
        self, kind: FavoriteKindEnum, subject_id: int, *, cancel: CancelToken | None = None
    ) -> PollResult[Any]:
        current = self._items[kind]
        index = next((n for n, i in enumerate(current) if i.get("id") == subject_id), None)
        removed = current[index] if index is not None else None

        def apply(items: list[Favourite]) -> list[Favourite]:
            return [i for i in items if i.get("id") != subject_id]

        def revert(items: list[Favourite]) -> list[Favourite]:
            if removed is None or any(i.get("id") == subject_id for i in items):
                return items
            return [*items[:index], removed, *items[index:]]

        return await self._optimistic(
            kind,
            apply,
            revert,
            "DELETE",
            favourite_endpoint(kind, subject_id),
            cancel=cancel,
        )

    async def add_team(self, team: Favourite) -> PollResult[Any]:
        return await self.add(FavoriteKindEnum.TEAM, team)

    async def remove_team(self, team_id: int) -> PollResult[Any]:
        return await self.remove(FavoriteKindEnum.TEAM, team_id)

    async def add_competition(self, competition: Favourite) -> PollResult[Any]:
        return await self.add(FavoriteKindEnum.COMPETITION, competition)

    async def remove_competition(self, competition_id: int) -> PollResult[Any]:
        return await self.remove(FavoriteKindEnum.COMPETITION, competition_id)

    async def _optimistic(
        self,
        kind: FavoriteKindEnum,
        apply: Callable[[list[Favourite]], list[Favourite]],
        revert: Callable[[list[Favourite]], list[Favourite]],
        method: str,
        endpoint: str,
        *,
        body: Any = None,
        cancel: CancelToken | None = None,
    ) -> PollResult[Any]:
        self._items[kind] = apply(self._items[kind])

        result = await self.client.request(
            method, endpoint, body=body, authenticated=True, cancel=cancel
        )
        if not result.ok:
            logger.warning(
                "%s %s not confirmed (%s), reverting favourite", method, endpoint, result.state
            )
            self._items[kind] = revert(self._items[kind])
        return result
