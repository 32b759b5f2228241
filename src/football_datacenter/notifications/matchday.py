from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import UTC, date, datetime, timedelta, tzinfo
from typing import Any

from sqlalchemy.orm import Session

from football_datacenter.db.enums import FavoriteKindEnum, MatchStatusEnum
from football_datacenter.db.models.users.user import User
from football_datacenter.db.repos.users.user_repo import UserRepository
from football_datacenter.ingestion.dates import (
    is_same_local_day,
    local_date,
    parse_match_datetime,
    utc_date_span,
)
from football_datacenter.ingestion.providers.base.errors import ProviderError
from football_datacenter.ingestion.providers.football_data.client import FootballDataClient
from football_datacenter.notifications.digest import NotificationCandidate
from football_datacenter.notifications.sender import DigestSender

logger = logging.getLogger(__name__)

ApiItem = dict[str, Any]

_NOT_PLAYED = {MatchStatusEnum.CANCELLED.value, MatchStatusEnum.POSTPONED.value}


@dataclass(frozen=True)
class MatchdayRunResult:
    reference_date: date
    users_seen: int
    users_without_matches: int
    digests_sent: int
    digests_failed: int
    lookups_failed: int


class MatchLookup:
    """Provider match queries for one run, cached per (kind, subject id).

    A failed lookup is cached as well, so a broken subject costs one call per
    run no matter how many users follow it.
    """

    def __init__(self, client: FootballDataClient, *, date_from: date, date_to: date) -> None:
        self.client = client
        self.date_from = date_from
        self.date_to = date_to
        self.failures = 0
        self._cache: dict[tuple[FavoriteKindEnum, int], list[ApiItem] | None] = {}

    async def matches_for(self, kind: FavoriteKindEnum, subject_id: int) -> list[ApiItem] | None:
        key = (kind, subject_id)
        if key in self._cache:
            return self._cache[key]

        try:
            if kind is FavoriteKindEnum.TEAM:
                items = await self.client.list_team_matches(
                    subject_id, date_from=self.date_from, date_to=self.date_to
                )
            else:
                items = await self.client.list_competition_matches(
                    subject_id, date_from=self.date_from, date_to=self.date_to
                )
        except (ProviderError, TypeError):
            logger.exception("Match lookup failed for %s %s", kind.value, subject_id)
            self.failures += 1
            self._cache[key] = None
            return None

        self._cache[key] = items
        return items


def _team_name(match: ApiItem, side: str) -> str | None:
    team = match.get(side)
    if isinstance(team, dict):
        name = team.get("shortName") or team.get("name")
        return name if isinstance(name, str) else None
    return None


def matches_today(
    user_id: int,
    kind: FavoriteKindEnum,
    subject_id: int,
    items: list[ApiItem],
    *,
    reference: datetime,
    tz: tzinfo,
    subject_name: str | None = None,
) -> list[NotificationCandidate]:
    """Candidates for the matches in `items` that are played on the reference day."""

    found: list[NotificationCandidate] = []
    for match in items:
        if match.get("status") in _NOT_PLAYED:
            continue
        match_id = match.get("id")
        try:
            kickoff = parse_match_datetime(match.get("utcDate"), provider_match_id=str(match_id))
        except ValueError:
            continue
        if not is_same_local_day(kickoff, reference, tz):
            continue
        found.append(
            NotificationCandidate(
                user_id=user_id,
                kind=kind,
                subject_id=subject_id,
                match_date=kickoff,
                subject_name=subject_name,
                provider_match_id=match_id if isinstance(match_id, int) else None,
                home_team=_team_name(match, "homeTeam"),
                away_team=_team_name(match, "awayTeam"),
            )
        )
    return found


async def collect_user_candidates(
    user: User,
    lookup: MatchLookup,
    *,
    reference: datetime,
    tz: tzinfo,
) -> list[NotificationCandidate]:
    candidates: list[NotificationCandidate] = []

    subjects: list[tuple[FavoriteKindEnum, int, str]] = [
        (FavoriteKindEnum.COMPETITION, c.provider_competition_id, c.name)
        for c in user.favorite_competitions
    ]
    subjects += [(FavoriteKindEnum.TEAM, t.provider_team_id, t.name) for t in user.favorite_teams]

    for kind, subject_id, name in subjects:
        items = await lookup.matches_for(kind, subject_id)
        if not items:
            continue
        candidates.extend(
            matches_today(
                user.id,
                kind,
                subject_id,
                items,
                reference=reference,
                tz=tz,
                subject_name=name,
            )
        )

    return candidates


async def run_matchday_notifications(
    session: Session,
    *,
    client: FootballDataClient,
    sender: DigestSender,
    now: datetime | None = None,
    tz: tzinfo = UTC,
    lookahead_days: int = 7,
) -> MatchdayRunResult:
    """Send one digest per user whose favourites play on the reference day."""

    reference = now or datetime.now(tz=UTC)
    today = local_date(reference, tz)
    date_from, date_to = utc_date_span(today, today + timedelta(days=lookahead_days), tz)
    lookup = MatchLookup(client, date_from=date_from, date_to=date_to)

    users = UserRepository(session).list_with_favorites()
    without_matches = 0
    sent = 0
    failed = 0

    for user in users:
        candidates = await collect_user_candidates(user, lookup, reference=reference, tz=tz)
        if not candidates:
            without_matches += 1
            continue

        try:
            await sender.send_digest(user.email, user, candidates)
        except Exception:
            # Deferred to the next scheduled run.
            logger.exception("Digest delivery failed for user %s", user.id)
            failed += 1
        else:
            sent += 1

    result = MatchdayRunResult(
        reference_date=today,
        users_seen=len(users),
        users_without_matches=without_matches,
        digests_sent=sent,
        digests_failed=failed,
        lookups_failed=lookup.failures,
    )
    logger.info(
        "Matchday run for %s: users=%s sent=%s failed=%s lookups_failed=%s",
        result.reference_date,
        result.users_seen,
        result.digests_sent,
        result.digests_failed,
        result.lookups_failed,
    )
    return result
