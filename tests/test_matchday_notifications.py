from __future__ import annotations

from datetime import UTC, date, datetime
from typing import Any
from zoneinfo import ZoneInfo

import httpx
import pytest
import sqlalchemy as sa
from sqlalchemy.orm import Session

import football_datacenter.db.models  # noqa: F401
from football_datacenter.db.base import Base
from football_datacenter.db.enums import FavoriteKindEnum
from football_datacenter.db.models.core.competition import Competition
from football_datacenter.db.models.core.team import Team
from football_datacenter.db.models.users.user import User
from football_datacenter.ingestion.dates import utc_date_span
from football_datacenter.ingestion.governor import RequestGovernor
from football_datacenter.ingestion.providers.base.client import BaseHttpClient
from football_datacenter.ingestion.providers.base.errors import ProviderRequestError
from football_datacenter.ingestion.providers.football_data.client import FootballDataClient
from football_datacenter.notifications.digest import NotificationCandidate
from football_datacenter.notifications.matchday import matches_today, run_matchday_notifications

NOW = datetime(2025, 9, 13, 6, 0, tzinfo=UTC)


def _make_session() -> Session:
    engine = sa.create_engine("sqlite+pysqlite:///:memory:", future=True)
    Base.metadata.create_all(engine)
    return Session(engine)


def _match(match_id: int, utc_date: str, *, status: str = "TIMED") -> dict[str, Any]:
    return {
        "id": match_id,
        "utcDate": utc_date,
        "status": status,
        "homeTeam": {"id": 57, "name": "Arsenal FC", "shortName": "Arsenal"},
        "awayTeam": {"id": 340, "name": "Southampton FC", "shortName": "Southampton"},
    }


class FakeMatches:
    def __init__(self, *, team=None, competition=None, failing=()) -> None:
        self.team: dict[int, list[dict[str, Any]]] = team or {}
        self.competition: dict[int, list[dict[str, Any]]] = competition or {}
        self.failing = set(failing)
        self.calls: list[tuple[str, int, date, date]] = []

    async def list_team_matches(self, team_id: int, *, date_from: date, date_to: date):
        self.calls.append(("team", team_id, date_from, date_to))
        if ("team", team_id) in self.failing:
            raise ProviderRequestError("HTTP 500", status_code=500)
        return self.team.get(team_id, [])

    async def list_competition_matches(
        self, competition_id: int, *, date_from: date, date_to: date
    ):
        self.calls.append(("competition", competition_id, date_from, date_to))
        if ("competition", competition_id) in self.failing:
            raise ProviderRequestError("HTTP 500", status_code=500)
        return self.competition.get(competition_id, [])


class RecordingSender:
    def __init__(self, *, fail_for: set[str] | None = None) -> None:
        self.sent: list[tuple[str, str, list[NotificationCandidate]]] = []
        self.fail_for = fail_for or set()

    async def send_digest(
        self, user_email: str, user: User, matches_today: list[NotificationCandidate]
    ) -> None:
        if user_email in self.fail_for:
            raise RuntimeError("mail API unavailable")
        self.sent.append((user_email, user.name, matches_today))


def _seed(session: Session) -> tuple[User, User]:
    arsenal = Team(provider_team_id=57, name="Arsenal FC")
    premier_league = Competition(provider_competition_id=2021, name="Premier League")
    fan = User(name="Ada", email="ada@example.test")
    fan.favorite_teams.append(arsenal)
    fan.favorite_competitions.append(premier_league)
    casual = User(name="Bo", email="bo@example.test")
    casual.favorite_competitions.append(premier_league)
    session.add_all([fan, casual])
    session.commit()
    return fan, casual


@pytest.mark.asyncio
async def test_one_digest_with_exactly_todays_team_match() -> None:
    session = _make_session()
    fan, _ = _seed(session)
    client = FakeMatches(
        team={57: [_match(1001, "2025-09-13T14:00:00Z"), _match(1002, "2025-09-20T14:00:00Z")]},
        competition={2021: [_match(2001, "2025-09-14T16:30:00Z")]},
    )
    sender = RecordingSender()

    result = await run_matchday_notifications(session, client=client, sender=sender, now=NOW)

    assert len(sender.sent) == 1
    email, name, matches = sender.sent[0]
    assert (email, name) == ("ada@example.test", "Ada")
    assert [m.provider_match_id for m in matches] == [1001]
    assert matches[0].kind is FavoriteKindEnum.TEAM
    assert matches[0].user_id == fan.id
    assert matches[0].fixture == "Arsenal vs Southampton"

    assert result.users_seen == 2
    assert result.users_without_matches == 1
    assert result.digests_sent == 1
    assert result.digests_failed == 0
    assert result.reference_date == date(2025, 9, 13)


@pytest.mark.asyncio
async def test_each_subject_is_queried_once_per_run_with_lookahead_window() -> None:
    session = _make_session()
    _seed(session)
    client = FakeMatches()

    await run_matchday_notifications(
        session, client=client, sender=RecordingSender(), now=NOW, lookahead_days=3
    )

    assert sorted(c[:2] for c in client.calls) == [("competition", 2021), ("team", 57)]
    assert {(c[2], c[3]) for c in client.calls} == {(date(2025, 9, 13), date(2025, 9, 16))}


@pytest.mark.asyncio
async def test_failed_lookup_is_skipped_and_other_favourites_still_notify() -> None:
    session = _make_session()
    _seed(session)
    client = FakeMatches(
        team={57: [_match(1001, "2025-09-13T14:00:00Z")]},
        failing={("competition", 2021)},
    )
    sender = RecordingSender()

    result = await run_matchday_notifications(session, client=client, sender=sender, now=NOW)

    assert [s[0] for s in sender.sent] == ["ada@example.test"]
    assert result.lookups_failed == 1


@pytest.mark.asyncio
async def test_send_failure_is_counted_not_raised() -> None:
    session = _make_session()
    _seed(session)
    client = FakeMatches(competition={2021: [_match(2001, "2025-09-13T11:30:00Z")]})
    sender = RecordingSender(fail_for={"ada@example.test"})

    result = await run_matchday_notifications(session, client=client, sender=sender, now=NOW)

    assert [s[0] for s in sender.sent] == ["bo@example.test"]
    assert result.digests_sent == 1
    assert result.digests_failed == 1


def test_matches_today_uses_reference_time_zone_and_skips_unplayed() -> None:
    tokyo = ZoneInfo("Asia/Tokyo")
    reference = datetime(2025, 9, 13, 1, 0, tzinfo=UTC)  # 10:00 in Tokyo
    items = [
        _match(1, "2025-09-13T12:00:00Z"),  # 21:00 Tokyo, same day
        _match(2, "2025-09-13T16:00:00Z"),  # 01:00 next day in Tokyo
        _match(3, "2025-09-13T10:00:00Z", status="POSTPONED"),
        {"id": 4, "utcDate": None},
    ]

    found = matches_today(
        7, FavoriteKindEnum.TEAM, 57, items, reference=reference, tz=tokyo, subject_name="Arsenal"
    )

    assert [c.provider_match_id for c in found] == [1]
    assert found[0].subject_name == "Arsenal"


@pytest.mark.asyncio
async def test_transport_failure_on_one_favourite_does_not_abort_the_run() -> None:
    session = _make_session()
    _seed(session)

    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/v4/teams/57/matches":
            raise httpx.RemoteProtocolError("Server disconnected", request=request)
        return httpx.Response(200, json={"matches": [_match(2001, "2025-09-13T11:30:00Z")]})

    http = BaseHttpClient(base_url="https://api.test/v4", transport=httpx.MockTransport(handler))
    governor = RequestGovernor(threshold=100)
    client = FootballDataClient(http=http, api_key="secret", governor=governor)
    sender = RecordingSender()

    result = await run_matchday_notifications(session, client=client, sender=sender, now=NOW)

    assert sorted(s[0] for s in sender.sent) == ["ada@example.test", "bo@example.test"]
    assert result.lookups_failed == 1
    assert result.digests_sent == 2


class UtcFilteredMatches(FakeMatches):
    """Returns only matches whose UTC date falls inside the requested window."""

    async def list_team_matches(self, team_id: int, *, date_from: date, date_to: date):
        items = await super().list_team_matches(team_id, date_from=date_from, date_to=date_to)
        return [m for m in items if date_from <= date.fromisoformat(m["utcDate"][:10]) <= date_to]


@pytest.mark.asyncio
async def test_window_reaches_back_to_the_utc_date_of_local_midnight() -> None:
    session = _make_session()
    _seed(session)
    # 01:30 on 13 Sep in Tokyo, still 12 Sep in UTC.
    client = UtcFilteredMatches(team={57: [_match(1001, "2025-09-12T16:30:00Z")]})
    sender = RecordingSender()

    await run_matchday_notifications(
        session, client=client, sender=sender, now=NOW, tz=ZoneInfo("Asia/Tokyo")
    )

    assert {(c[2], c[3]) for c in client.calls} == {(date(2025, 9, 12), date(2025, 9, 20))}
    assert [(s[0], [m.provider_match_id for m in s[2]]) for s in sender.sent] == [
        ("ada@example.test", [1001])
    ]


def test_utc_date_span_extends_forward_for_zones_behind_utc() -> None:
    new_york = ZoneInfo("America/New_York")

    assert utc_date_span(date(2025, 9, 13), date(2025, 9, 13), new_york) == (
        date(2025, 9, 13),
        date(2025, 9, 14),
    )
    assert utc_date_span(date(2025, 9, 13), date(2025, 9, 16), UTC) == (
        date(2025, 9, 13),
        date(2025, 9, 16),
    )
