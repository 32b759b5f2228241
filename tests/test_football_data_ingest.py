from __future__ import annotations

from typing import Any

import pytest
import sqlalchemy as sa
from sqlalchemy.orm import Session

import football_datacenter.db.models  # noqa: F401
from football_datacenter.db.base import Base
from football_datacenter.db.models.core.coach import Coach
from football_datacenter.db.models.core.competition import Competition
from football_datacenter.db.models.core.player import Player
from football_datacenter.db.models.core.team import Team
from football_datacenter.db.models.ingestion.ingested_payload import IngestedPayload
from football_datacenter.db.repos.core.player_repo import PlayerRepository
from football_datacenter.db.repos.core.team_repo import TeamRepository
from football_datacenter.ingestion.providers.base.errors import ProviderMappingError
from football_datacenter.ingestion.providers.football_data.ingest.competitions import (
    ingest_competitions,
)
from football_datacenter.ingestion.providers.football_data.ingest.squads import ingest_squads
from football_datacenter.ingestion.providers.football_data.ingest.teams import ingest_teams


def _make_session() -> Session:
    engine = sa.create_engine("sqlite+pysqlite:///:memory:", future=True)
    Base.metadata.create_all(engine)
    return Session(engine)


def _count(session: Session, model: type[Any]) -> int:
    return session.execute(sa.select(sa.func.count()).select_from(model)).scalar_one()


class FakeFootballData:
    def __init__(self, teams_by_competition=None, team_payloads=None, people=None) -> None:
        self.teams_by_competition: dict[int, list[dict[str, Any]]] = teams_by_competition or {}
        self.team_payloads: dict[int, dict[str, Any]] = team_payloads or {}
        self.people: dict[int, dict[str, Any]] = people or {}
        self.calls: list[str] = []

    async def list_competition_teams(self, competition_id: int) -> list[dict[str, Any]]:
        self.calls.append(f"competition_teams:{competition_id}")
        return self.teams_by_competition.get(competition_id, [])

    async def get_team(self, team_id: int) -> dict[str, Any]:
        self.calls.append(f"team:{team_id}")
        return self.team_payloads[team_id]

    async def get_person(self, person_id: int) -> dict[str, Any]:
        self.calls.append(f"person:{person_id}")
        return self.people[person_id]


COMPETITIONS = [
    {
        "id": 2021,
        "name": "Premier League",
        "code": "PL",
        "plan": "TIER_ONE",
        "emblem": "https://crests.test/PL.png",
        "area": {"id": 2072, "name": "England"},
    },
    {"id": 2013, "name": "Campeonato Brasileiro Série A", "code": "BSA", "plan": "TIER_TWO"},
]


@pytest.mark.asyncio
async def test_ingest_competitions_keeps_supported_plan_and_is_idempotent() -> None:
    session = _make_session()

    first = await ingest_competitions(session, items=COMPETITIONS)
    assert first.competitions_seen == 2
    assert first.competitions_skipped == 1
    assert first.competitions_created == 1

    second = await ingest_competitions(session, items=COMPETITIONS, store_payloads=False)
    assert second.competitions_created == 0
    assert second.competitions_updated == 1

    assert _count(session, Competition) == 1
    pl = session.execute(sa.select(Competition)).scalar_one()
    assert pl.provider_competition_id == 2021
    assert pl.code == "PL"
    assert pl.area_name == "England"
    assert _count(session, IngestedPayload) == 1


@pytest.mark.asyncio
async def test_ingest_competitions_requires_a_source() -> None:
    session = _make_session()
    with pytest.raises(ValueError):
        await ingest_competitions(session)


@pytest.mark.asyncio
async def test_ingest_competitions_rejects_items_without_id() -> None:
    session = _make_session()
    with pytest.raises(ProviderMappingError):
        await ingest_competitions(session, items=[{"name": "Nameless", "plan": "TIER_ONE"}])


@pytest.mark.asyncio
async def test_ingest_teams_upserts_and_links_once_per_competition() -> None:
    session = _make_session()
    await ingest_competitions(session, items=COMPETITIONS)

    client = FakeFootballData(
        teams_by_competition={
            2021: [
                {"id": 57, "name": "Arsenal FC", "shortName": "Arsenal", "tla": "ARS"},
                {"id": 61, "name": "Chelsea FC", "tla": "CHE", "founded": 1905},
            ]
        }
    )

    first = await ingest_teams(session, client=client)
    second = await ingest_teams(session, client=client)

    assert client.calls == ["competition_teams:2021", "competition_teams:2021"]
    assert first.teams_created == 2
    assert first.links_created == 2
    assert second.teams_created == 0
    assert second.teams_updated == 2
    assert second.links_created == 0
    assert _count(session, Team) == 2

    pl = session.execute(sa.select(Competition)).scalar_one()
    teams = TeamRepository(session).teams_for_competition(pl)
    assert [t.tla for t in teams] == ["ARS", "CHE"]
    assert teams[1].founded == 1905


@pytest.mark.asyncio
async def test_ingest_squads_fetches_every_profile_and_defaults_unknowns() -> None:
    session = _make_session()
    session.add(Team(provider_team_id=57, name="Arsenal FC"))
    session.commit()

    client = FakeFootballData(
        team_payloads={
            57: {
                "id": 57,
                "name": "Arsenal FC",
                "coach": {"id": 11619, "name": "Mikel Arteta", "nationality": "Spain"},
                "squad": [{"id": 7784}, {"id": 8021}],
            }
        },
        people={
            7784: {
                "id": 7784,
                "name": "Bukayo Saka",
                "position": "Right Winger",
                "nationality": "England",
                "shirtNumber": 7,
            },
            8021: {"id": 8021, "name": "Trialist"},
        },
    )

    first = await ingest_squads(session, client=client)
    second = await ingest_squads(session, client=client, store_payloads=False)

    assert client.calls == ["team:57", "person:7784", "person:8021"] * 2
    assert first.players_created == 2
    assert first.coaches_created == 1
    assert second.players_created == 0
    assert second.players_updated == 2
    assert second.coaches_updated == 1

    team = session.execute(sa.select(Team)).scalar_one()
    squad = {p.provider_player_id: p for p in PlayerRepository(session).squad_for_team(team)}
    assert squad[7784].shirt_number == 7
    assert squad[8021].nationality == "unknown"
    assert squad[8021].position == "unknown"
    assert _count(session, Player) == 2
    assert _count(session, Coach) == 1

    stored = session.execute(
        sa.select(IngestedPayload.entity_type, IngestedPayload.entity_key).order_by(
            IngestedPayload.id
        )
    ).all()
    assert [tuple(row) for row in stored] == [
        ("team", "57"),
        ("player", "7784"),
        ("player", "8021"),
    ]
    team_payload = session.execute(
        sa.select(IngestedPayload.payload_json).where(IngestedPayload.entity_type == "team")
    ).scalar_one()
    assert team_payload["coach"]["name"] == "Mikel Arteta"


@pytest.mark.asyncio
async def test_ingest_squads_moves_team_to_new_coach() -> None:
    session = _make_session()
    session.add(Team(provider_team_id=61, name="Chelsea FC"))
    session.commit()

    payload: dict[str, Any] = {
        "id": 61,
        "coach": {"id": 1, "name": "Old Coach"},
        "squad": [],
    }
    client = FakeFootballData(team_payloads={61: payload})
    await ingest_squads(session, client=client)

    payload["coach"] = {"id": 2, "name": "New Coach"}
    await ingest_squads(session, client=client)

    coaches = {c.provider_coach_id: c for c in session.execute(sa.select(Coach)).scalars()}
    team = session.execute(sa.select(Team)).scalar_one()
    assert coaches[1].team_id is None
    assert coaches[2].team_id == team.id
