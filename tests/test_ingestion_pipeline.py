from __future__ import annotations

from typing import Any

import pytest
import sqlalchemy as sa
from sqlalchemy.pool import StaticPool

import football_datacenter.db.models  # noqa: F401
from football_datacenter.db import create_session_factory
from football_datacenter.db.base import Base
from football_datacenter.db.models.core.coach import Coach
from football_datacenter.db.models.core.competition import Competition
from football_datacenter.db.models.core.player import Player
from football_datacenter.db.models.core.team import Team
from football_datacenter.ingestion.providers.base.errors import ProviderRequestError
from football_datacenter.orchestration.pipeline import (
    COMPETITIONS_JOB,
    SQUADS_JOB,
    TEAMS_JOB,
    build_ingestion_graph,
)


def _session_factory():
    engine = sa.create_engine(
        "sqlite+pysqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    return create_session_factory(engine)


class FakeFootballData:
    def __init__(self, *, fail_competitions: bool = False) -> None:
        self.fail_competitions = fail_competitions
        self.calls: list[str] = []

    async def list_competitions(self) -> list[dict[str, Any]]:
        self.calls.append("competitions")
        if self.fail_competitions:
            raise ProviderRequestError("HTTP 503 for GET /competitions", status_code=503)
        return [
            {"id": 2001, "name": "UEFA Champions League", "code": "CL", "plan": "TIER_ONE"},
            {"id": 2024, "name": "Liga Profesional", "code": "ASL", "plan": "TIER_TWO"},
        ]

    async def list_competition_teams(self, competition_id: int) -> list[dict[str, Any]]:
        self.calls.append(f"competition_teams:{competition_id}")
        return [{"id": 86, "name": "Real Madrid CF", "tla": "RMA"}]

    async def get_team(self, team_id: int) -> dict[str, Any]:
        self.calls.append(f"team:{team_id}")
        return {
            "id": team_id,
            "coach": {"id": 55, "name": "Carlo Ancelotti"},
            "squad": [{"id": 3188}],
        }

    async def get_person(self, person_id: int) -> dict[str, Any]:
        self.calls.append(f"person:{person_id}")
        return {"id": person_id, "name": "Thibaut Courtois", "position": "Goalkeeper"}


def _count(session_factory, model) -> int:
    with session_factory() as session:
        return session.execute(sa.select(sa.func.count()).select_from(model)).scalar_one()


@pytest.mark.asyncio
async def test_pipeline_runs_jobs_in_dependency_order() -> None:
    session_factory = _session_factory()
    client = FakeFootballData()
    graph = build_ingestion_graph(session_factory=session_factory, client=client)

    report = await graph.run()

    assert report.ok
    assert graph.names == [COMPETITIONS_JOB, TEAMS_JOB, SQUADS_JOB]
    assert client.calls == [
        "competitions",
        "competition_teams:2001",
        "team:86",
        "person:3188",
    ]
    assert report.outcomes[TEAMS_JOB].result.teams_created == 1
    assert report.outcomes[SQUADS_JOB].result.players_created == 1
    assert _count(session_factory, Competition) == 1
    assert _count(session_factory, Team) == 1
    assert _count(session_factory, Player) == 1
    assert _count(session_factory, Coach) == 1

    again = await build_ingestion_graph(session_factory=session_factory, client=client).run()
    assert again.ok
    assert again.outcomes[SQUADS_JOB].result.players_updated == 1
    assert _count(session_factory, Player) == 1


@pytest.mark.asyncio
async def test_pipeline_skips_dependents_when_competitions_fail() -> None:
    session_factory = _session_factory()
    client = FakeFootballData(fail_competitions=True)

    report = await build_ingestion_graph(session_factory=session_factory, client=client).run()

    assert report.failed == [COMPETITIONS_JOB]
    assert report.skipped == [TEAMS_JOB, SQUADS_JOB]
    assert client.calls == ["competitions"]
    assert _count(session_factory, Team) == 0
