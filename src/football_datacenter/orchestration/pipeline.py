from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import TypeVar

from sqlalchemy.orm import Session, sessionmaker

from football_datacenter.ingestion.providers.football_data.client import FootballDataClient
from football_datacenter.ingestion.providers.football_data.ingest.competitions import (
    IngestCompetitionsResult,
    ingest_competitions,
)
from football_datacenter.ingestion.providers.football_data.ingest.squads import (
    IngestSquadsResult,
    ingest_squads,
)
from football_datacenter.ingestion.providers.football_data.ingest.teams import (
    IngestTeamsResult,
    ingest_teams,
)
from football_datacenter.orchestration.jobs import IngestionJob, JobGraph

COMPETITIONS_JOB = "competitions"
TEAMS_JOB = "teams"
SQUADS_JOB = "squads"

ResultT = TypeVar("ResultT")


def _with_session(
    session_factory: sessionmaker[Session],
    work: Callable[[Session], Awaitable[ResultT]],
) -> Callable[[], Awaitable[ResultT]]:
    async def run() -> ResultT:
        with session_factory() as session:
            try:
                return await work(session)
            except Exception:
                session.rollback()
                raise

    return run


def build_ingestion_jobs(
    *,
    session_factory: sessionmaker[Session],
    client: FootballDataClient,
    supported_plan: str = "TIER_ONE",
    store_payloads: bool = True,
) -> list[IngestionJob]:
    """competitions -> teams -> squads (players and coaches)."""

    async def competitions(session: Session) -> IngestCompetitionsResult:
        return await ingest_competitions(
            session,
            client=client,
            supported_plan=supported_plan,
            store_payloads=store_payloads,
        )

    async def teams(session: Session) -> IngestTeamsResult:
        return await ingest_teams(session, client=client, store_payloads=store_payloads)

    async def squads(session: Session) -> IngestSquadsResult:
        return await ingest_squads(session, client=client, store_payloads=store_payloads)

    return [
        IngestionJob.create(COMPETITIONS_JOB, _with_session(session_factory, competitions)),
        IngestionJob.create(
            TEAMS_JOB, _with_session(session_factory, teams), depends_on=[COMPETITIONS_JOB]
        ),
        IngestionJob.create(
            SQUADS_JOB, _with_session(session_factory, squads), depends_on=[TEAMS_JOB]
        ),
    ]


def build_ingestion_graph(
    *,
    session_factory: sessionmaker[Session],
    client: FootballDataClient,
    supported_plan: str = "TIER_ONE",
    store_payloads: bool = True,
) -> JobGraph:
    return JobGraph(
        build_ingestion_jobs(
            session_factory=session_factory,
            client=client,
            supported_plan=supported_plan,
            store_payloads=store_payloads,
        )
    )
