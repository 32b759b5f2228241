from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

import pytest
import sqlalchemy as sa
from apscheduler.triggers.cron import CronTrigger
from sqlalchemy.pool import StaticPool

import football_datacenter.db.models  # noqa: F401
from football_datacenter.db import create_session_factory
from football_datacenter.db.base import Base
from football_datacenter.db.models.core.team import Team
from football_datacenter.db.models.users.user import User
from football_datacenter.orchestration.jobs import IngestionJob, JobGraph
from football_datacenter.orchestration.scheduling import (
    IngestionDriver,
    MatchdayNotificationDriver,
    build_scheduler,
    run_task,
)


class NoMatches:
    async def list_team_matches(self, team_id: int, **kw: Any) -> list[dict[str, Any]]:
        return [{"id": 9, "utcDate": "2025-09-13T19:45:00Z", "status": "TIMED"}]

    async def list_competition_matches(self, competition_id: int, **kw: Any):
        return []


class CollectingSender:
    def __init__(self) -> None:
        self.recipients: list[str] = []

    async def send_digest(self, user_email: str, user: User, matches_today: list) -> None:
        self.recipients.append(user_email)


async def _noop() -> str:
    return "done"


def _session_factory():
    engine = sa.create_engine(
        "sqlite+pysqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    return create_session_factory(engine)


def test_build_scheduler_registers_each_driver_on_its_cron() -> None:
    graph = JobGraph([IngestionJob.create("competitions", _noop)])
    tasks = [
        IngestionDriver(graph=graph),
        MatchdayNotificationDriver(
            session_factory=_session_factory(), client=NoMatches(), sender=CollectingSender()
        ),
    ]

    scheduler = build_scheduler(tasks, tz=UTC)
    jobs = {job.id: job for job in scheduler.get_jobs()}

    assert set(jobs) == {"ingestion", "matchday-notifications"}
    assert isinstance(jobs["ingestion"].trigger, CronTrigger)
    assert "hour='17'" in str(jobs["ingestion"].trigger)
    assert "minute='10'" in str(jobs["ingestion"].trigger)
    assert "hour='1'" in str(jobs["matchday-notifications"].trigger)
    assert jobs["ingestion"].max_instances == 1


@pytest.mark.asyncio
async def test_ingestion_driver_returns_the_run_report() -> None:
    report = await IngestionDriver(
        graph=JobGraph([IngestionJob.create("competitions", _noop)])
    ).run()

    assert report.ok
    assert report.outcomes["competitions"].result == "done"


@pytest.mark.asyncio
async def test_matchday_driver_uses_its_clock_and_own_session() -> None:
    session_factory = _session_factory()
    with session_factory() as session:
        user = User(name="Ada", email="ada@example.test")
        user.favorite_teams.append(Team(provider_team_id=57, name="Arsenal FC"))
        session.add(user)
        session.commit()

    sender = CollectingSender()
    driver = MatchdayNotificationDriver(
        session_factory=session_factory,
        client=NoMatches(),
        sender=sender,
        clock=lambda: datetime(2025, 9, 13, 1, 10, tzinfo=UTC),
    )

    result = await driver.run()

    assert result.digests_sent == 1
    assert sender.recipients == ["ada@example.test"]


@pytest.mark.asyncio
async def test_run_task_logs_and_swallows_failures(caplog: pytest.LogCaptureFixture) -> None:
    class Broken:
        name = "broken"
        trigger = "* * * * *"

        async def run(self) -> None:
            raise RuntimeError("database is locked")

    await run_task(Broken())

    assert "Scheduled task broken failed" in caplog.text
