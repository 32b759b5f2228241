"""Calendar-driven drivers for ingestion and matchday notifications.

Both drivers implement `ScheduledTask`: a name, a crontab trigger and an
async `run()`. The cadence lives in configuration; `build_scheduler` turns a
list of tasks into an APScheduler `AsyncIOScheduler`.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from datetime import UTC, datetime, tzinfo
from typing import Protocol

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger
from sqlalchemy.orm import Session, sessionmaker

from football_datacenter.ingestion.providers.football_data.client import FootballDataClient
from football_datacenter.notifications.matchday import (
    MatchdayRunResult,
    run_matchday_notifications,
)
from football_datacenter.notifications.sender import DigestSender
from football_datacenter.orchestration.jobs import JobGraph, RunReport

logger = logging.getLogger(__name__)


class ScheduledTask(Protocol):
    name: str
    trigger: str

    async def run(self) -> object:
        ...


@dataclass
class IngestionDriver:
    """Runs the ingestion job graph; failures stay inside the returned report."""

    graph: JobGraph
    trigger: str = "10 17 * * *"
    name: str = "ingestion"

    async def run(self) -> RunReport:
        logger.info("Ingestion run starting (%s)", ", ".join(self.graph.names))
        return await self.graph.run()


@dataclass
class MatchdayNotificationDriver:
    session_factory: sessionmaker[Session]
    client: FootballDataClient
    sender: DigestSender
    trigger: str = "10 1 * * *"
    name: str = "matchday-notifications"
    tz: tzinfo = UTC
    lookahead_days: int = 7
    clock: Callable[[], datetime] = field(default=lambda: datetime.now(tz=UTC), repr=False)

    async def run(self) -> MatchdayRunResult:
        with self.session_factory() as session:
            return await run_matchday_notifications(
                session,
                client=self.client,
                sender=self.sender,
                now=self.clock(),
                tz=self.tz,
                lookahead_days=self.lookahead_days,
            )


async def run_task(task: ScheduledTask) -> None:
    """Scheduler entry point: a failing run is logged and retried at the next trigger."""

    try:
        await task.run()
    except Exception:
        logger.exception("Scheduled task %s failed", task.name)


def build_scheduler(tasks: Sequence[ScheduledTask], *, tz: tzinfo = UTC) -> AsyncIOScheduler:
    scheduler = AsyncIOScheduler(timezone=tz)
    for task in tasks:
        scheduler.add_job(
            run_task,
            trigger=CronTrigger.from_crontab(task.trigger, timezone=tz),
            args=[task],
            id=task.name,
            name=task.name,
            replace_existing=True,
            max_instances=1,
            coalesce=True,
        )
        logger.info("Scheduled %s at '%s' (%s)", task.name, task.trigger, tz)
    return scheduler
