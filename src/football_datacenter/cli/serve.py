from __future__ import annotations

import asyncio
import logging

from football_datacenter.cli.common import (
    build_governor,
    build_session_factory,
    digest_sender,
    football_data_client,
    scheduler_timezone,
)
from football_datacenter.core.config import settings
from football_datacenter.orchestration.pipeline import build_ingestion_graph
from football_datacenter.orchestration.scheduling import (
    IngestionDriver,
    MatchdayNotificationDriver,
    build_scheduler,
)

logger = logging.getLogger(__name__)


async def _serve() -> None:
    tz = scheduler_timezone()
    session_factory = build_session_factory()
    governor = build_governor()

    async with football_data_client(governor) as client, digest_sender(tz) as sender:
        tasks = [
            IngestionDriver(
                graph=build_ingestion_graph(
                    session_factory=session_factory,
                    client=client,
                    supported_plan=settings.supported_plan,
                    store_payloads=settings.store_ingested_payloads,
                ),
                trigger=settings.ingestion_cron,
            ),
            MatchdayNotificationDriver(
                session_factory=session_factory,
                client=client,
                sender=sender,
                trigger=settings.notification_cron,
                tz=tz,
                lookahead_days=settings.notification_lookahead_days,
            ),
        ]
        scheduler = build_scheduler(tasks, tz=tz)
        scheduler.start()
        logger.info("Scheduler started; press Ctrl+C to stop")
        try:
            await asyncio.Event().wait()
        finally:
            scheduler.shutdown(wait=False)


def serve_cmd() -> None:
    """Run the ingestion and matchday drivers on their calendar triggers."""

    try:
        asyncio.run(_serve())
    except KeyboardInterrupt:
        logger.info("Scheduler stopped")
