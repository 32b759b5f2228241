from __future__ import annotations

import asyncio
from datetime import datetime, time

import typer

from football_datacenter.cli.common import (
    build_governor,
    digest_sender,
    football_data_client,
    scheduler_timezone,
    session_scope,
)
from football_datacenter.core.config import settings
from football_datacenter.notifications.matchday import (
    MatchdayRunResult,
    run_matchday_notifications,
)

app = typer.Typer(help="Send user notifications.")


async def _run_matchday(day: datetime | None) -> MatchdayRunResult:
    tz = scheduler_timezone()
    now = datetime.combine(day.date(), time(12, 0), tzinfo=tz) if day else None

    async with football_data_client(build_governor()) as client, digest_sender(tz) as sender:
        with session_scope() as session:
            return await run_matchday_notifications(
                session,
                client=client,
                sender=sender,
                now=now,
                tz=tz,
                lookahead_days=settings.notification_lookahead_days,
            )


@app.command("matchday")
def notify_matchday_cmd(
    day: datetime | None = typer.Option(
        None,
        "--date",
        formats=["%Y-%m-%d"],
        help="Reference day (YYYY-MM-DD) in the scheduler time zone. Defaults to today.",
    ),
) -> None:
    """Send today's matchday digest to every user with a favourite playing."""

    result = asyncio.run(_run_matchday(day))
    typer.echo(
        " ".join(
            [
                f"Matchday {result.reference_date}:",
                f"users_seen={result.users_seen}",
                f"users_without_matches={result.users_without_matches}",
                f"digests_sent={result.digests_sent}",
                f"digests_failed={result.digests_failed}",
                f"lookups_failed={result.lookups_failed}",
            ]
        )
    )
