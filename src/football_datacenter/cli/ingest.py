from __future__ import annotations

import asyncio

import typer

from football_datacenter.cli.common import (
    build_governor,
    build_session_factory,
    football_data_client,
)
from football_datacenter.core.config import settings
from football_datacenter.orchestration.jobs import JobStatus, RunReport
from football_datacenter.orchestration.pipeline import build_ingestion_graph

app = typer.Typer(help="Ingest football-data.org data into the local DB.")


async def _run_ingestion(only: list[str]) -> RunReport:
    session_factory = build_session_factory()
    async with football_data_client(build_governor()) as client:
        graph = build_ingestion_graph(
            session_factory=session_factory,
            client=client,
            supported_plan=settings.supported_plan,
            store_payloads=settings.store_ingested_payloads,
        )
        if only:
            try:
                graph = graph.subset(only)
            except ValueError as e:
                raise typer.BadParameter(str(e), param_hint="--only") from e
        return await graph.run()


def echo_report(report: RunReport) -> None:
    for name, outcome in report.outcomes.items():
        line = f"{name}: {outcome.status.value}"
        if outcome.status is JobStatus.SUCCEEDED and outcome.result is not None:
            line += f" {outcome.result}"
        elif outcome.status is JobStatus.FAILED:
            line += f" ({outcome.error})"
        elif outcome.status is JobStatus.SKIPPED:
            line += f" (waiting on {', '.join(outcome.skipped_because)})"
        typer.echo(line)


@app.command("run")
def ingest_run_cmd(
    only: list[str] = typer.Option(
        [],
        "--only",
        help="Run only this job and its dependencies (competitions, teams, squads). Repeatable.",
    ),
) -> None:
    """Run the ingestion jobs once in dependency order."""

    report = asyncio.run(_run_ingestion(only))
    echo_report(report)
    if not report.ok:
        raise typer.Exit(code=1)
