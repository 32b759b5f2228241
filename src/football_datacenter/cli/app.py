from __future__ import annotations

import typer

from football_datacenter.cli.ingest import app as ingest_app
from football_datacenter.cli.notify import app as notify_app
from football_datacenter.cli.serve import serve_cmd
from football_datacenter.core.config import settings
from football_datacenter.core.logging import configure_logging

app = typer.Typer(no_args_is_help=True)
app.add_typer(ingest_app, name="ingest")
app.add_typer(notify_app, name="notify")
app.command("serve")(serve_cmd)


@app.callback()
def main(
    log_level: str | None = typer.Option(
        None, "--log-level", help="Root log level (defaults to LOG_LEVEL / INFO)."
    ),
) -> None:
    """Football data ingestion and matchday notifications."""

    configure_logging(log_level or settings.log_level)
