from __future__ import annotations

import pytest
from typer.testing import CliRunner

from football_datacenter.cli.app import app
from football_datacenter.core.config import settings


def test_cli_help_smoke() -> None:
    runner = CliRunner()
    result = runner.invoke(app, ["--help"])
    assert result.exit_code == 0
    # Basic sanity checks that the top-level commands are registered.
    assert "ingest" in result.stdout
    assert "notify" in result.stdout
    assert "serve" in result.stdout


def test_ingest_run_rejects_unknown_job(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(settings, "football_data_api_key", "test-key")
    monkeypatch.setattr(settings, "database_url", "sqlite+pysqlite:///:memory:")

    runner = CliRunner()
    result = runner.invoke(app, ["ingest", "run", "--only", "fixtures"])

    assert result.exit_code == 2


def test_ingest_run_requires_provider_key(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(settings, "football_data_api_key", None)

    runner = CliRunner()
    result = runner.invoke(app, ["ingest", "run"])

    assert result.exit_code != 0
    assert isinstance(result.exception, RuntimeError)
