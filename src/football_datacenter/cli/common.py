from __future__ import annotations

from collections.abc import AsyncIterator, Iterator
from contextlib import asynccontextmanager, contextmanager
from datetime import tzinfo
from zoneinfo import ZoneInfo

from sqlalchemy.orm import Session, sessionmaker

from football_datacenter.core.config import settings
from football_datacenter.db import DatabaseConfig, create_db_engine, create_session_factory
from football_datacenter.ingestion.governor import RequestGovernor
from football_datacenter.ingestion.providers.base.client import BaseHttpClient
from football_datacenter.ingestion.providers.football_data.client import FootballDataClient
from football_datacenter.notifications.sender import (
    DigestSender,
    LoggingDigestSender,
    MailApiDigestSender,
)


def build_session_factory() -> sessionmaker[Session]:
    engine = create_db_engine(
        DatabaseConfig(database_url=settings.database_url, echo=settings.db_echo)
    )
    return create_session_factory(engine)


@contextmanager
def session_scope() -> Iterator[Session]:
    """
    Context-managed DB session for CLI commands.
    Ensures proper close and rolls back on exception.
    """
    SessionLocal = build_session_factory()
    session = SessionLocal()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def scheduler_timezone() -> tzinfo:
    return ZoneInfo(settings.scheduler_timezone)


def build_governor() -> RequestGovernor:
    """One governor per process; every provider client in the process shares it."""

    return RequestGovernor(
        threshold=settings.governor_threshold,
        cooldown_seconds=settings.governor_cooldown_seconds,
        progress_interval_s=settings.governor_progress_interval_seconds,
    )


@asynccontextmanager
async def football_data_client(governor: RequestGovernor) -> AsyncIterator[FootballDataClient]:
    api_key = settings.require_football_data_key()
    async with BaseHttpClient(base_url=settings.football_data_base_url) as http:
        yield FootballDataClient(
            http=http,
            api_key=api_key,
            governor=governor,
            rate_limit_retries=settings.provider_rate_limit_retries,
            rate_limit_retry_s=settings.provider_rate_limit_retry_seconds,
        )


@asynccontextmanager
async def digest_sender(tz: tzinfo) -> AsyncIterator[DigestSender]:
    """Mail API sender when configured, otherwise digests go to the log."""

    if not settings.mail_api_url:
        yield LoggingDigestSender(tz=tz)
        return

    async with BaseHttpClient(base_url=settings.require_mail_api_url()) as http:
        yield MailApiDigestSender(
            http=http,
            sender=settings.mail_from,
            api_key=settings.mail_api_key,
            tz=tz,
        )
