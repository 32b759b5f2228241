from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import UTC, datetime

from sqlalchemy.orm import Session

from football_datacenter.db.repos.core.competition_repo import CompetitionRepository
from football_datacenter.ingestion.providers.football_data.client import FootballDataClient
from football_datacenter.ingestion.providers.football_data.ingest.common import (
    ApiItem,
    optional_str,
    provider_id,
    record_payload,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IngestCompetitionsResult:
    competitions_seen: int
    competitions_skipped: int
    competitions_created: int
    competitions_updated: int


async def ingest_competitions(
    session: Session,
    *,
    client: FootballDataClient | None = None,
    items: list[ApiItem] | None = None,
    supported_plan: str = "TIER_ONE",
    store_payloads: bool = True,
) -> IngestCompetitionsResult:
    """Fetch all competitions (one provider call) and upsert the ones on `supported_plan`."""

    if items is None:
        if client is None:
            raise ValueError("Either client or items must be provided")
        items = await client.list_competitions()

    repo = CompetitionRepository(session)
    now = datetime.now(tz=UTC)

    skipped = 0
    created = 0
    updated = 0

    for item in items:
        if item.get("plan") != supported_plan:
            skipped += 1
            continue

        competition_id = provider_id(item, entity_type="competition")
        area = item.get("area")

        _, was_created = repo.upsert(
            competition_id,
            {
                "name": optional_str(item.get("name")) or str(competition_id),
                "code": optional_str(item.get("code")),
                "emblem_url": optional_str(item.get("emblem")),
                "area_name": optional_str(area.get("name")) if isinstance(area, dict) else None,
                "plan": optional_str(item.get("plan")),
            },
        )
        if was_created:
            created += 1
        else:
            updated += 1

        if store_payloads:
            record_payload(
                session,
                entity_type="competition",
                entity_key=competition_id,
                payload=item,
                fetched_at=now,
            )

    session.commit()

    result = IngestCompetitionsResult(
        competitions_seen=len(items),
        competitions_skipped=skipped,
        competitions_created=created,
        competitions_updated=updated,
    )
    logger.info(
        "Competitions ingested: seen=%s skipped=%s created=%s updated=%s",
        result.competitions_seen,
        result.competitions_skipped,
        result.competitions_created,
        result.competitions_updated,
    )
    return result
