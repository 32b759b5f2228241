from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import UTC, datetime

from sqlalchemy.orm import Session

from football_datacenter.db.models.core.competition import Competition
from football_datacenter.db.repos.core.competition_repo import CompetitionRepository
from football_datacenter.db.repos.core.team_repo import TeamRepository
from football_datacenter.ingestion.providers.football_data.client import FootballDataClient
from football_datacenter.ingestion.providers.football_data.ingest.common import (
    ApiItem,
    optional_int,
    optional_str,
    provider_id,
    record_payload,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StoreTeamsResult:
    teams_seen: int
    teams_created: int
    teams_updated: int
    links_created: int


@dataclass(frozen=True)
class IngestTeamsResult:
    competitions_seen: int
    teams_seen: int
    teams_created: int
    teams_updated: int
    links_created: int


def team_values(item: ApiItem) -> dict[str, object]:
    team_id = item.get("id")
    return {
        "name": optional_str(item.get("name")) or str(team_id),
        "short_name": optional_str(item.get("shortName")),
        "tla": optional_str(item.get("tla")),
        "crest_url": optional_str(item.get("crest")),
        "address": optional_str(item.get("address")),
        "website": optional_str(item.get("website")),
        "founded": optional_int(item.get("founded")),
        "club_colors": optional_str(item.get("clubColors")),
        "venue": optional_str(item.get("venue")),
    }


def store_competition_teams(
    session: Session,
    competition: Competition,
    items: list[ApiItem],
    *,
    fetched_at: datetime | None = None,
    store_payloads: bool = True,
) -> StoreTeamsResult:
    """Upsert the teams listed for one competition and link them to it."""

    repo = TeamRepository(session)
    fetched_at = fetched_at or datetime.now(tz=UTC)

    created = 0
    updated = 0
    linked = 0

    for item in items:
        team_id = provider_id(item, entity_type="team")
        team, was_created = repo.upsert(team_id, team_values(item))
        if was_created:
            created += 1
        else:
            updated += 1

        if repo.link_competition(team, competition):
            linked += 1

        if store_payloads:
            record_payload(
                session,
                entity_type="team",
                entity_key=team_id,
                payload=item,
                fetched_at=fetched_at,
            )

    return StoreTeamsResult(
        teams_seen=len(items),
        teams_created=created,
        teams_updated=updated,
        links_created=linked,
    )


async def ingest_teams(
    session: Session,
    *,
    client: FootballDataClient,
    competitions: list[Competition] | None = None,
    store_payloads: bool = True,
) -> IngestTeamsResult:
    """One provider call per known competition; progress is committed per competition."""

    if competitions is None:
        competitions = CompetitionRepository(session).list()

    teams_seen = 0
    created = 0
    updated = 0
    linked = 0

    for competition in competitions:
        logger.info(
            "Storing teams for competition %s (%s)",
            competition.name,
            competition.provider_competition_id,
        )
        items = await client.list_competition_teams(competition.provider_competition_id)
        stored = store_competition_teams(
            session, competition, items, store_payloads=store_payloads
        )
        session.commit()

        teams_seen += stored.teams_seen
        created += stored.teams_created
        updated += stored.teams_updated
        linked += stored.links_created

    result = IngestTeamsResult(
        competitions_seen=len(competitions),
        teams_seen=teams_seen,
        teams_created=created,
        teams_updated=updated,
        links_created=linked,
    )
    logger.info(
        "Teams ingested: competitions=%s seen=%s created=%s updated=%s",
        result.competitions_seen,
        result.teams_seen,
        result.teams_created,
        result.teams_updated,
    )
    return result
