from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any

from sqlalchemy.orm import Session

from football_datacenter.db.models.core.team import Team
from football_datacenter.db.repos.core.coach_repo import CoachRepository
from football_datacenter.db.repos.core.player_repo import PlayerRepository
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

UNKNOWN = "unknown"


@dataclass(frozen=True)
class StoreSquadResult:
    players_created: int
    players_updated: int
    coach_created: bool
    coach_updated: bool


@dataclass(frozen=True)
class IngestSquadsResult:
    teams_seen: int
    players_seen: int
    players_created: int
    players_updated: int
    coaches_created: int
    coaches_updated: int


def player_values(profile: ApiItem, *, team: Team) -> dict[str, Any]:
    player_id = profile.get("id")
    return {
        "team_id": team.id,
        "name": optional_str(profile.get("name")) or str(player_id),
        "first_name": optional_str(profile.get("firstName")),
        "last_name": optional_str(profile.get("lastName")),
        "date_of_birth": optional_str(profile.get("dateOfBirth")),
        "nationality": optional_str(profile.get("nationality")) or UNKNOWN,
        "position": optional_str(profile.get("position")) or UNKNOWN,
        "shirt_number": optional_int(profile.get("shirtNumber")),
    }


def coach_values(coach: ApiItem, *, team: Team) -> dict[str, Any]:
    coach_id = coach.get("id")
    return {
        "team_id": team.id,
        "name": optional_str(coach.get("name")) or str(coach_id),
        "first_name": optional_str(coach.get("firstName")),
        "last_name": optional_str(coach.get("lastName")),
        "date_of_birth": optional_str(coach.get("dateOfBirth")),
        "nationality": optional_str(coach.get("nationality")),
    }


def store_team_coach(session: Session, team: Team, team_payload: ApiItem) -> tuple[bool, bool]:
    """Upsert the coach embedded in a team payload. Returns (created, updated)."""

    coach = team_payload.get("coach")
    if not isinstance(coach, dict) or coach.get("id") is None:
        return False, False

    repo = CoachRepository(session)
    coach_id = provider_id(coach, entity_type="coach")

    current = repo.coach_for_team(team)
    if current is not None and current.provider_coach_id != coach_id:
        # Previous coach no longer holds this team.
        current.team_id = None
        session.flush()

    _, created = repo.upsert(coach_id, coach_values(coach, team=team))
    return created, not created


def store_player_profile(session: Session, team: Team, profile: ApiItem) -> bool:
    """Upsert one full player profile for `team`. Returns True when a row was created."""

    repo = PlayerRepository(session)
    player_id = provider_id(profile, entity_type="player")
    _, created = repo.upsert(player_id, player_values(profile, team=team))
    return created


async def ingest_team_squad(
    session: Session,
    team: Team,
    *,
    client: FootballDataClient,
    store_payloads: bool = True,
) -> tuple[int, StoreSquadResult]:
    """One call for the squad listing, then one call per squad member."""

    now = datetime.now(tz=UTC)
    team_payload = await client.get_team(team.provider_team_id)

    if store_payloads:
        record_payload(
            session,
            entity_type="team",
            entity_key=team.provider_team_id,
            payload=team_payload,
            fetched_at=now,
        )

    coach_created, coach_updated = store_team_coach(session, team, team_payload)

    squad = team_payload.get("squad")
    members = [m for m in squad if isinstance(m, dict)] if isinstance(squad, list) else []

    created = 0
    updated = 0
    for member in members:
        member_id = provider_id(member, entity_type="squad member")
        profile = await client.get_person(member_id)
        if store_player_profile(session, team, profile):
            created += 1
        else:
            updated += 1

        if store_payloads:
            record_payload(
                session,
                entity_type="player",
                entity_key=member_id,
                payload=profile,
                fetched_at=now,
            )

    return len(members), StoreSquadResult(
        players_created=created,
        players_updated=updated,
        coach_created=coach_created,
        coach_updated=coach_updated,
    )


async def ingest_squads(
    session: Session,
    *,
    client: FootballDataClient,
    teams: list[Team] | None = None,
    store_payloads: bool = True,
) -> IngestSquadsResult:
    """Players and coaches for every known team. The most call-heavy ingestion step."""

    if teams is None:
        teams = TeamRepository(session).list()

    players_seen = 0
    players_created = 0
    players_updated = 0
    coaches_created = 0
    coaches_updated = 0

    for team in teams:
        seen, stored = await ingest_team_squad(
            session, team, client=client, store_payloads=store_payloads
        )
        session.commit()
        logger.info("%s squad stored (%s players)", team.name, seen)

        players_seen += seen
        players_created += stored.players_created
        players_updated += stored.players_updated
        coaches_created += int(stored.coach_created)
        coaches_updated += int(stored.coach_updated)

    result = IngestSquadsResult(
        teams_seen=len(teams),
        players_seen=players_seen,
        players_created=players_created,
        players_updated=players_updated,
        coaches_created=coaches_created,
        coaches_updated=coaches_updated,
    )
    logger.info(
        "Squads ingested: teams=%s players created=%s updated=%s coaches created=%s updated=%s",
        result.teams_seen,
        result.players_created,
        result.players_updated,
        result.coaches_created,
        result.coaches_updated,
    )
    return result
