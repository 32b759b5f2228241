from football_datacenter.db.models.core.coach import Coach
from football_datacenter.db.models.core.competition import Competition
from football_datacenter.db.models.core.player import Player
from football_datacenter.db.models.core.team import Team
from football_datacenter.db.models.core.team_competition import team_competitions
from football_datacenter.db.models.ingestion.ingested_payload import IngestedPayload
from football_datacenter.db.models.users.favorites import (
    user_favorite_competitions,
    user_favorite_teams,
)
from football_datacenter.db.models.users.user import User

__all__ = [
    "Coach",
    "Competition",
    "IngestedPayload",
    "Player",
    "Team",
    "User",
    "team_competitions",
    "user_favorite_competitions",
    "user_favorite_teams",
]
