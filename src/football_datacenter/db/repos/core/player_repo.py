from __future__ import annotations

from sqlalchemy.orm import Session

from football_datacenter.db.models.core.player import Player
from football_datacenter.db.models.core.team import Team
from football_datacenter.db.repos.base import ProviderKeyedRepository


class PlayerRepository(ProviderKeyedRepository[Player]):
    provider_id_field = "provider_player_id"

    def __init__(self, session: Session) -> None:
        super().__init__(session=session, model=Player)

    def squad_for_team(self, team: Team) -> list[Player]:
        return self.all_where(Player.team_id == team.id)
