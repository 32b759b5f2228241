from __future__ import annotations

from sqlalchemy.orm import Session

from football_datacenter.db.models.core.coach import Coach
from football_datacenter.db.models.core.team import Team
from football_datacenter.db.repos.base import ProviderKeyedRepository


class CoachRepository(ProviderKeyedRepository[Coach]):
    provider_id_field = "provider_coach_id"

    def __init__(self, session: Session) -> None:
        super().__init__(session=session, model=Coach)

    def coach_for_team(self, team: Team) -> Coach | None:
        return self.first_where(Coach.team_id == team.id)
