from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.orm import Session

from football_datacenter.db.models.core.competition import Competition
from football_datacenter.db.models.core.team import Team
from football_datacenter.db.repos.base import ProviderKeyedRepository


class TeamRepository(ProviderKeyedRepository[Team]):
    provider_id_field = "provider_team_id"

    def __init__(self, session: Session) -> None:
        super().__init__(session=session, model=Team)

    def teams_for_competition(self, competition: Competition) -> list[Team]:
        stmt = (
            select(Team)
            .where(Team.competitions.any(Competition.id == competition.id))
            .order_by(Team.provider_team_id)
        )
        return list(self.session.execute(stmt).scalars().all())

    def link_competition(self, team: Team, competition: Competition) -> bool:
        """Attach `competition` to `team` if missing. Returns True when a link was added."""

        if any(c.id == competition.id for c in team.competitions):
            return False
        team.competitions.append(competition)
        self.session.flush()
        return True
