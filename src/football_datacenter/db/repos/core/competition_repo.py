from __future__ import annotations

from sqlalchemy.orm import Session

from football_datacenter.db.models.core.competition import Competition
from football_datacenter.db.repos.base import ProviderKeyedRepository


class CompetitionRepository(ProviderKeyedRepository[Competition]):
    provider_id_field = "provider_competition_id"

    def __init__(self, session: Session) -> None:
        super().__init__(session=session, model=Competition)
