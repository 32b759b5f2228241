from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from football_datacenter.db.models.users.user import User
from football_datacenter.db.repos.base import BaseRepository


class UserRepository(BaseRepository[User]):
    def __init__(self, session: Session) -> None:
        super().__init__(session=session, model=User)

    def list_with_favorites(self) -> list[User]:
        stmt = (
            select(User)
            .options(selectinload(User.favorite_teams), selectinload(User.favorite_competitions))
            .order_by(User.id)
        )
        return list(self.session.execute(stmt).scalars().all())
