from __future__ import annotations

from sqlalchemy import Boolean, String, false
from sqlalchemy.orm import Mapped, mapped_column, relationship

from football_datacenter.db.base import Base, TimestampMixin
from football_datacenter.db.models.users.favorites import (
    user_favorite_competitions,
    user_favorite_teams,
)


class User(Base, TimestampMixin):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String, nullable=False)
    email: Mapped[str] = mapped_column(String, nullable=False, unique=True)
    is_email_verified: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=false()
    )

    favorite_teams: Mapped[list[Team]] = relationship(secondary=user_favorite_teams)
    favorite_competitions: Mapped[list[Competition]] = relationship(
        secondary=user_favorite_competitions
    )


from football_datacenter.db.models.core.competition import Competition  # noqa: E402
from football_datacenter.db.models.core.team import Team  # noqa: E402
