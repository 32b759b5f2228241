from __future__ import annotations

from sqlalchemy import Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from football_datacenter.db.base import Base, TimestampMixin
from football_datacenter.db.models.core.team_competition import team_competitions


class Team(Base, TimestampMixin):
    __tablename__ = "teams"

    id: Mapped[int] = mapped_column(primary_key=True)
    provider_team_id: Mapped[int] = mapped_column(Integer, nullable=False, unique=True)

    name: Mapped[str] = mapped_column(String, nullable=False)
    short_name: Mapped[str | None] = mapped_column(String, nullable=True)
    tla: Mapped[str | None] = mapped_column(String, nullable=True)
    crest_url: Mapped[str | None] = mapped_column(String, nullable=True)
    address: Mapped[str | None] = mapped_column(String, nullable=True)
    website: Mapped[str | None] = mapped_column(String, nullable=True)
    founded: Mapped[int | None] = mapped_column(Integer, nullable=True)
    club_colors: Mapped[str | None] = mapped_column(String, nullable=True)
    venue: Mapped[str | None] = mapped_column(String, nullable=True)

    competitions: Mapped[list[Competition]] = relationship(
        secondary=team_competitions, back_populates="teams"
    )
    squad: Mapped[list[Player]] = relationship(back_populates="team")
    coach: Mapped[Coach | None] = relationship(back_populates="team", uselist=False)

    __table_args__ = (Index("ix_teams_tla", "tla"),)


from football_datacenter.db.models.core.coach import Coach  # noqa: E402
from football_datacenter.db.models.core.competition import Competition  # noqa: E402
from football_datacenter.db.models.core.player import Player  # noqa: E402
