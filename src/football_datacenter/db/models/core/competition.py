from __future__ import annotations

from sqlalchemy import Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from football_datacenter.db.base import Base, TimestampMixin
from football_datacenter.db.models.core.team_competition import team_competitions


class Competition(Base, TimestampMixin):
    __tablename__ = "competitions"

    id: Mapped[int] = mapped_column(primary_key=True)
    provider_competition_id: Mapped[int] = mapped_column(Integer, nullable=False, unique=True)

    name: Mapped[str] = mapped_column(String, nullable=False)
    code: Mapped[str | None] = mapped_column(String, nullable=True)
    emblem_url: Mapped[str | None] = mapped_column(String, nullable=True)
    area_name: Mapped[str | None] = mapped_column(String, nullable=True)
    plan: Mapped[str | None] = mapped_column(String, nullable=True)

    teams: Mapped[list[Team]] = relationship(
        secondary=team_competitions, back_populates="competitions"
    )

    __table_args__ = (Index("ix_competitions_code", "code"),)


from football_datacenter.db.models.core.team import Team  # noqa: E402
