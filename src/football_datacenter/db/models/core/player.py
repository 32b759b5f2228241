from __future__ import annotations

from sqlalchemy import ForeignKey, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from football_datacenter.db.base import Base, TimestampMixin


class Player(Base, TimestampMixin):
    __tablename__ = "players"

    id: Mapped[int] = mapped_column(primary_key=True)
    provider_player_id: Mapped[int] = mapped_column(Integer, nullable=False, unique=True)

    team_id: Mapped[int | None] = mapped_column(
        ForeignKey("teams.id", ondelete="SET NULL"), nullable=True
    )

    name: Mapped[str] = mapped_column(String, nullable=False)
    first_name: Mapped[str | None] = mapped_column(String, nullable=True)
    last_name: Mapped[str | None] = mapped_column(String, nullable=True)
    date_of_birth: Mapped[str | None] = mapped_column(String, nullable=True)
    nationality: Mapped[str] = mapped_column(
        String, nullable=False, default="unknown", server_default="unknown"
    )
    position: Mapped[str] = mapped_column(
        String, nullable=False, default="unknown", server_default="unknown"
    )
    shirt_number: Mapped[int | None] = mapped_column(Integer, nullable=True)

    team: Mapped[Team | None] = relationship(back_populates="squad")

    __table_args__ = (Index("ix_players_team", "team_id"),)


from football_datacenter.db.models.core.team import Team  # noqa: E402
