from __future__ import annotations

from sqlalchemy import Column, ForeignKey, Table

from football_datacenter.db.base import Base

team_competitions = Table(
    "team_competitions",
    Base.metadata,
    Column("team_id", ForeignKey("teams.id", ondelete="CASCADE"), primary_key=True),
    Column("competition_id", ForeignKey("competitions.id", ondelete="CASCADE"), primary_key=True),
)
