from __future__ import annotations

from sqlalchemy import Column, ForeignKey, Table

from football_datacenter.db.base import Base

user_favorite_teams = Table(
    "user_favorite_teams",
    Base.metadata,
    Column("user_id", ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
    Column("team_id", ForeignKey("teams.id", ondelete="CASCADE"), primary_key=True),
)

user_favorite_competitions = Table(
    "user_favorite_competitions",
    Base.metadata,
    Column("user_id", ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
    Column("competition_id", ForeignKey("competitions.id", ondelete="CASCADE"), primary_key=True),
)
