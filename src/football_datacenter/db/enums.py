from __future__ import annotations

from enum import StrEnum


class ProviderEnum(StrEnum):
    FOOTBALL_DATA = "football_data"


class FavoriteKindEnum(StrEnum):
    TEAM = "team"
    COMPETITION = "competition"


class MatchStatusEnum(StrEnum):
    SCHEDULED = "SCHEDULED"
    TIMED = "TIMED"
    IN_PLAY = "IN_PLAY"
    PAUSED = "PAUSED"
    FINISHED = "FINISHED"
    SUSPENDED = "SUSPENDED"
    POSTPONED = "POSTPONED"
    CANCELLED = "CANCELLED"
    AWARDED = "AWARDED"
