from __future__ import annotations

from datetime import datetime
from typing import Any

from sqlalchemy import JSON, DateTime, Index, String
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from football_datacenter.db.base import Base
from football_datacenter.db.enums import ProviderEnum

_PAYLOAD_TYPE = JSON().with_variant(JSONB, "postgresql")


class IngestedPayload(Base):
    """Raw provider item as it was received, one row per fetch.

    Rows are append-only and only written when payload storage is enabled.
    Coaches have no row of their own; they arrive inside the team payload.
    """

    __tablename__ = "ingested_payloads"
    __table_args__ = (
        Index("ix_ingested_payloads_lookup", "provider", "entity_type", "entity_key", "fetched_at"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    provider: Mapped[str] = mapped_column(String, default=ProviderEnum.FOOTBALL_DATA.value)
    # competition | team | player
    entity_type: Mapped[str] = mapped_column(String)
    entity_key: Mapped[str] = mapped_column(String)
    fetched_at: Mapped[datetime] = mapped_column(DateTime(timezone=True))
    payload_json: Mapped[dict[str, Any]] = mapped_column(_PAYLOAD_TYPE)
