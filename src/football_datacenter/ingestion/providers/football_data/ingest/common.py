from __future__ import annotations

from datetime import datetime
from typing import Any

from sqlalchemy.orm import Session

from football_datacenter.db.enums import ProviderEnum
from football_datacenter.db.models.ingestion.ingested_payload import IngestedPayload
from football_datacenter.ingestion.providers.base.errors import ProviderMappingError

ApiItem = dict[str, Any]


def provider_id(item: ApiItem, *, entity_type: str) -> int:
    """Extract the provider's numeric id from a payload item."""

    raw = item.get("id")
    if isinstance(raw, bool) or raw is None:
        raise ProviderMappingError(f"{entity_type} payload has no id", context={"item": item})
    try:
        return int(raw)
    except (TypeError, ValueError) as e:
        raise ProviderMappingError(
            f"{entity_type} payload has a non-numeric id", context={"id": raw}
        ) from e


def optional_str(value: Any) -> str | None:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def optional_int(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.strip().isdigit():
        return int(value.strip())
    return None


def record_payload(
    session: Session,
    *,
    entity_type: str,
    entity_key: int,
    payload: ApiItem,
    fetched_at: datetime,
) -> None:
    session.add(
        IngestedPayload(
            provider=ProviderEnum.FOOTBALL_DATA.value,
            entity_type=entity_type,
            entity_key=str(entity_key),
            fetched_at=fetched_at,
            payload_json=payload,
        )
    )
