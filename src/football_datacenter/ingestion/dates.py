from __future__ import annotations

from datetime import UTC, date, datetime, time, tzinfo
from typing import Any


def parse_match_datetime(value: Any, *, provider_match_id: str) -> datetime:
    """
    Parse a football-data `utcDate` field into a tz-aware UTC datetime.

    Supports:
      - ISO string: "2025-09-07T19:00:00Z" / "+00:00"
      - Unix timestamp (int seconds)
    """
    if isinstance(value, bool):
        raise ValueError(f"Invalid utcDate for provider_match_id={provider_match_id}: {value!r}")

    if isinstance(value, int):
        return datetime.fromtimestamp(value, tz=UTC)

    if isinstance(value, str) and value.strip():
        parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=UTC)
        return parsed.astimezone(UTC)

    raise ValueError(
        f"Missing/invalid utcDate for provider_match_id={provider_match_id}: {value!r}"
    )


def local_date(moment: datetime, tz: tzinfo) -> date:
    """Calendar date of `moment` in `tz` (naive datetimes are treated as UTC)."""

    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=UTC)
    return moment.astimezone(tz).date()


def is_same_local_day(moment: datetime, reference: datetime, tz: tzinfo) -> bool:
    return local_date(moment, tz) == local_date(reference, tz)


def utc_date_span(first: date, last: date, tz: tzinfo) -> tuple[date, date]:
    """UTC calendar dates covering the local days `first`..`last` in `tz`.

    Provider date filters work on UTC dates, so a zone ahead of UTC needs the
    previous UTC day and a zone behind it needs the following one.
    """

    start = datetime.combine(first, time.min, tzinfo=tz).astimezone(UTC)
    end = datetime.combine(last, time.max, tzinfo=tz).astimezone(UTC)
    return start.date(), end.date()


def format_api_date(value: date) -> str:
    """football-data expects YYYY-MM-DD for dateFrom/dateTo."""

    return value.strftime("%Y-%m-%d")
