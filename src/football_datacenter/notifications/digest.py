from __future__ import annotations

import html
from dataclasses import dataclass
from datetime import datetime, tzinfo

from football_datacenter.db.enums import FavoriteKindEnum

DIGEST_SUBJECT = "MatchDay!"


@dataclass(frozen=True)
class NotificationCandidate:
    """One match today for one of a user's favourites. Lives for a single run."""

    user_id: int
    kind: FavoriteKindEnum
    subject_id: int
    match_date: datetime
    subject_name: str | None = None
    provider_match_id: int | None = None
    home_team: str | None = None
    away_team: str | None = None

    @property
    def fixture(self) -> str:
        if self.home_team and self.away_team:
            return f"{self.home_team} vs {self.away_team}"
        return self.subject_name or str(self.subject_id)


@dataclass(frozen=True)
class MatchdayDigest:
    subject: str
    recipient_name: str
    competitions: list[NotificationCandidate]
    teams: list[NotificationCandidate]

    def render_text(self, tz: tzinfo) -> str:
        lines = [f"Hi {self.recipient_name},", "", "Your favourites play today:"]
        for title, section in (("Competitions", self.competitions), ("Teams", self.teams)):
            if not section:
                continue
            lines.append("")
            lines.append(f"{title}:")
            for c in section:
                kickoff = c.match_date.astimezone(tz).strftime("%H:%M")
                lines.append(f"  {kickoff}  {c.subject_name or c.subject_id}: {c.fixture}")
        return "\n".join(lines)

    def render_html(self, tz: tzinfo) -> str:
        parts = [
            f"<p>Hi {html.escape(self.recipient_name)},</p>",
            "<p>Your favourites play today:</p>",
        ]
        for title, section in (("Competitions", self.competitions), ("Teams", self.teams)):
            if not section:
                continue
            parts.append(f"<h3>{title}</h3><ul>")
            for c in section:
                kickoff = c.match_date.astimezone(tz).strftime("%H:%M")
                label = html.escape(str(c.subject_name or c.subject_id))
                fixture = html.escape(c.fixture)
                parts.append(f"<li>{kickoff} <strong>{label}</strong>: {fixture}</li>")
            parts.append("</ul>")
        return "\n".join(parts)


def build_digest(recipient_name: str, matches_today: list[NotificationCandidate]) -> MatchdayDigest:
    ordered = sorted(matches_today, key=lambda c: (c.match_date, c.subject_id))
    return MatchdayDigest(
        subject=DIGEST_SUBJECT,
        recipient_name=recipient_name,
        competitions=[c for c in ordered if c.kind is FavoriteKindEnum.COMPETITION],
        teams=[c for c in ordered if c.kind is FavoriteKindEnum.TEAM],
    )
