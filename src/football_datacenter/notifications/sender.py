from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import UTC, tzinfo
from typing import Protocol

from football_datacenter.db.models.users.user import User
from football_datacenter.ingestion.providers.base.client import BaseHttpClient
from football_datacenter.notifications.digest import NotificationCandidate, build_digest

logger = logging.getLogger(__name__)


class DigestSender(Protocol):
    """Delivery collaborator for matchday digests."""

    async def send_digest(
        self, user_email: str, user: User, matches_today: list[NotificationCandidate]
    ) -> None:
        ...


@dataclass
class MailApiDigestSender:
    """Posts digests to a transactional mail HTTP API (`{from, to, subject, html, text}`)."""

    http: BaseHttpClient
    sender: str
    api_key: str | None = field(default=None, repr=False)
    tz: tzinfo = UTC
    path: str = "/emails"

    def _headers(self) -> dict[str, str]:
        if not self.api_key:
            return {}
        return {"Authorization": f"Bearer {self.api_key}"}

    async def send_digest(
        self, user_email: str, user: User, matches_today: list[NotificationCandidate]
    ) -> None:
        digest = build_digest(user.name, matches_today)
        await self.http.request_json(
            "POST",
            self.path,
            json={
                "from": self.sender,
                "to": [user_email],
                "subject": digest.subject,
                "html": digest.render_html(self.tz),
                "text": digest.render_text(self.tz),
            },
            headers=self._headers(),
        )
        logger.info("Digest sent to %s (%s matches)", user_email, len(matches_today))


@dataclass
class LoggingDigestSender:
    """Writes digests to the log instead of delivering them (no mail API configured)."""

    tz: tzinfo = UTC

    async def send_digest(
        self, user_email: str, user: User, matches_today: list[NotificationCandidate]
    ) -> None:
        digest = build_digest(user.name, matches_today)
        logger.info("Digest for %s:\n%s", user_email, digest.render_text(self.tz))
