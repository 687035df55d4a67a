"""Explicit per-call user context threaded into every engine operation."""
import uuid
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from src.config.settings import settings


def load_timezone(name: str | None) -> ZoneInfo:
    """Resolve an IANA zone name, falling back to the configured default."""
    if name:
        try:
            return ZoneInfo(name)
        except (ZoneInfoNotFoundError, ValueError):
            pass
    return ZoneInfo(settings.LOCAL_TIMEZONE)


@dataclass(frozen=True)
class UserContext:
    """Who is calling, and which calendar they live in."""

    user_id: uuid.UUID
    is_admin: bool = False
    tz: ZoneInfo = field(default_factory=lambda: ZoneInfo(settings.LOCAL_TIMEZONE))

    def local_date(self, now: datetime) -> date:
        """Calendar date of ``now`` in the user's timezone (naive = UTC)."""
        if now.tzinfo is None:
            now = now.replace(tzinfo=timezone.utc)
        return now.astimezone(self.tz).date()
