"""
Suppression of insights the user marked as not helpful.

The app records a "was this helpful?" answer per insight. Only the latest
answer per insight matters: a `helpful = false` answer hides that insight for
a while (shorter when the reason was "not relevant right now").
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Iterable, Mapping, Optional

from pydantic import BaseModel, ConfigDict

from reclaim.config import settings

NOT_RELEVANT_NOW = "not_relevant_now"


class FeedbackEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    created_at: str = ""
    helpful: bool = False
    reason: Optional[str] = None


class FeedbackIndex:
    """Latest feedback per insight id, plus a fingerprint for cache keys."""

    def __init__(self, latest_by_id: Mapping[str, FeedbackEntry], fingerprint: str):
        self._latest_by_id = dict(latest_by_id)
        self.fingerprint = fingerprint

    def get_latest(self, insight_id: str) -> Optional[FeedbackEntry]:
        key = str(insight_id or "").strip()
        if not key:
            return None
        return self._latest_by_id.get(key)

    @classmethod
    def from_latest_by_id(cls, latest_by_id: Optional[Mapping[str, Mapping[str, Any]]]) -> Optional["FeedbackIndex"]:
        """Build an index from `{insight_id: {created_at, helpful, reason}}`."""
        if not latest_by_id:
            return None
        entries = {
            str(insight_id).strip(): FeedbackEntry(
                created_at=str(row.get("created_at") or ""),
                helpful=bool(row.get("helpful")),
                reason=row.get("reason"),
            )
            for insight_id, row in latest_by_id.items()
            if row
        }
        newest = max((e.created_at for e in entries.values()), default="")
        return cls(entries, f"latestById;n={len(entries)};newest={newest}")

    @classmethod
    def from_rows(cls, rows: Optional[Iterable[Mapping[str, Any]]]) -> Optional["FeedbackIndex"]:
        """Build an index from feedback rows ordered newest first."""
        rows = list(rows or [])
        if not rows:
            return None
        entries: dict[str, FeedbackEntry] = {}
        for row in rows:
            insight_id = str(row.get("insight_id") or "").strip()
            if not insight_id or insight_id in entries:
                continue
            entries[insight_id] = FeedbackEntry(
                created_at=str(row.get("created_at") or ""),
                helpful=row.get("helpful") is True,
                reason=row.get("reason"),
            )
        newest = str(rows[0].get("created_at") or "")
        return cls(entries, f"rows;n={len(rows)};newest={newest}")


def _parse_time(value: str) -> Optional[datetime]:
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)


def is_suppressed(insight_id: str, index: Optional[FeedbackIndex], now: datetime) -> bool:
    """True if the user's latest feedback on this insight still hides it."""
    if index is None:
        return False
    latest = index.get_latest(insight_id)
    if latest is None or latest.helpful:
        return False

    created = _parse_time(latest.created_at)
    if created is None:
        return False

    if (latest.reason or "") == NOT_RELEVANT_NOW:
        window = timedelta(hours=settings.FEEDBACK_NOT_RELEVANT_HOURS)
    else:
        window = timedelta(days=settings.FEEDBACK_COOLDOWN_DAYS)
    return now - created < window
