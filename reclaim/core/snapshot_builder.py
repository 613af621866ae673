"""
Build a MetricsSnapshot from raw records.

Fetching the records (mood check-ins, sleep sessions, daily activity,
medication dose logs) is the caller's job; this module only derives the
summary values the insight rules read. Records that cannot be parsed are
skipped.
"""

import json
from datetime import datetime, timezone
from statistics import mean
from typing import Any, Iterable, Optional

from reclaim.core.snapshot import (
    BehaviorMetrics,
    FlagMetrics,
    MedsMetrics,
    MetricsSnapshot,
    MoodMetrics,
    SleepMetrics,
    StepsMetrics,
)

STRESS_TAGS = {"stressed", "overwhelmed", "anxious", "stress"}
SOCIAL_TAGS = {"social", "connected"}
MINUTES_PER_DAY = 1440


def _average(values: list[float]) -> Optional[float]:
    """Return the mean of a list, or None if empty."""
    return mean(values) if values else None


def parse_time(value: Any) -> Optional[datetime]:
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str) and value:
        try:
            parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return None
    else:
        return None
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)


def parse_tags(raw: Any) -> list[str]:
    """Tags arrive as a list, a JSON-encoded list, or a comma separated string."""
    if not raw:
        return []
    if isinstance(raw, str):
        try:
            decoded = json.loads(raw)
        except json.JSONDecodeError:
            decoded = None
        raw = decoded if isinstance(decoded, list) else raw.split(",")
    if not isinstance(raw, (list, tuple)):
        return []
    return [str(t).strip() for t in raw if t and str(t).strip()]


# --- Mood ------------------------------------------------------------------
def mood_metrics(moods: Iterable[dict], now: datetime) -> tuple[Optional[MoodMetrics], list[str], Optional[BehaviorMetrics], Optional[FlagMetrics]]:
    entries = []
    for m in moods:
        rating = m.get("rating", m.get("mood"))
        ts = parse_time(m.get("ts") or m.get("created_at"))
        if ts is None:
            continue
        entries.append(
            {
                "mood": rating if isinstance(rating, (int, float)) and not isinstance(rating, bool) else None,
                "ts": ts,
                "tags": parse_tags(m.get("tags")),
            }
        )
    if not entries:
        return None, [], None, None

    entries.sort(key=lambda e: e["ts"], reverse=True)
    ratings = [e["mood"] for e in entries]
    latest = entries[0]

    baseline = _average([r for r in ratings[1:15] if r is not None])
    delta = latest["mood"] - baseline if baseline is not None and latest["mood"] is not None else None

    recent = _average([r for r in ratings[:3] if r is not None])
    past = _average([r for r in ratings[3:10] if r is not None])
    if past is None:
        past = baseline if baseline is not None else _average([r for r in ratings if r is not None])
    trend = (recent - past) / past * 100 if recent is not None and past else None

    tags = list(dict.fromkeys(latest["tags"]))

    behavior = None
    social = next((e for e in entries if SOCIAL_TAGS.intersection(e["tags"])), None)
    if social is not None:
        diff = now - social["ts"]
        if diff.total_seconds() >= 0:
            behavior = BehaviorMetrics(days_since_social=diff.days)

    stress = any(t.lower() in STRESS_TAGS for t in tags)
    mood = MoodMetrics(last=latest["mood"], delta_vs_baseline=delta, trend_3d_pct=trend)
    return mood, tags, behavior, FlagMetrics(stress=stress)


# --- Sleep -----------------------------------------------------------------
def _session_bounds(session: dict) -> Optional[tuple[datetime, datetime]]:
    start = parse_time(session.get("start_time"))
    end = parse_time(session.get("end_time"))
    if start is None or end is None or end <= start:
        return None
    return start, end


def _midpoint_minutes(start: datetime, end: datetime) -> int:
    midpoint = start + (end - start) / 2
    return midpoint.hour * 60 + midpoint.minute


def circular_abs_delta_minutes(a: float, b: float) -> float:
    """Absolute distance between two clock times on a 24h dial, in [0, 720]."""
    diff = abs(a - b) % MINUTES_PER_DAY
    return min(diff, MINUTES_PER_DAY - diff)


def sleep_metrics(sessions: Iterable[dict]) -> Optional[SleepMetrics]:
    bounded = [b for b in (_session_bounds(s) for s in sessions) if b is not None]
    if not bounded:
        return None

    bounded.sort(key=lambda b: b[1], reverse=True)
    durations = [(end - start).total_seconds() / 3600 for start, end in bounded]
    midpoints = [_midpoint_minutes(start, end) for start, end in bounded]

    avg_7d = _average(durations[:7])
    baseline_midpoint = _average(midpoints[1:8])
    midpoint_delta = (
        circular_abs_delta_minutes(midpoints[0], baseline_midpoint)
        if baseline_midpoint is not None
        else None
    )
    return SleepMetrics(
        last_night_hours=round(durations[0], 2),
        avg_7d_hours=round(avg_7d, 2) if avg_7d is not None else None,
        midpoint_delta_min=midpoint_delta,
    )


# --- Steps & meds ----------------------------------------------------------
def steps_metrics(activity: Iterable[dict]) -> Optional[StepsMetrics]:
    days = [a for a in activity if a.get("activity_date")]
    if not days:
        return None
    latest = max(days, key=lambda a: str(a["activity_date"]))
    steps = latest.get("steps")
    if steps is None:
        return None
    return StepsMetrics(last_day=steps)


def meds_metrics(logs: Iterable[dict]) -> Optional[MedsMetrics]:
    logs = list(logs)
    if not logs:
        return None
    taken = sum(1 for log in logs if log.get("status") == "taken")
    return MedsMetrics(adherence_pct_7d=round(taken / len(logs) * 100))


def build_snapshot(
    moods: Iterable[dict] = (),
    sleep_sessions: Iterable[dict] = (),
    activity: Iterable[dict] = (),
    med_logs: Iterable[dict] = (),
    now: Optional[datetime] = None,
) -> MetricsSnapshot:
    """Derive the full snapshot from raw record lists (each may be empty)."""
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    mood, tags, behavior, flags = mood_metrics(moods, now)
    return MetricsSnapshot(
        mood=mood,
        sleep=sleep_metrics(sleep_sessions),
        steps=steps_metrics(activity),
        meds=meds_metrics(med_logs),
        behavior=behavior,
        tags=tuple(tags),
        flags=flags,
    )
