"""
Seen store: per-user, per-screen record of when each insight was last shown.

Each user has one flat map, `"<screen>:<insight_id>" -> epoch millis`, kept
under a storage key namespaced to that user. Cooldown is computed at read
time from the stored timestamp; writing a record never drops other entries.

History is a nice-to-have. When filtering, any failure to read it is treated
as "no history". Writes read the stored map first and are skipped (logged,
never raised) when that read fails, so a storage outage can only make
rotation less fresh; it never breaks a screen or erases history.
"""

import math
import threading
from datetime import datetime, timezone
from typing import Any, Mapping, Optional, Sequence, TypeVar

from reclaim.config import settings
from reclaim.data_access.dal import SeenDataAccess
from reclaim.infra.log_utils import log_message

ANON_USER = "anon"

T = TypeVar("T")


def now_ms() -> int:
    """Current wall-clock time in epoch milliseconds."""
    return int(datetime.now(timezone.utc).timestamp() * 1000)


def entry_key(screen: str, insight_id: str) -> str:
    return f"{screen}:{insight_id}"


def _is_timestamp(value: Any) -> bool:
    if isinstance(value, bool):
        return False
    # JSON allows Infinity/NaN/1e999; those cannot become epoch millis
    return isinstance(value, int) or (isinstance(value, float) and math.isfinite(value))


def _clean_seen_map(raw: Any) -> dict[str, int]:
    """Keep only well-formed `str -> number` entries of a stored map."""
    if not isinstance(raw, Mapping):
        raise ValueError(f"seen map must be an object, got {type(raw).__name__}")
    return {str(k): int(v) for k, v in raw.items() if _is_timestamp(v)}


def prune_seen_map(seen: Mapping[str, int], now_ts: int, max_age_ms: int) -> dict[str, int]:
    """Return the entries of `seen` no older than `max_age_ms` at `now_ts`."""
    cutoff = now_ts - max_age_ms
    return {k: ts for k, ts in seen.items() if ts >= cutoff}


class SeenStore:
    def __init__(
        self,
        dal: SeenDataAccess,
        cooldown_ms: Optional[int] = None,
        eviction_multiplier: Optional[int] = None,
        key_prefix: Optional[str] = None,
    ):
        self.dal = dal
        self.cooldown_ms = settings.cooldown_ms if cooldown_ms is None else cooldown_ms
        multiplier = settings.SEEN_EVICTION_MULTIPLIER if eviction_multiplier is None else eviction_multiplier
        # Evicting inside the cooldown window would re-show insights early.
        self.eviction_multiplier = max(1, multiplier)
        self.key_prefix = key_prefix or settings.SEEN_STORAGE_KEY_PREFIX
        self._write_lock = threading.Lock()

    def storage_key(self, user_id: Optional[str]) -> str:
        return f"{self.key_prefix}:{user_id or ANON_USER}"

    # --- Reads -----------------------------------------------------------
    def load(self, user_id: Optional[str]) -> dict[str, int]:
        """The user's seen map, or an empty map if it cannot be read."""
        key = self.storage_key(user_id)
        try:
            return _clean_seen_map(self.dal.load_seen_map(key))
        except Exception as e:
            log_message(f"[SeenStore] Could not read seen map for {key}, treating as empty: {e}", "WARN")
            return {}

    def _within_cooldown(self, seen_at: Optional[int], now_ts: int) -> bool:
        if seen_at is None:
            return False
        age = now_ts - seen_at
        return 0 <= age < self.cooldown_ms

    def was_seen_recently(self, screen: str, user_id: Optional[str], insight_id: str, now_ts: int) -> bool:
        seen = self.load(user_id)
        return self._within_cooldown(seen.get(entry_key(screen, insight_id)), now_ts)

    def filter_unseen(
        self,
        candidates: Sequence[T],
        screen: str,
        user_id: Optional[str],
        now_ts: int,
    ) -> list[T]:
        """
        Drop candidates shown on `screen` to this user within the cooldown.

        Candidates only need an `id` attribute. Input order is preserved and
        storage is never written.
        """
        seen = self.load(user_id)
        return [
            c for c in candidates
            if not self._within_cooldown(seen.get(entry_key(screen, c.id)), now_ts)
        ]

    # --- Writes ----------------------------------------------------------
    def _load_for_update(self, key: str) -> dict[str, int]:
        """
        The stored map for a read-modify-write.

        A corrupt payload starts a fresh map. Any other read failure is
        raised, so the caller skips the write rather than overwrite history
        it could not see.
        """
        try:
            return _clean_seen_map(self.dal.load_seen_map(key))
        except ValueError as e:
            log_message(f"[SeenStore] Corrupt seen map for {key}, starting fresh: {e}", "WARN")
            return {}

    def mark_seen(self, screen: str, user_id: Optional[str], insight_id: str, now_ts: int) -> bool:
        """
        Record that `insight_id` was shown on `screen` at `now_ts`.

        Returns False (after logging) if the stored map could not be read or
        the write failed. Nothing is written in either case.
        """
        key = self.storage_key(user_id)
        with self._write_lock:
            try:
                seen = self._load_for_update(key)
                seen[entry_key(screen, insight_id)] = int(now_ts)
                self.dal.save_seen_map(key, seen)
            except Exception as e:
                log_message(f"[SeenStore] Failed to record {screen}:{insight_id} for {key}: {e}", "ERROR")
                return False
        return True

    def prune(self, user_id: Optional[str], now_ts: int) -> int:
        """
        Evict entries older than `eviction_multiplier` cooldown windows.

        Returns the number of evicted entries.
        """
        key = self.storage_key(user_id)
        max_age = self.cooldown_ms * self.eviction_multiplier
        with self._write_lock:
            try:
                seen = self._load_for_update(key)
                kept = prune_seen_map(seen, now_ts, max_age)
                evicted = len(seen) - len(kept)
                if not evicted:
                    return 0
                self.dal.save_seen_map(key, kept)
            except Exception as e:
                log_message(f"[SeenStore] Failed to prune seen map for {key}: {e}", "ERROR")
                return 0
        log_message(f"[SeenStore] Evicted {evicted} stale entries for {key}")
        return evicted
