"""
Insight engine: condition matching, feedback suppression and ranking.

`evaluate` is deterministic for a given snapshot, rule set and feedback
index, so results are cached on a stable hash of those inputs.
"""

from collections import OrderedDict
from datetime import datetime, timezone
from typing import Iterable, Optional

from reclaim.config import settings
from reclaim.core.canonical import stable_hash
from reclaim.core.feedback import FeedbackIndex, is_suppressed
from reclaim.core.matcher import InsightMatch, match_rules
from reclaim.core.ranker import rank_matches
from reclaim.core.rules import InsightRule, load_rules
from reclaim.core.snapshot import MetricsSnapshot
from reclaim.infra.log_utils import log_message


class InsightEngine:
    def __init__(self, rules: Optional[Iterable[InsightRule]] = None, cache_size: Optional[int] = None):
        """Build an engine over `rules` (defaults to the configured rule file)."""
        self.rules: list[InsightRule] = list(rules) if rules is not None else load_rules()
        self.cache_size = settings.EVALUATION_CACHE_SIZE if cache_size is None else cache_size
        self._cache: OrderedDict[str, list[InsightMatch]] = OrderedDict()

    def _cache_key(self, snapshot: MetricsSnapshot, feedback: Optional[FeedbackIndex], now: datetime) -> str:
        # Suppression depends on the clock only when feedback is supplied.
        return stable_hash(
            {
                "snapshot": snapshot,
                "feedback": feedback.fingerprint if feedback else None,
                "now": now if feedback else None,
            }
        )

    def evaluate(
        self,
        snapshot: MetricsSnapshot,
        feedback: Optional[FeedbackIndex] = None,
        now: Optional[datetime] = None,
    ) -> list[InsightMatch]:
        """Return every matching, unsuppressed insight, highest priority first."""
        now = now or datetime.now(timezone.utc)
        if now.tzinfo is None:
            now = now.replace(tzinfo=timezone.utc)

        key = self._cache_key(snapshot, feedback, now)
        cached = self._cache.get(key)
        if cached is not None:
            self._cache.move_to_end(key)
            return list(cached)

        matches = match_rules(snapshot, self.rules)
        kept = [m for m in matches if not is_suppressed(m.id, feedback, now)]
        ranked = rank_matches(kept)

        log_message(
            f"[InsightEngine] evaluated={len(self.rules)} matched={len(matches)} "
            f"suppressed={len(matches) - len(kept)}",
            "DEBUG",
        )

        if self.cache_size > 0:
            self._cache[key] = ranked
            while len(self._cache) > self.cache_size:
                self._cache.popitem(last=False)
        return list(ranked)

    def evaluate_top(self, snapshot: MetricsSnapshot) -> Optional[InsightMatch]:
        """Highest priority match, or None when nothing fires."""
        matches = self.evaluate(snapshot)
        return matches[0] if matches else None
