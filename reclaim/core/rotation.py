"""
Insight rotation: rank -> filter unseen -> select, then record the display.

Filtering and selection stay separate steps so that, when every candidate
was seen recently, the screen can still select from the unfiltered list.
"""

from typing import Optional, Sequence

from reclaim.core.engine import InsightEngine
from reclaim.core.feedback import FeedbackIndex
from reclaim.core.matcher import InsightMatch
from reclaim.core.seen_store import SeenStore
from reclaim.core.selector import pick_insight_for_screen
from reclaim.core.snapshot import MetricsSnapshot
from reclaim.infra.log_utils import log_message


class InsightRotation:
    def __init__(self, engine: InsightEngine, seen_store: SeenStore):
        self.engine = engine
        self.seen_store = seen_store

    def candidates(self, snapshot: MetricsSnapshot, feedback: Optional[FeedbackIndex] = None) -> list[InsightMatch]:
        return self.engine.evaluate(snapshot, feedback=feedback)

    def choose(
        self,
        matches: Sequence[InsightMatch],
        screen: str,
        user_id: Optional[str],
        now_ts: int,
        preferred_scopes: Optional[Sequence[str]] = None,
        allow_global_fallback: bool = True,
    ) -> Optional[InsightMatch]:
        """
        Select the insight to show on `screen`, preferring ones not seen lately.

        Does not record anything; call `confirm_shown` once it is rendered.
        """
        scopes = list(preferred_scopes) if preferred_scopes else [screen, "global"]
        unseen = self.seen_store.filter_unseen(matches, screen, user_id, now_ts)
        pool = unseen or list(matches)
        selected = pick_insight_for_screen(pool, scopes, allow_global_fallback)
        log_message(
            f"[rotation] screen={screen} total={len(matches)} unseen={len(unseen)} "
            f"chosen={selected.id if selected else None}",
            "DEBUG",
        )
        return selected

    def confirm_shown(self, screen: str, user_id: Optional[str], insight_id: str, now_ts: int) -> bool:
        return self.seen_store.mark_seen(screen, user_id, insight_id, now_ts)
