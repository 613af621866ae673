"""Rotation selector: choose the single insight a screen displays."""

from typing import Iterable, Optional, Sequence

from reclaim.core.matcher import InsightMatch

_PLACEHOLDER_MESSAGES = {
    "mood": "Log your mood to unlock personalized trends.",
    "sleep": "Sync or log sleep to unlock better sleep nudges.",
    "meds": "Keep logging meds to get adherence tips.",
    "dashboard": "Keep logging to unlock personalized insights.",
    "global": "Keep logging to unlock personalized insights.",
}


def pick_insight_for_screen(
    candidates: Optional[Sequence[InsightMatch]],
    preferred_scopes: Optional[Iterable[str]] = None,
    allow_global_fallback: bool = True,
) -> Optional[InsightMatch]:
    """
    Pick one insight from an already ranked candidate list.

    The first candidate whose scopes intersect `preferred_scopes` wins. When
    none does and `allow_global_fallback` is set, the first candidate of the
    whole list is returned regardless of scope. Otherwise there is nothing
    to show and the result is None.
    """
    candidates = list(candidates or [])
    if not candidates:
        return None

    preferred = set(preferred_scopes or ()) or {"global"}
    for candidate in candidates:
        if preferred.intersection(candidate.scopes):
            return candidate

    return candidates[0] if allow_global_fallback else None


def placeholder_for_screen(screen: str) -> InsightMatch:
    """A "keep logging" card for screens with no eligible insight. Never mark it seen."""
    scope = screen or "global"
    return InsightMatch(
        id=f"fallback-{scope}",
        priority=-999,
        message=_PLACEHOLDER_MESSAGES.get(scope, _PLACEHOLDER_MESSAGES["global"]),
        scopes=(scope,),
    )
