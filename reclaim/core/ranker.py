"""Insight ranking."""

from typing import Iterable

from reclaim.core.matcher import InsightMatch


def rank_matches(matches: Iterable[InsightMatch]) -> list[InsightMatch]:
    """
    Order matches by descending priority.

    `sorted` is stable, so matches of equal priority keep the rule set's
    declaration order and the first-declared rule wins.
    """
    return sorted(matches, key=lambda m: -m.priority)
