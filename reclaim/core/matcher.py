"""
Condition matcher: evaluates insight rules against a metrics snapshot.

Matching is pure. A condition over a metric the snapshot does not carry is
simply false, so partial data narrows the set of matches instead of raising.
"""

import operator
from typing import Any, Callable, Iterable, Optional

from pydantic import BaseModel, ConfigDict, Field

from reclaim.core.rules import InsightCondition, InsightRule
from reclaim.core.snapshot import MetricsSnapshot


class InsightMatch(BaseModel):
    """An insight candidate produced for one evaluation cycle."""

    model_config = ConfigDict(frozen=True)

    id: str
    priority: int = 0
    message: str
    scopes: tuple[str, ...] = Field(min_length=1)
    matched_conditions: tuple[InsightCondition, ...] = ()
    action: Optional[str] = None
    why: Optional[str] = None
    icon: Optional[str] = None
    source_tag: Optional[str] = None
    explain: dict[str, dict[str, Any]] = Field(default_factory=dict)

    @property
    def condition_names(self) -> list[str]:
        return [c.name for c in self.matched_conditions]


def _section(name: str, attr: str) -> Callable[[MetricsSnapshot], Any]:
    def getter(snapshot: MetricsSnapshot) -> Any:
        section = getattr(snapshot, name)
        return None if section is None else getattr(section, attr)

    return getter


FIELD_GETTERS: dict[str, Callable[[MetricsSnapshot], Any]] = {
    "mood.last": _section("mood", "last"),
    "mood.delta_vs_baseline": _section("mood", "delta_vs_baseline"),
    "mood.trend_3d_pct": _section("mood", "trend_3d_pct"),
    "sleep.last_night_hours": _section("sleep", "last_night_hours"),
    "sleep.avg_7d_hours": _section("sleep", "avg_7d_hours"),
    "sleep.midpoint_delta_min": _section("sleep", "midpoint_delta_min"),
    "steps.last_day": _section("steps", "last_day"),
    "meds.adherence_pct_7d": _section("meds", "adherence_pct_7d"),
    "behavior.days_since_social": _section("behavior", "days_since_social"),
    "tags.contains": lambda s: list(s.tags),
    "tags.empty": lambda s: len(s.tags) == 0,
    "tags.count": lambda s: len(s.tags),
    "flags.stress": lambda s: bool(s.flags and s.flags.stress),
}

# delta*/pct* compare like lt/gt; the names only document the rule author's intent
_NUMERIC_OPS: dict[str, Callable[[float, float], bool]] = {
    "lt": operator.lt,
    "lte": operator.le,
    "gt": operator.gt,
    "gte": operator.ge,
    "deltaLt": operator.lt,
    "deltaGt": operator.gt,
    "pctLt": operator.lt,
    "pctGt": operator.gt,
}


def get_field(snapshot: MetricsSnapshot, path: str) -> Any:
    """Read a dotted field path from the snapshot; unknown paths read as None."""
    getter = FIELD_GETTERS.get(path)
    return getter(snapshot) if getter else None


def _as_number(value: Any) -> Optional[float]:
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def compare(op: str, actual: Any, expected: Any) -> bool:
    if actual is None:
        return False
    if op == "eq":
        return actual == expected

    fn = _NUMERIC_OPS.get(op)
    a, e = _as_number(actual), _as_number(expected)
    if fn is None or a is None or e is None:
        return False
    return fn(a, e)


def _check(condition: InsightCondition, snapshot: MetricsSnapshot) -> tuple[bool, Any]:
    actual = get_field(snapshot, condition.field)
    if condition.field == "tags.contains":
        wanted = str(condition.value).strip()
        return any(str(t).strip() == wanted for t in actual), actual
    return compare(condition.op, actual, condition.value), actual


def match_rule(rule: InsightRule, snapshot: MetricsSnapshot) -> Optional[InsightMatch]:
    """Return the rule's match if every condition holds, else None."""
    insight_id = rule.insight_id
    if not insight_id:
        return None

    matched: list[InsightCondition] = []
    explain: dict[str, dict[str, Any]] = {}
    for condition in rule.conditions:
        passed, actual = _check(condition, snapshot)
        explain[condition.field] = {
            "actual": actual,
            "expected": condition.value,
            "op": condition.op,
            "pass": passed,
        }
        if not passed:
            return None
        matched.append(condition)

    return InsightMatch(
        id=insight_id,
        priority=rule.priority,
        message=rule.message,
        scopes=rule.resolved_scopes,
        matched_conditions=tuple(matched),
        action=rule.action,
        why=rule.why,
        icon=rule.icon,
        source_tag=rule.source_tag,
        explain=explain,
    )


def match_rules(snapshot: MetricsSnapshot, rules: Iterable[InsightRule]) -> list[InsightMatch]:
    """Evaluate every rule in declaration order and collect the matches."""
    matches = []
    for rule in rules:
        match = match_rule(rule, snapshot)
        if match is not None:
            matches.append(match)
    return matches
