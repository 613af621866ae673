from datetime import datetime, timedelta, timezone

from reclaim.core.engine import InsightEngine
from reclaim.core.feedback import FeedbackIndex
from reclaim.core.rules import parse_rules
from reclaim.core.snapshot import MetricsSnapshot, MoodMetrics, SleepMetrics, StepsMetrics

NOW = datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)


def make_rules():
    return parse_rules(
        [
            {
                "id": "meds-adherence",
                "priority": 2,
                "scopes": ["meds"],
                "conditions": [{"field": "mood.last", "op": "lt", "value": 10}],
                "message": "Meds.",
            },
            {
                "id": "mood-dip",
                "priority": 4,
                "scopes": ["mood"],
                "conditions": [{"field": "mood.trend_3d_pct", "op": "pctLt", "value": -10}],
                "message": "Dip.",
            },
            {
                "id": "low-mood-sleep-debt",
                "priority": 5,
                "scopes": ["dashboard"],
                "conditions": [
                    {"field": "mood.last", "op": "lt", "value": 3},
                    {"field": "sleep.last_night_hours", "op": "lt", "value": 6},
                ],
                "message": "Sleep debt.",
            },
            {
                "id": "inactivity",
                "priority": 4,
                "scopes": ["dashboard"],
                "conditions": [{"field": "steps.last_day", "op": "lt", "value": 2000}],
                "message": "Move.",
            },
        ]
    )


SNAPSHOT = MetricsSnapshot(
    mood=MoodMetrics(last=2.5, trend_3d_pct=-12),
    sleep=SleepMetrics(last_night_hours=5.5),
    steps=StepsMetrics(last_day=1800),
)


def test_ranked_by_priority_with_declaration_order_tie_break():
    engine = InsightEngine(make_rules())
    ranked = engine.evaluate(SNAPSHOT)
    # mood-dip and inactivity share priority 4; mood-dip is declared first
    assert [m.id for m in ranked] == ["low-mood-sleep-debt", "mood-dip", "inactivity", "meds-adherence"]
    for earlier, later in zip(ranked, ranked[1:]):
        assert earlier.priority >= later.priority


def test_evaluate_is_deterministic_across_calls_and_engines():
    first = InsightEngine(make_rules()).evaluate(SNAPSHOT)
    second = InsightEngine(make_rules(), cache_size=0).evaluate(SNAPSHOT.model_copy())
    assert first == second
    assert [m.id for m in first] == [m.id for m in second]


def test_cached_results_are_copies():
    engine = InsightEngine(make_rules())
    first = engine.evaluate(SNAPSHOT)
    first.clear()
    assert len(engine.evaluate(SNAPSHOT)) == 4


def test_cache_is_bounded():
    engine = InsightEngine(make_rules(), cache_size=2)
    for steps in (100, 200, 300):
        engine.evaluate(MetricsSnapshot(steps=StepsMetrics(last_day=steps)))
    assert len(engine._cache) == 2


def test_evaluate_top_returns_none_when_nothing_matches():
    engine = InsightEngine(make_rules())
    assert engine.evaluate_top(MetricsSnapshot(mood=MoodMetrics(last=12))) is None
    assert engine.evaluate_top(SNAPSHOT).id == "low-mood-sleep-debt"


def test_unhelpful_feedback_suppresses_insight():
    feedback = FeedbackIndex.from_latest_by_id(
        {"low-mood-sleep-debt": {"created_at": (NOW - timedelta(days=2)).isoformat(), "helpful": False}}
    )
    ranked = InsightEngine(make_rules()).evaluate(SNAPSHOT, feedback=feedback, now=NOW)
    assert "low-mood-sleep-debt" not in [m.id for m in ranked]


def test_not_relevant_now_feedback_expires_after_a_day():
    feedback = FeedbackIndex.from_latest_by_id(
        {
            "mood-dip": {
                "created_at": (NOW - timedelta(hours=25)).isoformat(),
                "helpful": False,
                "reason": "not_relevant_now",
            }
        }
    )
    ranked = InsightEngine(make_rules()).evaluate(SNAPSHOT, feedback=feedback, now=NOW)
    assert "mood-dip" in [m.id for m in ranked]


def test_default_rulebook_is_used_without_rule_file():
    engine = InsightEngine()
    assert engine.rules
    assert all(rule.resolved_scopes for rule in engine.rules)
