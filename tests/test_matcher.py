from reclaim.core.matcher import compare, get_field, match_rules
from reclaim.core.rules import parse_rules
from reclaim.core.snapshot import FlagMetrics, MetricsSnapshot, MoodMetrics, SleepMetrics, StepsMetrics


RULES = parse_rules(
    [
        {
            "id": "low-mood-sleep-debt",
            "priority": 5,
            "scopes": ["dashboard"],
            "conditions": [
                {"field": "mood.last", "op": "lt", "value": 3},
                {"field": "sleep.last_night_hours", "op": "lt", "value": 6},
            ],
            "message": "Low sleep can dampen mood.",
        },
        {
            "id": "mood-dip",
            "priority": 4,
            "scopes": ["mood"],
            "condition": [{"field": "mood.trend_3d_pct", "operator": "pctLt", "value": -10}],
            "message": "Mood dip.",
        },
        {
            "id": "inactivity",
            "priority": 4,
            "scopes": ["dashboard"],
            "conditions": [{"field": "steps.last_day", "op": "lt", "value": 2000}],
            "message": "Move a little.",
        },
        {
            "id": "stress",
            "priority": 3,
            "scopes": ["dashboard"],
            "conditions": [{"field": "flags.stress", "op": "eq", "value": True}],
            "message": "Breathe.",
        },
        {
            "id": "gratitude",
            "priority": 1,
            "scopes": ["mood"],
            "conditions": [{"field": "tags.contains", "op": "eq", "value": "grateful"}],
            "message": "Nice.",
        },
    ]
)


def ids(matches):
    return [m.id for m in matches]


def test_all_conditions_recorded_for_multi_condition_rule():
    snapshot = MetricsSnapshot(
        mood=MoodMetrics(last=2.5),
        sleep=SleepMetrics(last_night_hours=5.5),
    )
    matches = match_rules(snapshot, RULES)
    assert ids(matches) == ["low-mood-sleep-debt"]
    first = matches[0]
    assert first.condition_names == ["mood.last lt 3", "sleep.last_night_hours lt 6"]
    assert first.explain["mood.last"]["pass"] is True
    assert first.scopes == ("dashboard",)


def test_matches_follow_declaration_order():
    snapshot = MetricsSnapshot(
        mood=MoodMetrics(last=2, trend_3d_pct=-15),
        sleep=SleepMetrics(last_night_hours=5),
        steps=StepsMetrics(last_day=500),
        flags=FlagMetrics(stress=True),
        tags=("grateful",),
    )
    assert ids(match_rules(snapshot, RULES)) == [
        "low-mood-sleep-debt",
        "mood-dip",
        "inactivity",
        "stress",
        "gratitude",
    ]


def test_missing_metrics_are_non_matches_not_errors():
    assert match_rules(MetricsSnapshot(), RULES) == []
    # Mood present but sleep section missing: the two-condition rule is skipped
    snapshot = MetricsSnapshot(mood=MoodMetrics(last=1))
    assert "low-mood-sleep-debt" not in ids(match_rules(snapshot, RULES))


def test_stress_flag_defaults_to_false():
    assert get_field(MetricsSnapshot(), "flags.stress") is False
    assert "stress" not in ids(match_rules(MetricsSnapshot(), RULES))


def test_tags_contains_trims_whitespace():
    snapshot = MetricsSnapshot(tags=(" grateful ",))
    assert ids(match_rules(snapshot, RULES)) == ["gratitude"]


def test_unknown_field_never_matches():
    rules = parse_rules(
        [
            {
                "id": "typo",
                "scopes": ["dashboard"],
                "conditions": [{"field": "stress.flag", "op": "eq", "value": 1}],
                "message": "x",
            }
        ]
    )
    snapshot = MetricsSnapshot(flags=FlagMetrics(stress=True))
    assert match_rules(snapshot, rules) == []


def test_rule_without_conditions_always_matches_and_infers_scope():
    rules = parse_rules([{"id": "sleep-hygiene", "message": "Keep a regular bedtime."}])
    matches = match_rules(MetricsSnapshot(), rules)
    assert ids(matches) == ["sleep-hygiene"]
    assert matches[0].scopes == ("sleep",)
    assert matches[0].matched_conditions == ()


def test_rule_id_falls_back_to_source_tag_then_message():
    rules = parse_rules(
        [
            {"sourceTag": "meds", "scope": "meds", "message": "Tip"},
            {"message": "  Just a message  ", "scopes": ["global"]},
        ]
    )
    assert ids(match_rules(MetricsSnapshot(), rules)) == ["meds", "Just a message"]


def test_compare_operators():
    assert compare("lt", 1, 2)
    assert compare("lte", 2, 2)
    assert compare("gt", 3, 2)
    assert compare("gte", 2, 2)
    assert compare("deltaLt", -1, 0)
    assert compare("deltaGt", 1, 0)
    assert compare("pctLt", -20, -10)
    assert compare("pctGt", 20, 10)
    assert compare("eq", True, True)
    assert not compare("lt", None, 2)
    assert not compare("lt", "not-a-number", 2)
    assert not compare("gt", 1, None)
