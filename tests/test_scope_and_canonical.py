from datetime import date

from reclaim.core.canonical import stable_hash, stable_stringify
from reclaim.core.scope import infer_scopes_from_rule, normalize_scope
from reclaim.core.snapshot import MetricsSnapshot, MoodMetrics


def test_normalize_scope():
    assert normalize_scope("Dashboard") == "dashboard"
    assert normalize_scope("home") == "dashboard"
    assert normalize_scope("/sleep details") == "sleep"
    assert normalize_scope("MoodHistory") == "mood"
    assert normalize_scope("medications") == "meds"
    assert normalize_scope("settings") == "global"
    assert normalize_scope(None) == "global"


class Rule:
    def __init__(self, id, source_tag=None):
        self.id = id
        self.source_tag = source_tag


def test_infer_scopes_prefers_source_tag():
    assert infer_scopes_from_rule(Rule("x", "sleep")) == ("sleep",)
    assert infer_scopes_from_rule(Rule("meds-reminder")) == ("meds",)
    assert infer_scopes_from_rule(Rule("breathing", "breath")) == ("global",)


def test_stable_stringify_ignores_key_order():
    a = {"b": 1, "a": {"y": [1, 2], "x": None}}
    b = {"a": {"x": None, "y": [1, 2]}, "b": 1}
    assert stable_stringify(a) == stable_stringify(b) == '{"a":{"x":null,"y":[1,2]},"b":1}'
    assert stable_hash(a) == stable_hash(b)


def test_stable_stringify_handles_models_dates_and_sets():
    snapshot = MetricsSnapshot(mood=MoodMetrics(last=3), tags=("calm",))
    assert stable_hash(snapshot) == stable_hash(MetricsSnapshot(tags=("calm",), mood=MoodMetrics(last=3)))
    assert stable_hash(snapshot) != stable_hash(MetricsSnapshot(mood=MoodMetrics(last=4), tags=("calm",)))
    assert stable_stringify({"d": date(2024, 1, 2)}) == '{"d":"2024-01-02"}'
    assert stable_stringify({"s": {"b", "a"}}) == '{"s":["a","b"]}'
