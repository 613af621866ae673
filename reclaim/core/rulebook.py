"""
Built-in insight rules.

Used when no `knowledge/insights.json` is deployed. Order matters: it is the
tie-break between rules of equal priority.
"""

DEFAULT_RULES = [
    {
        "id": "low-mood-sleep-debt",
        "priority": 5,
        "scopes": ["dashboard", "mood", "sleep"],
        "source_tag": "sleep",
        "conditions": [
            {"field": "mood.last", "op": "lt", "value": 3},
            {"field": "sleep.last_night_hours", "op": "lt", "value": 6},
        ],
        "message": "Low sleep can dampen mood-regulating serotonin.",
        "action": "Take a 10 minute sunlight walk.",
    },
    {
        "id": "mood-dip",
        "priority": 4,
        "scopes": ["mood", "dashboard"],
        "source_tag": "mood",
        "conditions": [{"field": "mood.trend_3d_pct", "op": "pctLt", "value": -10}],
        "message": "A mood dip can follow sustained stress.",
        "action": "Do a two-minute quick win.",
    },
    {
        "id": "stress-short-sleep",
        "priority": 4,
        "scopes": ["dashboard", "sleep"],
        "source_tag": "breath",
        "conditions": [
            {"field": "flags.stress", "op": "eq", "value": True},
            {"field": "sleep.last_night_hours", "op": "lt", "value": 6},
        ],
        "message": "Short sleep can amplify stress physiology.",
        "action": "Try three rounds of 4-7-8 breathing.",
    },
    {
        "id": "inactivity",
        "priority": 4,
        "scopes": ["dashboard", "mood"],
        "source_tag": "activity",
        "conditions": [
            {"field": "steps.last_day", "op": "lt", "value": 2000},
            {"field": "mood.last", "op": "lt", "value": 4},
        ],
        "message": "Gentle movement can lift energy.",
        "action": "Take a 5 minute brisk walk.",
    },
    {
        "id": "circadian-shift",
        "priority": 3,
        "scopes": ["sleep"],
        "source_tag": "sleep",
        "conditions": [{"field": "sleep.midpoint_delta_min", "op": "gt", "value": 90}],
        "message": "Your body clock may be drifting later.",
        "action": "Get morning light and skip caffeine after 2pm.",
    },
    {
        "id": "short-sleep-week",
        "priority": 3,
        "scopes": ["sleep", "dashboard"],
        "source_tag": "sleep",
        "conditions": [{"field": "sleep.avg_7d_hours", "op": "lt", "value": 6.5}],
        "message": "You've averaged under 6.5 hours of sleep this week.",
        "action": "Aim to be in bed 30 minutes earlier tonight.",
    },
    {
        "id": "social-gap",
        "priority": 2,
        "scopes": ["mood"],
        "source_tag": "mood",
        "conditions": [{"field": "behavior.days_since_social", "op": "gte", "value": 5}],
        "message": "It's been a few days since you logged time with others.",
        "action": "Send a message to someone you trust.",
    },
    {
        "id": "meds-adherence",
        "priority": 2,
        "scopes": ["meds", "dashboard"],
        "source_tag": "meds",
        "conditions": [{"field": "meds.adherence_pct_7d", "op": "lt", "value": 70}],
        "message": "Medication adherence slipped this week.",
        "action": "Tie your next dose to a daily habit.",
    },
    {
        "id": "untagged-checkin",
        "priority": 1,
        "source_tag": "mood",
        "conditions": [
            {"field": "tags.empty", "op": "eq", "value": True},
            {"field": "mood.last", "op": "gte", "value": 0},
        ],
        "message": "Adding a tag or two to check-ins makes your trends clearer.",
    },
]
