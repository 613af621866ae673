"""Screen scope helpers."""

from typing import Any


def _keyword_scope(key: str) -> str | None:
    if "dashboard" in key:
        return "dashboard"
    if "sleep" in key:
        return "sleep"
    if "mood" in key:
        return "mood"
    if "med" in key:
        return "meds"
    return None


def normalize_scope(value: Any) -> str:
    """
    Map a free-form screen or route name onto one of the known scopes.

    "/Sleep Details" -> "sleep", "home" -> "dashboard", "settings" -> "global".
    """
    raw = str(value if value is not None else "").strip().lower()
    key = "_".join(raw.lstrip("/").split())
    if key == "home":
        return "dashboard"
    return _keyword_scope(key) or "global"


def infer_scopes_from_rule(rule: Any) -> tuple[str, ...]:
    """Infer scopes for a rule that declares none, from its source tag or id."""
    key = str(getattr(rule, "source_tag", None) or getattr(rule, "id", None) or "").lower()
    return (_keyword_scope(key) or "global",)
