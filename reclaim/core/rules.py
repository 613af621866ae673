"""
Insight rule definitions and loading.

Rules live in a JSON file (`settings.rules_path`). Each rule is a list of
conditions over snapshot fields plus the insight it produces when they all
hold. The built-in rulebook is used when no rule file is present.
"""

import json
from pathlib import Path
from typing import Any, Literal, Optional, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError, field_validator

from reclaim.config import settings
from reclaim.core.rulebook import DEFAULT_RULES
from reclaim.core.scope import infer_scopes_from_rule
from reclaim.infra.log_utils import log_message

Operator = Literal["lt", "lte", "gt", "gte", "eq", "deltaLt", "deltaGt", "pctLt", "pctGt"]


class InsightCondition(BaseModel):
    """A single comparison of a snapshot field against a fixed value."""

    model_config = ConfigDict(frozen=True)

    field: str
    # Rule files written for the mobile app spell this "operator".
    op: Operator = Field(validation_alias=AliasChoices("op", "operator"))
    value: Any = None

    @property
    def name(self) -> str:
        return f"{self.field} {self.op} {self.value}"


class InsightRule(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    id: str = ""
    priority: int = 0
    scopes: tuple[str, ...] = ()
    # Legacy single-scope spelling, kept for older rule files.
    scope: Union[str, tuple[str, ...], None] = None
    source_tag: Optional[str] = Field(None, validation_alias=AliasChoices("source_tag", "sourceTag"))
    icon: Optional[str] = None
    message: str
    action: Optional[str] = None
    why: Optional[str] = None
    conditions: tuple[InsightCondition, ...] = Field(
        default=(), validation_alias=AliasChoices("conditions", "condition")
    )

    @field_validator("priority", mode="before")
    @classmethod
    def _default_priority(cls, value: Any) -> Any:
        return 0 if value is None else value

    @property
    def insight_id(self) -> str:
        return str(self.id or self.source_tag or self.message).strip()

    @property
    def resolved_scopes(self) -> tuple[str, ...]:
        if self.scopes:
            return self.scopes
        if isinstance(self.scope, tuple) and self.scope:
            return self.scope
        if isinstance(self.scope, str) and self.scope:
            return (self.scope,)
        return infer_scopes_from_rule(self)


def parse_rules(raw_rules: list[dict[str, Any]]) -> list[InsightRule]:
    """Validate raw rule dicts, skipping (and logging) any that are malformed."""
    rules: list[InsightRule] = []
    for index, raw in enumerate(raw_rules):
        try:
            rules.append(InsightRule.model_validate(raw))
        except ValidationError as e:
            rule_id = raw.get("id", f"#{index}") if isinstance(raw, dict) else f"#{index}"
            log_message(f"[rules] Skipping invalid rule {rule_id}: {e.error_count()} error(s)", "WARN")
    return rules


# Cache of parsed rule files, keyed by path, to avoid repeated file reads
_rules_by_path: dict[Path, list[InsightRule]] = {}


def load_rules(path: Optional[Path] = None) -> list[InsightRule]:
    """Load rules from JSON (cached), falling back to the built-in rulebook."""
    rules_path = path or settings.rules_path
    if rules_path in _rules_by_path:
        return _rules_by_path[rules_path]

    if not rules_path.exists():
        log_message(f"[rules] No rule file at {rules_path}, using built-in rulebook", "WARN")
        return parse_rules(DEFAULT_RULES)

    try:
        raw = json.loads(rules_path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, OSError) as e:
        log_message(f"[rules] Error reading rule file {rules_path}: {e}", "ERROR")
        return parse_rules(DEFAULT_RULES)

    if not isinstance(raw, list):
        log_message(f"[rules] Rule file {rules_path} must contain a JSON list", "ERROR")
        return parse_rules(DEFAULT_RULES)

    rules = parse_rules(raw)
    _rules_by_path[rules_path] = rules
    return rules
