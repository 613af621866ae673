"""Point-in-time metrics snapshot consumed by the condition matcher."""

from typing import Optional

from pydantic import BaseModel, ConfigDict


class _Section(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")


class MoodMetrics(_Section):
    last: Optional[float] = None
    delta_vs_baseline: Optional[float] = None
    trend_3d_pct: Optional[float] = None


class SleepMetrics(_Section):
    last_night_hours: Optional[float] = None
    avg_7d_hours: Optional[float] = None
    midpoint_delta_min: Optional[float] = None


class StepsMetrics(_Section):
    last_day: Optional[int] = None


class MedsMetrics(_Section):
    adherence_pct_7d: Optional[float] = None


class BehaviorMetrics(_Section):
    days_since_social: Optional[int] = None


class FlagMetrics(_Section):
    stress: bool = False


class MetricsSnapshot(_Section):
    """
    The user's recent mood, sleep, activity and adherence values.

    Every section is optional: a provider that has no sleep data simply leaves
    `sleep` unset and rules that need it do not match.
    """

    mood: Optional[MoodMetrics] = None
    sleep: Optional[SleepMetrics] = None
    steps: Optional[StepsMetrics] = None
    meds: Optional[MedsMetrics] = None
    behavior: Optional[BehaviorMetrics] = None
    tags: tuple[str, ...] = ()
    flags: Optional[FlagMetrics] = None
