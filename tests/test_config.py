import pytest
from pydantic import ValidationError

from reclaim.config import Settings


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("DATABASE_URL", "DB_HOST_OVERRIDE", "INSIGHT_COOLDOWN_HOURS"):
        monkeypatch.delenv(name, raising=False)


def test_database_url_is_assembled_and_escaped():
    s = Settings(
        POSTGRES_USER="amy@home",
        POSTGRES_PASSWORD="p#ss",
        POSTGRES_HOST="db",
        POSTGRES_DB="reclaim",
        _env_file=None,
    )
    assert s.DATABASE_URL == "postgresql://amy%40home:p%23ss@db:5432/reclaim"


def test_explicit_database_url_wins(monkeypatch):
    monkeypatch.setenv("DB_HOST_OVERRIDE", "other")
    s = Settings(DATABASE_URL="postgresql://x@y/z", POSTGRES_USER="u", _env_file=None)
    assert s.DATABASE_URL == "postgresql://x@y/z"


def test_host_override(monkeypatch):
    monkeypatch.setenv("DB_HOST_OVERRIDE", "localhost")
    s = Settings(POSTGRES_USER="u", POSTGRES_PASSWORD="p", POSTGRES_HOST="db", POSTGRES_DB="d", _env_file=None)
    assert s.DATABASE_URL == "postgresql://u:p@localhost:5432/d"


def test_cooldown_from_environment(monkeypatch):
    monkeypatch.setenv("INSIGHT_COOLDOWN_HOURS", "12")
    assert Settings(_env_file=None).cooldown_ms == 12 * 60 * 60 * 1000


@pytest.mark.parametrize("field, value", [("INSIGHT_COOLDOWN_HOURS", 0), ("SEEN_EVICTION_MULTIPLIER", 0)])
def test_invalid_values_are_rejected(field, value):
    with pytest.raises(ValidationError):
        Settings(**{field: value}, _env_file=None)
