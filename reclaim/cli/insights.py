"""
Command-line interface for the insight rotation engine.

Subcommands:
- evaluate: print the ranked insight candidates for a snapshot file.
- pick:     choose the insight for one screen (optionally recording it as shown).
- prune:    evict stale seen-history entries for a user.

The snapshot file is either a snapshot object (`{"mood": {...}, "sleep": ...}`)
or raw records (`{"moods": [...], "sleep_sessions": [...], "activity": [...],
"med_logs": [...]}`) that get summarised first.
"""
import argparse
import json
from pathlib import Path
from typing import Optional, Sequence

from reclaim.config import settings
from reclaim.core.engine import InsightEngine
from reclaim.core.rotation import InsightRotation
from reclaim.core.scope import normalize_scope
from reclaim.core.seen_store import SeenStore, now_ms
from reclaim.core.selector import placeholder_for_screen
from reclaim.core.snapshot import MetricsSnapshot
from reclaim.core.snapshot_builder import build_snapshot
from reclaim.data_access.dal import SeenDataAccess
from reclaim.data_access.json_dal import JsonSeenDal
from reclaim.data_access.postgres_dal import PostgresSeenDal
from reclaim.infra import log_utils

RAW_RECORD_KEYS = ("moods", "sleep_sessions", "activity", "med_logs")


def get_seen_dal() -> SeenDataAccess:
    """Pick the storage backend from settings, falling back to JSON files."""
    if settings.SEEN_BACKEND == "postgres" and settings.DATABASE_URL:
        try:
            return PostgresSeenDal()
        except Exception as e:
            log_utils.log_message(f"Postgres seen DAL init failed: {e}. Falling back to JSON.", "WARN")
    return JsonSeenDal()


def load_snapshot(path: Path) -> MetricsSnapshot:
    data = json.loads(path.read_text(encoding="utf-8"))
    if any(k in data for k in RAW_RECORD_KEYS):
        return build_snapshot(**{k: data.get(k) or [] for k in RAW_RECORD_KEYS})
    return MetricsSnapshot.model_validate(data)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Rank, rotate and pick Reclaim insights.")
    sub = parser.add_subparsers(dest="command", required=True)

    evaluate = sub.add_parser("evaluate", help="Print ranked insight candidates.")
    evaluate.add_argument("--snapshot", type=Path, required=True, help="Snapshot JSON file.")

    pick = sub.add_parser("pick", help="Choose the insight for a screen.")
    pick.add_argument("--snapshot", type=Path, required=True, help="Snapshot JSON file.")
    pick.add_argument("--screen", required=True, help="Requesting screen, e.g. dashboard.")
    pick.add_argument("--user", default=None, help="User id (defaults to anon).")
    pick.add_argument(
        "--scope",
        action="append",
        default=None,
        help="Preferred scope; repeat for several. Defaults to the screen plus global.",
    )
    pick.add_argument("--no-global-fallback", action="store_true", help="Never show out-of-scope insights.")
    pick.add_argument("--confirm", action="store_true", help="Record the chosen insight as shown.")

    prune = sub.add_parser("prune", help="Evict stale seen entries.")
    prune.add_argument("--user", default=None, help="User id (defaults to anon).")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Parses CLI arguments and runs the requested command."""
    args = build_parser().parse_args(argv)
    log_utils.log_message(f"Insights CLI invoked for '{args.command}'.", "INFO")

    seen_store = SeenStore(get_seen_dal())
    now_ts = now_ms()

    if args.command == "prune":
        evicted = seen_store.prune(args.user, now_ts)
        print(json.dumps({"evicted": evicted}))
        return 0

    rotation = InsightRotation(InsightEngine(), seen_store)
    matches = rotation.candidates(load_snapshot(args.snapshot))

    if args.command == "evaluate":
        print(json.dumps([m.model_dump(mode="json") for m in matches], indent=2))
        return 0

    screen = normalize_scope(args.screen)
    selected = rotation.choose(
        matches,
        screen=screen,
        user_id=args.user,
        now_ts=now_ts,
        preferred_scopes=args.scope,
        allow_global_fallback=not args.no_global_fallback,
    )
    if selected is None:
        log_utils.log_message(f"No insight eligible for '{screen}', showing placeholder.", "INFO")
        print(json.dumps({"insight": placeholder_for_screen(screen).model_dump(mode="json"), "placeholder": True}, indent=2))
        return 0

    if args.confirm:
        rotation.confirm_shown(screen, args.user, selected.id, now_ts)
    print(json.dumps({"insight": selected.model_dump(mode="json"), "placeholder": False}, indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
