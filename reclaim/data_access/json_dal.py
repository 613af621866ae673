"""JSON file-based implementation of the seen-insight storage layer."""

from __future__ import annotations

import json
import tempfile
from pathlib import Path
from typing import Any, Dict

from reclaim.config import settings
from reclaim.core.canonical import stable_hash
from .dal import SeenDataAccess


class JsonSeenDal(SeenDataAccess):
    """Persists each user's seen map as its own JSON file on disk."""

    def __init__(self, base_dir: Path | None = None):
        self._base_dir = base_dir

    @property
    def base_dir(self) -> Path:
        return self._base_dir or settings.seen_store_path

    def path_for(self, storage_key: str) -> Path:
        # Storage keys contain "/" and ":"; hash them into a safe file name.
        return self.base_dir / f"{stable_hash(storage_key)[:32]}.json"

    def _read_json(self, path: Path) -> Any:
        if not path.exists():
            return {}
        with path.open("r", encoding="utf-8") as f:
            return json.load(f)

    def _write_json(self, path: Path, data: Any) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        # One temp file per write, so concurrent writers never share it
        tmp = tempfile.NamedTemporaryFile(
            "w", encoding="utf-8", dir=path.parent, prefix=f"{path.stem}.", suffix=".tmp", delete=False
        )
        tmp_path = Path(tmp.name)
        try:
            with tmp as f:
                json.dump(data, f, indent=2, sort_keys=True)
            tmp_path.replace(path)
        except Exception:
            tmp_path.unlink(missing_ok=True)
            raise

    def load_seen_map(self, storage_key: str) -> Dict[str, Any]:
        path = self.path_for(storage_key)
        record = self._read_json(path)
        if not isinstance(record, dict):
            raise ValueError(f"Seen record at {path} is not a JSON object")
        # Records written by this DAL wrap the map with its key for inspection.
        return record.get("seen", {}) if "storage_key" in record else record

    def save_seen_map(self, storage_key: str, seen: Dict[str, int]) -> None:
        self._write_json(self.path_for(storage_key), {"storage_key": storage_key, "seen": seen})
