from typing import Any, Dict, Optional

from psycopg.rows import dict_row
from psycopg.types.json import Jsonb
from psycopg_pool import ConnectionPool

from reclaim.config import settings
from reclaim.data_access.dal import SeenDataAccess
from reclaim.infra import log_utils


class PostgresSeenDal(SeenDataAccess):
    """
    Seen-insight storage backed by the `insight_seen` table (see
    init-db/schema.sql). One row per user storage key, the seen map held
    as JSONB.
    """

    def __init__(self, conninfo: Optional[str] = None, pool: Optional[ConnectionPool] = None):
        conninfo = conninfo or settings.DATABASE_URL
        if pool is None and not conninfo:
            raise ValueError("PostgresSeenDal needs DATABASE_URL or an explicit pool")
        # Small pool: the seen store issues one short query per call.
        self.pool = pool or ConnectionPool(
            conninfo=conninfo,
            min_size=1,
            max_size=3,
            kwargs={"row_factory": dict_row},
            open=True,
        )

    def load_seen_map(self, storage_key: str) -> Dict[str, Any]:
        with self.pool.connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    "SELECT payload FROM insight_seen WHERE storage_key = %s;",
                    (storage_key,),
                )
                row = cur.fetchone()
        if row is None:
            return {}
        payload = row["payload"]
        if not isinstance(payload, dict):
            raise ValueError(f"Seen payload for {storage_key} is not a JSON object")
        return payload

    def save_seen_map(self, storage_key: str, seen: Dict[str, int]) -> None:
        log_utils.log_message(f"[PostgresSeenDal] Saving {len(seen)} seen entries for {storage_key}", "DEBUG")
        with self.pool.connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    """
                    INSERT INTO insight_seen (storage_key, payload, updated_at)
                    VALUES (%s, %s, now())
                    ON CONFLICT (storage_key) DO UPDATE SET
                        payload = EXCLUDED.payload,
                        updated_at = EXCLUDED.updated_at;
                    """,
                    (storage_key, Jsonb(seen)),
                )

    def close(self) -> None:
        self.pool.close()
