from __future__ import annotations

import sqlite3
from pathlib import Path
from typing import List, Optional, Union

from missionforge.errors import WorkOrderNotFound
from missionforge.schemas.work_order import CanonicalWorkOrder
from missionforge.settings import settings

DB_PATH = Path(settings.db_path)

SCHEMA = """
CREATE TABLE IF NOT EXISTS work_orders (
  id TEXT PRIMARY KEY,
  title TEXT NOT NULL,
  domain TEXT,
  city TEXT,
  source_provider TEXT NOT NULL,
  data_json TEXT NOT NULL,
  created_at_utc TEXT NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_work_orders_created ON work_orders(created_at_utc);
"""


def get_conn(db_path: Union[str, Path] = DB_PATH) -> sqlite3.Connection:
    if str(db_path) != ":memory:":
        Path(db_path).parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(str(db_path))
    conn.execute("PRAGMA journal_mode=WAL;")
    return conn


def init_db(conn: sqlite3.Connection) -> None:
    conn.executescript(SCHEMA)
    conn.commit()


class WorkOrderStore:
    """
    sqlite persistence for finalized work orders (JSON blob + a few indexed columns).
    The generation pipeline never touches it; surfaces decide when to save.
    """

    def __init__(self, db_path: Union[str, Path] = DB_PATH) -> None:
        self.conn = get_conn(db_path)
        init_db(self.conn)

    def close(self) -> None:
        self.conn.close()

    def insert(self, wo: CanonicalWorkOrder) -> str:
        cols = ["id", "title", "domain", "city", "source_provider", "data_json", "created_at_utc"]
        row = [
            wo.id,
            wo.title,
            wo.domain,
            wo.city,
            wo.source_provider,
            wo.model_dump_json(by_alias=True),
            wo.created_at.isoformat(),
        ]
        placeholders = ",".join(["?"] * len(cols))
        assignments = ",".join([f"{c}=excluded.{c}" for c in cols[1:]])  # don't overwrite PK
        sql = f"""
        INSERT INTO work_orders ({",".join(cols)}) VALUES ({placeholders})
        ON CONFLICT(id) DO UPDATE SET {assignments}
        """
        self.conn.execute(sql, row)
        self.conn.commit()
        return wo.id

    def get(self, work_order_id: str) -> CanonicalWorkOrder:
        cur = self.conn.execute("SELECT data_json FROM work_orders WHERE id=?", (work_order_id,))
        row = cur.fetchone()
        if row is None:
            raise WorkOrderNotFound(work_order_id)
        return CanonicalWorkOrder.model_validate_json(row[0])

    def list(self, limit: Optional[int] = None) -> List[CanonicalWorkOrder]:
        """Newest first."""
        sql = "SELECT data_json FROM work_orders ORDER BY created_at_utc DESC, rowid DESC"
        params: tuple = ()
        if limit is not None:
            sql += " LIMIT ?"
            params = (limit,)
        return [CanonicalWorkOrder.model_validate_json(r[0]) for r in self.conn.execute(sql, params)]

    def delete(self, work_order_id: str) -> None:
        cur = self.conn.execute("DELETE FROM work_orders WHERE id=?", (work_order_id,))
        self.conn.commit()
        if cur.rowcount == 0:
            raise WorkOrderNotFound(work_order_id)
