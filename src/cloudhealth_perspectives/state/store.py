"""SQLite store for the last-known server copy of each perspective.

The server fills in fields the user never writes (group ids, dynamic groups,
other-group entries). Keeping its last document lets the next update send
them back unchanged.
"""

from __future__ import annotations

import json
import sqlite3
from datetime import datetime, timezone
from pathlib import Path

from cloudhealth_perspectives.codec import from_wire, to_wire
from cloudhealth_perspectives.model.types import Perspective


class StateStore:
    """Simple SQLite state store keyed by perspective id."""

    def __init__(self, db_path: Path | str = ":memory:"):
        self.db_path = str(db_path)
        self.conn: sqlite3.Connection | None = None

    def connect(self) -> None:
        """Open the database, creating parent directories and the table."""
        if self.db_path != ":memory:":
            Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
        self.conn = sqlite3.connect(self.db_path)
        self.conn.row_factory = sqlite3.Row
        self.conn.execute("""
            CREATE TABLE IF NOT EXISTS perspective_state (
                id TEXT PRIMARY KEY,
                name TEXT NOT NULL,
                document TEXT NOT NULL,
                reserved_ref_ids TEXT NOT NULL DEFAULT '[]',
                updated_at TEXT NOT NULL
            )
        """)
        self.conn.commit()

    def close(self) -> None:
        if self.conn:
            self.conn.close()
            self.conn = None

    def __enter__(self) -> StateStore:
        self.connect()
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def _require_conn(self) -> sqlite3.Connection:
        if not self.conn:
            raise RuntimeError("State store not connected")
        return self.conn

    def save(self, perspective_id: str, perspective: Perspective) -> None:
        """Insert or replace the stored copy of a perspective."""
        conn = self._require_conn()
        reserved = sorted(set(perspective.reserved_ref_ids) | perspective.all_ref_ids())
        conn.execute(
            """
            INSERT OR REPLACE INTO perspective_state
                (id, name, document, reserved_ref_ids, updated_at)
            VALUES (?, ?, ?, ?, ?)
            """,
            [
                perspective_id,
                perspective.name,
                json.dumps(stored_document(perspective)),
                json.dumps(reserved),
                datetime.now(timezone.utc).isoformat(),
            ],
        )
        conn.commit()

    def load(self, perspective_id: str) -> Perspective | None:
        """Return the stored copy, or None if nothing is stored for this id."""
        conn = self._require_conn()
        row = conn.execute(
            "SELECT document, reserved_ref_ids FROM perspective_state WHERE id = ?",
            [perspective_id],
        ).fetchone()
        if row is None:
            return None
        perspective = from_wire(json.loads(row["document"]))
        perspective.reserved_ref_ids = json.loads(row["reserved_ref_ids"])
        return perspective

    def delete(self, perspective_id: str) -> bool:
        """Remove a stored copy. Returns True if one existed."""
        conn = self._require_conn()
        cursor = conn.execute("DELETE FROM perspective_state WHERE id = ?", [perspective_id])
        conn.commit()
        return cursor.rowcount > 0

    def list_ids(self) -> list[tuple[str, str]]:
        """List ``(id, name)`` pairs, ordered by id."""
        conn = self._require_conn()
        rows = conn.execute(
            "SELECT id, name FROM perspective_state ORDER BY CAST(id AS INTEGER)"
        ).fetchall()
        return [(row["id"], row["name"]) for row in rows]


def stored_document(perspective: Perspective) -> dict:
    """Wire document plus dynamic groups, which the outbound shape leaves out."""
    doc = to_wire(perspective)
    for group, wire_group in zip(perspective.groups, doc["group"]):
        if group.dynamic_groups:
            wire_group["dynamic_group"] = [
                {"ref_id": d.ref_id, "name": d.name, "val": d.val} for d in group.dynamic_groups
            ]
    return doc
