"""SQLite document store for ascend."""

from __future__ import annotations

import json
import logging
import sqlite3
from datetime import datetime, timezone
from pathlib import Path
from typing import Protocol

from ascend.state import ProgressionState, state_from_dict, state_to_dict

logger = logging.getLogger(__name__)

DEFAULT_DB_PATH = Path.home() / ".ascend" / "data.db"
PROGRESSION_KEY = "progression_state"


class Database:
    """SQLite key/document manager with WAL mode."""

    def __init__(self, db_path: Path | None = None) -> None:
        self.db_path = db_path or DEFAULT_DB_PATH
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self.conn = sqlite3.connect(str(self.db_path), check_same_thread=False)
        self.conn.row_factory = sqlite3.Row
        self.conn.execute("PRAGMA journal_mode=WAL")
        self.init_db()

    def init_db(self) -> None:
        """Create tables if they do not exist."""
        self.conn.executescript("""
            CREATE TABLE IF NOT EXISTS documents (
                key TEXT PRIMARY KEY,
                value TEXT NOT NULL,
                updated_at TEXT
            );
        """)
        self.conn.commit()

    def get_document(self, key: str) -> str | None:
        """Return the raw stored text for a key."""
        row = self.conn.execute(
            "SELECT value FROM documents WHERE key = ?", (key,)
        ).fetchone()
        return row["value"] if row else None

    def set_document(self, key: str, value: str) -> None:
        """Store raw text under a key (upsert)."""
        self.conn.execute(
            "INSERT INTO documents (key, value, updated_at) VALUES (?, ?, ?) "
            "ON CONFLICT(key) DO UPDATE SET value = excluded.value, updated_at = excluded.updated_at",
            (key, value, datetime.now(tz=timezone.utc).isoformat()),
        )
        self.conn.commit()

    def reset_document(self, key: str) -> bool:
        """Delete a document. Returns True if a row was removed."""
        cursor = self.conn.execute("DELETE FROM documents WHERE key = ?", (key,))
        self.conn.commit()
        return cursor.rowcount > 0

    def export_document(self, key: str, output_path: Path) -> bool:
        """Write a document as pretty JSON. Returns False if there is nothing stored."""
        raw = self.get_document(key)
        if raw is None:
            return False
        try:
            payload = json.loads(raw)
        except json.JSONDecodeError:
            payload = raw
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(json.dumps(payload, indent=2, ensure_ascii=False) + "\n", encoding="utf-8")
        return True

    def import_document(self, key: str, input_path: Path) -> None:
        """Replace a document with the JSON object in input_path.

        Raises ValueError if the file is not a JSON object.
        """
        try:
            payload = json.loads(input_path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as exc:
            raise ValueError(f"{input_path} is not valid JSON: {exc}") from exc
        if not isinstance(payload, dict):
            raise ValueError(f"{input_path} must contain a JSON object")
        self.set_document(key, json.dumps(payload))

    def close(self) -> None:
        """Close the database connection."""
        self.conn.close()


class StateStore(Protocol):
    def load(self) -> ProgressionState: ...

    def save(self, state: ProgressionState) -> None: ...


class ProgressionStore:
    """Loads and saves the progression document under a stable key."""

    def __init__(self, db: Database, key: str = PROGRESSION_KEY) -> None:
        self.db = db
        self.key = key

    def load(self) -> ProgressionState:
        """Return the stored state, falling back to defaults field by field."""
        raw = self.db.get_document(self.key)
        if raw is None:
            return ProgressionState()
        try:
            data = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("Stored %s is not valid JSON; starting from defaults", self.key)
            return ProgressionState()
        return state_from_dict(data)

    def save(self, state: ProgressionState) -> None:
        self.db.set_document(self.key, json.dumps(state_to_dict(state), ensure_ascii=False))
        logger.debug("Saved %s", self.key)

    def reset(self) -> None:
        self.db.reset_document(self.key)


class MemoryStore:
    """In-process StateStore holding the serialized document."""

    def __init__(self, document: dict | None = None) -> None:
        self.document = document
        self.saves = 0

    def load(self) -> ProgressionState:
        return state_from_dict(self.document)

    def save(self, state: ProgressionState) -> None:
        self.document = state_to_dict(state)
        self.saves += 1
