"""
Venue_POS.data.snapshot_store

Durable storage for the single dataset snapshot.

Backends:
- SqliteSnapshotBackend   : one row in kv_store (default, survives crashes)
- JsonFileSnapshotBackend : one JSON file, swapped atomically
- MemorySnapshotBackend   : in-process only (tests, demos)

Every backend's load() returns None instead of raising when the stored
document is missing or unreadable; the store then starts from an empty
dataset.
"""

from __future__ import annotations

import copy
import json
import logging
import os
import sqlite3
import tempfile
from contextlib import closing
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional

from Venue_POS.data.connection import get_connection
from Venue_POS.data.schema import create_tables

logger = logging.getLogger(__name__)

STORAGE_KEY = "venue_pos_db"


def _now_utc_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="seconds")


class SnapshotBackend:
    """Interface: load/save the whole dataset document."""

    def load(self) -> Optional[Dict[str, Any]]:
        raise NotImplementedError

    def save(self, snapshot: Dict[str, Any]) -> None:
        raise NotImplementedError


class MemorySnapshotBackend(SnapshotBackend):
    def __init__(self, initial: Optional[Dict[str, Any]] = None) -> None:
        self._doc = copy.deepcopy(initial) if initial is not None else None

    def load(self) -> Optional[Dict[str, Any]]:
        return copy.deepcopy(self._doc) if self._doc is not None else None

    def save(self, snapshot: Dict[str, Any]) -> None:
        self._doc = copy.deepcopy(snapshot)


class JsonFileSnapshotBackend(SnapshotBackend):
    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def load(self) -> Optional[Dict[str, Any]]:
        if not self.path.exists():
            return None
        try:
            with self.path.open("r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as exc:
            logger.warning("Snapshot file %s unreadable, starting fresh: %s", self.path, exc)
            return None
        if not isinstance(data, dict):
            logger.warning("Snapshot file %s is not a JSON object, starting fresh", self.path)
            return None
        return data

    def save(self, snapshot: Dict[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            prefix=self.path.name + ".", suffix=".tmp", dir=str(self.path.parent)
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(snapshot, f, ensure_ascii=False)
            os.replace(tmp_name, self.path)
        except BaseException:
            try:
                os.unlink(tmp_name)
            except OSError:
                pass
            raise


class SqliteSnapshotBackend(SnapshotBackend):
    def __init__(self, base_dir: Optional[Path] = None, key: str = STORAGE_KEY) -> None:
        self.key = key
        self._conn = get_connection(base_dir)
        create_tables(self._conn)

    def load(self) -> Optional[Dict[str, Any]]:
        with closing(self._conn.cursor()) as cur:
            cur.execute("SELECT value FROM kv_store WHERE key = ?", (self.key,))
            row = cur.fetchone()
        if row is None:
            return None
        try:
            data = json.loads(row["value"])
        except ValueError as exc:
            logger.warning("Stored snapshot %r is not valid JSON, starting fresh: %s", self.key, exc)
            return None
        if not isinstance(data, dict):
            logger.warning("Stored snapshot %r is not a JSON object, starting fresh", self.key)
            return None
        return data

    def save(self, snapshot: Dict[str, Any]) -> None:
        payload = json.dumps(snapshot, ensure_ascii=False)
        with self._conn:
            self._conn.execute(
                """
                INSERT INTO kv_store (key, value, updated_at)
                VALUES (?, ?, ?)
                ON CONFLICT(key) DO UPDATE SET
                    value = excluded.value,
                    updated_at = excluded.updated_at
                """,
                (self.key, payload, _now_utc_iso()),
            )

    def close(self) -> None:
        try:
            self._conn.close()
        except sqlite3.Error:
            pass
