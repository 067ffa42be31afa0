"""
Venue_POS.data.connection

SQLite connection utilities for the POS backend.
Stores the database inside src/Venue_POS/data/db/ unless told otherwise.
"""

from __future__ import annotations

import sqlite3
from pathlib import Path
from typing import Optional

# Name of the SQLite file
DB_FILENAME = "venue_pos.db"


def get_db_path(base_dir: Optional[Path] = None) -> Path:
    """
    Return the full path to the DB file.

    If base_dir is None, we put the DB inside the 'db' directory next to this file:
        src/Venue_POS/data/db/venue_pos.db
    """
    if base_dir is None:
        base_dir = Path(__file__).resolve().parent / "db"
    else:
        base_dir = Path(base_dir)

    base_dir.mkdir(parents=True, exist_ok=True)
    return base_dir / DB_FILENAME


def get_connection(base_dir: Optional[Path] = None, timeout: float = 5.0) -> sqlite3.Connection:
    """
    Open a SQLite connection to our DB.

    check_same_thread is off because the sync worker thread persists through
    the same backend as the UI; the store's lock serializes access.
    """
    db_path = get_db_path(base_dir)
    conn = sqlite3.connect(db_path, timeout=timeout, check_same_thread=False)
    conn.row_factory = sqlite3.Row  # nicer dict-like access
    return conn
