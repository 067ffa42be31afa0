"""
Venue_POS.data.schema

SQLite schema definition and initialization for the POS backend.

The POS keeps its whole dataset as one JSON document, so the schema is a
single key/value table. Replacing the row is the atomic "save snapshot".
"""

from typing import Optional
from pathlib import Path
import sqlite3

from Venue_POS.data.connection import get_connection


def create_tables(conn: sqlite3.Connection) -> None:
    """
    Create all tables if they do not exist.

    Run this once at startup (safe to call multiple times).
    """
    cur = conn.cursor()

    # --- kv_store ---
    cur.execute(
        """
        CREATE TABLE IF NOT EXISTS kv_store (
            key         TEXT PRIMARY KEY,
            value       TEXT NOT NULL,           -- JSON document
            updated_at  TEXT NOT NULL DEFAULT (datetime('now'))
        );
        """
    )

    conn.commit()


def initialize_database(base_dir: Optional[Path] = None) -> None:
    """
    Convenience entry point: open a connection, create tables, close.
    """
    conn = get_connection(base_dir)
    try:
        create_tables(conn)
    finally:
        conn.close()
