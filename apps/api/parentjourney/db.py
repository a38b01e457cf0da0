"""SQLite helpers."""
from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Iterator, Optional

from .config import CONFIG

_DB_PATH = CONFIG.resolved_database_path
_DB_PATH.parent.mkdir(parents=True, exist_ok=True)


def initialize_db() -> None:
    with sqlite3.connect(_DB_PATH) as conn:
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS profile_storage (
                profile_id TEXT NOT NULL,
                storage_key TEXT NOT NULL,
                value TEXT NOT NULL,
                updated_at TEXT NOT NULL,
                PRIMARY KEY (profile_id, storage_key)
            );
            """
        )
        conn.commit()


@contextmanager
def get_connection() -> Iterator[sqlite3.Connection]:
    conn = sqlite3.connect(_DB_PATH)
    try:
        yield conn
    finally:
        conn.close()


def read_profile_value(profile_id: str, storage_key: str) -> Optional[str]:
    with get_connection() as conn:
        row = conn.execute(
            "SELECT value FROM profile_storage WHERE profile_id = ? AND storage_key = ?",
            (profile_id, storage_key),
        ).fetchone()
    return row[0] if row else None


def write_profile_value(profile_id: str, storage_key: str, value: str) -> None:
    now = datetime.now(timezone.utc).isoformat()
    with get_connection() as conn:
        conn.execute(
            """
            INSERT INTO profile_storage (profile_id, storage_key, value, updated_at)
            VALUES (?, ?, ?, ?)
            ON CONFLICT (profile_id, storage_key)
            DO UPDATE SET value = excluded.value, updated_at = excluded.updated_at
            """,
            (profile_id, storage_key, value, now),
        )
        conn.commit()


def delete_profile_value(profile_id: str, storage_key: str) -> None:
    with get_connection() as conn:
        conn.execute(
            "DELETE FROM profile_storage WHERE profile_id = ? AND storage_key = ?",
            (profile_id, storage_key),
        )
        conn.commit()
