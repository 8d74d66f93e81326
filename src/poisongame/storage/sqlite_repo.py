"""SQLite-based repository implementations.

This module provides SQLite storage for match records, deployment
settings and escrow locks, suitable for the webapp. Records are stored as
JSON with the columns needed for listing and expiry pulled out alongside.
"""

import json
import sqlite3
from datetime import datetime
from pathlib import Path
from typing import Optional

from .repository import EscrowRepository, MatchRepository, SettingsRepository


def dict_factory(cursor: sqlite3.Cursor, row: tuple) -> dict:
    """Convert sqlite3 row to dict."""
    return {col[0]: row[idx] for idx, col in enumerate(cursor.description)}


class _SQLiteRepository:
    """Connection handling shared by the SQLite repositories."""

    def __init__(self, database_uri: str = "instance/poisongame.db"):
        """Initialize repository.

        Args:
            database_uri: Path to SQLite database file
        """
        self.database_path = Path(database_uri)
        self.database_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_db()

    def _get_connection(self) -> sqlite3.Connection:
        """Get database connection."""
        conn = sqlite3.connect(self.database_path)
        conn.row_factory = dict_factory
        return conn

    def _init_db(self) -> None:
        raise NotImplementedError


class SQLiteMatchRepository(_SQLiteRepository, MatchRepository):
    """SQLite-based match repository."""

    def _init_db(self) -> None:
        """Initialize database schema."""
        conn = self._get_connection()
        cursor = conn.cursor()
        cursor.execute("""
            CREATE TABLE IF NOT EXISTS matches (
                session_id INTEGER PRIMARY KEY,
                player_a TEXT NOT NULL,
                player_b TEXT NOT NULL,
                phase TEXT NOT NULL,
                outcome TEXT,
                expires_at REAL NOT NULL DEFAULT 0,
                data TEXT NOT NULL,
                updated_at TEXT
            )
        """)
        cursor.execute("CREATE INDEX IF NOT EXISTS idx_matches_expires_at ON matches(expires_at)")
        conn.commit()
        conn.close()

    def load_match(self, session_id: int) -> Optional[dict]:
        """Load match record by session ID."""
        conn = self._get_connection()
        cursor = conn.cursor()
        cursor.execute("SELECT data FROM matches WHERE session_id = ?", (int(session_id),))
        row = cursor.fetchone()
        conn.close()

        if row is None:
            return None

        return json.loads(row["data"])

    def save_match(self, session_id: int, record: dict) -> None:
        """Persist complete match record in a single statement."""
        now = datetime.utcnow().isoformat()
        record = {**record, "session_id": int(session_id)}

        conn = self._get_connection()
        cursor = conn.cursor()

        cursor.execute("""
            INSERT INTO matches (session_id, player_a, player_b, phase, outcome, expires_at, data, updated_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?)
            ON CONFLICT(session_id) DO UPDATE SET
                player_a = excluded.player_a,
                player_b = excluded.player_b,
                phase = excluded.phase,
                outcome = excluded.outcome,
                expires_at = excluded.expires_at,
                data = excluded.data,
                updated_at = excluded.updated_at
        """, (
            int(session_id),
            record.get("player_a", ""),
            record.get("player_b", ""),
            record.get("phase", ""),
            record.get("outcome"),
            record.get("expires_at", 0.0),
            json.dumps(record),
            now,
        ))

        conn.commit()
        conn.close()

    def delete_match(self, session_id: int) -> bool:
        """Delete match record."""
        conn = self._get_connection()
        cursor = conn.cursor()
        cursor.execute("DELETE FROM matches WHERE session_id = ?", (int(session_id),))
        deleted = cursor.rowcount > 0
        conn.commit()
        conn.close()
        return deleted

    def list_matches(self) -> list[dict]:
        """List match summaries ordered by session ID."""
        conn = self._get_connection()
        cursor = conn.cursor()
        cursor.execute("""
            SELECT session_id, player_a, player_b, phase, outcome, expires_at
            FROM matches
            ORDER BY session_id
        """)
        rows = cursor.fetchall()
        conn.close()
        return rows


class SQLiteSettingsRepository(_SQLiteRepository, SettingsRepository):
    """SQLite-based settings repository."""

    def _init_db(self) -> None:
        """Initialize database schema."""
        conn = self._get_connection()
        cursor = conn.cursor()
        cursor.execute("""
            CREATE TABLE IF NOT EXISTS settings (
                key TEXT PRIMARY KEY,
                value TEXT NOT NULL,
                updated_at TEXT
            )
        """)
        conn.commit()
        conn.close()

    def get_setting(self, key: str) -> Optional[str]:
        """Return the value for key, or None if unset."""
        conn = self._get_connection()
        cursor = conn.cursor()
        cursor.execute("SELECT value FROM settings WHERE key = ?", (key,))
        row = cursor.fetchone()
        conn.close()
        return None if row is None else row["value"]

    def set_setting(self, key: str, value: str) -> None:
        """Store value under key."""
        conn = self._get_connection()
        cursor = conn.cursor()
        cursor.execute("""
            INSERT INTO settings (key, value, updated_at)
            VALUES (?, ?, ?)
            ON CONFLICT(key) DO UPDATE SET
                value = excluded.value,
                updated_at = excluded.updated_at
        """, (key, value, datetime.utcnow().isoformat()))
        conn.commit()
        conn.close()


class SQLiteEscrowRepository(_SQLiteRepository, EscrowRepository):
    """SQLite-based escrow lock repository."""

    def _init_db(self) -> None:
        """Initialize database schema."""
        conn = self._get_connection()
        cursor = conn.cursor()
        cursor.execute("""
            CREATE TABLE IF NOT EXISTS escrow_locks (
                session_id INTEGER PRIMARY KEY,
                settled INTEGER NOT NULL DEFAULT 0,
                data TEXT NOT NULL,
                updated_at TEXT
            )
        """)
        conn.commit()
        conn.close()

    def load_lock(self, session_id: int) -> Optional[dict]:
        """Load the lock record for a session."""
        conn = self._get_connection()
        cursor = conn.cursor()
        cursor.execute("SELECT data FROM escrow_locks WHERE session_id = ?", (int(session_id),))
        row = cursor.fetchone()
        conn.close()
        return None if row is None else json.loads(row["data"])

    def save_lock(self, session_id: int, record: dict) -> None:
        """Persist the lock record in a single statement."""
        record = {**record, "session_id": int(session_id)}
        conn = self._get_connection()
        cursor = conn.cursor()
        cursor.execute("""
            INSERT INTO escrow_locks (session_id, settled, data, updated_at)
            VALUES (?, ?, ?, ?)
            ON CONFLICT(session_id) DO UPDATE SET
                settled = excluded.settled,
                data = excluded.data,
                updated_at = excluded.updated_at
        """, (
            int(session_id),
            int(bool(record.get("settled"))),
            json.dumps(record),
            datetime.utcnow().isoformat(),
        ))
        conn.commit()
        conn.close()
