"""File-based repository implementations using JSON files.

This module provides JSON file-based storage for match records,
deployment settings and escrow locks. Matches and escrow locks are stored
one file per session in their own directories; settings one file per key
in the settings directory.

Writes go to a temporary file that is then renamed over the target, so a
reader never observes a half-written record.
"""

import json
import os
import re
from datetime import datetime
from pathlib import Path
from typing import Optional

from .repository import EscrowRepository, MatchRepository, SettingsRepository

_SETTING_KEY = re.compile(r"^[a-z0-9_]+$")


def _atomic_write_json(path: Path, data: dict) -> None:
    """Write JSON to ``path`` via a temporary file and rename."""
    tmp_path = path.with_suffix(path.suffix + ".tmp")
    with open(tmp_path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2)
    os.replace(tmp_path, path)


class FileMatchRepository(MatchRepository):
    """JSON file-based match repository.

    Stores match records as individual JSON files in the matches directory.
    File names are the session IDs (e.g., '42.json').
    """

    def __init__(self, matches_path: str | Path = "matches"):
        """Initialize repository.

        Args:
            matches_path: Path to matches directory
        """
        self.matches_path = Path(matches_path)
        self.matches_path.mkdir(parents=True, exist_ok=True)

    def _get_match_path(self, session_id: int) -> Path:
        """Get path to match file."""
        return self.matches_path / f"{int(session_id)}.json"

    def load_match(self, session_id: int) -> Optional[dict]:
        """Load match record by session ID."""
        path = self._get_match_path(session_id)
        if not path.exists():
            return None
        with open(path, encoding="utf-8") as f:
            return json.load(f)

    def save_match(self, session_id: int, record: dict) -> None:
        """Persist complete match record."""
        record_with_meta = {
            **record,
            "session_id": int(session_id),
            "updated_at": datetime.utcnow().isoformat(),
        }
        _atomic_write_json(self._get_match_path(session_id), record_with_meta)

    def delete_match(self, session_id: int) -> bool:
        """Delete match record."""
        path = self._get_match_path(session_id)
        if path.exists():
            path.unlink()
            return True
        return False

    def list_matches(self) -> list[dict]:
        """List match summaries ordered by session ID."""
        matches = []
        for path in self.matches_path.glob("*.json"):
            with open(path, encoding="utf-8") as f:
                data = json.load(f)
                matches.append({
                    "session_id": data.get("session_id", int(path.stem)),
                    "player_a": data.get("player_a", ""),
                    "player_b": data.get("player_b", ""),
                    "phase": data.get("phase", ""),
                    "outcome": data.get("outcome"),
                    "expires_at": data.get("expires_at", 0.0),
                })
        return sorted(matches, key=lambda x: x["session_id"])


class FileSettingsRepository(SettingsRepository):
    """JSON file-based settings repository.

    Each setting is a small JSON file named after its key.
    """

    def __init__(self, settings_path: str | Path = "instance/settings"):
        """Initialize repository.

        Args:
            settings_path: Path to settings directory
        """
        self.settings_path = Path(settings_path)
        self.settings_path.mkdir(parents=True, exist_ok=True)

    def _get_setting_path(self, key: str) -> Path:
        """Get path to setting file."""
        if not _SETTING_KEY.match(key):
            raise ValueError(f"Invalid setting key: {key!r}")
        return self.settings_path / f"{key}.json"

    def get_setting(self, key: str) -> Optional[str]:
        """Return the value for key, or None if unset."""
        path = self._get_setting_path(key)
        if not path.exists():
            return None
        with open(path, encoding="utf-8") as f:
            return json.load(f)["value"]

    def set_setting(self, key: str, value: str) -> None:
        """Store value under key."""
        _atomic_write_json(
            self._get_setting_path(key),
            {"key": key, "value": value, "updated_at": datetime.utcnow().isoformat()},
        )


class FileEscrowRepository(EscrowRepository):
    """JSON file-based escrow lock repository.

    One file per session in the escrow directory (e.g., '42.json').
    """

    def __init__(self, escrow_path: str | Path = "instance/escrow"):
        self.escrow_path = Path(escrow_path)
        self.escrow_path.mkdir(parents=True, exist_ok=True)

    def _get_lock_path(self, session_id: int) -> Path:
        return self.escrow_path / f"{int(session_id)}.json"

    def load_lock(self, session_id: int) -> Optional[dict]:
        """Load the lock record for a session."""
        path = self._get_lock_path(session_id)
        if not path.exists():
            return None
        with open(path, encoding="utf-8") as f:
            return json.load(f)

    def save_lock(self, session_id: int, record: dict) -> None:
        """Persist the lock record."""
        _atomic_write_json(self._get_lock_path(session_id), {**record, "session_id": int(session_id)})
