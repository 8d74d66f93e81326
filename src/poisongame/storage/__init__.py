"""Storage module for the Poison Game.

This module provides repository interfaces and implementations for
persisting match records, deployment settings and escrow locks.

Usage:
    from poisongame.storage import open_repositories

    # Repositories on the environment-configured backend
    repos = open_repositories()
    repos.matches.list_matches()

    # Or name the backend and locations explicitly
    from poisongame.storage import StorageBackend, StorageSettings
    repos = open_repositories(StorageSettings(StorageBackend.SQLITE, database_uri="game.db"))

Configuration via environment variables:
    POISONGAME_STORAGE_BACKEND: "file" or "sqlite" (default: "file")
    POISONGAME_MATCHES_PATH: Path to matches directory (default: "matches")
    POISONGAME_SETTINGS_PATH: Path to settings directory (default: "instance/settings")
    POISONGAME_ESCROW_PATH: Path to escrow lock directory (default: "instance/escrow")
    POISONGAME_DATABASE_URI: SQLite database path (default: "instance/poisongame.db")
"""

from .config import Repositories, StorageBackend, StorageSettings, open_repositories
from .file_repo import FileEscrowRepository, FileMatchRepository, FileSettingsRepository
from .repository import EscrowRepository, MatchRepository, SettingsRepository
from .sqlite_repo import SQLiteEscrowRepository, SQLiteMatchRepository, SQLiteSettingsRepository

__all__ = [
    # Abstract interfaces
    "MatchRepository",
    "SettingsRepository",
    "EscrowRepository",
    # File implementations
    "FileMatchRepository",
    "FileSettingsRepository",
    "FileEscrowRepository",
    # SQLite implementations
    "SQLiteMatchRepository",
    "SQLiteSettingsRepository",
    "SQLiteEscrowRepository",
    # Configuration
    "StorageBackend",
    "StorageSettings",
    "Repositories",
    "open_repositories",
]
