"""Storage configuration for the Poison Game.

A deployment keeps three kinds of records: match records, deployment
settings and escrow locks. All three always live on the same backend, so
they are opened together from one StorageSettings. The CLI reads its
settings from the environment; the webapp builds them from Flask config.
"""

import os
from dataclasses import dataclass
from enum import Enum

from .file_repo import FileEscrowRepository, FileMatchRepository, FileSettingsRepository
from .repository import EscrowRepository, MatchRepository, SettingsRepository
from .sqlite_repo import SQLiteEscrowRepository, SQLiteMatchRepository, SQLiteSettingsRepository


class StorageBackend(Enum):
    """Available storage backends."""

    FILE = "file"
    SQLITE = "sqlite"

    @classmethod
    def parse(cls, value: "str | StorageBackend") -> "StorageBackend":
        """Backend named by ``value`` (case-insensitive).

        Raises:
            ValueError: If no backend has that name.
        """
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise ValueError(f"Unknown storage backend: {value!r}") from None


DEFAULT_MATCHES_PATH = "matches"
DEFAULT_SETTINGS_PATH = "instance/settings"
DEFAULT_ESCROW_PATH = "instance/escrow"
DEFAULT_DATABASE_URI = "instance/poisongame.db"


@dataclass(frozen=True)
class StorageSettings:
    """Where a deployment keeps its records.

    The file backend uses the three directory paths; the SQLite backend keeps
    every table in ``database_uri``.
    """

    backend: StorageBackend = StorageBackend.FILE
    matches_path: str = DEFAULT_MATCHES_PATH
    settings_path: str = DEFAULT_SETTINGS_PATH
    escrow_path: str = DEFAULT_ESCROW_PATH
    database_uri: str = DEFAULT_DATABASE_URI

    @classmethod
    def from_env(cls) -> "StorageSettings":
        """Settings from POISONGAME_* environment variables.

        Raises:
            ValueError: If POISONGAME_STORAGE_BACKEND names no backend.
        """
        return cls(
            backend=StorageBackend.parse(os.environ.get("POISONGAME_STORAGE_BACKEND", "file")),
            matches_path=os.environ.get("POISONGAME_MATCHES_PATH", DEFAULT_MATCHES_PATH),
            settings_path=os.environ.get("POISONGAME_SETTINGS_PATH", DEFAULT_SETTINGS_PATH),
            escrow_path=os.environ.get("POISONGAME_ESCROW_PATH", DEFAULT_ESCROW_PATH),
            database_uri=os.environ.get("POISONGAME_DATABASE_URI", DEFAULT_DATABASE_URI),
        )


@dataclass
class Repositories:
    """The repositories of one deployment, all on the same backend."""

    matches: MatchRepository
    settings: SettingsRepository
    escrow: EscrowRepository


def open_repositories(storage: StorageSettings | None = None) -> Repositories:
    """Open every repository for ``storage`` (environment config when None)."""
    if storage is None:
        storage = StorageSettings.from_env()

    if storage.backend is StorageBackend.SQLITE:
        return Repositories(
            matches=SQLiteMatchRepository(storage.database_uri),
            settings=SQLiteSettingsRepository(storage.database_uri),
            escrow=SQLiteEscrowRepository(storage.database_uri),
        )
    return Repositories(
        matches=FileMatchRepository(storage.matches_path),
        settings=FileSettingsRepository(storage.settings_path),
        escrow=FileEscrowRepository(storage.escrow_path),
    )
