"""Abstract repository interfaces for Poison Game storage.

This module defines the abstract base classes for match records and
deployment settings. Both file-based (JSON) and SQLite backends implement
these interfaces, allowing the engine, CLI and webapp to use storage without
knowing which backend is active.

Match records are plain dicts (the JSON form of models.match.Match). Every
save replaces the whole record; there are no partial updates.
"""

from abc import ABC, abstractmethod
from typing import Optional


class MatchRepository(ABC):
    """Abstract base class for match record storage."""

    @abstractmethod
    def load_match(self, session_id: int) -> Optional[dict]:
        """Load a match record by session ID.

        Args:
            session_id: Session identifier of the match

        Returns:
            Match record dict, or None if not found. Expired records are
            returned as stored; expiry is decided by the caller.
        """
        pass

    @abstractmethod
    def save_match(self, session_id: int, record: dict) -> None:
        """Persist the complete match record, replacing any previous one.

        Args:
            session_id: Session identifier of the match
            record: Complete match record dict (must include 'expires_at')
        """
        pass

    @abstractmethod
    def delete_match(self, session_id: int) -> bool:
        """Delete a match record.

        Returns:
            True if deleted, False if not found
        """
        pass

    @abstractmethod
    def list_matches(self) -> list[dict]:
        """List match summaries.

        Returns:
            List of dicts containing: {session_id, player_a, player_b, phase,
            outcome, expires_at}
        """
        pass

class SettingsRepository(ABC):
    """Abstract base class for deployment-wide settings.

    Holds the singletons every match shares: administrator identity, escrow
    address and verification key. Values are strings.
    """

    @abstractmethod
    def get_setting(self, key: str) -> Optional[str]:
        """Return the value for ``key``, or None if unset."""
        pass

    @abstractmethod
    def set_setting(self, key: str, value: str) -> None:
        """Store ``value`` under ``key``, replacing any previous value."""
        pass

    def has_setting(self, key: str) -> bool:
        """Whether ``key`` has a value."""
        return self.get_setting(key) is not None


class EscrowRepository(ABC):
    """Abstract base class for escrowed wager locks.

    One record per session holding both wagers and the settlement state.
    Locks outlive process restarts, so a match started before a restart can
    still be settled after it.
    """

    @abstractmethod
    def load_lock(self, session_id: int) -> Optional[dict]:
        """Return the lock record for ``session_id``, or None if never locked."""
        pass

    @abstractmethod
    def save_lock(self, session_id: int, record: dict) -> None:
        """Persist the complete lock record, replacing any previous one."""
        pass
