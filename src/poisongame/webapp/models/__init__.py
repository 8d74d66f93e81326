"""SQLAlchemy models for the webapp."""

from .user import User

__all__ = ["User"]
