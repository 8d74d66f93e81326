"""Route blueprints for the webapp."""

from . import admin, auth, matches

__all__ = ["admin", "auth", "matches"]
