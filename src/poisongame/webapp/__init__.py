"""JSON web API for the Poison Game."""

from .app import create_app

__all__ = ["create_app"]
