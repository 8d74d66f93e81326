"""Poison Game: rule engine for a two-player hidden-board tile game.

Each player commits to a secret board; every tile reveal is backed by a
zero-knowledge proof checked against that commitment.
"""

__version__ = "0.1.0"
