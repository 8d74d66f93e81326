"""Poison Game operator CLI.

Usage:
    poisongame list

Or directly:
    python -m poisongame.cli.app list
"""

from poisongame.cli.app import main

__all__ = ["main"]
