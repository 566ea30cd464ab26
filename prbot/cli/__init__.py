"""
prbot Command-Line Interface.

Provides CLI commands for running conflict resolution by hand.
"""

from prbot.cli.main import app

__all__ = [
    "app",
]
