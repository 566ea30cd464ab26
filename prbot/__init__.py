"""
prbot - pull request housekeeping bot.

Automatically resolves semantically-mergeable conflicts on pull requests
and keeps the author informed through status comments.
"""

__version__ = "0.1.0"
