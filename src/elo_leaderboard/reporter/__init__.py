"""Reporter module.

Provides output formatting for leaderboards:
- MarkdownReporter: Markdown leaderboard, update comments and text tables
"""

from .markdown import MarkdownReporter, print_leaderboard

__all__ = [
    "MarkdownReporter",
    "print_leaderboard",
]
