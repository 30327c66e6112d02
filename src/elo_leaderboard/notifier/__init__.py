"""Notifier module.

Provides implementations for announcing rating updates:
- GitHubCommentNotifier: Posts a comment on the merged pull request
- RecordingNotifier: Keeps messages in memory for testing

Example:
    ```python
    from elo_leaderboard.notifier import get_notifier

    notifier = get_notifier("github", repository=repo)
    notifier.notify(event, body)
    ```
"""

from __future__ import annotations

from typing import Any

from .base import BaseNotifier
from .github import GitHubCommentNotifier
from .mock import RecordingNotifier


def get_notifier(name: str, **kwargs: Any) -> BaseNotifier:
    """Factory function to get a notifier by name.

    Args:
        name: Notifier name. One of:
            - "github": Pull request comments via the GitHub REST API
            - "recording": In-memory notifier for testing
        **kwargs: Additional arguments passed to the notifier constructor.

    Returns:
        Initialized notifier instance.

    Raises:
        ValueError: If notifier name is not recognized.
    """
    notifiers: dict[str, type[BaseNotifier]] = {
        "github": GitHubCommentNotifier,
        "recording": RecordingNotifier,
    }

    if name not in notifiers:
        valid = list(notifiers.keys())
        raise ValueError(f"Unknown notifier '{name}'. Valid notifiers: {valid}")

    return notifiers[name](**kwargs)


__all__ = [
    "BaseNotifier",
    "GitHubCommentNotifier",
    "RecordingNotifier",
    "get_notifier",
]
