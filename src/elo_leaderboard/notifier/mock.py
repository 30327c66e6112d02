"""In-memory notifier for testing.

This module provides a notifier that records messages instead of sending
them, useful for:
- Unit testing without API calls
- Dry runs of the update command
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from ..exceptions import NotificationError
from .base import BaseNotifier

if TYPE_CHECKING:
    from ..models import PullRequestEvent


class RecordingNotifier(BaseNotifier):
    """Notifier that keeps every message in memory.

    Example:
        ```python
        notifier = RecordingNotifier()
        updater = LeaderboardUpdater(config, store, repo, notifier=notifier)
        updater.update(event)
        number, body = notifier.messages[0]
        ```
    """

    def __init__(self, fail: bool = False):
        """Initialize the notifier.

        Args:
            fail: Raise NotificationError on every delivery instead of
                recording, to exercise failure handling.
        """
        self.fail = fail
        self.messages: list[tuple[int, str]] = []

    @property
    def name(self) -> str:
        """Return the notifier's name."""
        return "recording"

    def notify(self, event: PullRequestEvent, body: str) -> None:
        """Record the message, or fail if configured to."""
        if self.fail:
            raise NotificationError(f"delivery disabled for #{event.number}")
        self.messages.append((event.number, body))
