"""Base notifier interface for announcing rating updates.

The updater depends on this capability rather than on a concrete host API,
so the rating logic can run and be tested without any network access.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..models import PullRequestEvent


class BaseNotifier(ABC):
    """Abstract base class for notifier implementations.

    A notifier delivers an already-rendered message about one merged pull
    request. Delivery failures are reported by raising; the updater catches
    and logs them, so a notifier never has to protect the rating state.

    Supported notifiers:
    - GitHubCommentNotifier: Posts a comment on the pull request
    - RecordingNotifier: Keeps messages in memory for testing
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Return the notifier's name identifier."""
        ...

    @abstractmethod
    def notify(self, event: PullRequestEvent, body: str) -> None:
        """Deliver a message about a merged pull request.

        Args:
            event: The pull request the message is about.
            body: Rendered message text.

        Raises:
            NotificationError: If delivery fails.
        """
        ...

    def close(self) -> None:
        """Release any resources held by the notifier."""
        pass

    def __enter__(self) -> BaseNotifier:
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Context manager exit - cleanup resources."""
        self.close()
