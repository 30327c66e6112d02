"""Custom exceptions for the Elo leaderboard.

Every error raised by the package derives from EloLeaderboardError so callers
(the CLI, a CI workflow) can catch one type and report a failed update.
"""

from __future__ import annotations


class EloLeaderboardError(Exception):
    """Base exception for all Elo leaderboard errors."""

    pass


class ConfigError(EloLeaderboardError):
    """Error in configuration.

    Raised when configuration is invalid or missing required fields.
    """

    def __init__(self, message: str, field: str | None = None):
        self.field = field
        full_message = message
        if field:
            full_message = f"Configuration error in '{field}': {message}"
        super().__init__(full_message)


class EventValidationError(EloLeaderboardError):
    """A pull request event could not be validated.

    Raised at ingestion, before any rating is computed, so a bad event never
    reaches the leaderboard.
    """

    def __init__(self, message: str, field: str | None = None):
        self.field = field
        full_message = f"Invalid pull request event: {message}"
        if field:
            full_message = f"Invalid pull request event field '{field}': {message}"
        super().__init__(full_message)


class StorePersistenceError(EloLeaderboardError):
    """The leaderboard could not be written.

    The computed update is not durable until the write succeeds, so this is
    fatal for the invocation.
    """

    def __init__(self, message: str, path: str):
        self.path = path
        full_message = (
            f"Could not write leaderboard to '{path}'.\n"
            f"{message}\n"
            "The rating update was not saved."
        )
        super().__init__(full_message)


class NotificationError(EloLeaderboardError):
    """Delivering an update notification failed."""

    def __init__(self, message: str, status_code: int | None = None):
        self.status_code = status_code
        full_message = f"Notification failed: {message}"
        if status_code is not None:
            full_message += f" (HTTP {status_code})"
        super().__init__(full_message)
