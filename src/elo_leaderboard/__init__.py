"""Elo Leaderboard - Skill ratings for pull request contributors.

Every merged pull request is a game the author wins against the task. Harder
tasks, cleaner reviews and a healthy turnaround earn more rating; the
leaderboard is kept as JSON and rendered as Markdown.

Example:
    ```python
    from elo_leaderboard import (
        EloConfig,
        LeaderboardStore,
        LeaderboardUpdater,
        PullRequestEvent,
        RepositoryContext,
    )

    updater = LeaderboardUpdater(
        config=EloConfig(),
        store=LeaderboardStore("leaderboard.json"),
        repository=RepositoryContext.from_slug("acme/widgets"),
    )
    result = updater.update(PullRequestEvent.from_payload(data))
    print(result.delta, result.rank)
    ```
"""

from importlib.metadata import PackageNotFoundError, version

from .config import (
    CodeChangeConfig,
    EloConfig,
    FeatureFlags,
    KFactorConfig,
    LeaderboardSettings,
    QualityConfig,
    ReviewComplexityConfig,
    TimeBonusConfig,
)
from .exceptions import (
    ConfigError,
    EloLeaderboardError,
    EventValidationError,
    NotificationError,
    StorePersistenceError,
)
from .models import (
    ContributorRecord,
    HistoryEntry,
    Leaderboard,
    PullRequestEvent,
    RepositoryContext,
    UpdateResult,
)
from .notifier import BaseNotifier, GitHubCommentNotifier, RecordingNotifier, get_notifier
from .reporter import MarkdownReporter, print_leaderboard
from .scorer import ELO, Scorer
from .store import LeaderboardStore
from .updater import LeaderboardUpdater, process_merged_pull_request

try:
    __version__ = version("elo-leaderboard")
except PackageNotFoundError:
    __version__ = "0.0.0"  # running from a source checkout

__all__ = [
    # Main entry points
    "LeaderboardUpdater",
    "process_merged_pull_request",
    # Configuration
    "EloConfig",
    "KFactorConfig",
    "CodeChangeConfig",
    "ReviewComplexityConfig",
    "QualityConfig",
    "TimeBonusConfig",
    "LeaderboardSettings",
    "FeatureFlags",
    # Models
    "PullRequestEvent",
    "HistoryEntry",
    "ContributorRecord",
    "Leaderboard",
    "RepositoryContext",
    "UpdateResult",
    # Scoring
    "ELO",
    "Scorer",
    # Storage
    "LeaderboardStore",
    # Reporter
    "MarkdownReporter",
    "print_leaderboard",
    # Notifiers
    "BaseNotifier",
    "GitHubCommentNotifier",
    "RecordingNotifier",
    "get_notifier",
    # Exceptions
    "EloLeaderboardError",
    "ConfigError",
    "EventValidationError",
    "StorePersistenceError",
    "NotificationError",
]
