"""Update orchestration for the Elo leaderboard.

This module applies one merged pull request to the leaderboard. The pure
step, process_merged_pull_request, only touches the in-memory leaderboard;
LeaderboardUpdater wraps it with persistence, Markdown rendering and the
pull request notification.
"""

from __future__ import annotations

import logging
from pathlib import Path

from .config import EloConfig
from .exceptions import EloLeaderboardError, StorePersistenceError
from .models import HistoryEntry, Leaderboard, PullRequestEvent, RepositoryContext, UpdateResult
from .notifier import BaseNotifier
from .reporter import MarkdownReporter
from .scorer import ELO, Scorer
from .store import LeaderboardStore

logger = logging.getLogger(__name__)


def process_merged_pull_request(
    leaderboard: Leaderboard,
    event: PullRequestEvent,
    config: EloConfig | None = None,
    repository: RepositoryContext | None = None,
) -> UpdateResult:
    """Apply one merged pull request to a leaderboard in place.

    The rounded delta is what accumulates into the rating, so replaying the
    stored deltas reproduces the rating exactly.

    Args:
        leaderboard: Leaderboard to update.
        event: The merged pull request.
        config: Rating configuration.
        repository: Repository used to build the history entry URL.

    Returns:
        UpdateResult describing the applied change.
    """
    config = config or EloConfig()
    contributor = leaderboard.get_or_create(event.author, config.starting_rating)

    difficulty = Scorer.task_difficulty(event, config)
    quality = Scorer.quality_multiplier(event, config)
    time_bonus = Scorer.time_bonus(event, config)
    delta, expected, k = ELO.rating_delta(
        contributor.rating,
        difficulty,
        contributor.merged_count,
        quality=quality,
        time_bonus=time_bonus,
        config=config,
    )

    contributor.rating += delta
    contributor.merged_count += 1
    contributor.total_difficulty += difficulty

    if config.features.track_recent_prs:
        contributor.record(
            HistoryEntry(
                number=event.number,
                title=event.title,
                delta=delta,
                difficulty=difficulty,
                merged_at=event.merged_at,
                url=repository.pull_request_url(event.number) if repository else "",
            ),
            config.leaderboard.max_recent_prs,
        )

    leaderboard.total_merged_count += 1

    logger.debug(
        f"#{event.number} by {event.author}: difficulty={difficulty} expected={expected:.3f} "
        f"k={k} quality={quality:.2f} time={time_bonus:.2f} delta={delta}"
    )

    return UpdateResult(
        author=event.author,
        number=event.number,
        delta=delta,
        new_rating=contributor.rating,
        rank=leaderboard.rank_of(event.author),
        difficulty=difficulty,
        expected=expected,
        k_factor=k,
        quality=quality,
        time_bonus=time_bonus,
    )


class LeaderboardUpdater:
    """Runs a full leaderboard update for one merged pull request.

    Load, apply, save, render, then notify. State is authoritative once
    saved: a failed notification is logged and never undoes the update.

    Example:
        ```python
        updater = LeaderboardUpdater(
            config=EloConfig(),
            store=LeaderboardStore("leaderboard.json"),
            repository=RepositoryContext.from_slug("acme/widgets"),
            notifier=GitHubCommentNotifier(repo),
        )
        result = updater.update(event)
        print(result.delta, result.rank)
        ```
    """

    def __init__(
        self,
        config: EloConfig | None = None,
        store: LeaderboardStore | None = None,
        repository: RepositoryContext | None = None,
        notifier: BaseNotifier | None = None,
        markdown_path: str | Path | None = None,
    ):
        """Initialize the updater.

        Args:
            config: Configuration. Uses defaults if not provided.
            store: Leaderboard store (defaults to config.leaderboard.json_file).
            repository: Repository for links in history and comments.
            notifier: Where to announce updates; None disables announcing.
            markdown_path: Markdown output (defaults to config.leaderboard.markdown_file).
        """
        self.config = config or EloConfig()
        self.store = store or LeaderboardStore(self.config.leaderboard.json_file)
        self.repository = repository
        self.notifier = notifier
        self.markdown_path = Path(markdown_path or self.config.leaderboard.markdown_file)
        self.reporter = MarkdownReporter(self.config)

    def update(self, event: PullRequestEvent) -> UpdateResult:
        """Apply, persist and announce one merged pull request.

        Args:
            event: The merged pull request.

        Returns:
            UpdateResult for the contributor.

        Raises:
            StorePersistenceError: If the leaderboard or its Markdown report
                could not be written. Nothing is announced in that case.
        """
        leaderboard = self.store.load()
        result = process_merged_pull_request(leaderboard, event, self.config, self.repository)

        self.store.save(leaderboard)
        if self.config.features.generate_markdown:
            self.write_markdown(leaderboard)

        logger.info(f"Updated Elo for {result.author}: {result.new_rating:g} ({result.delta:+d})")

        if self.notifier is not None and self.config.features.post_pr_comment:
            self._announce(event, result)

        return result

    def render(self) -> Leaderboard:
        """Regenerate the Markdown report from the stored leaderboard."""
        leaderboard = self.store.load()
        self.write_markdown(leaderboard)
        return leaderboard

    def write_markdown(self, leaderboard: Leaderboard) -> None:
        """Write the Markdown leaderboard.

        Raises:
            StorePersistenceError: If the file cannot be written.
        """
        try:
            self.markdown_path.parent.mkdir(parents=True, exist_ok=True)
            self.markdown_path.write_text(self.reporter.format_leaderboard(leaderboard), encoding="utf-8")
        except OSError as e:
            raise StorePersistenceError(str(e), path=str(self.markdown_path)) from e
        logger.debug(f"Wrote Markdown leaderboard to {self.markdown_path}")

    def report_url(self) -> str:
        """Link to the Markdown leaderboard in the repository."""
        if self.repository is None:
            return self.markdown_path.name
        return self.repository.report_url(self.markdown_path.name)

    def _announce(self, event: PullRequestEvent, result: UpdateResult) -> None:
        body = self.reporter.format_update_comment(result, self.report_url())
        try:
            self.notifier.notify(event, body)
        except EloLeaderboardError as e:
            logger.error(f"Failed to post comment: {e}")
        except Exception as e:
            logger.error(f"Unexpected error posting comment: {e}")
