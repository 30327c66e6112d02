"""Pull request metrics feeding the Elo update.

This module provides the Scorer class which turns a PullRequestEvent into the
three adjustment factors of a rating update: task difficulty (the opponent
rating), a quality multiplier and a turnaround time multiplier.
"""

from __future__ import annotations

from ..config import EloConfig
from ..models import PullRequestEvent

_DEFAULT_CONFIG = EloConfig()

SECONDS_PER_HOUR = 3600


class Scorer:
    """Calculates rating factors from pull request metadata.

    Example:
        ```python
        difficulty = Scorer.task_difficulty(event)
        quality = Scorer.quality_multiplier(event)
        speed = Scorer.time_bonus(event)
        ```
    """

    @staticmethod
    def base_difficulty(labels: tuple[str, ...] | list[str], config: EloConfig = _DEFAULT_CONFIG) -> int:
        """Highest base difficulty among the labels.

        A label matches a pattern when, lowercased, it equals or contains the
        pattern. Only the maximum matching score is kept, so pattern order
        does not change the result.

        Args:
            labels: Label names.
            config: Rating configuration.

        Returns:
            The highest matching score, or config.default_difficulty when no
            label matches.
        """
        best: int | None = None
        for label in labels:
            label = label.lower()
            if not label:
                continue
            for pattern, score in config.difficulty_patterns():
                if pattern in label and (best is None or score > best):
                    best = score
        return config.default_difficulty if best is None else best

    @staticmethod
    def task_difficulty(event: PullRequestEvent, config: EloConfig = _DEFAULT_CONFIG) -> int:
        """Calculate the difficulty score of a pull request.

        Starts from the label base difficulty and adds independent bonuses
        for change size, file count and review discussion. Within the size
        and file categories only the highest tier applies.

        Args:
            event: The merged pull request.
            config: Rating configuration.

        Returns:
            Difficulty score, used as the opponent rating.

        Example:
            ```python
            # bug label, 80 lines, 2 files, 3 comments -> 1000 (no bonuses)
            Scorer.task_difficulty(small_bug_fix)
            ```
        """
        difficulty = Scorer.base_difficulty(event.labels, config)

        sizes = config.code_changes
        if event.total_changes > sizes.large_change_threshold:
            difficulty += sizes.large_change_bonus
        elif event.total_changes > sizes.medium_change_threshold:
            difficulty += sizes.medium_change_bonus

        if event.changed_files > sizes.many_files_threshold:
            difficulty += sizes.many_files_bonus
        elif event.changed_files > sizes.moderate_files_threshold:
            difficulty += sizes.moderate_files_bonus

        review = config.review_complexity
        if event.review_comments > review.high_comment_threshold:
            difficulty += review.high_comment_bonus

        return difficulty

    @staticmethod
    def quality_multiplier(event: PullRequestEvent, config: EloConfig = _DEFAULT_CONFIG) -> float:
        """Calculate the quality multiplier of a pull request.

        Bonuses and penalties accumulate independently from 1.0; the total is
        then clamped to [min_multiplier, max_multiplier].

        Args:
            event: The merged pull request.
            config: Rating configuration.

        Returns:
            Multiplier applied to the base rating change.
        """
        q = config.quality
        multiplier = 1.0

        # Approved without any change requests
        if event.approved_reviews > 0 and event.changes_requested == 0:
            multiplier += q.clean_approval_bonus

        if event.approved_reviews >= 2:
            multiplier += q.multi_approval_bonus

        multiplier -= q.changes_requested_penalty * event.changes_requested
        multiplier += q.linked_issue_bonus * event.linked_issues

        if event.commits <= q.clean_commits_threshold:
            multiplier += q.clean_commits_bonus
        elif event.commits > q.many_commits_threshold:
            multiplier -= q.many_commits_penalty

        # Review comments per hundred added lines
        if event.review_comments > 0 and event.additions > 0:
            ratio = event.review_comments / (event.additions / 100)
            if q.review_ratio_min < ratio < q.review_ratio_max:
                multiplier += q.good_review_ratio_bonus

        return max(q.min_multiplier, min(q.max_multiplier, multiplier))

    @staticmethod
    def hours_to_merge(event: PullRequestEvent) -> float:
        """Hours between opening and merging the pull request."""
        return (event.merged_at - event.created_at).total_seconds() / SECONDS_PER_HOUR

    @staticmethod
    def time_bonus(event: PullRequestEvent, config: EloConfig = _DEFAULT_CONFIG) -> float:
        """Calculate the turnaround multiplier of a pull request.

        Very quick merges are slightly penalized (possibly rushed), same-day
        and within-three-days merges are rewarded, merges taking over a week
        are slightly penalized, and anything in between is neutral.

        Args:
            event: The merged pull request.
            config: Rating configuration.

        Returns:
            Multiplier applied to the base rating change.
        """
        t = config.time_bonus
        hours = Scorer.hours_to_merge(event)

        if hours < t.very_fast_threshold:
            return t.very_fast_multiplier
        if hours < t.fast_threshold:
            return t.fast_multiplier
        if hours < t.moderate_threshold:
            return t.moderate_multiplier
        if hours > t.slow_threshold:
            return t.slow_multiplier
        return t.neutral_multiplier
