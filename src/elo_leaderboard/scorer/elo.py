"""Elo rating system for contributor rankings.

This module implements the Elo rating system commonly used in chess and other
competitive games. It's adapted for pull requests: each merge is a "game"
the contributor wins against a task whose difficulty plays the opponent's
rating.
"""

from __future__ import annotations

import math

from ..config import EloConfig

_DEFAULT_CONFIG = EloConfig()


def round_half_up(value: float) -> int:
    """Round to the nearest integer, with halves rounded up.

    Python's built-in round() uses banker's rounding; published deltas use
    the conventional half-up rule so they match previously stored history.
    """
    return math.floor(value + 0.5)


class ELO:
    """Elo rating system for contributor rankings.

    Every method is a pure function of its arguments and an explicit config.

    Example:
        ```python
        # Probability a 1300 contributor "beats" a 1200 difficulty task
        ELO.expected_score(1300, 1200)  # ~0.64

        # Volatility for someone with 12 merged PRs
        ELO.k_factor(12)  # 24

        delta, expected, k = ELO.rating_delta(
            rating=1200, difficulty=1300, merged_count=0,
            quality=1.2, time_bonus=1.1,
        )
        ```
    """

    ACTUAL_SCORE = 1.0

    @staticmethod
    def expected_score(rating_a: float, rating_b: float) -> float:
        """Calculate expected score for player A against player B.

        The expected score represents the probability of player A winning,
        based on the difference in ratings.

        Args:
            rating_a: Elo rating of player A (the contributor).
            rating_b: Elo rating of player B (the task difficulty).

        Returns:
            Expected score between 0 and 1.

        Example:
            ```python
            # Equal ratings = 50% chance
            ELO.expected_score(1200, 1200)  # 0.5

            # Higher rated player expected to win more
            ELO.expected_score(1400, 1200)  # ~0.76
            ```
        """
        return 1 / (1 + 10 ** ((rating_b - rating_a) / 400))

    @staticmethod
    def k_factor(merged_count: int, config: EloConfig = _DEFAULT_CONFIG) -> int:
        """Select the K-factor for a contributor's experience.

        A count exactly at a threshold belongs to the next tier.

        Args:
            merged_count: Merged pull requests before this one.
            config: Rating configuration.

        Returns:
            The K-factor: high for new contributors, low for veterans.
        """
        tiers = config.k_factor
        if merged_count < tiers.new_contributor_threshold:
            return tiers.new_contributor_k
        if merged_count < tiers.veteran_threshold:
            return tiers.regular_contributor_k
        return tiers.veteran_k

    @staticmethod
    def rating_delta(
        rating: float,
        difficulty: float,
        merged_count: int,
        quality: float = 1.0,
        time_bonus: float = 1.0,
        config: EloConfig = _DEFAULT_CONFIG,
    ) -> tuple[int, float, int]:
        """Calculate the rating change for one merged pull request.

        A merge always counts as a win (actual score 1), so the change is
        never negative; harder tasks relative to the current rating pay more.

        Args:
            rating: Contributor's rating before the merge.
            difficulty: Task difficulty, used as the opponent's rating.
            merged_count: Contributor's merged pull requests before this one.
            quality: Quality multiplier.
            time_bonus: Turnaround multiplier.
            config: Rating configuration.

        Returns:
            Tuple of (rounded_delta, expected_score, k_factor).
        """
        expected = ELO.expected_score(rating, difficulty)
        k = ELO.k_factor(merged_count, config)
        base_change = k * (ELO.ACTUAL_SCORE - expected)
        return round_half_up(base_change * quality * time_bonus), expected, k
