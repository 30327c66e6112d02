"""Scoring module for the Elo leaderboard.

This module provides the rating math: the Elo expected-score model and the
pull request metrics that adjust each update.

Components:
    - ELO: Expected score, K-factor tiers and the rounded rating delta
    - Scorer: Task difficulty, quality multiplier and time bonus

Example:
    ```python
    from elo_leaderboard.scorer import ELO, Scorer

    difficulty = Scorer.task_difficulty(event)
    delta, expected, k = ELO.rating_delta(1200, difficulty, merged_count=0)
    ```
"""

from .elo import ELO, round_half_up
from .metrics import Scorer

__all__ = [
    "ELO",
    "Scorer",
    "round_half_up",
]
