"""Configuration for the Elo leaderboard.

This module provides the EloConfig class, an immutable bundle of every tunable
used by the rating math, the store, and the reporter. A config is passed
explicitly into each call, so several configurations (per test, per
repository) can coexist in one process.
"""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from .exceptions import ConfigError

DEFAULT_TASK_DIFFICULTY: dict[str, int] = {
    "bug": 1000,
    "enhancement": 1200,
    "feature": 1300,
    "refactor": 1300,
    "documentation": 1100,
    "critical": 1500,
    "architecture": 1500,
    "technical-debt": 1250,
    "hotfix": 1400,
    "test": 1050,
    "ci-cd": 1200,
    "security": 1450,
    "performance": 1350,
    "ui-ux": 1250,
}

DEFAULT_RANK_TITLES: tuple[str, ...] = (
    "\U0001f451 Grand Master",
    "⭐ Master",
    "\U0001f48e Diamond",
    "\U0001f947 Gold",
    "\U0001f948 Silver",
    "\U0001f949 Bronze",
    "\U0001f4c8 Rising Star",
    "\U0001f331 Contributor",
)


class _Section(BaseModel):
    """Base for config sections: immutable, unknown keys rejected."""

    model_config = ConfigDict(frozen=True, extra="forbid")


class KFactorConfig(_Section):
    """K-factor tiers, selected by a contributor's prior merged PR count.

    Attributes:
        new_contributor_threshold: Counts below this use new_contributor_k.
        veteran_threshold: Counts below this (and at or above the first
            threshold) use regular_contributor_k; the rest use veteran_k.
    """

    new_contributor_threshold: int = Field(default=10, ge=0)
    veteran_threshold: int = Field(default=50, ge=0)
    new_contributor_k: int = Field(default=32, ge=0)
    regular_contributor_k: int = Field(default=24, ge=0)
    veteran_k: int = Field(default=16, ge=0)

    @model_validator(mode="after")
    def _check_thresholds(self) -> KFactorConfig:
        if self.veteran_threshold <= self.new_contributor_threshold:
            raise ValueError("veteran_threshold must be greater than new_contributor_threshold")
        return self


class CodeChangeConfig(_Section):
    """Difficulty bonuses for change size (lines) and spread (files)."""

    large_change_threshold: int = 1000
    large_change_bonus: int = 100
    medium_change_threshold: int = 500
    medium_change_bonus: int = 50
    many_files_threshold: int = 20
    many_files_bonus: int = 50
    moderate_files_threshold: int = 10
    moderate_files_bonus: int = 25


class ReviewComplexityConfig(_Section):
    """Difficulty bonus for heavily discussed pull requests."""

    high_comment_threshold: int = 10
    high_comment_bonus: int = 30


class QualityConfig(_Section):
    """Quality multiplier bonuses, penalties and clamp bounds."""

    clean_approval_bonus: float = 0.15
    multi_approval_bonus: float = 0.10
    linked_issue_bonus: float = 0.05
    clean_commits_bonus: float = 0.05
    clean_commits_threshold: int = 3
    good_review_ratio_bonus: float = 0.05
    review_ratio_min: float = 0.5
    review_ratio_max: float = 3.0

    changes_requested_penalty: float = 0.10
    many_commits_penalty: float = 0.05
    many_commits_threshold: int = 10

    min_multiplier: float = 0.5
    max_multiplier: float = 1.5

    @model_validator(mode="after")
    def _check_bounds(self) -> QualityConfig:
        if self.min_multiplier > self.max_multiplier:
            raise ValueError("min_multiplier must not exceed max_multiplier")
        if self.clean_commits_threshold > self.many_commits_threshold:
            raise ValueError("clean_commits_threshold must not exceed many_commits_threshold")
        return self


class TimeBonusConfig(_Section):
    """Turnaround multipliers. Thresholds are hours from open to merge."""

    very_fast_threshold: float = 2
    very_fast_multiplier: float = 0.9
    fast_threshold: float = 24
    fast_multiplier: float = 1.1
    moderate_threshold: float = 72
    moderate_multiplier: float = 1.05
    slow_threshold: float = 168
    slow_multiplier: float = 0.95
    neutral_multiplier: float = 1.0

    @model_validator(mode="after")
    def _check_order(self) -> TimeBonusConfig:
        thresholds = [
            self.very_fast_threshold,
            self.fast_threshold,
            self.moderate_threshold,
            self.slow_threshold,
        ]
        if thresholds != sorted(thresholds):
            raise ValueError("time thresholds must be in ascending order")
        return self


class LeaderboardSettings(_Section):
    """Storage and display settings."""

    max_recent_prs: int = Field(default=10, ge=1)
    recent_activity_count: int = Field(default=5, ge=0)
    json_file: str = "leaderboard.json"
    markdown_file: str = "leaderboard.md"


class FeatureFlags(_Section):
    """Switches for optional side effects."""

    post_pr_comment: bool = True
    generate_markdown: bool = True
    track_recent_prs: bool = True
    verbose_logging: bool = False


class EloConfig(_Section):
    """Configuration for the Elo leaderboard.

    Attributes:
        starting_rating: Rating given to a contributor on their first merge.
        default_difficulty: Base difficulty when no label matches.
        task_difficulty: Ordered (label pattern, base difficulty) pairs,
            given as a mapping or as pairs. A label matches a pattern when
            it equals or contains it (case-insensitive); the highest
            matching score wins.
        k_factor: Volatility tiers.
        code_changes: Size and file-count bonuses.
        review_complexity: Review comment bonus.
        quality: Quality multiplier settings.
        time_bonus: Turnaround multiplier settings.
        leaderboard: Storage and display settings.
        rank_titles: Titles by leaderboard position; positions past the end
            reuse the last title.
        features: Feature flags.
    """

    starting_rating: float = 1200
    default_difficulty: int = 1200
    task_difficulty: tuple[tuple[str, int], ...] = tuple(DEFAULT_TASK_DIFFICULTY.items())

    k_factor: KFactorConfig = Field(default_factory=KFactorConfig)
    code_changes: CodeChangeConfig = Field(default_factory=CodeChangeConfig)
    review_complexity: ReviewComplexityConfig = Field(default_factory=ReviewComplexityConfig)
    quality: QualityConfig = Field(default_factory=QualityConfig)
    time_bonus: TimeBonusConfig = Field(default_factory=TimeBonusConfig)
    leaderboard: LeaderboardSettings = Field(default_factory=LeaderboardSettings)

    rank_titles: tuple[str, ...] = Field(default=DEFAULT_RANK_TITLES, min_length=1)
    features: FeatureFlags = Field(default_factory=FeatureFlags)

    @field_validator("task_difficulty", mode="before")
    @classmethod
    def _pairs_from_mapping(cls, v: Any) -> Any:
        if isinstance(v, Mapping):
            return tuple(v.items())
        return v

    @field_validator("task_difficulty")
    @classmethod
    def _lowercase_patterns(cls, v: tuple[tuple[str, int], ...]) -> tuple[tuple[str, int], ...]:
        # Patterns are compared against lowercased labels; a later duplicate wins.
        return tuple({key.lower(): score for key, score in v}.items())

    def difficulty_patterns(self) -> list[tuple[str, int]]:
        """Return the label mapping as an ordered list of (pattern, score) pairs."""
        return list(self.task_difficulty)

    def difficulty_of(self, pattern: str) -> int | None:
        """Base difficulty configured for one pattern, or None."""
        return dict(self.task_difficulty).get(pattern.lower())

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> EloConfig:
        """Build a config from a plain mapping.

        Raises:
            ConfigError: If a value fails validation.
        """
        try:
            return cls(**data)
        except ValidationError as e:
            first = e.errors()[0]
            field = ".".join(str(part) for part in first["loc"]) or None
            raise ConfigError(first["msg"], field=field) from e

    @classmethod
    def from_yaml(cls, path: str | Path) -> EloConfig:
        """Load configuration from a YAML file.

        Args:
            path: Path to the YAML configuration file.

        Returns:
            EloConfig instance.

        Raises:
            FileNotFoundError: If the config file doesn't exist.
            ConfigError: If the YAML is invalid.
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")

        with open(path) as f:
            try:
                data = yaml.safe_load(f)
            except yaml.YAMLError as e:
                raise ConfigError(f"Could not parse YAML: {e}") from e

        if data is None:
            return cls()
        if not isinstance(data, dict):
            raise ConfigError(f"Invalid config file: expected dict, got {type(data).__name__}")

        return cls.from_dict(data)
