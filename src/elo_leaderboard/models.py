"""Core data models for the Elo leaderboard.

This module defines the primary data structures used throughout the package:
- PullRequestEvent: Immutable facts about one merged pull request
- HistoryEntry / ContributorRecord / Leaderboard: Persisted rating state
- RepositoryContext: Where the leaderboard lives, for building links
- UpdateResult: What one processed event did to a contributor

Persisted models carry JSON aliases (``elo``, ``prs``, ``recentPRs`` ...) so
the file format stays compatible with existing leaderboard.json files.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .exceptions import EventValidationError


def utcnow() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def label_name(label: Any) -> str:
    """Extract a label's name.

    Accepts plain strings, mappings with a ``name`` key (GitHub REST label
    objects) and objects exposing a ``name`` attribute. Anything else is an
    empty label and will not match any difficulty pattern.
    """
    if isinstance(label, str):
        return label
    if isinstance(label, Mapping):
        name = label.get("name")
    else:
        name = getattr(label, "name", None)
    return name if isinstance(name, str) else ""


class PullRequestEvent(BaseModel):
    """Immutable facts about one merged pull request.

    Attributes:
        author: Handle of the pull request author.
        number: Pull request number.
        title: Pull request title.
        labels: Label names (see label_name for accepted inputs).
        additions: Lines added.
        deletions: Lines deleted.
        changed_files: Number of files changed.
        review_comments: Number of review comments.
        approved_reviews: Number of approving reviews.
        changes_requested: Number of reviews requesting changes.
        linked_issues: Number of issues the pull request closes.
        commits: Number of commits.
        created_at: When the pull request was opened.
        merged_at: When the pull request was merged.
    """

    model_config = ConfigDict(frozen=True)

    author: str = Field(min_length=1)
    number: int = Field(ge=0)
    title: str = ""
    labels: tuple[str, ...] = ()
    additions: int = Field(default=0, ge=0)
    deletions: int = Field(default=0, ge=0)
    changed_files: int = Field(default=0, ge=0)
    review_comments: int = Field(default=0, ge=0)
    approved_reviews: int = Field(default=0, ge=0)
    changes_requested: int = Field(default=0, ge=0)
    linked_issues: int = Field(default=0, ge=0)
    commits: int = Field(default=0, ge=0)
    created_at: datetime
    merged_at: datetime

    @field_validator("labels", mode="before")
    @classmethod
    def _coerce_labels(cls, v: Any) -> tuple[str, ...]:
        if v is None:
            return ()
        if isinstance(v, (str, Mapping)):
            v = [v]
        if not isinstance(v, Iterable):
            raise ValueError(f"labels must be a list, got {type(v).__name__}")
        return tuple(label_name(label) for label in v)

    @field_validator("created_at", "merged_at")
    @classmethod
    def _assume_utc(cls, v: datetime) -> datetime:
        return _as_utc(v)

    @property
    def total_changes(self) -> int:
        """Lines added plus lines deleted."""
        return self.additions + self.deletions

    @classmethod
    def from_payload(cls, data: Mapping[str, Any]) -> PullRequestEvent:
        """Validate a flat event mapping.

        Args:
            data: Mapping with the attribute names of this model.

        Returns:
            PullRequestEvent instance.

        Raises:
            EventValidationError: If a field is missing or malformed. A
                missing or unparsable timestamp is rejected here rather than
                defaulted, since a wrong time bonus would corrupt history.
        """
        try:
            return cls.model_validate(dict(data))
        except ValidationError as e:
            first = e.errors()[0]
            field = ".".join(str(part) for part in first["loc"]) or None
            raise EventValidationError(first["msg"], field=field) from e

    @classmethod
    def from_github_pull_request(
        cls,
        pull_request: Mapping[str, Any],
        approved_reviews: int = 0,
        changes_requested: int = 0,
        linked_issues: int = 0,
    ) -> PullRequestEvent:
        """Build an event from a GitHub REST ``pull_request`` object.

        Review and linked-issue statistics are not part of the pull request
        object; the caller gathers them and passes them in.

        Raises:
            EventValidationError: If the pull request is not merged or is
                missing required fields.
        """
        if not pull_request.get("merged_at"):
            raise EventValidationError("pull request is not merged", field="merged_at")

        user = pull_request.get("user") or {}
        return cls.from_payload(
            {
                "author": user.get("login", ""),
                "number": pull_request.get("number"),
                "title": pull_request.get("title") or "",
                "labels": pull_request.get("labels") or [],
                "additions": pull_request.get("additions", 0),
                "deletions": pull_request.get("deletions", 0),
                "changed_files": pull_request.get("changed_files", 0),
                "review_comments": pull_request.get("review_comments", 0),
                "commits": pull_request.get("commits", 0),
                "approved_reviews": approved_reviews,
                "changes_requested": changes_requested,
                "linked_issues": linked_issues,
                "created_at": pull_request.get("created_at"),
                "merged_at": pull_request.get("merged_at"),
            }
        )


class HistoryEntry(BaseModel):
    """One processed pull request in a contributor's recent history."""

    model_config = ConfigDict(populate_by_name=True)

    number: int
    title: str = ""
    delta: int = Field(default=0, alias="eloChange")
    difficulty: int = 0
    merged_at: datetime = Field(alias="mergedAt")
    url: str = ""

    @field_validator("merged_at")
    @classmethod
    def _assume_utc(cls, v: datetime) -> datetime:
        return _as_utc(v)


class ContributorRecord(BaseModel):
    """Rating state for one contributor.

    Attributes:
        rating: Current Elo rating.
        merged_count: Merged pull requests processed for this contributor.
        total_difficulty: Sum of the difficulty of those pull requests.
        recent_history: Most-recent-first history, bounded by config.
    """

    model_config = ConfigDict(populate_by_name=True)

    rating: float = Field(alias="elo")
    merged_count: int = Field(default=0, ge=0, alias="prs")
    total_difficulty: int = Field(default=0, alias="totalDifficulty")
    recent_history: list[HistoryEntry] = Field(default_factory=list, alias="recentPRs")

    @field_validator("recent_history", mode="before")
    @classmethod
    def _none_is_empty(cls, v: Any) -> Any:
        return [] if v is None else v

    @property
    def average_difficulty(self) -> float | None:
        """Mean difficulty of merged pull requests, or None before the first."""
        if self.merged_count <= 0:
            return None
        return self.total_difficulty / self.merged_count

    def record(self, entry: HistoryEntry, max_length: int) -> None:
        """Prepend a history entry, dropping the oldest beyond max_length."""
        self.recent_history.insert(0, entry)
        del self.recent_history[max_length:]


class Leaderboard(BaseModel):
    """All contributors' rating state.

    ``contributors`` keeps first-appearance order, which is also the
    tie-break order when ranking equal ratings for display.
    """

    model_config = ConfigDict(populate_by_name=True)

    contributors: dict[str, ContributorRecord] = Field(default_factory=dict)
    total_merged_count: int = Field(default=0, ge=0, alias="totalPRs")
    last_updated: datetime = Field(default_factory=utcnow, alias="lastUpdated")

    @field_validator("last_updated")
    @classmethod
    def _assume_utc(cls, v: datetime) -> datetime:
        return _as_utc(v)

    def get_or_create(self, author: str, starting_rating: float) -> ContributorRecord:
        """Return the author's record, creating it with starting_rating if new."""
        if author not in self.contributors:
            self.contributors[author] = ContributorRecord(rating=starting_rating)
        return self.contributors[author]

    def rank_of(self, author: str) -> int:
        """1 + number of other contributors rated strictly higher.

        Contributors with equal ratings share a rank.

        Raises:
            KeyError: If the author has no record.
        """
        rating = self.contributors[author].rating
        return 1 + sum(
            1
            for name, record in self.contributors.items()
            if name != author and record.rating > rating
        )

    def ranked(self) -> list[tuple[str, ContributorRecord]]:
        """Contributors sorted by rating descending, ties in insertion order."""
        return sorted(self.contributors.items(), key=lambda item: item[1].rating, reverse=True)

    def to_json_dict(self) -> dict[str, Any]:
        """Serialize using the persisted field names."""
        return self.model_dump(mode="json", by_alias=True)


class RepositoryContext(BaseModel):
    """The repository a leaderboard belongs to.

    Attributes:
        owner: Repository owner (user or organization).
        name: Repository name.
        html_url: Web URL of the repository.
        default_branch: Branch the Markdown report is committed to.
    """

    model_config = ConfigDict(frozen=True)

    owner: str = Field(min_length=1)
    name: str = Field(min_length=1)
    html_url: str | None = None
    default_branch: str = "main"

    @classmethod
    def from_slug(cls, slug: str, **kwargs: Any) -> RepositoryContext:
        """Create from an ``owner/name`` string."""
        owner, sep, name = slug.partition("/")
        if not sep or not owner or not name or "/" in name:
            raise ValueError(f"Invalid repository '{slug}'. Expected format: owner/name")
        return cls(owner=owner, name=name, **kwargs)

    @property
    def url(self) -> str:
        return self.html_url or f"https://github.com/{self.owner}/{self.name}"

    def pull_request_url(self, number: int) -> str:
        return f"{self.url}/pull/{number}"

    def report_url(self, filename: str) -> str:
        return f"{self.url}/blob/{self.default_branch}/{filename}"


class UpdateResult(BaseModel):
    """The outcome of processing one merged pull request.

    Attributes:
        author: Contributor the update applied to.
        number: Pull request number.
        delta: Rounded rating change applied.
        new_rating: Rating after the update.
        rank: Leaderboard rank after the update (ties share a rank).
        difficulty: Task difficulty score.
        expected: Modeled probability of success against the task.
        k_factor: Volatility constant used.
        quality: Quality multiplier.
        time_bonus: Turnaround multiplier.
    """

    author: str
    number: int
    delta: int
    new_rating: float
    rank: int
    difficulty: int
    expected: float
    k_factor: int
    quality: float
    time_bonus: float
