"""Markdown reporter for the Elo leaderboard.

Provides human-readable formatting for the full leaderboard and for the
per-update comment posted on a merged pull request.
"""

from __future__ import annotations

from datetime import timezone

from ..config import EloConfig
from ..models import HistoryEntry, Leaderboard, UpdateResult
from ..scorer import round_half_up


class MarkdownReporter:
    """Formats leaderboard state as Markdown.

    Example:
        ```python
        reporter = MarkdownReporter(config)
        Path("leaderboard.md").write_text(reporter.format_leaderboard(leaderboard))
        ```
    """

    def __init__(self, config: EloConfig | None = None, profile_url: str = "https://github.com"):
        """Initialize the reporter.

        Args:
            config: Configuration supplying rank titles and display counts.
            profile_url: Base URL for contributor profile links.
        """
        self.config = config or EloConfig()
        self.profile_url = profile_url.rstrip("/")

    def rank_title(self, position: int) -> str:
        """Title for a 1-indexed leaderboard position."""
        titles = self.config.rank_titles
        return titles[min(position - 1, len(titles) - 1)]

    @staticmethod
    def recent_activity(leaderboard: Leaderboard, limit: int) -> list[tuple[str, HistoryEntry]]:
        """Most recent history entries across all contributors.

        Args:
            leaderboard: The leaderboard to read.
            limit: Maximum number of entries to return.

        Returns:
            (contributor, entry) pairs sorted by merge time, newest first.
        """
        entries = [
            (name, entry)
            for name, record in leaderboard.contributors.items()
            for entry in record.recent_history
        ]
        entries.sort(key=lambda item: item[1].merged_at, reverse=True)
        return entries[:limit]

    def format_leaderboard(self, leaderboard: Leaderboard) -> str:
        """Format a Leaderboard as a Markdown document.

        Rows are sorted by rating descending; equal ratings keep the order in
        which contributors first appeared.

        Args:
            leaderboard: The leaderboard to format.

        Returns:
            Markdown text.
        """
        updated = leaderboard.last_updated.astimezone(timezone.utc)
        lines = [
            "# \U0001f3c6 Contribution Leaderboard",
            "",
            f"*Last updated: {updated:%Y-%m-%d %H:%M:%S} UTC*",
            "",
            f"**Total PRs tracked:** {leaderboard.total_merged_count}",
            "",
            "| Rank | Contributor | Elo Rating | PRs | Avg Difficulty | Title |",
            "|------|-------------|------------|-----|----------------|-------|",
        ]

        for position, (name, record) in enumerate(leaderboard.ranked(), start=1):
            average = record.average_difficulty
            avg_text = "-" if average is None else str(round_half_up(average))
            lines.append(
                f"| {position} | [@{name}]({self.profile_url}/{name}) | "
                f"{round_half_up(record.rating)} | {record.merged_count} | {avg_text} | "
                f"{self.rank_title(position)} |"
            )

        lines += [
            "",
            "## \U0001f4ca Stats Explained",
            "",
            f"- **Elo Rating**: Your skill rating (starts at {self.config.starting_rating:g})",
            "- **PRs**: Number of merged pull requests",
            "- **Avg Difficulty**: Average complexity of tasks you tackle",
            "",
            "## \U0001f3af How It Works",
            "",
            "- Ratings increase when you complete challenging tasks",
            "- Quality matters: Clean code with good reviews earns bonus points",
            "- Speed counts: Timely PRs get a small boost",
            "- Collaboration is rewarded: Linked issues and review engagement help",
            "",
            "## \U0001f3c5 Recent Activity",
            "",
        ]

        recent = self.recent_activity(leaderboard, self.config.leaderboard.recent_activity_count)
        for name, entry in recent:
            lines.append(
                f"- **{name}** completed [#{entry.number}]({entry.url}) "
                f"({entry.delta:+d} Elo) - {entry.title}"
            )

        return "\n".join(lines) + "\n"

    @staticmethod
    def format_update_comment(result: UpdateResult, report_url: str) -> str:
        """Format the comment announcing one rating update.

        Args:
            result: The applied update.
            report_url: Link to the full Markdown leaderboard.

        Returns:
            Markdown comment body.
        """
        lines = [
            "## \U0001f3ae Elo Update",
            "",
            f"**{result.author}** earned **{result.delta:+d}** Elo points!",
            "",
            f"- Current Rating: **{round_half_up(result.new_rating)}** (Rank #{result.rank})",
            f"- Task Difficulty: {result.difficulty}",
            f"- Quality Multiplier: {result.quality:.2f}x",
            f"- Time Bonus: {result.time_bonus:.2f}x",
            "",
            f"[View Full Leaderboard]({report_url})",
        ]
        return "\n".join(lines)

    def format_table(self, leaderboard: Leaderboard) -> str:
        """Format the ranking as a plain-text table for terminals."""
        lines = [
            f"  {'Rank':<6} {'Contributor':<24} {'Elo':<8} {'PRs':<6} {'Avg Diff':<10} Title",
            f"  {'-' * 70}",
        ]
        for position, (name, record) in enumerate(leaderboard.ranked(), start=1):
            average = record.average_difficulty
            avg_text = "-" if average is None else str(round_half_up(average))
            lines.append(
                f"  {position:<6} {name:<24} {round_half_up(record.rating):<8} "
                f"{record.merged_count:<6} {avg_text:<10} {self.rank_title(position)}"
            )
        return "\n".join(lines)


def print_leaderboard(leaderboard: Leaderboard, config: EloConfig | None = None) -> None:
    """Convenience function to print the ranking as a text table.

    Args:
        leaderboard: The leaderboard to print.
        config: Configuration supplying rank titles.
    """
    print(MarkdownReporter(config).format_table(leaderboard))
