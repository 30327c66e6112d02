"""Tests for update orchestration.

Tests the pure leaderboard update and the LeaderboardUpdater facade that
persists, renders and announces it.
"""

import json
import logging
from datetime import datetime, timedelta, timezone

import pytest

from elo_leaderboard import (
    BaseNotifier,
    ContributorRecord,
    EloConfig,
    Leaderboard,
    LeaderboardStore,
    LeaderboardUpdater,
    PullRequestEvent,
    RecordingNotifier,
    RepositoryContext,
    StorePersistenceError,
    process_merged_pull_request,
)

CREATED = datetime(2024, 3, 1, 9, 0, tzinfo=timezone.utc)


def make_event(number: int = 1, author: str = "alice", **overrides) -> PullRequestEvent:
    """A small approved bug fix merged after 12 hours."""
    data = {
        "author": author,
        "number": number,
        "title": f"Fix #{number}",
        "labels": ["bug"],
        "additions": 50,
        "deletions": 30,
        "changed_files": 2,
        "review_comments": 3,
        "approved_reviews": 1,
        "commits": 2,
        "created_at": CREATED + timedelta(days=number),
        "merged_at": CREATED + timedelta(days=number, hours=12),
    }
    data.update(overrides)
    return PullRequestEvent(**data)


@pytest.fixture
def repo() -> RepositoryContext:
    return RepositoryContext.from_slug("acme/widgets")


@pytest.fixture
def no_markdown_config() -> EloConfig:
    return EloConfig.from_dict({"features": {"generate_markdown": False}})


# ============================================================================
# process_merged_pull_request
# ============================================================================


class TestProcessMergedPullRequest:
    """Tests for process_merged_pull_request()."""

    def test_first_pull_request(self, repo: RepositoryContext) -> None:
        """Test a new contributor's first merge."""
        leaderboard = Leaderboard()
        result = process_merged_pull_request(leaderboard, make_event(), repository=repo)

        # difficulty 1000, quality 1.2, time 1.1, k 32:
        # 32 * (1 - 0.7597) * 1.2 * 1.1 = 10.15
        assert result.difficulty == 1000
        assert result.quality == pytest.approx(1.2)
        assert result.time_bonus == 1.1
        assert result.k_factor == 32
        assert result.expected == pytest.approx(0.7597, abs=1e-4)
        assert result.delta == 10
        assert result.new_rating == 1210
        assert result.rank == 1

        record = leaderboard.contributors["alice"]
        assert record.rating == 1210
        assert record.merged_count == 1
        assert record.total_difficulty == 1000
        assert leaderboard.total_merged_count == 1

        entry = record.recent_history[0]
        assert entry.number == 1
        assert entry.title == "Fix #1"
        assert entry.delta == 10
        assert entry.difficulty == 1000
        assert entry.merged_at == CREATED + timedelta(days=1, hours=12)
        assert entry.url == "https://github.com/acme/widgets/pull/1"

    def test_repeated_events_accumulate_rounded_deltas(self) -> None:
        """Test rating equals the start plus the sum of applied deltas."""
        leaderboard = Leaderboard()
        deltas = [
            process_merged_pull_request(leaderboard, make_event(n, labels=["feature"], changed_files=n)).delta
            for n in range(1, 16)
        ]
        record = leaderboard.contributors["alice"]
        assert record.merged_count == 15
        assert leaderboard.total_merged_count == 15
        assert record.rating == 1200 + sum(deltas)

    def test_updates_are_reproducible(self) -> None:
        """Test the same events give the same leaderboard."""
        events = [make_event(n, author=name) for n, name in enumerate(["a", "b", "a", "c", "a"], start=1)]
        first, second = Leaderboard(), Leaderboard()
        for event in events:
            process_merged_pull_request(first, event)
            process_merged_pull_request(second, event)
        assert first.contributors == second.contributors

    def test_history_is_bounded(self) -> None:
        """Test history never exceeds the configured length."""
        config = EloConfig.from_dict({"leaderboard": {"max_recent_prs": 4}})
        leaderboard = Leaderboard()
        for n in range(1, 10):
            process_merged_pull_request(leaderboard, make_event(n), config)
            assert len(leaderboard.contributors["alice"].recent_history) <= 4
        assert [e.number for e in leaderboard.contributors["alice"].recent_history] == [9, 8, 7, 6]

    def test_default_history_length(self) -> None:
        leaderboard = Leaderboard()
        for n in range(1, 13):
            process_merged_pull_request(leaderboard, make_event(n))
        assert len(leaderboard.contributors["alice"].recent_history) == 10

    def test_history_tracking_disabled(self) -> None:
        """Test no history is kept when the feature is off."""
        config = EloConfig.from_dict({"features": {"track_recent_prs": False}})
        leaderboard = Leaderboard()
        process_merged_pull_request(leaderboard, make_event(), config)
        assert leaderboard.contributors["alice"].recent_history == []
        assert leaderboard.contributors["alice"].merged_count == 1

    def test_history_not_shared_between_contributors(self) -> None:
        """Test each contributor's history only holds their own merges."""
        leaderboard = Leaderboard()
        process_merged_pull_request(leaderboard, make_event(1, author="alice"))
        process_merged_pull_request(leaderboard, make_event(2, author="bob"))
        process_merged_pull_request(leaderboard, make_event(3, author="alice"))
        assert [e.number for e in leaderboard.contributors["alice"].recent_history] == [3, 1]
        assert [e.number for e in leaderboard.contributors["bob"].recent_history] == [2]

    def test_k_factor_uses_prior_count(self) -> None:
        """Test the tier is chosen before the count is incremented."""
        leaderboard = Leaderboard(contributors={"alice": ContributorRecord(rating=1200, merged_count=9)})
        result = process_merged_pull_request(leaderboard, make_event())
        assert result.k_factor == 32
        result = process_merged_pull_request(leaderboard, make_event(2))
        assert result.k_factor == 24

    def test_rank_against_others(self) -> None:
        """Test rank counts contributors strictly above."""
        leaderboard = Leaderboard(
            contributors={
                "bob": ContributorRecord(rating=1400),
                "carol": ContributorRecord(rating=1210),
                "dave": ContributorRecord(rating=1000),
            }
        )
        result = process_merged_pull_request(leaderboard, make_event())
        assert result.new_rating == 1210
        # bob is above, carol ties and shares the rank
        assert result.rank == 2

    def test_starting_rating_from_config(self) -> None:
        config = EloConfig(starting_rating=1000)
        leaderboard = Leaderboard()
        result = process_merged_pull_request(leaderboard, make_event(), config)
        assert result.new_rating == 1000 + result.delta

    def test_url_empty_without_repository(self) -> None:
        leaderboard = Leaderboard()
        process_merged_pull_request(leaderboard, make_event())
        assert leaderboard.contributors["alice"].recent_history[0].url == ""


# ============================================================================
# LeaderboardUpdater
# ============================================================================


class TestLeaderboardUpdater:
    """Tests for the LeaderboardUpdater class."""

    def test_update_persists_and_announces(self, tmp_path, repo: RepositoryContext) -> None:
        """Test a full update writes JSON, Markdown and a comment."""
        notifier = RecordingNotifier()
        updater = LeaderboardUpdater(
            store=LeaderboardStore(tmp_path / "leaderboard.json"),
            repository=repo,
            notifier=notifier,
            markdown_path=tmp_path / "leaderboard.md",
        )
        result = updater.update(make_event())

        data = json.loads((tmp_path / "leaderboard.json").read_text())
        assert data["totalPRs"] == 1
        assert data["contributors"]["alice"]["elo"] == result.new_rating

        markdown = (tmp_path / "leaderboard.md").read_text()
        assert "[@alice](https://github.com/alice)" in markdown

        assert len(notifier.messages) == 1
        number, body = notifier.messages[0]
        assert number == 1
        assert f"**alice** earned **+{result.delta}** Elo points!" in body
        assert "https://github.com/acme/widgets/blob/main/leaderboard.md" in body

    def test_update_loads_previous_state(self, tmp_path, no_markdown_config: EloConfig) -> None:
        """Test successive invocations build on the stored leaderboard."""
        path = tmp_path / "leaderboard.json"
        for n in range(1, 4):
            LeaderboardUpdater(config=no_markdown_config, store=LeaderboardStore(path)).update(make_event(n))
        leaderboard = LeaderboardStore(path).load()
        assert leaderboard.total_merged_count == 3
        assert leaderboard.contributors["alice"].merged_count == 3

    def test_notification_failure_is_not_fatal(self, tmp_path, caplog, no_markdown_config: EloConfig) -> None:
        """Test a failed comment leaves the saved update in place."""
        path = tmp_path / "leaderboard.json"
        updater = LeaderboardUpdater(
            config=no_markdown_config,
            store=LeaderboardStore(path),
            notifier=RecordingNotifier(fail=True),
        )
        with caplog.at_level(logging.ERROR, logger="elo_leaderboard.updater"):
            result = updater.update(make_event())

        assert "Failed to post comment" in caplog.text
        assert LeaderboardStore(path).load().contributors["alice"].rating == result.new_rating

    def test_unexpected_notifier_error_is_not_fatal(self, tmp_path, caplog, no_markdown_config: EloConfig) -> None:
        """Test errors outside the package hierarchy are also contained."""

        class BrokenNotifier(BaseNotifier):
            @property
            def name(self) -> str:
                return "broken"

            def notify(self, event, body) -> None:
                raise RuntimeError("socket closed")

        updater = LeaderboardUpdater(
            config=no_markdown_config,
            store=LeaderboardStore(tmp_path / "leaderboard.json"),
            notifier=BrokenNotifier(),
        )
        with caplog.at_level(logging.ERROR, logger="elo_leaderboard.updater"):
            result = updater.update(make_event())
        assert result.delta == 10
        assert "socket closed" in caplog.text

    def test_persistence_failure_is_fatal(self, tmp_path) -> None:
        """Test a failed save raises and nothing is announced."""
        blocker = tmp_path / "blocker"
        blocker.write_text("")
        notifier = RecordingNotifier()
        updater = LeaderboardUpdater(
            store=LeaderboardStore(blocker / "leaderboard.json"),
            notifier=notifier,
            markdown_path=tmp_path / "leaderboard.md",
        )
        with pytest.raises(StorePersistenceError):
            updater.update(make_event())
        assert notifier.messages == []
        assert not (tmp_path / "leaderboard.md").exists()

    def test_markdown_failure_is_fatal(self, tmp_path) -> None:
        """Test a failed report write raises."""
        blocker = tmp_path / "blocker"
        blocker.write_text("")
        updater = LeaderboardUpdater(
            store=LeaderboardStore(tmp_path / "leaderboard.json"),
            markdown_path=blocker / "leaderboard.md",
        )
        with pytest.raises(StorePersistenceError):
            updater.update(make_event())

    def test_markdown_disabled(self, tmp_path, no_markdown_config: EloConfig) -> None:
        updater = LeaderboardUpdater(
            config=no_markdown_config,
            store=LeaderboardStore(tmp_path / "leaderboard.json"),
            markdown_path=tmp_path / "leaderboard.md",
        )
        updater.update(make_event())
        assert not (tmp_path / "leaderboard.md").exists()

    def test_comment_disabled(self, tmp_path) -> None:
        config = EloConfig.from_dict({"features": {"post_pr_comment": False, "generate_markdown": False}})
        notifier = RecordingNotifier()
        updater = LeaderboardUpdater(
            config=config,
            store=LeaderboardStore(tmp_path / "leaderboard.json"),
            notifier=notifier,
        )
        updater.update(make_event())
        assert notifier.messages == []

    def test_render(self, tmp_path) -> None:
        """Test regenerating the report from stored state."""
        store = LeaderboardStore(tmp_path / "leaderboard.json")
        leaderboard = Leaderboard()
        process_merged_pull_request(leaderboard, make_event(author="zoe"))
        store.save(leaderboard)

        updater = LeaderboardUpdater(store=store, markdown_path=tmp_path / "out" / "board.md")
        updater.render()
        assert "[@zoe]" in (tmp_path / "out" / "board.md").read_text()

    def test_report_url_without_repository(self, tmp_path) -> None:
        updater = LeaderboardUpdater(markdown_path=tmp_path / "board.md")
        assert updater.report_url() == "board.md"

    def test_defaults_from_config(self) -> None:
        """Test file locations fall back to the configured names."""
        config = EloConfig.from_dict({"leaderboard": {"json_file": "elo.json", "markdown_file": "ELO.md"}})
        updater = LeaderboardUpdater(config=config)
        assert updater.store.path.name == "elo.json"
        assert updater.markdown_path.name == "ELO.md"
