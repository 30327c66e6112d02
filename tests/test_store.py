"""Tests for the leaderboard store."""

import json
import logging
from datetime import datetime, timezone

import pytest

from elo_leaderboard import (
    ContributorRecord,
    HistoryEntry,
    Leaderboard,
    LeaderboardStore,
    StorePersistenceError,
)


@pytest.fixture
def populated() -> Leaderboard:
    """A leaderboard with two contributors and some history."""
    alice = ContributorRecord(rating=1237, merged_count=2, total_difficulty=2500)
    alice.record(
        HistoryEntry(
            number=3,
            title="Add retries",
            delta=21,
            difficulty=1300,
            merged_at="2024-03-02T10:00:00Z",
            url="https://github.com/acme/widgets/pull/3",
        ),
        max_length=10,
    )
    bob = ContributorRecord(rating=1200.5, merged_count=0, total_difficulty=0)
    return Leaderboard(contributors={"alice": alice, "bob": bob}, total_merged_count=2)


class TestLeaderboardStore:
    """Tests for LeaderboardStore."""

    def test_missing_file_gives_fresh_leaderboard(self, tmp_path) -> None:
        """Test loading a store that was never written."""
        leaderboard = LeaderboardStore(tmp_path / "leaderboard.json").load()
        assert leaderboard.contributors == {}
        assert leaderboard.total_merged_count == 0

    def test_round_trip(self, tmp_path, populated: Leaderboard) -> None:
        """Test saving then loading yields an equal leaderboard."""
        store = LeaderboardStore(tmp_path / "leaderboard.json")
        store.save(populated)
        assert store.load() == populated

    def test_save_stamps_last_updated(self, tmp_path, populated: Leaderboard) -> None:
        """Test save records the given time."""
        store = LeaderboardStore(tmp_path / "leaderboard.json")
        now = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)
        store.save(populated, now=now)
        data = json.loads((tmp_path / "leaderboard.json").read_text())
        assert data["lastUpdated"] == "2024-05-01T12:00:00Z"
        assert store.load().last_updated == now

    def test_file_format(self, tmp_path, populated: Leaderboard) -> None:
        """Test the persisted JSON layout."""
        path = tmp_path / "leaderboard.json"
        LeaderboardStore(path).save(populated)
        data = json.loads(path.read_text())
        assert data["totalPRs"] == 2
        assert data["contributors"]["alice"]["elo"] == 1237
        assert data["contributors"]["alice"]["prs"] == 2
        assert data["contributors"]["alice"]["recentPRs"][0]["eloChange"] == 21
        assert data["contributors"]["alice"]["recentPRs"][0]["mergedAt"] == "2024-03-02T10:00:00Z"

    def test_loads_existing_file(self, tmp_path) -> None:
        """Test loading a leaderboard written by an earlier tool version."""
        path = tmp_path / "leaderboard.json"
        path.write_text(
            json.dumps(
                {
                    "contributors": {
                        "alice": {"elo": 1216, "prs": 1, "totalDifficulty": 1000},
                        "bob": {
                            "elo": 1224,
                            "prs": 1,
                            "totalDifficulty": 1300,
                            "recentPRs": [
                                {
                                    "number": 2,
                                    "title": "Feature",
                                    "eloChange": 24,
                                    "difficulty": 1300,
                                    "mergedAt": "2024-03-01T12:00:00.000Z",
                                    "url": "https://github.com/acme/widgets/pull/2",
                                }
                            ],
                        },
                    },
                    "lastUpdated": "2024-03-01T12:00:05.123Z",
                    "totalPRs": 2,
                }
            )
        )
        leaderboard = LeaderboardStore(path).load()
        assert leaderboard.total_merged_count == 2
        assert leaderboard.contributors["alice"].recent_history == []
        assert leaderboard.contributors["bob"].recent_history[0].delta == 24

    @pytest.mark.parametrize(
        "content",
        [
            b"{not json",
            b"[]",
            b'{"contributors": {"alice": {"prs": 1}}}',
            b'{"contributors": [], "totalPRs": 0}',
            b'{"totalPRs": -1}',
            b'{"contributors": {"\xff\xfe": {}}}',
            b"\x00\x9f\x92\x96",
        ],
    )
    def test_malformed_file_gives_fresh_leaderboard(self, tmp_path, caplog, content: bytes) -> None:
        """Test a corrupt store is replaced by a fresh leaderboard."""
        path = tmp_path / "leaderboard.json"
        path.write_bytes(content)
        with caplog.at_level(logging.WARNING, logger="elo_leaderboard.store"):
            leaderboard = LeaderboardStore(path).load()
        assert leaderboard.contributors == {}
        assert leaderboard.total_merged_count == 0
        assert "creating new leaderboard" in caplog.text

    def test_save_creates_parent_directories(self, tmp_path, populated: Leaderboard) -> None:
        """Test saving into a directory that doesn't exist yet."""
        path = tmp_path / "data" / "elo" / "leaderboard.json"
        LeaderboardStore(path).save(populated)
        assert path.exists()

    def test_save_leaves_no_temp_files(self, tmp_path, populated: Leaderboard) -> None:
        """Test the temporary file is moved into place."""
        LeaderboardStore(tmp_path / "leaderboard.json").save(populated)
        assert [p.name for p in tmp_path.iterdir()] == ["leaderboard.json"]

    def test_save_failure_raises(self, tmp_path, populated: Leaderboard) -> None:
        """Test a write failure is fatal."""
        blocker = tmp_path / "not-a-directory"
        blocker.write_text("")
        store = LeaderboardStore(blocker / "leaderboard.json")
        with pytest.raises(StorePersistenceError) as exc_info:
            store.save(populated)
        assert exc_info.value.path == str(blocker / "leaderboard.json")
