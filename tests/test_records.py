"""
Unit tests for the leaderboard and win count store
"""

import json
import os
from unittest.mock import patch

import pytest
from minefield.config import BoardConfig
from minefield.records import LeaderboardEntry, RecordManager, clean_name

KEY = "9x9_10"
OTHER_KEY = "16x16_40"


@pytest.fixture
def data_file(tmp_path):
    return str(tmp_path / "records.json")


@pytest.fixture
def manager(data_file):
    return RecordManager(data_file)


class TestCleanName:

    @pytest.mark.parametrize("raw,expected", [
        ("Alice", "Alice"),
        ("  Bob  ", "Bob"),
        ("", "Player"),
        ("   ", "Player"),
        (None, "Player"),
        ("x" * 25, "x" * 20),
    ])
    def test_clean_name(self, raw, expected):
        assert clean_name(raw) == expected


class TestLeaderboardEntry:

    def test_to_dict(self):
        entry = LeaderboardEntry(42, "Ann", timestamp=1700000000000)
        assert entry.to_dict() == {"name": "Ann", "time": 42, "ts": 1700000000000}

    def test_from_dict(self):
        entry = LeaderboardEntry.from_dict({"name": "Ann", "time": 42, "ts": 5})
        assert (entry.player_name, entry.time_seconds, entry.timestamp) == ("Ann", 42, 5)

    def test_timestamp_defaults_to_now(self):
        with patch("minefield.records.time.time", return_value=12.5):
            entry = LeaderboardEntry(3)
        assert entry.timestamp == 12500

    @pytest.mark.parametrize("seconds,formatted", [(0, "00:00"), (61, "01:01"), (600, "10:00")])
    def test_format_time(self, seconds, formatted):
        assert LeaderboardEntry(seconds, timestamp=0).format_time() == formatted


class TestLeaderboard:

    def test_empty_leaderboard(self, manager):
        assert manager.get_leaderboard(KEY) == []
        assert manager.get_best(KEY) is None

    def test_sorted_by_time(self, manager):
        for seconds in (30, 10, 20):
            manager.add_score(KEY, seconds, "P")

        assert [e.time_seconds for e in manager.get_leaderboard(KEY)] == [10, 20, 30]
        assert manager.get_best(KEY).time_seconds == 10

    def test_ties_keep_older_record_first(self, manager):
        with patch("minefield.records.time.time", side_effect=[2.0, 1.0]):
            manager.add_score(KEY, 15, "Later")
            manager.add_score(KEY, 15, "Earlier")

        names = [e.player_name for e in manager.get_leaderboard(KEY)]
        assert names == ["Earlier", "Later"]

    def test_rank_returned(self, manager):
        assert manager.add_score(KEY, 50, "A") == 1
        assert manager.add_score(KEY, 40, "B") == 1
        assert manager.add_score(KEY, 45, "C") == 2

    def test_truncated_to_top_10(self, manager):
        for seconds in range(100, 112):
            manager.add_score(KEY, seconds, "P")

        board = manager.get_leaderboard(KEY)
        assert len(board) == 10
        assert board[-1].time_seconds == 109

    def test_slow_time_does_not_rank(self, manager):
        for seconds in range(10):
            manager.add_score(KEY, seconds, "P")

        assert manager.is_top_10_time(KEY, 9) is False
        assert manager.add_score(KEY, 500, "Slow") is None
        assert all(e.player_name == "P" for e in manager.get_leaderboard(KEY))

    def test_is_top_10_time_with_room(self, manager):
        manager.add_score(KEY, 5, "P")
        assert manager.is_top_10_time(KEY, 999) is True

    def test_name_is_cleaned(self, manager):
        manager.add_score(KEY, 5, "   ")
        manager.add_score(KEY, 6, "A" * 30)

        names = [e.player_name for e in manager.get_leaderboard(KEY)]
        assert names == ["Player", "A" * 20]

    def test_default_name_from_preferences(self, manager):
        manager.set_player_name("Dana")
        manager.add_score(KEY, 5)

        assert manager.get_best(KEY).player_name == "Dana"

    def test_boards_are_separate(self, manager):
        manager.add_score(KEY, 5, "P")
        assert manager.get_leaderboard(OTHER_KEY) == []


class TestWinCounts:

    def test_bump_win_count(self, manager):
        assert manager.bump_win_count(KEY, "Ann") == 1
        assert manager.bump_win_count(KEY, "Ann") == 2
        assert manager.bump_win_count(KEY, "Bob") == 1

        assert manager.get_win_counts(KEY) == {"Ann": 2, "Bob": 1}
        assert manager.get_win_count(KEY, "  Ann ") == 2

    def test_unknown_player(self, manager):
        assert manager.get_win_count(KEY, "Nobody") == 0


class TestClear:

    def test_clear_only_current_board(self, manager):
        manager.add_score(KEY, 5, "P")
        manager.bump_win_count(KEY, "P")
        manager.add_score(OTHER_KEY, 7, "Q")
        manager.bump_win_count(OTHER_KEY, "Q")

        manager.clear(KEY)

        assert manager.get_leaderboard(KEY) == []
        assert manager.get_win_counts(KEY) == {}
        assert len(manager.get_leaderboard(OTHER_KEY)) == 1
        assert manager.get_win_counts(OTHER_KEY) == {"Q": 1}

    def test_clear_is_persisted(self, manager, data_file):
        manager.add_score(KEY, 5, "P")
        manager.clear(KEY)

        assert RecordManager(data_file).get_leaderboard(KEY) == []


class TestPersistence:

    def test_records_survive_reload(self, manager, data_file):
        manager.add_score(KEY, 12, "Ann")
        manager.bump_win_count(KEY, "Ann")

        reloaded = RecordManager(data_file)

        assert reloaded.get_best(KEY).player_name == "Ann"
        assert reloaded.get_win_count(KEY, "Ann") == 1

    def test_stored_shape(self, manager, data_file):
        with patch("minefield.records.time.time", return_value=1.0):
            manager.add_score(KEY, 12, "Ann")

        with open(data_file, encoding="utf-8") as f:
            data = json.load(f)
        assert data["records"]["ms_lb_" + KEY] == [{"name": "Ann", "time": 12, "ts": 1000}]

    def test_missing_file(self, tmp_path):
        manager = RecordManager(str(tmp_path / "missing" / "records.json"))
        assert manager.get_leaderboard(KEY) == []

    def test_save_creates_directory(self, tmp_path):
        path = tmp_path / "nested" / "records.json"
        RecordManager(str(path)).add_score(KEY, 1, "P")
        assert path.exists()

    def test_corrupt_file(self, data_file):
        with open(data_file, "w", encoding="utf-8") as f:
            f.write("{not json")

        manager = RecordManager(data_file)

        assert manager.get_leaderboard(KEY) == []
        assert manager.get_win_counts(KEY) == {}
        assert manager.get_player_name() == "Player"

    @pytest.mark.parametrize("payload", [
        [1, 2, 3],
        {"records": "nope"},
        {"records": {"ms_lb_" + KEY: {"a": 1}, "ms_stats_" + KEY: ["x"]}},
    ])
    def test_wrongly_shaped_data(self, data_file, payload):
        with open(data_file, "w", encoding="utf-8") as f:
            json.dump(payload, f)

        manager = RecordManager(data_file)

        assert manager.get_leaderboard(KEY) == []
        assert manager.get_win_counts(KEY) == {}

    def test_bad_rows_are_skipped(self, data_file):
        rows = [{"name": "Ok", "time": 3, "ts": 1}, {"name": "NoTime"}, "junk"]
        with open(data_file, "w", encoding="utf-8") as f:
            json.dump({"records": {"ms_lb_" + KEY: rows}}, f)

        board = RecordManager(data_file).get_leaderboard(KEY)

        assert [e.player_name for e in board] == ["Ok"]

    def test_overflowing_rows_are_skipped(self, data_file):
        with open(data_file, "w", encoding="utf-8") as f:
            f.write('{"records": {"ms_lb_' + KEY + '": ['
                    '{"name": "Huge", "time": 1e400, "ts": 1}, '
                    '{"name": "Inf", "time": 4, "ts": Infinity}, '
                    '{"name": "Ok", "time": 5, "ts": 2}]}}')

        manager = RecordManager(data_file)

        assert [e.player_name for e in manager.get_leaderboard(KEY)] == ["Ok"]
        assert manager.add_score(KEY, 3, "New") == 1

    def test_save_failure_is_logged(self, manager, caplog):
        with patch("builtins.open", side_effect=OSError("disk full")):
            manager.add_score(KEY, 5, "P")

        assert "Error saving records" in caplog.text
        assert manager.get_best(KEY).time_seconds == 5


class TestPreferences:

    def test_player_name(self, manager, data_file):
        assert manager.get_player_name() == "Player"
        manager.set_player_name("  Eve  ")

        assert RecordManager(data_file).get_player_name() == "Eve"

    def test_last_config(self, manager, data_file):
        assert manager.get_last_config() == BoardConfig(9, 9, 10)
        manager.set_last_config(BoardConfig(30, 16, 99))

        assert RecordManager(data_file).get_last_config() == BoardConfig(30, 16, 99)

    def test_default_data_file(self, tmp_path):
        with patch("minefield.records.os.path.expanduser", return_value=str(tmp_path)):
            manager = RecordManager()

        assert manager.data_file == os.path.join(str(tmp_path), ".minefield", "records.json")
