"""
Minefield Records
Best-time leaderboards and win counts per board configuration, persisted
to a JSON file
"""

import json
import logging
import os
import time
from typing import Any, Dict, List, Optional

from .config import BoardConfig

logger = logging.getLogger(__name__)

DEFAULT_PLAYER = "Player"
MAX_NAME_LENGTH = 20
LEADERBOARD_SIZE = 10

LEADERBOARD_PREFIX = "ms_lb_"
STATS_PREFIX = "ms_stats_"


def clean_name(name: Optional[str]) -> str:
    """Trim and truncate a player name, defaulting to Player"""
    cleaned = (name or "").strip()[:MAX_NAME_LENGTH]
    return cleaned or DEFAULT_PLAYER


class LeaderboardEntry:
    """Represents a single leaderboard entry"""

    def __init__(self, time_seconds: int, player_name: str = DEFAULT_PLAYER, timestamp: int = None):
        self.time_seconds = int(time_seconds)
        self.player_name = clean_name(player_name)
        # Milliseconds since the epoch
        self.timestamp = int(time.time() * 1000) if timestamp is None else int(timestamp)

    def to_dict(self) -> Dict:
        """Convert to dictionary for JSON serialization"""
        return {
            "name": self.player_name,
            "time": self.time_seconds,
            "ts": self.timestamp,
        }

    @classmethod
    def from_dict(cls, data: Dict) -> 'LeaderboardEntry':
        """Create from dictionary"""
        return cls(
            time_seconds=data["time"],
            player_name=data.get("name", DEFAULT_PLAYER),
            timestamp=data.get("ts", 0),
        )

    def sort_key(self):
        return (self.time_seconds, self.timestamp)

    def format_time(self) -> str:
        """Format time as MM:SS"""
        minutes = self.time_seconds // 60
        seconds = self.time_seconds % 60
        return f"{minutes:02d}:{seconds:02d}"

    def __eq__(self, other):
        if not isinstance(other, LeaderboardEntry):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __repr__(self):
        return f"LeaderboardEntry({self.player_name!r}, {self.time_seconds}s, ts={self.timestamp})"


class RecordManager:
    """Manages leaderboard and win count data and its persistence"""

    def __init__(self, data_file: str = None):
        # Default data file location
        if data_file is None:
            data_dir = os.path.join(os.path.expanduser("~"), ".minefield")
            data_file = os.path.join(data_dir, "records.json")

        self.data_file = data_file
        self.data = self._load_data()

    def _get_default_data(self) -> Dict:
        """Get default data structure"""
        return {
            "records": {},
            "preferences": {
                "player_name": DEFAULT_PLAYER,
                "last_config": BoardConfig().to_dict(),
            },
        }

    def _load_data(self) -> Dict:
        """Load data from file or create default"""
        default_data = self._get_default_data()
        if not os.path.exists(self.data_file):
            return default_data

        try:
            with open(self.data_file, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (ValueError, OSError) as e:
            logger.warning("Error loading records from %s: %s", self.data_file, e)
            return default_data

        if not isinstance(data, dict):
            logger.warning("Ignoring malformed records file %s", self.data_file)
            return default_data

        # Ensure all required keys exist
        for key in default_data:
            if not isinstance(data.get(key), dict):
                data[key] = default_data[key]
        return data

    def _save_data(self):
        """Save data to file"""
        try:
            directory = os.path.dirname(self.data_file)
            if directory:
                os.makedirs(directory, exist_ok=True)
            with open(self.data_file, 'w', encoding='utf-8') as f:
                json.dump(self.data, f, indent=2, ensure_ascii=False)
        except OSError as e:
            logger.warning("Error saving records to %s: %s", self.data_file, e)

    def _read_list(self, key: str) -> List[Dict]:
        raw = self.data["records"].get(key)
        return raw if isinstance(raw, list) else []

    def _read_dict(self, key: str) -> Dict[str, Any]:
        raw = self.data["records"].get(key)
        return raw if isinstance(raw, dict) else {}

    def get_leaderboard(self, board_key: str) -> List[LeaderboardEntry]:
        """Get the stored leaderboard for a board key; bad rows are skipped"""
        entries = []
        for item in self._read_list(LEADERBOARD_PREFIX + board_key):
            try:
                entries.append(LeaderboardEntry.from_dict(item))
            except (KeyError, TypeError, ValueError, OverflowError, AttributeError):
                logger.warning("Skipping malformed leaderboard entry %r", item)
        return entries

    def add_score(self, board_key: str, time_seconds: int, player_name: str = None) -> Optional[int]:
        """
        Add a new score to the leaderboard

        Returns the 1-based rank of the new entry, or None if it did not make
        the top 10.
        """
        if player_name is None:
            player_name = self.get_player_name()

        entry = LeaderboardEntry(time_seconds, player_name=player_name)

        entries = self.get_leaderboard(board_key)
        entries.append(entry)

        # Faster times first, earlier records win ties
        entries.sort(key=LeaderboardEntry.sort_key)
        entries = entries[:LEADERBOARD_SIZE]

        self.data["records"][LEADERBOARD_PREFIX + board_key] = [e.to_dict() for e in entries]
        self._save_data()

        for rank, kept in enumerate(entries, 1):
            if kept is entry:
                return rank
        return None

    def get_best(self, board_key: str) -> Optional[LeaderboardEntry]:
        leaderboard = self.get_leaderboard(board_key)
        return leaderboard[0] if leaderboard else None

    def is_top_10_time(self, board_key: str, time_seconds: int) -> bool:
        """Check if a time would make it into the top 10"""
        leaderboard = self.get_leaderboard(board_key)

        if len(leaderboard) < LEADERBOARD_SIZE:
            return True

        # Ties go to the older record
        return time_seconds < leaderboard[-1].time_seconds

    def get_win_counts(self, board_key: str) -> Dict[str, int]:
        counts = {}
        for name, value in self._read_dict(STATS_PREFIX + board_key).items():
            if isinstance(value, int) and not isinstance(value, bool):
                counts[name] = value
        return counts

    def get_win_count(self, board_key: str, player_name: str) -> int:
        return self.get_win_counts(board_key).get(clean_name(player_name), 0)

    def bump_win_count(self, board_key: str, player_name: str) -> int:
        """Add one win for the player and return the new total"""
        name = clean_name(player_name)
        counts = self.get_win_counts(board_key)
        counts[name] = counts.get(name, 0) + 1
        self.data["records"][STATS_PREFIX + board_key] = counts
        self._save_data()
        return counts[name]

    def clear(self, board_key: str):
        """Remove leaderboard and win counts for one board key only"""
        self.data["records"].pop(LEADERBOARD_PREFIX + board_key, None)
        self.data["records"].pop(STATS_PREFIX + board_key, None)
        self._save_data()
        logger.info("Cleared records for %s", board_key)

    def get_player_name(self) -> str:
        """Get the current player name"""
        return clean_name(self.data["preferences"].get("player_name"))

    def set_player_name(self, name: str):
        """Set the player name"""
        self.data["preferences"]["player_name"] = clean_name(name)
        self._save_data()

    def get_last_config(self) -> BoardConfig:
        """Get the last played board configuration"""
        raw = self.data["preferences"].get("last_config")
        if not isinstance(raw, dict):
            return BoardConfig()
        return BoardConfig.from_mapping(raw)

    def set_last_config(self, config: BoardConfig):
        self.data["preferences"]["last_config"] = config.to_dict()
        self._save_data()
