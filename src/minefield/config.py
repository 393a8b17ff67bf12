"""
Minefield - Board Configuration
Clamps user supplied board dimensions and provides the standard presets
"""

import logging
import sys
from dataclasses import dataclass
from typing import Any, Dict, Mapping

logger = logging.getLogger(__name__)

MIN_WIDTH, MAX_WIDTH = 5, 60
MIN_HEIGHT, MAX_HEIGHT = 5, 40
MIN_MINES = 1


def clamp(value: int, low: int, high: int) -> int:
    """Clamp value into the inclusive range [low, high]"""
    return max(low, min(high, value))


def _to_int(value: Any, default: int) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        logger.debug("Non-numeric config value %r, using %d", value, default)
        return default
    except OverflowError:
        # Infinite values land on the matching end of the clamp range
        return sys.maxsize if value > 0 else -sys.maxsize


@dataclass(frozen=True)
class BoardConfig:
    """Board dimensions and mine count, always within the playable range"""
    width: int = 9
    height: int = 9
    mines: int = 10

    @classmethod
    def clamped(cls, width: Any = None, height: Any = None, mines: Any = None) -> 'BoardConfig':
        """
        Build a config from raw values, never rejecting input.

        Non-numeric or missing values fall back to the easy preset, then
        every value is clamped so that at least one safe cell remains.
        """
        default = PRESETS["easy"]
        w = clamp(_to_int(width, default.width), MIN_WIDTH, MAX_WIDTH)
        h = clamp(_to_int(height, default.height), MIN_HEIGHT, MAX_HEIGHT)
        m = clamp(_to_int(mines, default.mines), MIN_MINES, w * h - 1)
        return cls(w, h, m)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> 'BoardConfig':
        """Create from a {"w": .., "h": .., "m": ..} record"""
        return cls.clamped(data.get("w"), data.get("h"), data.get("m"))

    @classmethod
    def preset(cls, name: str) -> 'BoardConfig':
        """Get a preset by name, falling back to easy for unknown names"""
        return PRESETS.get(name, PRESETS["easy"])

    def to_dict(self) -> Dict[str, int]:
        return {"w": self.width, "h": self.height, "m": self.mines}

    @property
    def total_cells(self) -> int:
        return self.width * self.height

    @property
    def safe_cells(self) -> int:
        return self.total_cells - self.mines

    @property
    def key(self) -> str:
        """Key identifying this board configuration in the records store"""
        return f"{self.width}x{self.height}_{self.mines}"


# Difficulty presets (width, height, mines)
PRESETS = {
    "easy": BoardConfig(9, 9, 10),
    "medium": BoardConfig(16, 16, 40),
    "hard": BoardConfig(30, 16, 99),
}
