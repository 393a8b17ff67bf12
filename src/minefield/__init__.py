"""
Minefield package initialization
"""

from .board import GameEngine, GameSession, GamePhase, MarkState, MoveResult, Cell
from .config import BoardConfig, PRESETS
from .commands import new_game, handle_open, handle_flag_cycle, handle_chord, handle_hint
from .records import RecordManager, LeaderboardEntry
from .api import MinefieldAPI, Action

__all__ = [
    'GameEngine',
    'GameSession',
    'GamePhase',
    'MarkState',
    'MoveResult',
    'Cell',
    'BoardConfig',
    'PRESETS',
    'new_game',
    'handle_open',
    'handle_flag_cycle',
    'handle_chord',
    'handle_hint',
    'RecordManager',
    'LeaderboardEntry',
    'MinefieldAPI',
    'Action'
]
