"""
Minefield Game API
Provides a clean interface for a presentation layer to drive the engine
and read back what it needs to paint
"""

import json
import logging
import random
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Tuple

import numpy as np

from .board import GameEngine, GamePhase, MarkState, MoveResult
from .config import BoardConfig
from .records import RecordManager, clean_name

logger = logging.getLogger(__name__)

# Codes used in the visible board
QUESTION = -4
HIDDEN = -3
FLAG = -2
MINE = -1


class Action(Enum):
    """Available player actions on a cell"""
    OPEN = "open"
    FLAG = "flag"
    CHORD = "chord"


class MinefieldAPI:
    """
    API for a presentation layer to interact with a game
    Handles coordinates, keeps an action history and reports board state
    """

    def __init__(self, config: Optional[BoardConfig] = None,
                 records: Optional[RecordManager] = None,
                 seed: Optional[int] = None,
                 clock: Optional[Callable[[], float]] = None):
        """
        Initialize the game API

        Args:
            config: Board configuration (default: easy preset)
            records: Leaderboard store used when a win is submitted
            seed: Seed for reproducible mine placement and hints
            clock: Time source in seconds (default: time.time)
        """
        rng = random.Random(seed) if seed is not None else None
        self.engine = GameEngine(config, rng=rng, clock=clock)
        self.records = records
        self.action_history: List[Dict[str, Any]] = []
        self._win_submitted = False

    def reset_game(self, config: Optional[BoardConfig] = None) -> Dict[str, Any]:
        """
        Start a new game, optionally with a different configuration

        Returns:
            Initial game state
        """
        self.engine.reset(config)
        self.action_history.clear()
        self._win_submitted = False
        if self.records is not None and config is not None:
            self.records.set_last_config(self.engine.config)
        return self.get_game_state()

    def take_action(self, x: int, y: int, action: Action) -> Dict[str, Any]:
        """
        Take an action at the specified coordinates

        Args:
            x: Column (0-indexed)
            y: Row (0-indexed)
            action: Action to take (OPEN, FLAG, CHORD)

        Returns:
            Updated game state with action result
        """
        if not self.engine.in_bounds(x, y):
            return {
                'success': False,
                'error': f'Invalid coordinates: ({x}, {y})',
                'state': self.get_game_state()
            }

        if action == Action.OPEN:
            handler = self.engine.open
        elif action == Action.FLAG:
            handler = self.engine.toggle_flag
        else:
            handler = self.engine.chord

        return self._run(action.value, (x, y), lambda: handler(x, y))

    def hint(self) -> Dict[str, Any]:
        """Spend a hint; the opened cell is reported as coordinates"""
        result = self._run("hint", None, self.engine.hint)
        if result['success']:
            result['coordinates'] = self.engine.last_hint
        return result

    def _run(self, name: str, coordinates: Optional[Tuple[int, int]],
             operation: Callable[[], MoveResult]) -> Dict[str, Any]:
        phase_before = self.engine.phase
        outcome = operation()

        self.action_history.append({
            'action': name,
            'coordinates': coordinates,
            'result': outcome.value,
            'game_state_before': phase_before.value,
            'game_state_after': self.engine.phase.value,
        })

        return {
            'success': outcome != MoveResult.REFUSED,
            'action': name,
            'coordinates': coordinates,
            'result': outcome.value,
            'state': self.get_game_state()
        }

    def get_visible_board(self) -> List[List[int]]:
        """What the player can see (-4=question, -3=hidden, -2=flag, -1=mine, 0-8=numbers)"""
        visible = []
        for row in self.engine.grid:
            visible_row = []
            for cell in row:
                if cell.is_open:
                    visible_row.append(MINE if cell.is_mine else cell.adjacent_mines)
                elif cell.mark == MarkState.FLAGGED:
                    visible_row.append(FLAG)
                elif cell.mark == MarkState.QUESTIONED:
                    visible_row.append(QUESTION)
                else:
                    visible_row.append(HIDDEN)
            visible.append(visible_row)
        return visible

    def get_game_state(self) -> Dict[str, Any]:
        """
        Get the current game state

        Returns:
            Board size, counters, phase and the visible board
        """
        engine = self.engine
        session = engine.session
        return {
            'board_size': (engine.width, engine.height),
            'board_key': engine.config.key,
            'total_mines': engine.total_mines,
            'game_state': session.phase.value,
            'mines_placed': engine.mines_placed,
            'cells_opened': session.opened_safe_count,
            'flags_used': session.flagged_count,
            'remaining_mines': engine.get_remaining_mines(),
            'hints_remaining': engine.hints_remaining(),
            'elapsed_seconds': engine.elapsed_seconds(),
            'clicked_mine': engine.clicked_mine,
            'visible_board': self.get_visible_board(),
            'action_count': len(self.action_history),
            'is_game_over': engine.is_over(),
            'is_won': session.phase == GamePhase.WON,
            'is_lost': session.phase == GamePhase.LOST
        }

    def get_board_array(self) -> np.ndarray:
        """
        Get the board as a numpy array

        Returns:
            3D numpy array: [height, width, channels]
            Channels:
            0: Visible state (see get_visible_board)
            1: Is open (0 or 1)
            2: Is flagged (0 or 1)
        """
        visible = np.array(self.get_visible_board(), dtype=np.float32)
        opened = np.array([[cell.is_open for cell in row] for row in self.engine.grid],
                          dtype=np.float32)
        flagged = np.array([[cell.is_flagged() for cell in row] for row in self.engine.grid],
                           dtype=np.float32)
        return np.stack([visible, opened, flagged], axis=-1)

    def get_valid_actions(self) -> List[Tuple[int, int, Action]]:
        """
        Get all actions that would not be refused right now

        Returns:
            List of (x, y, action) tuples
        """
        engine = self.engine
        if engine.is_over():
            return []

        valid_actions = []
        for cell in engine.cells():
            if not cell.is_open:
                if not cell.is_flagged():
                    valid_actions.append((cell.x, cell.y, Action.OPEN))
                valid_actions.append((cell.x, cell.y, Action.FLAG))
            elif engine.phase == GamePhase.ACTIVE and not cell.is_mine and cell.adjacent_mines > 0:
                flags = sum(1 for n in engine.neighbors(cell.x, cell.y) if n.is_flagged())
                if flags == cell.adjacent_mines:
                    valid_actions.append((cell.x, cell.y, Action.CHORD))
        return valid_actions

    def submit_win(self, player_name: Optional[str] = None) -> Optional[Dict[str, Any]]:
        """
        Record the finished game in the leaderboard and win counts

        Returns:
            Name, time, win count and rank (None when outside the top 10),
            or None if there is no unrecorded win to submit
        """
        if self.records is None or self._win_submitted:
            return None
        if self.engine.phase != GamePhase.WON:
            return None

        if player_name is None:
            player_name = self.records.get_player_name()
        name = clean_name(player_name)
        seconds = self.engine.elapsed_seconds()
        key = self.engine.config.key

        wins = self.records.bump_win_count(key, name)
        rank = self.records.add_score(key, seconds, name)
        self._win_submitted = True
        logger.info("%s won %s in %ds (win #%d, rank %s)", name, key, seconds, wins, rank)

        return {'name': name, 'time': seconds, 'wins': wins, 'rank': rank}

    def export_game_state(self) -> str:
        """
        Export current game state as JSON string

        Returns:
            JSON string of game state
        """
        return json.dumps(self.get_game_state(), indent=2)

    def get_action_history(self) -> List[Dict[str, Any]]:
        """
        Get the history of all actions taken

        Returns:
            List of action records
        """
        return self.action_history.copy()
