"""
Minefield - Core Game Logic
Implements mine placement, reveal propagation, chording, hints and
win/loss detection for a single game session
"""

import logging
import random
import time
from collections import deque
from enum import Enum
from typing import Callable, Iterator, List, Optional, Tuple

from .config import BoardConfig

logger = logging.getLogger(__name__)

Coordinate = Tuple[int, int]

DEFAULT_HINT_MAX = 3


class GamePhase(Enum):
    """Enumeration for the phases of a game session"""
    PENDING = "pending"
    ACTIVE = "active"
    WON = "won"
    LOST = "lost"


class MarkState(Enum):
    """Player annotation on a closed cell"""
    NONE = "none"
    FLAGGED = "flagged"
    QUESTIONED = "questioned"


class MoveResult(Enum):
    """Signal returned by every mutating engine call"""
    CONTINUE = "continue"
    WON = "won"
    LOST = "lost"
    REFUSED = "refused"


# none -> flag -> question -> none
_MARK_CYCLE = {
    MarkState.NONE: MarkState.FLAGGED,
    MarkState.FLAGGED: MarkState.QUESTIONED,
    MarkState.QUESTIONED: MarkState.NONE,
}


class Cell:
    """Represents a single cell on the board"""

    def __init__(self, x: int, y: int):
        self.x = x
        self.y = y
        self.is_mine = False
        self.is_open = False
        self.mark = MarkState.NONE
        self.adjacent_mines = 0

    def place_mine(self):
        """Place a mine in this cell"""
        self.is_mine = True

    def open(self) -> bool:
        """Open this cell, clearing any mark. Returns False if already open"""
        if self.is_open:
            return False
        self.mark = MarkState.NONE
        self.is_open = True
        return True

    def cycle_mark(self) -> MarkState:
        """Advance the mark cycle and return the previous mark"""
        previous = self.mark
        if not self.is_open:
            self.mark = _MARK_CYCLE[previous]
        return previous

    def is_flagged(self) -> bool:
        return self.mark == MarkState.FLAGGED

    def is_questioned(self) -> bool:
        return self.mark == MarkState.QUESTIONED

    def is_blank(self) -> bool:
        """Non-mine cell with no adjacent mines"""
        return not self.is_mine and self.adjacent_mines == 0

    def __repr__(self):
        return f"Cell(x={self.x}, y={self.y}, mine={self.is_mine}, open={self.is_open}, mark={self.mark.value})"


class GameSession:
    """Mutable per-game state; replaced wholesale on reset"""

    def __init__(self, hint_max: int = DEFAULT_HINT_MAX):
        self.phase = GamePhase.PENDING
        self.opened_safe_count = 0
        self.flagged_count = 0
        self.hints_used = 0
        self.hint_max = hint_max
        self.start_time: Optional[float] = None
        self.finish_time: Optional[float] = None

    def is_over(self) -> bool:
        return self.phase in (GamePhase.WON, GamePhase.LOST)


class GameEngine:
    """Manages the board grid and the game session played on it"""

    def __init__(self, config: Optional[BoardConfig] = None,
                 rng: Optional[random.Random] = None,
                 clock: Optional[Callable[[], float]] = None,
                 hint_max: int = DEFAULT_HINT_MAX):
        self.rng = rng or random.Random()
        self.clock = clock or time.time
        self.hint_max = hint_max
        self.config: BoardConfig = BoardConfig()
        self.grid: List[List[Cell]] = []
        self.session = GameSession(hint_max)
        self.mines_placed = False
        self.clicked_mine: Optional[Coordinate] = None
        self.last_hint: Optional[Coordinate] = None

        self.reset(config)

    @property
    def width(self) -> int:
        return self.config.width

    @property
    def height(self) -> int:
        return self.config.height

    @property
    def total_mines(self) -> int:
        return self.config.mines

    @property
    def phase(self) -> GamePhase:
        return self.session.phase

    def reset(self, config: Optional[BoardConfig] = None):
        """Discard the current game and start a fresh one"""
        if config is not None:
            # Re-clamp so hand-built configs obey the board limits too
            self.config = BoardConfig.clamped(config.width, config.height, config.mines)
        self.session = GameSession(self.hint_max)
        self.mines_placed = False
        self.clicked_mine = None
        self.last_hint = None
        self.grid = [[Cell(x, y) for x in range(self.width)] for y in range(self.height)]

    def in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def get_cell(self, x: int, y: int) -> Optional[Cell]:
        """Get cell at specified position"""
        if self.in_bounds(x, y):
            return self.grid[y][x]
        return None

    def neighbors(self, x: int, y: int) -> Iterator[Cell]:
        """Yield the edge-clipped 8-neighbourhood, row by row"""
        for dy in (-1, 0, 1):
            for dx in (-1, 0, 1):
                if dx == 0 and dy == 0:
                    continue
                nx, ny = x + dx, y + dy
                if self.in_bounds(nx, ny):
                    yield self.grid[ny][nx]

    def cells(self) -> Iterator[Cell]:
        for row in self.grid:
            yield from row

    def _place_mines(self, safe_x: int, safe_y: int):
        """Place mines randomly, keeping the first opened cell and its neighbours clear"""
        forbidden = {(safe_x, safe_y)}
        forbidden.update((c.x, c.y) for c in self.neighbors(safe_x, safe_y))

        candidates = [(c.x, c.y) for c in self.cells() if (c.x, c.y) not in forbidden]

        # Board too small for the 3x3 safe area: only the clicked cell is safe
        if len(candidates) < self.total_mines:
            logger.debug("Only %d candidates for %d mines, shrinking safe area",
                         len(candidates), self.total_mines)
            candidates = [(c.x, c.y) for c in self.cells() if (c.x, c.y) != (safe_x, safe_y)]

        # random.shuffle is a Fisher-Yates shuffle
        self.rng.shuffle(candidates)
        for x, y in candidates[:self.total_mines]:
            self.grid[y][x].place_mine()

        self._calculate_adjacent_mines()
        self.mines_placed = True

    def _calculate_adjacent_mines(self):
        """Calculate the number of adjacent mines for each cell"""
        for cell in self.cells():
            if cell.is_mine:
                cell.adjacent_mines = 0
            else:
                cell.adjacent_mines = sum(1 for n in self.neighbors(cell.x, cell.y) if n.is_mine)

    def _start(self, x: int, y: int):
        self._place_mines(x, y)
        self.session.phase = GamePhase.ACTIVE
        self.session.start_time = self.clock()
        logger.info("Game started on %s at (%d, %d)", self.config.key, x, y)

    def open(self, x: int, y: int) -> MoveResult:
        """
        Open a cell and handle game logic

        Returns LOST if a mine was opened, WON if this completed the board,
        REFUSED if nothing happened and CONTINUE otherwise.
        """
        if self.session.is_over():
            return MoveResult.REFUSED

        cell = self.get_cell(x, y)
        if cell is None or cell.is_open or cell.is_flagged():
            return MoveResult.REFUSED

        # Place mines on first open
        if self.session.phase == GamePhase.PENDING:
            self._start(x, y)

        if self._open_cell(cell):
            return MoveResult.LOST

        return MoveResult.WON if self.check_win() else MoveResult.CONTINUE

    def _open_cell(self, cell: Cell) -> bool:
        """Open a closed, unflagged cell with flood fill. Returns True if it was a mine"""
        cell.open()

        if cell.is_mine:
            self._lose(cell)
            return True

        self.session.opened_safe_count += 1
        if cell.adjacent_mines == 0:
            self._flood_fill(cell)
        return False

    def _flood_fill(self, start: Cell):
        """Breadth-first reveal of the blank region around start"""
        queue = deque([start])
        seen = {(start.x, start.y)}

        while queue:
            current = queue.popleft()
            for neighbor in self.neighbors(current.x, current.y):
                key = (neighbor.x, neighbor.y)
                if key in seen:
                    continue
                seen.add(key)

                if neighbor.is_open or neighbor.is_flagged():
                    continue

                neighbor.open()
                self.session.opened_safe_count += 1

                if neighbor.is_blank():
                    queue.append(neighbor)

    def _lose(self, mine: Cell):
        self.clicked_mine = (mine.x, mine.y)
        self.session.phase = GamePhase.LOST
        self.session.finish_time = self.clock()
        self._reveal_all_mines()
        logger.info("Game lost on %s: mine at (%d, %d)", self.config.key, mine.x, mine.y)

    def _reveal_all_mines(self):
        """Open every mine, leaving marks as they are"""
        for cell in self.cells():
            if cell.is_mine:
                cell.is_open = True

    def toggle_flag(self, x: int, y: int) -> MoveResult:
        """Cycle the mark on a closed cell and keep the flag count in step"""
        if self.session.is_over():
            return MoveResult.REFUSED

        cell = self.get_cell(x, y)
        if cell is None or cell.is_open:
            return MoveResult.REFUSED

        previous = cell.cycle_mark()

        if cell.mark == MarkState.FLAGGED:
            self.session.flagged_count += 1
        elif previous == MarkState.FLAGGED:
            self.session.flagged_count -= 1

        return MoveResult.CONTINUE

    def chord(self, x: int, y: int) -> MoveResult:
        """
        Open every unflagged neighbour of a satisfied number.

        The flag count around the cell must equal its number exactly,
        otherwise nothing is opened. Neighbours are opened in order and the
        first mine ends the game; neighbours after it stay closed.
        """
        if self.session.phase != GamePhase.ACTIVE:
            return MoveResult.REFUSED

        cell = self.get_cell(x, y)
        if cell is None or not cell.is_open or cell.is_mine or cell.adjacent_mines == 0:
            return MoveResult.REFUSED

        neighbors = list(self.neighbors(x, y))
        flags = sum(1 for n in neighbors if n.is_flagged())
        if flags != cell.adjacent_mines:
            logger.debug("Chord refused at (%d, %d): %d flags for %d",
                         x, y, flags, cell.adjacent_mines)
            return MoveResult.REFUSED

        for neighbor in neighbors:
            if neighbor.is_flagged() or neighbor.is_open:
                continue
            if self._open_cell(neighbor):
                return MoveResult.LOST

        return MoveResult.WON if self.check_win() else MoveResult.CONTINUE

    def check_win(self) -> bool:
        """
        Check if the player has won

        Returns True only on the call that moves the game to WON.
        """
        if self.session.is_over():
            return False
        if self.session.opened_safe_count < self.config.safe_cells:
            return False

        self.session.phase = GamePhase.WON
        self.session.finish_time = self.clock()
        logger.info("Game won on %s in %ds", self.config.key, self.elapsed_seconds())
        return True

    def hint(self) -> MoveResult:
        """
        Open one safe cell, preferring question-marked ones

        Before the first open the hint starts the game on a random cell.
        The draw skips flagged cells, so a hint is never spent on a start
        that open() would refuse.
        """
        if self.session.is_over():
            return MoveResult.REFUSED
        if self.session.hints_used >= self.session.hint_max:
            logger.debug("Hint refused: %d of %d used", self.session.hints_used, self.session.hint_max)
            return MoveResult.REFUSED

        if self.session.phase == GamePhase.PENDING:
            # Any first open is safe, so a random start is a valid hint.
            # Flagged cells are skipped since open() would refuse them.
            starts = [c for c in self.cells() if not c.is_flagged()]
            if not starts:
                return MoveResult.REFUSED
            pick = self.rng.choice(starts)
            self.session.hints_used += 1
            self.last_hint = (pick.x, pick.y)
            return self.open(pick.x, pick.y)

        questioned = []
        unmarked = []
        for cell in self.cells():
            if cell.is_open or cell.is_flagged() or cell.is_mine:
                continue
            if cell.is_questioned():
                questioned.append(cell)
            else:
                unmarked.append(cell)

        candidates = questioned or unmarked
        if not candidates:
            return MoveResult.REFUSED

        pick = self.rng.choice(candidates)
        self.session.hints_used += 1
        self.last_hint = (pick.x, pick.y)
        self._open_cell(pick)

        return MoveResult.WON if self.check_win() else MoveResult.CONTINUE

    def is_over(self) -> bool:
        return self.session.is_over()

    def hints_remaining(self) -> int:
        return max(0, self.session.hint_max - self.session.hints_used)

    def get_remaining_mines(self) -> int:
        """Get the number of remaining mines (total mines - flags used)"""
        return max(0, self.total_mines - self.session.flagged_count)

    def elapsed_seconds(self) -> int:
        """Whole seconds since the first open, frozen once the game ends"""
        start = self.session.start_time
        if start is None:
            return 0
        end = self.session.finish_time
        if end is None:
            end = self.clock()
        return max(0, int(end - start))
