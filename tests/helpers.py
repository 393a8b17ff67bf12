"""
Board builders shared by the test modules
"""

from minefield.board import GameEngine, GamePhase
from minefield.config import BoardConfig

# Column of mines down the middle of a 5x5 board
WALL = [(2, y) for y in range(5)]


class FakeClock:
    """Manually advanced time source"""

    def __init__(self, now: float = 1000.0):
        self.now = now

    def advance(self, seconds: float):
        self.now += seconds

    def __call__(self) -> float:
        return self.now


def rig_board(width, height, mines_at, clock=None, hint_max=3, rng=None):
    """Create an active game with mines at known positions"""
    engine = GameEngine(BoardConfig(width, height, len(mines_at)), rng=rng, clock=clock, hint_max=hint_max)
    for x, y in mines_at:
        engine.grid[y][x].place_mine()
    engine._calculate_adjacent_mines()
    engine.mines_placed = True
    engine.session.phase = GamePhase.ACTIVE
    engine.session.start_time = engine.clock()
    return engine
