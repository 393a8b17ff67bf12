"""
Minefield - Command Interface
Device independent entry points that the presentation layer calls on input
"""

import random
from typing import Optional, Tuple

from .board import GameEngine, MoveResult
from .config import BoardConfig

CommandResult = Tuple[GameEngine, MoveResult]


def new_game(config: Optional[BoardConfig] = None, seed: Optional[int] = None) -> GameEngine:
    """Create a fresh engine; a seed makes mine placement reproducible"""
    rng = random.Random(seed) if seed is not None else None
    return GameEngine(config, rng=rng)


def handle_open(engine: GameEngine, x: int, y: int) -> CommandResult:
    return engine, engine.open(x, y)


def handle_flag_cycle(engine: GameEngine, x: int, y: int) -> CommandResult:
    return engine, engine.toggle_flag(x, y)


def handle_chord(engine: GameEngine, x: int, y: int) -> CommandResult:
    return engine, engine.chord(x, y)


def handle_hint(engine: GameEngine) -> CommandResult:
    return engine, engine.hint()
