"""
Shared fixtures for the minefield tests
"""

import pytest

from helpers import FakeClock, WALL, rig_board


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def wall_board():
    """5x5 board split in two by a wall of mines at x=2"""
    return rig_board(5, 5, WALL)
