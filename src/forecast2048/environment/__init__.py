"""
2048 board mechanics: move engine, state codec and game session.
"""

from .engine import Direction, DIRECTIONS, MoveResult, apply_move, spawn_tile, is_terminal
from .encoding import SpawnedTile, encode_state, decode_state
from .game2048 import Game2048
