from collections import deque
from typing import Deque, List, Tuple
import logging

import numpy as np

from ..config import GAME_GRID_SIZE_N, GAME_GRID_SIZE_M, GRID_HISTORY_MAX_LENGTH, set_seeds
from .encoding import encode_state, decode_state, encode_tile
from .engine import (
    Direction,
    apply_move,
    spawn_tile,
    is_terminal,
    is_non_empty,
    max_tile,
    new_grid,
    valid_moves,
)

logger = logging.getLogger(__name__)


class Game2048:
    """
    Game session: the board, the running score, the move counter and a bounded
    undo history of encoded boards.
    """

    def __init__(self, seed=None, size: Tuple[int, int] = (GAME_GRID_SIZE_N, GAME_GRID_SIZE_M),
                 deterministic: bool = False, history_length: int = GRID_HISTORY_MAX_LENGTH):
        self.size = size
        self.deterministic = deterministic
        # oldest entries are evicted first once the history is full
        self.history: Deque[Tuple[int, np.ndarray]] = deque(maxlen=history_length)
        self.reset(seed)

    def reset(self, seed=None):
        """Reset the game with optional seed"""
        if seed is not None:
            set_seeds(seed)

        self.board = new_grid(*self.size)
        self.score = 0
        self.move_count = 0
        self.history.clear()
        self.add_random_tile()
        self.add_random_tile()
        return self.board.copy()

    def add_random_tile(self):
        """Add a random tile (2 or 4) to an empty cell"""
        self.board, tile = spawn_tile(self.board, deterministic=self.deterministic)
        return tile

    def step(self, direction: Direction):
        """
        Play a move followed by a tile spawn.

        Returns:
            (board, delta_score, done, info). An invalid move leaves the game
            untouched and reports info["valid"] = False.
        """
        result = apply_move(direction, self.board)
        if not result.valid:
            return self.board.copy(), 0, self.is_game_over(), {
                "valid": False,
                "destinations": result.destinations,
                "spawned": None,
                "spawned_hash": None,
            }

        if is_non_empty(self.board):
            self.history.append((self.score, encode_state(self.board)))

        self.board = result.grid
        self.score += result.delta_score
        self.move_count += 1
        spawned = self.add_random_tile()

        done = self.is_game_over()
        if done:
            logger.debug(f"Game over after {self.move_count} moves, score {self.score}")
        return self.board.copy(), result.delta_score, done, {
            "valid": True,
            "destinations": result.destinations,
            "spawned": spawned,
            "spawned_hash": encode_tile(spawned, self.size) if spawned is not None else None,
        }

    def undo(self) -> bool:
        """Restore the board and score preceding the last move, False if there is no history."""
        if not self.history:
            return False
        self.score, encoded = self.history.pop()
        self.board = decode_state(encoded, self.size)
        return True

    def is_game_over(self) -> bool:
        return is_terminal(self.board)

    def get_valid_moves(self) -> List[Direction]:
        return valid_moves(self.board)

    def get_state(self) -> np.ndarray:
        return self.board.copy()

    def get_score(self) -> int:
        return self.score

    def max_tile(self) -> int:
        return max_tile(self.board)

    def render(self):
        """
        Render the game board to the console.
        """
        width = 6 * self.size[1] + 1
        print("\n" + "-" * width)
        print(f"Score: {self.score}  Moves: {self.move_count}")
        for row in self.board:
            print("|", end="")
            for cell in row:
                if cell == 0:
                    print("".center(5), end="|")
                else:
                    print(str(cell).center(5), end="|")
            print("\n" + "-" * width)
        print("")
