import matplotlib

matplotlib.use("Agg")

import numpy as np
import pytest

from forecast2048.config import set_seeds
from forecast2048.environment.engine import valid_moves


@pytest.fixture(autouse=True)
def seeded():
    set_seeds(42)


class FirstValidAgent:
    """Plays the first valid direction in UP, LEFT, RIGHT, DOWN order."""

    def get_move(self, state, move_count=0):
        moves = valid_moves(state)
        return moves[0] if moves else None


@pytest.fixture
def first_valid_agent():
    return FirstValidAgent()


def reachable_boards(num_games=3, max_moves=150, seed=7):
    """Boards met while playing random valid moves from fresh games."""
    from forecast2048.environment.game2048 import Game2048

    rng = np.random.RandomState(seed)
    boards = []
    game = Game2048()
    for game_idx in range(num_games):
        game.reset(seed + game_idx)
        boards.append(game.get_state())
        while game.move_count < max_moves:
            moves = game.get_valid_moves()
            if not moves:
                break
            game.step(moves[rng.randint(len(moves))])
            boards.append(game.get_state())
    return boards
