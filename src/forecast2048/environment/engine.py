"""
Move engine for 2048 boards.

Every direction is reduced to a single row operation, stack-left, through
transpositions and row reversals:

    LEFT  = stack_left
    RIGHT = reverse -> stack_left -> reverse
    UP    = transpose -> stack_left -> transpose
    DOWN  = transpose -> reverse -> stack_left -> reverse -> transpose

Boards are numpy integer arrays. Functions never modify their inputs.
"""

from enum import Enum
from typing import Dict, List, NamedTuple, Optional, Tuple
import itertools

import numpy as np

from ..config import ENCODING_BITS, GAME_GRID_SIZE_N, GAME_GRID_SIZE_M, TILE_2_PROBABILITY
from .encoding import SpawnedTile, decode_row, encode_row, tile_exponent


class Direction(str, Enum):
    """Valid move directions."""

    UP = "UP"
    LEFT = "LEFT"
    RIGHT = "RIGHT"
    DOWN = "DOWN"


# Fixed enumeration order, also used to break ties between moves
DIRECTIONS = (Direction.UP, Direction.LEFT, Direction.RIGHT, Direction.DOWN)


class MoveResult(NamedTuple):
    grid: np.ndarray
    delta_score: int
    destinations: np.ndarray  # signed slide distance of every tile, for animations
    valid: bool


RowResult = Tuple[Tuple[int, ...], int, Tuple[int, ...]]

# Rows of this width with tiles up to 2**LOOKUP_MAX_EXPONENT are served from ROW_LOOKUP
LOOKUP_WIDTH = GAME_GRID_SIZE_M
LOOKUP_MAX_EXPONENT = 15


def new_grid(n: int = GAME_GRID_SIZE_N, m: int = GAME_GRID_SIZE_M) -> np.ndarray:
    return np.zeros((n, m), dtype=np.int64)


def copy_grid(grid) -> np.ndarray:
    return np.array(grid, dtype=np.int64)


def transpose(grid) -> np.ndarray:
    return np.ascontiguousarray(np.asarray(grid).T)


def reverse(grid) -> np.ndarray:
    """Reverse the order of the tiles in every row."""
    return np.ascontiguousarray(np.asarray(grid)[:, ::-1])


def change_sign(grid) -> np.ndarray:
    return -np.asarray(grid)


def zero_count(grid) -> int:
    return int(np.count_nonzero(np.asarray(grid) == 0))


def grid_sum(grid) -> int:
    return int(np.sum(grid))


def max_tile(grid) -> int:
    return int(np.max(grid))


def is_non_empty(grid) -> bool:
    return bool(np.any(np.asarray(grid) != 0))


def empty_cells(grid) -> List[Tuple[int, int]]:
    """Coordinates of the empty cells in row-major order."""
    rows, cols = np.nonzero(np.asarray(grid) == 0)
    return list(zip(rows.tolist(), cols.tolist()))


def stack_row(row) -> RowResult:
    """
    Slide the tiles of a row towards index 0, merging equal neighbours.

    A tile produced by a merge does not merge again within the same move.

    Returns:
        (new_row, delta_score, offsets) where offsets[i] is the signed distance
        travelled by the tile originally at index i (0 for empty cells)
    """
    stacked = []
    offsets = [0] * len(row)
    delta_score = 0
    merged_last = False

    for i, tile in enumerate(row):
        if tile == 0:
            continue
        if stacked and stacked[-1] == tile and not merged_last:
            stacked[-1] *= 2
            delta_score += stacked[-1]
            merged_last = True
        else:
            stacked.append(tile)
            merged_last = False
        offsets[i] = len(stacked) - 1 - i

    new_row = tuple(stacked) + (0,) * (len(row) - len(stacked))
    return new_row, delta_score, tuple(offsets)


def build_row_lookup(width: int = LOOKUP_WIDTH, max_exponent: int = LOOKUP_MAX_EXPONENT) -> Dict[int, RowResult]:
    """
    Stack-left result of every row whose tiles are at most 2**max_exponent.

    The table is keyed by the encoded row (see encode_row).
    """
    table = {}
    for exponents in itertools.product(range(max_exponent + 1), repeat=width):
        key = 0
        for count, exponent in enumerate(exponents):
            key |= exponent << (ENCODING_BITS * count)
        table[key] = stack_row(tuple(decode_row(key, width)))
    return table


# Built once at import and only read afterwards
ROW_LOOKUP: Dict[int, RowResult] = build_row_lookup()


def lookup_row(row) -> RowResult:
    """Stack-left result of a row, from ROW_LOOKUP when the row is covered by it."""
    row = tuple(int(tile) for tile in row)
    if len(row) == LOOKUP_WIDTH and max(tile_exponent(tile) for tile in row) <= LOOKUP_MAX_EXPONENT:
        return ROW_LOOKUP[encode_row(row)]
    return stack_row(row)


def stack_left(grid) -> MoveResult:
    """Apply stack-left to every row of the board independently."""
    grid = np.asarray(grid)
    new = np.zeros(grid.shape, dtype=np.int64)
    destinations = np.zeros(grid.shape, dtype=np.int64)
    delta_score = 0

    for i, row in enumerate(grid.tolist()):
        new_row, row_delta, offsets = lookup_row(row)
        new[i] = new_row
        destinations[i] = offsets
        delta_score += row_delta

    return MoveResult(new, delta_score, destinations, bool(destinations.sum() != 0))


def apply_move(direction: Direction, grid) -> MoveResult:
    """
    Apply a move to the board.

    Destinations are expressed in the frame of the input board: negative values
    move towards row/column 0, positive values towards the opposite edge.
    A move is valid iff at least one tile slides; an invalid move returns an
    unchanged copy of the board and a zero score delta.
    """
    direction = Direction(direction)
    grid = np.asarray(grid)

    if direction is Direction.LEFT:
        result = stack_left(grid)
        new, destinations = result.grid, result.destinations
    elif direction is Direction.RIGHT:
        result = stack_left(reverse(grid))
        new = reverse(result.grid)
        destinations = change_sign(reverse(result.destinations))
    elif direction is Direction.UP:
        result = stack_left(transpose(grid))
        new = transpose(result.grid)
        destinations = transpose(result.destinations)
    else:
        result = stack_left(reverse(transpose(grid)))
        new = transpose(reverse(result.grid))
        destinations = transpose(change_sign(reverse(result.destinations)))

    valid = bool(destinations.sum() != 0)
    if not valid:
        return MoveResult(copy_grid(grid), 0, destinations, False)
    return MoveResult(new, result.delta_score, destinations, True)


def spawn_tile(grid, deterministic: bool = False) -> Tuple[np.ndarray, Optional[SpawnedTile]]:
    """
    Add a random tile (2 or 4) to an empty cell.

    The cell is chosen uniformly among the empty ones and the tile is a 2 with
    probability TILE_2_PROBABILITY. In deterministic mode the first empty cell
    in row-major order always receives a 2.

    Returns:
        The new board and the placed tile, or an unchanged copy and None when
        the board is full
    """
    new = copy_grid(grid)
    cells = empty_cells(new)
    if not cells:
        return new, None

    if deterministic:
        row, col = cells[0]
        value = 2
    else:
        row, col = cells[np.random.randint(len(cells))]
        value = 2 if np.random.random() < TILE_2_PROBABILITY else 4

    new[row, col] = value
    return new, SpawnedTile(row, col, value)


def is_terminal(grid) -> bool:
    """True iff the board is full and no direction moves a tile."""
    if zero_count(grid) > 0:
        return False
    return not any(apply_move(direction, grid).valid for direction in DIRECTIONS)


def valid_moves(grid) -> List[Direction]:
    return [direction for direction in DIRECTIONS if apply_move(direction, grid).valid]
