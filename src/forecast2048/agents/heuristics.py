"""
Heuristic evaluation of 2048 boards.

A board is scored on four independent axes, each normalised to [0, 1]:

    monotonicity  how consistently tiles increase or decrease along rows and columns
    emptiness     fraction of free cells
    mergeability  penalty for gaps in the ladder of tile ranks below the highest tile
    highest tile  progress of the highest tile towards the victory threshold

The utility is their weighted geometric mean.
"""

from typing import Dict, Optional
import math

import numpy as np

from ..config import HeuristicConfig, Shaping, VICTORY_THRESHOLD

DEFAULT_CONFIG = HeuristicConfig()
IDENTITY = Shaping()


def _monotonic_pairs(grid: np.ndarray):
    """Count non-decreasing and non-increasing adjacent pairs along each axis."""
    grid = grid.astype(np.int64)
    horizontal = np.diff(grid, axis=1)
    vertical = np.diff(grid, axis=0)
    inc_h = int(np.count_nonzero(horizontal >= 0))
    dec_h = int(np.count_nonzero(horizontal <= 0))
    inc_v = int(np.count_nonzero(vertical >= 0))
    dec_v = int(np.count_nonzero(vertical <= 0))
    return inc_h, dec_h, inc_v, dec_v


def _raw_monotonicity(grid: np.ndarray) -> float:
    n, m = grid.shape
    pairs = (n - 1) * m + n * (m - 1)
    inc_h, dec_h, inc_v, dec_v = _monotonic_pairs(grid)
    # every pair counts at least once per axis, so the sum never drops below pairs / 2
    return (max(inc_h, dec_h) + max(inc_v, dec_v) - pairs / 2) / (pairs / 2)


def _raw_emptiness(grid: np.ndarray) -> float:
    # at least one tile is always on the board
    return np.count_nonzero(grid == 0) / (grid.size - 1)


def _raw_mergeability(grid: np.ndarray) -> float:
    top = int(np.max(grid))
    if top < 4:
        return 1.0
    log_max = top.bit_length() - 1
    ranks = {int(tile).bit_length() - 1 for tile in np.unique(grid) if tile}
    missing = sum(1 for rank in range(1, log_max) if rank not in ranks)
    return 1 - 0.8 * missing / (log_max - 1)


def _raw_highest_tile(grid: np.ndarray, victory_threshold: int) -> float:
    top = int(np.max(grid))
    if top <= 0:
        return 0.0
    return min(math.log2(top) / math.log2(victory_threshold), 1.0)


def monotonicity_score(grid, shaping: Shaping = IDENTITY) -> float:
    """1 for a fully monotonic board, 0 for a maximally alternating one."""
    return shaping(_raw_monotonicity(np.asarray(grid)))


def emptiness_score(grid, shaping: Shaping = IDENTITY) -> float:
    return shaping(_raw_emptiness(np.asarray(grid)))


def mergeability_score(grid, shaping: Shaping = IDENTITY) -> float:
    return shaping(_raw_mergeability(np.asarray(grid)))


def highest_tile_score(grid, shaping: Shaping = IDENTITY, victory_threshold: int = VICTORY_THRESHOLD) -> float:
    return shaping(_raw_highest_tile(np.asarray(grid), victory_threshold))


def heuristics(grid, config: Optional[HeuristicConfig] = None) -> Dict[str, float]:
    """Raw (unshaped) heuristic components of a board."""
    config = config or DEFAULT_CONFIG
    grid = np.asarray(grid)
    return {
        "monotonicity": _raw_monotonicity(grid),
        "emptiness": _raw_emptiness(grid),
        "mergeability": _raw_mergeability(grid),
        "highest_tile": _raw_highest_tile(grid, config.victory_threshold),
    }


def utility(grid, config: Optional[HeuristicConfig] = None) -> float:
    """
    Weighted geometric mean of the shaped heuristic components.

    Any board holding the victory tile gets the maximum utility 1.
    """
    config = config or DEFAULT_CONFIG
    scores = heuristics(grid, config)
    if scores["highest_tile"] >= 1:
        return 1.0

    shape = config.shaping
    d = config.degree
    return (
        shape(scores["emptiness"]) ** (d * config.alpha)
        * shape(scores["monotonicity"]) ** (d * config.beta)
        * shape(scores["mergeability"]) ** (d * config.gamma)
        * shape(scores["highest_tile"]) ** (d * config.highest_tile_weight)
    )
