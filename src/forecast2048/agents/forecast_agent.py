"""
Forecast engine: picks a move by looking a few plies ahead.

The engine expands, breadth first, every board reachable by a move followed by
a 2 or 4 spawning on any empty cell. Each path carries the probability of its
spawn sequence, estimated from the progress of the game. Expansion stops at a
depth or size budget, the boards of the last complete level are scored with
the heuristic utility, and the first move with the best damped expected
utility wins.
"""

from collections import deque
from typing import Dict, List, NamedTuple, Optional, Tuple
import logging
import math
import time

import numpy as np

from ..config import ForecastConfig, HeuristicConfig
from ..environment.encoding import encode_state, decode_state
from ..environment.engine import DIRECTIONS, Direction, apply_move, empty_cells, grid_sum
from .heuristics import utility

logger = logging.getLogger(__name__)

DEFAULT_FORECAST_CONFIG = ForecastConfig()

# keeps path probabilities strictly inside (0, 1) on boards far from a real game
SPAWN_PROB_EPSILON = 1e-3


class ForecastNode(NamedTuple):
    grid: np.ndarray  # encoded board
    originating_move: Optional[Direction]
    path_prob: float
    depth: int
    delta_score: int


def make_node(grid, originating_move: Optional[Direction] = None, path_prob: float = 1.0,
              depth: int = 0, delta_score: int = 0) -> ForecastNode:
    return ForecastNode(encode_state(grid), originating_move, path_prob, depth, delta_score)


def estimate_p2(grid, move_count: int, config: Optional[ForecastConfig] = None) -> float:
    """
    Estimate the probability that the next spawned tile is a 2.

    Beta-prior style estimate: every move spawned one tile, and the board sum
    tells how many of them were 4s. It corrects itself as the game goes on.
    """
    config = config or DEFAULT_FORECAST_CONFIG
    p = (config.prior_two + 2 * (move_count + 1) - 0.5 * grid_sum(grid)) / (
        config.prior_two + config.prior_four + move_count + 1
    )
    return min(max(p, SPAWN_PROB_EPSILON), 1 - SPAWN_PROB_EPSILON)


def _expand(root: ForecastNode, shape: Tuple[int, int], p2: float, max_depth: int,
            config: ForecastConfig) -> Optional[List[ForecastNode]]:
    """
    Breadth-first expansion from root.

    Returns the nodes of the last complete level as soon as a new level would
    exceed max_depth or the queue outgrew the size threshold, or None when the
    queue drains first (every path ended in a terminal board or was pruned).
    """
    queue = deque([root])
    cur_depth = root.depth

    while queue:
        node = queue.popleft()

        # stochastic pruning of unlikely paths, where too many 4s appeared
        if node.depth > 2 and node.path_prob ** (1 / node.depth) < config.path_prob_threshold:
            continue

        board = decode_state(node.grid, shape)
        for direction in DIRECTIONS:
            result = apply_move(direction, board)
            if not result.valid:
                continue

            origin = node.originating_move if node.originating_move is not None else direction
            child_depth = node.depth + 1
            delta_score = node.delta_score + result.delta_score

            for row, col in empty_cells(result.grid):
                for value, weight in ((2, p2), (4, 1 - p2)):
                    if child_depth != cur_depth and (
                        len(queue) > config.tree_size_threshold or child_depth > max_depth
                    ):
                        queue.appendleft(node)
                        return list(queue)

                    spawned = result.grid.copy()
                    spawned[row, col] = value
                    queue.append(ForecastNode(
                        encode_state(spawned), origin, node.path_prob * weight, child_depth, delta_score
                    ))
                    cur_depth = child_depth

    return None


def generate_leaves(grid, move_count: int, config: Optional[ForecastConfig] = None,
                    max_depth: Optional[int] = None) -> List[ForecastNode]:
    """
    Leaves of the forecast tree rooted at grid.

    When every path dies before reaching the depth budget, the search is
    retried with a budget one ply shorter. An empty list means the board is
    terminal; a list holding only the root means no complete level could be
    built below it.
    """
    config = config or DEFAULT_FORECAST_CONFIG
    grid = np.asarray(grid)
    root = make_node(grid)
    p2 = estimate_p2(grid, move_count, config)
    depth = config.max_depth if max_depth is None else max_depth

    while True:
        leaves = _expand(root, grid.shape, p2, depth, config)
        if leaves is not None:
            return leaves
        if depth <= 0:
            return []
        logger.debug(f"Forecast exhausted at depth budget {depth}, retrying with {depth - 1}")
        depth -= 1


def direction_scores(leaves: List[ForecastNode], shape: Tuple[int, int],
                     heuristic_config: Optional[HeuristicConfig] = None) -> Dict[Direction, Tuple[float, int]]:
    """
    Damped expected utility and leaf count of every originating move.

    The probability-weighted utility sum of a move is divided by
    count / ln(1 + count), which favours moves whose subtree kept many leaves.
    """
    totals = {direction: 0.0 for direction in DIRECTIONS}
    counts = {direction: 0 for direction in DIRECTIONS}

    for leaf in leaves:
        totals[leaf.originating_move] += leaf.path_prob * utility(decode_state(leaf.grid, shape), heuristic_config)
        counts[leaf.originating_move] += 1

    scores = {}
    for direction in DIRECTIONS:
        count = counts[direction]
        if count:
            scores[direction] = (totals[direction] / (count / math.log(1 + count)), count)
    return scores


def best_direction(scores: Dict[Direction, Tuple[float, int]]) -> Optional[Direction]:
    """Direction with the strictly highest score, earliest in DIRECTIONS on ties."""
    best_move = None
    best_score = -math.inf
    for direction in DIRECTIONS:
        if direction in scores and scores[direction][0] > best_score:
            best_score = scores[direction][0]
            best_move = direction
    return best_move


class Forecast(NamedTuple):
    move: Optional[Direction]
    leaves: List[ForecastNode]
    scores: Dict[Direction, Tuple[float, int]]


def forecast(grid, move_count: int, config: Optional[ForecastConfig] = None,
             heuristic_config: Optional[HeuristicConfig] = None) -> Forecast:
    """Run the search and score its leaves; the move is None when nothing below the root was built."""
    grid = np.asarray(grid)
    leaves = generate_leaves(grid, move_count, config)
    if not leaves or leaves[0].depth == 0:
        return Forecast(None, leaves, {})

    scores = direction_scores(leaves, grid.shape, heuristic_config)
    return Forecast(best_direction(scores), leaves, scores)


def choose_move(grid, move_count: int, config: Optional[ForecastConfig] = None,
                heuristic_config: Optional[HeuristicConfig] = None) -> Optional[Direction]:
    """
    Best move for the board, or None when no move can be forecast (game over).

    Ties are broken by the order UP, LEFT, RIGHT, DOWN.
    """
    return forecast(grid, move_count, config, heuristic_config).move


class ForecastAgent:
    """
    Agent wrapper around forecast, keeping its configuration and the
    statistics of the last search.
    """
    def __init__(self, config: Optional[ForecastConfig] = None,
                 heuristic_config: Optional[HeuristicConfig] = None):
        self.config = config or DEFAULT_FORECAST_CONFIG
        self.heuristic_config = heuristic_config or HeuristicConfig()
        self.last_search = {}
        self.logger = logging.getLogger(__name__)

    def get_move(self, state, move_count: int = 0) -> Optional[Direction]:
        """
        Get the best move using the forecast search.

        Args:
            state: Current board
            move_count: Number of moves played so far

        Returns:
            The chosen direction, None if the game is over
        """
        start_time = time.time()
        move, leaves, scores = forecast(state, move_count, self.config, self.heuristic_config)

        self.last_search = {
            "leaves": len(leaves),
            "depth": leaves[0].depth if leaves else 0,
            "scores": {direction.value: score for direction, (score, _) in scores.items()},
            "elapsed": time.time() - start_time,
        }
        self.logger.debug(
            f"Move {move_count}: {len(leaves)} leaves at depth {self.last_search['depth']}, "
            f"chose {move.value if move is not None else None} in {self.last_search['elapsed']:.3f}s"
        )
        return move
