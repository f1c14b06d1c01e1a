import math

import numpy as np
import pytest

from forecast2048.agents.forecast_agent import (
    SPAWN_PROB_EPSILON,
    ForecastAgent,
    best_direction,
    choose_move,
    forecast,
    direction_scores,
    estimate_p2,
    generate_leaves,
    make_node,
)
from forecast2048.config import ForecastConfig
from forecast2048.environment.encoding import decode_state
from forecast2048.environment.engine import Direction, valid_moves

# only two tiles can merge, and every board they lead to is over
ONE_MOVE_LEFT = np.array([[32, 32, 8, 32], [8, 16, 4, 16], [2, 8, 16, 2], [8, 4, 8, 4]])
GAME_OVER = np.array([[32, 64, 8, 32], [8, 16, 4, 16], [2, 8, 16, 2], [8, 4, 8, 4]])


def test_estimate_p2():
    start = np.zeros((4, 4), dtype=np.int64)
    start[3, 3] = 2
    assert estimate_p2(start, 0) == pytest.approx(2 / 3)

    deep = np.array([[128, 4, 2, 4], [256, 8, 16, 2], [64, 2, 0, 0], [8, 0, 0, 0]])
    assert estimate_p2(deep, 220) == pytest.approx((1 + 442 - 247) / 223)


def test_estimate_p2_stays_a_probability():
    assert estimate_p2(np.full((4, 4), 2048), 0) == SPAWN_PROB_EPSILON
    assert estimate_p2(np.zeros((4, 4)), 1000) == 1 - SPAWN_PROB_EPSILON


def test_one_step_forecast():
    grid = np.array([[0, 8, 4, 2], [0, 2, 64, 128], [8, 64, 4, 2], [4, 2, 16, 8]])
    p2 = 131 / 146
    up = [[8, 8, 4, 2], [4, 2, 64, 128], [0, 64, 4, 2], [0, 2, 16, 8]]
    left = [[8, 4, 2, 0], [2, 64, 128, 0], [8, 64, 4, 2], [4, 2, 16, 8]]

    expected = []
    for move, board, cells in ((Direction.UP, up, [(2, 0), (3, 0)]),
                               (Direction.LEFT, left, [(0, 3), (1, 3)])):
        for row, col in cells:
            for value, prob in ((2, p2), (4, 1 - p2)):
                spawned = np.array(board)
                spawned[row, col] = value
                expected.append((move, spawned.tolist(), prob))

    leaves = generate_leaves(grid, 143, ForecastConfig(max_depth=1))
    assert len(leaves) == len(expected)
    for leaf, (move, board, prob) in zip(leaves, expected):
        assert leaf.originating_move is move
        assert decode_state(leaf.grid).tolist() == board
        assert leaf.path_prob == pytest.approx(prob)
        assert leaf.depth == 1
        assert leaf.delta_score == 0


def test_leaves_share_one_depth():
    grid = np.array([[0, 8, 4, 2], [0, 2, 64, 128], [8, 64, 4, 2], [4, 2, 16, 8]])
    leaves = generate_leaves(grid, 143, ForecastConfig(max_depth=2))
    assert leaves
    assert {leaf.depth for leaf in leaves} == {2}
    assert all(0 < leaf.path_prob <= 1 for leaf in leaves)


def test_size_threshold_stops_at_complete_level():
    grid = np.zeros((4, 4), dtype=np.int64)
    grid[0, 0] = grid[3, 3] = 2
    leaves = generate_leaves(grid, 1, ForecastConfig(max_depth=5, tree_size_threshold=5))
    assert len(leaves) == 4 * 14 * 2
    assert {leaf.depth for leaf in leaves} == {1}
    for direction in (Direction.UP, Direction.LEFT, Direction.RIGHT, Direction.DOWN):
        assert sum(leaf.originating_move is direction for leaf in leaves) == 28


def test_unlikely_paths_are_pruned():
    grid = np.array([[2, 0], [0, 0]])
    config = ForecastConfig(max_depth=4, tree_size_threshold=10 ** 6, path_prob_threshold=0.99)
    leaves = generate_leaves(grid, 0, config)
    assert leaves
    assert {leaf.depth for leaf in leaves} == {2}


def test_score_deltas_accumulate_along_paths():
    grid = np.array([[2, 2], [0, 0]])
    leaves = generate_leaves(grid, 0, ForecastConfig(max_depth=2))
    left = [leaf.delta_score for leaf in leaves if leaf.originating_move is Direction.LEFT]
    down = [leaf.delta_score for leaf in leaves if leaf.originating_move is Direction.DOWN]
    assert min(left) == 4 and max(left) == 12
    assert max(down) == 4
    assert not any(leaf.originating_move is Direction.UP for leaf in leaves)


def test_horizon_shrinks_until_root():
    leaves = generate_leaves(ONE_MOVE_LEFT, 500)
    assert len(leaves) == 1
    assert leaves[0].depth == 0
    assert leaves[0].originating_move is None
    assert np.array_equal(decode_state(leaves[0].grid), ONE_MOVE_LEFT)
    assert choose_move(ONE_MOVE_LEFT, 500) is None


def test_terminal_board_has_no_leaves():
    assert generate_leaves(GAME_OVER, 500) == []
    assert choose_move(GAME_OVER, 500) is None


def test_zero_depth_budget_returns_root():
    leaves = generate_leaves(np.array([[2, 2], [0, 0]]), 0, ForecastConfig(max_depth=0))
    assert len(leaves) == 1 and leaves[0].depth == 0


def test_chosen_move_is_valid():
    grid = np.array([[4, 2, 4, 2], [8, 512, 64, 4], [1024, 256, 32, 16], [64, 8, 8, 2]])
    move = choose_move(grid, 909, ForecastConfig(max_depth=2))
    assert move in (Direction.LEFT, Direction.RIGHT)

    start = np.zeros((4, 4), dtype=np.int64)
    start[0, :2] = 2
    assert choose_move(start, 0, ForecastConfig(max_depth=1)) in valid_moves(start)


def test_direction_scores_damp_by_leaf_count():
    victory = np.zeros((4, 4), dtype=np.int64)
    victory[0, 0] = 2048
    leaves = [make_node(victory, Direction.LEFT, 0.5, 1), make_node(victory, Direction.LEFT, 0.5, 1)]
    scores = direction_scores(leaves, (4, 4))
    assert set(scores) == {Direction.LEFT}
    score, count = scores[Direction.LEFT]
    assert count == 2
    assert score == pytest.approx(1.0 / (2 / math.log(3)))


def test_best_direction_breaks_ties_in_fixed_order():
    assert best_direction({Direction.RIGHT: (0.5, 3), Direction.LEFT: (0.5, 3), Direction.DOWN: (0.2, 1)}) \
        is Direction.LEFT
    assert best_direction({Direction.DOWN: (0.7, 1), Direction.UP: (0.7, 2)}) is Direction.UP
    assert best_direction({Direction.DOWN: (0.9, 1), Direction.UP: (0.7, 2)}) is Direction.DOWN
    assert best_direction({}) is None


def test_forecast_reports_leaves_and_scores():
    start = np.zeros((4, 4), dtype=np.int64)
    start[0, :2] = 2
    config = ForecastConfig(max_depth=1)
    move, leaves, scores = forecast(start, 0, config)
    assert move is choose_move(start, 0, config)
    assert move is best_direction(scores)
    assert sum(count for _, count in scores.values()) == len(leaves)

    move, leaves, scores = forecast(ONE_MOVE_LEFT, 500)
    assert move is None
    assert len(leaves) == 1
    assert scores == {}


def test_agent_records_last_search():
    agent = ForecastAgent(ForecastConfig(max_depth=1))
    start = np.zeros((4, 4), dtype=np.int64)
    start[0, :2] = 2
    move = agent.get_move(start, 0)
    assert move in valid_moves(start)
    assert agent.last_search["depth"] == 1
    assert agent.last_search["leaves"] > 0
    assert move.value in agent.last_search["scores"]

    assert agent.get_move(GAME_OVER, 10) is None
    assert agent.last_search["leaves"] == 0


def test_invalid_forecast_configurations_raise():
    with pytest.raises(ValueError):
        ForecastConfig(max_depth=-1)
    with pytest.raises(ValueError):
        ForecastConfig(tree_size_threshold=0)
    with pytest.raises(ValueError):
        ForecastConfig(path_prob_threshold=1.5)
