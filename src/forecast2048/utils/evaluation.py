"""
Self-play evaluation of 2048 agents.
"""

import logging
import time
from collections import defaultdict

import numpy as np
from tqdm import tqdm

from ..environment.engine import Direction, max_tile
from ..environment.game2048 import Game2048

logger = logging.getLogger(__name__)


def play_game(agent, env, max_steps=1000, render=False):
    """
    Play one game until the agent gives up, the board is terminal or max_steps is reached.

    The agent must expose get_move(state, move_count) returning a direction or None.

    Returns:
        Dictionary with the states, moves and rewards of the game
    """
    states = [env.get_state()]
    moves = []
    rewards = []
    first_reached = {}

    while env.move_count < max_steps and not env.is_game_over():
        move = agent.get_move(env.get_state(), env.move_count)
        if move is None:
            break
        move = Direction(move)

        state, reward, done, info = env.step(move)
        if not info["valid"]:
            # an agent choosing a move that does nothing would loop forever
            logger.warning(f"Agent chose {move.value}, which does not change the board; stopping the game")
            break

        moves.append(move)
        rewards.append(reward)
        states.append(state)

        current_max_tile = max_tile(state)
        if current_max_tile >= 16 and current_max_tile not in first_reached:
            first_reached[current_max_tile] = env.move_count
            if current_max_tile >= 256:
                logger.info(f"Achieved {current_max_tile} tile at move {env.move_count}")

        if render:
            print(f"Step {env.move_count}, Action: {move.value}, Reward: {reward}")
            env.render()

        if done:
            break

    return {
        'states': states,
        'actions': moves,
        'rewards': rewards,
        'max_tile': env.max_tile(),
        'score': env.get_score(),
        'steps': env.move_count,
        'first_reached': first_reached,
    }


def evaluate_agent(agent, num_games=10, max_steps=1000, seed=None, render=False, save_trajectories=False):
    """
    Evaluate an agent's performance on the 2048 game.

    Args:
        agent: Agent to evaluate
        num_games: Number of games to play
        max_steps: Maximum number of moves per game
        seed: Seed of the first game, following games use seed + index
        render: Whether to render the games (print board states)
        save_trajectories: Whether to keep full game trajectories for analysis

    Returns:
        Dictionary with evaluation results
    """
    env = Game2048()
    max_tiles = []
    scores = []
    steps = []
    durations = []
    tile_progression = defaultdict(list)  # Track when each tile value is first achieved
    all_trajectories = []

    for game_idx in tqdm(range(num_games), desc="Evaluating"):
        env.reset(None if seed is None else seed + game_idx)
        start_time = time.time()
        game = play_game(agent, env, max_steps=max_steps, render=render)
        durations.append(time.time() - start_time)

        max_tiles.append(game['max_tile'])
        scores.append(game['score'])
        steps.append(game['steps'])
        for tile, step in game['first_reached'].items():
            tile_progression[tile].append(step)
        if save_trajectories:
            all_trajectories.append(game)

        logger.info(
            f"Game {game_idx+1}/{num_games} completed: Score = {game['score']}, "
            f"Max Tile = {game['max_tile']}, Steps = {game['steps']}, Time = {durations[-1]:.1f}s"
        )

    avg_max_tile = float(np.mean(max_tiles)) if max_tiles else 0.0
    avg_score = float(np.mean(scores)) if scores else 0.0
    avg_steps = float(np.mean(steps)) if steps else 0.0
    max_tile_reached = int(np.max(max_tiles)) if max_tiles else 0

    # Count occurrences of each tile
    tile_counts = {}
    for tile in max_tiles:
        tile_counts[tile] = tile_counts.get(tile, 0) + 1

    avg_tile_progression = {tile: sum(step_list) / len(step_list)
                            for tile, step_list in tile_progression.items()}

    logger.info("=" * 40)
    logger.info(f"Evaluation over {num_games} games:")
    logger.info(f"Average Max Tile: {avg_max_tile:.1f}")
    logger.info(f"Average Score: {avg_score:.1f}")
    logger.info(f"Average Steps: {avg_steps:.1f}")
    logger.info(f"Best Max Tile: {max_tile_reached}")
    logger.info("Tile distribution:")
    for tile, count in sorted(tile_counts.items()):
        logger.info(f"  {tile}: {count} games ({count/num_games*100:.1f}%)")

    return {
        'max_tiles': max_tiles,
        'scores': scores,
        'steps': steps,
        'durations': durations,
        'avg_max_tile': avg_max_tile,
        'avg_score': avg_score,
        'avg_steps': avg_steps,
        'max_tile_reached': max_tile_reached,
        'tile_counts': tile_counts,
        'tile_progression': avg_tile_progression,
        'trajectories': all_trajectories if save_trajectories else None
    }
