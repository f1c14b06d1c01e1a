#!/usr/bin/env python
"""
Main entry point for the 2048 forecast agent evaluation.
"""

import logging
import os

from .agents.forecast_agent import ForecastAgent
from .config import ForecastConfig, HeuristicConfig, set_seeds
from .utils.cli import setup_logging, parse_args
from .utils.evaluation import evaluate_agent
from .utils.visualizations import visualize_board_trajectory, plot_evaluation_results

def write_results(results, args, results_file):
    with open(results_file, "w") as f:
        f.write("FORECAST AGENT EVALUATION RESULTS:\n")
        f.write(f"Max Depth: {args.max_depth}, Tree Size: {args.tree_size}, "
                f"Path Probability Threshold: {args.path_prob_threshold}, Degree: {args.degree}\n")
        f.write(f"Average Max Tile: {results['avg_max_tile']:.1f}\n")
        f.write(f"Average Score: {results['avg_score']:.1f}\n")
        f.write(f"Average Steps: {results['avg_steps']:.1f}\n")
        f.write(f"Best Max Tile: {results['max_tile_reached']}\n")

        f.write("\nTile Distribution:\n")
        for tile, count in sorted(results['tile_counts'].items()):
            f.write(f"  {tile}: {count} games ({count/args.games*100:.1f}%)\n")

def main(argv=None):
    """Main function to run the forecast agent evaluation."""
    args = parse_args(argv)

    os.makedirs(args.output_dir, exist_ok=True)
    setup_logging(os.path.join(args.output_dir, "evaluation.log"), args.log_level)
    set_seeds(args.seed)

    agent = ForecastAgent(
        ForecastConfig(
            max_depth=args.max_depth,
            tree_size_threshold=args.tree_size,
            path_prob_threshold=args.path_prob_threshold,
        ),
        HeuristicConfig(degree=args.degree),
    )

    logging.info(f"Max depth: {args.max_depth}")
    logging.info(f"Tree size threshold: {args.tree_size}")
    logging.info(f"Path probability threshold: {args.path_prob_threshold}")
    logging.info(f"Number of games: {args.games}")

    try:
        results = evaluate_agent(
            agent,
            num_games=args.games,
            max_steps=args.max_steps,
            seed=args.seed,
            render=args.render,
            save_trajectories=args.plot,
        )
    except Exception:
        logging.exception("Evaluation failed")
        raise

    results_file = os.path.join(args.output_dir, "forecast_results.txt")
    write_results(results, args, results_file)
    logging.info(f"Results saved to {results_file}")

    if args.plot and results['trajectories']:
        plot_evaluation_results(results, os.path.join(args.output_dir, "evaluation_results.png"))
        best = max(results['trajectories'], key=lambda game: game['score'])
        visualize_board_trajectory(
            best['states'],
            filename=os.path.join(args.output_dir, "best_game_trajectory.png"),
            title=f"Best game: Max Tile = {best['max_tile']}, Score = {best['score']}",
        )

    logging.info("Evaluation complete!")
    return results

if __name__ == "__main__":
    main()
