import argparse
import logging
import sys

from ..config import DEFAULT_TREE_DEPTH, FORECAST_TREE_SIZE_THRESHOLD, PATH_PROB_THRESHOLD, HYPERPARAMS

def setup_logging(log_file="evaluation.log", level="INFO"):
    """
    Set up logging configuration.

    Args:
        log_file: Path to the log file
        level: Name of the root logging level
    """
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format='%(asctime)s - %(levelname)s - %(message)s',
        handlers=[
            logging.FileHandler(log_file, encoding='utf-8'),
            logging.StreamHandler(sys.stdout)
        ]
    )

def parse_args(args=None):
    """
    Parse command-line arguments.

    Args:
        args: Command-line arguments (defaults to sys.argv)

    Returns:
        Parsed arguments
    """
    parser = argparse.ArgumentParser(
        description="2048 Forecast Agent Evaluation"
    )

    # General options
    parser.add_argument("--seed", type=int, default=42,
                        help="Random seed (default: 42)")
    parser.add_argument("--output-dir", type=str, default="evaluation_results",
                        help="Directory to save results (default: evaluation_results)")
    parser.add_argument("--log-level", type=str, default="INFO",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
                        help="Logging level (default: INFO)")

    # Evaluation options
    parser.add_argument("--games", type=int, default=10,
                        help="Number of games to play in evaluation (default: 10)")
    parser.add_argument("--render", action="store_true",
                        help="Render the games during evaluation")
    parser.add_argument("--max-steps", type=int, default=1000,
                        help="Maximum steps per game (default: 1000)")
    parser.add_argument("--plot", action="store_true",
                        help="Save plots of the results and of the best game")

    # Forecast options
    parser.add_argument("--max-depth", type=int, default=DEFAULT_TREE_DEPTH,
                        help=f"Maximum forecast depth in plies (default: {DEFAULT_TREE_DEPTH})")
    parser.add_argument("--tree-size", type=int, default=FORECAST_TREE_SIZE_THRESHOLD,
                        help=f"Queue size that stops the forecast at a new level (default: {FORECAST_TREE_SIZE_THRESHOLD})")
    parser.add_argument("--path-prob-threshold", type=float, default=PATH_PROB_THRESHOLD,
                        help=f"Per-ply path probability below which paths are pruned (default: {PATH_PROB_THRESHOLD})")
    parser.add_argument("--degree", type=float, default=HYPERPARAMS["degree"],
                        help=f"Degree of the utility function (default: {HYPERPARAMS['degree']})")

    return parser.parse_args(args)
