import math
import random
from dataclasses import dataclass, field
from enum import Enum

import numpy as np

def set_seeds(seed: int = 42) -> None:
    random.seed(seed)
    np.random.seed(seed)

# Game constants. The encoding layout depends on these, changing them breaks stored histories.
GAME_GRID_SIZE_N = 4
GAME_GRID_SIZE_M = 4
ENCODING_BITS = 5
TILE_2_PROBABILITY = 0.9
VICTORY_THRESHOLD = 2048
GRID_HISTORY_MAX_LENGTH = 20

# Forecast search budget defaults
DEFAULT_TREE_DEPTH = 3
FORECAST_TREE_SIZE_THRESHOLD = 1000
PATH_PROB_THRESHOLD = 0.25

# External hyperparameters dictionary for easy configuration.
HYPERPARAMS = {
    "alpha": 0.2,   # weight of emptiness
    "beta": 0.4,    # weight of monotonicity
    "gamma": 0.15,  # weight of mergeability
    "degree": 8,    # degree of homogeneity, no less than the reciprocal of the lowest weight
    "prior_two": 1.0,
    "prior_four": 1.0,
}


class ScoringFunction(Enum):
    """Monotone maps of [0, 1] onto itself applied to each heuristic component."""

    IDENTITY = "identity"
    POWER = "power"
    NEGATIVE_EXPONENTIAL = "negative_exponential"
    HYPERBOLIC = "hyperbolic"
    SIGMOID = "sigmoid"


@dataclass(frozen=True)
class Shaping:
    """
    A scoring function together with its steepness parameter.

    Every variant satisfies f(0) = 0 and f(1) = 1, so shaped components stay
    comparable with the unshaped ones.
    """

    kind: ScoringFunction = ScoringFunction.IDENTITY
    parameter: float = 2.0

    def __post_init__(self):
        if self.kind is not ScoringFunction.IDENTITY and self.parameter <= 0:
            raise ValueError(f"{self.kind.value} shaping needs a positive parameter, got {self.parameter}")

    def __call__(self, x: float) -> float:
        k = self.parameter
        if self.kind is ScoringFunction.IDENTITY:
            return x
        if self.kind is ScoringFunction.POWER:
            return x ** k
        if self.kind is ScoringFunction.NEGATIVE_EXPONENTIAL:
            return (1 - math.exp(-k * x)) / (1 - math.exp(-k))
        if self.kind is ScoringFunction.HYPERBOLIC:
            return math.tanh(k * x) / math.tanh(k)
        # sigmoid centred on 0.5, stretched so the endpoints are fixed
        low = 1 / (1 + math.exp(k / 2))
        high = 1 / (1 + math.exp(-k / 2))
        return (1 / (1 + math.exp(-k * (x - 0.5))) - low) / (high - low)


@dataclass(frozen=True)
class HeuristicConfig:
    """Weights and shaping of the board utility (a Cobb-Douglas style geometric mean)."""

    alpha: float = HYPERPARAMS["alpha"]
    beta: float = HYPERPARAMS["beta"]
    gamma: float = HYPERPARAMS["gamma"]
    degree: float = HYPERPARAMS["degree"]
    victory_threshold: int = VICTORY_THRESHOLD
    shaping: Shaping = field(default_factory=Shaping)

    def __post_init__(self):
        if min(self.alpha, self.beta, self.gamma) < 0:
            raise ValueError("heuristic weights must be non-negative")
        if self.alpha + self.beta + self.gamma >= 1:
            raise ValueError(
                f"alpha + beta + gamma must be below 1, got {self.alpha + self.beta + self.gamma}"
            )
        if self.degree <= 0:
            raise ValueError(f"degree must be positive, got {self.degree}")
        if self.victory_threshold < 4:
            raise ValueError(f"victory threshold must be a tile value >= 4, got {self.victory_threshold}")

    @property
    def highest_tile_weight(self) -> float:
        return 1 - self.alpha - self.beta - self.gamma


@dataclass(frozen=True)
class ForecastConfig:
    """Search budget of the forecast engine and the prior of the spawn estimator."""

    max_depth: int = DEFAULT_TREE_DEPTH
    tree_size_threshold: int = FORECAST_TREE_SIZE_THRESHOLD
    path_prob_threshold: float = PATH_PROB_THRESHOLD
    prior_two: float = HYPERPARAMS["prior_two"]
    prior_four: float = HYPERPARAMS["prior_four"]

    def __post_init__(self):
        if self.max_depth < 0:
            raise ValueError(f"max_depth must be >= 0, got {self.max_depth}")
        if self.tree_size_threshold < 1:
            raise ValueError(f"tree_size_threshold must be >= 1, got {self.tree_size_threshold}")
        if not 0 < self.path_prob_threshold < 1:
            raise ValueError(f"path_prob_threshold must be in (0, 1), got {self.path_prob_threshold}")
        if self.prior_two <= 0 or self.prior_four <= 0:
            raise ValueError("prior pseudo-counts must be positive")
