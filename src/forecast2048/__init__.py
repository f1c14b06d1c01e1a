"""2048 move engine with a forecasting move-selection AI."""

__version__ = "0.1.0"

# Import key components for convenient access
from .environment.engine import Direction, apply_move, spawn_tile, is_terminal
from .environment.encoding import encode_state, decode_state
from .environment.game2048 import Game2048
from .agents.forecast_agent import ForecastAgent, choose_move
from .config import ForecastConfig, HeuristicConfig, set_seeds
