"""
Move-selection agents for 2048.
"""

from .heuristics import heuristics, utility
from .forecast_agent import ForecastAgent, choose_move, estimate_p2, forecast, generate_leaves
