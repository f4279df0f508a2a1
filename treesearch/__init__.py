"""Generic Monte Carlo Tree Search for sequential perfect-information games."""

from .core import GameState, SearchError, NoChildrenError, NoActionsAllowedError
from .ai import (
    MCTS, MCTSConfig, Node, play_move, play_move_timed,
    TimeConfig, TimeManager, create_time_manager,
)

__version__ = "0.1.0"
