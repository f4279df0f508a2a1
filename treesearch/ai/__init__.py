"""Search components: MCTS engine and time management."""

from .mcts import MCTS, MCTSConfig, Node, play_move, play_move_timed
from .time_manager import TimeConfig, TimeManager, create_time_manager
