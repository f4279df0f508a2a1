"""Core contracts: the game state interface and search errors."""

from .state import GameState, Action
from .errors import SearchError, NoChildrenError, NoActionsAllowedError
