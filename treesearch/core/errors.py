"""Fatal search errors raised when a GameState breaks its contract."""

from __future__ import annotations
from typing import Optional


class SearchError(Exception):
    """Base class for errors that abort a search."""

    def __init__(self, message: str, depth: int, state_description: str,
                 iteration: Optional[int] = None):
        self.depth = depth
        self.state_description = state_description
        self.iteration = iteration

        details = f"depth={depth}"
        if iteration is not None:
            details += f", iteration={iteration}"
        super().__init__(f"{message} ({details}, state={state_description})")


class NoChildrenError(SearchError):
    """A node had no children when one had to be selected."""

    def __init__(self, depth: int, state_description: str,
                 iteration: Optional[int] = None):
        super().__init__("Node has no children to select from",
                         depth, state_description, iteration)


class NoActionsAllowedError(SearchError):
    """A non-terminal state reported no legal actions."""

    def __init__(self, depth: int, state_description: str,
                 iteration: Optional[int] = None):
        super().__init__("Non-terminal state has no legal actions",
                         depth, state_description, iteration)
