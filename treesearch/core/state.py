"""
Game state contract consumed by the search engine.

A concrete game subclasses GameState. The engine never inspects the position
itself; it only walks transitions, asks for legal actions and reads scores
once a state is finished.
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from typing import Generic, Optional, Sequence, TypeVar
import copy

Action = TypeVar('Action')


class GameState(ABC, Generic[Action]):
    """
    Snapshot of a sequential, perfect-information game position.

    States are treated as immutable: next() must return a new state and
    leave the receiver untouched. Nodes keep references to the states they
    wrap, so mutating a state after the engine has seen it corrupts every
    path through that node.

    next() has two forms:
        next(action)  applies a legal action chosen by the caller or the tree.
        next()        advances one ply with the state's own default policy
                      (random, heuristic, ...). Only playouts use this form,
                      so None is reserved and is never a legal action.
    """

    @abstractmethod
    def next(self, action: Optional[Action] = None) -> GameState[Action]:
        """Return the state after `action`, or after one default-policy ply."""

    @abstractmethod
    def legal_actions(self) -> Sequence[Action]:
        """
        Ordered legal actions from this state.

        Empty only when is_finished() is true. A game where a player may be
        unable to move must offer a pass action instead.
        """

    @abstractmethod
    def is_finished(self) -> bool:
        """Check if the game is over."""

    @abstractmethod
    def get_my_player_num(self) -> int:
        """
        Index of the player whose decision this state represents.

        The search root's value picks the final move. During the search each
        node maximizes the score of the player its own state reports here.
        A game that reports one fixed perspective from every state (the
        deciding player at the root) therefore gets the root player's score
        maximized at every level; a game that reports the player to move
        gets each mover maximizing its own score.
        """

    @abstractmethod
    def get_score(self, player_num: int) -> float:
        """Final score for `player_num`. Only read on finished states."""

    @abstractmethod
    def get_last_action(self) -> Action:
        """Action that produced this state from its parent."""

    def clone(self) -> GameState[Action]:
        """
        Independent copy used before playouts and for the search root.

        Defaults to a deep copy. Purely functional states can override this
        to return self.
        """
        return copy.deepcopy(self)
