"""
Monte Carlo Tree Search over an abstract GameState.

Implements UCB1 selection with random playouts. Leaves are played out until
they have been visited more than `expansion_threshold` times, then get one
child per legal action. Statistics are kept per player, so the same tree
serves games with any number of players.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Optional, TYPE_CHECKING
import logging
import math
import time
import numpy as np

from ..core.state import GameState
from ..core.errors import NoActionsAllowedError, NoChildrenError

if TYPE_CHECKING:
    from .time_manager import TimeManager

logger = logging.getLogger(__name__)

SELECTION_FORMULAS = ('ucb1', 'ucb1-tuned')


@dataclass
class MCTSConfig:
    """Configuration for MCTS."""
    num_simulations: int = 1000  # Iterations per search
    expansion_threshold: int = 3  # Leaf visits before expanding
    exploration_weight: float = math.sqrt(2)  # UCB1 exploration constant
    selection: str = 'ucb1'  # 'ucb1' or 'ucb1-tuned'

    def __post_init__(self):
        if self.num_simulations < 1:
            raise ValueError(f"num_simulations must be >= 1, got {self.num_simulations}")
        if self.expansion_threshold < 0:
            raise ValueError(f"expansion_threshold must be >= 0, got {self.expansion_threshold}")
        if self.exploration_weight < 0:
            raise ValueError(f"exploration_weight must be >= 0, got {self.exploration_weight}")
        if self.selection not in SELECTION_FORMULAS:
            raise ValueError(
                f"selection must be one of {SELECTION_FORMULAS}, got {self.selection!r}"
            )


@dataclass(eq=False)
class Node:
    """A node in the MCTS tree."""
    state: GameState
    num_players: int
    depth: int = 0

    # Statistics, one slot per player
    visit_count: int = 0
    score_sums: np.ndarray = field(init=False, repr=False)
    score_squares: np.ndarray = field(init=False, repr=False)

    # Children (created once, in legal_actions() order)
    children: list[Node] = field(default_factory=list, repr=False)

    def __post_init__(self):
        self.score_sums = np.zeros(self.num_players, dtype=np.float64)
        self.score_squares = np.zeros(self.num_players, dtype=np.float64)

    @property
    def is_expanded(self) -> bool:
        return len(self.children) > 0

    @property
    def action(self) -> Any:
        """Action that led from the parent to this node."""
        return self.state.get_last_action()

    @property
    def mean_scores(self) -> np.ndarray:
        """Average score per player over all visits."""
        if self.visit_count == 0:
            return np.zeros(self.num_players, dtype=np.float64)
        return self.score_sums / self.visit_count

    @property
    def score_variance(self) -> np.ndarray:
        """Per-player variance of the visit outcomes."""
        if self.visit_count == 0:
            return np.zeros(self.num_players, dtype=np.float64)
        mean = self.mean_scores
        # Clamp float noise below zero
        return np.maximum(self.score_squares / self.visit_count - mean * mean, 0.0)

    def evaluate(self, parent_visits: int, player_num: int, config: MCTSConfig) -> float:
        """
        Selection score of this node from the parent's point of view.

        UCB1       = mean + c * sqrt(ln(N) / n)
        UCB1-Tuned = mean + sqrt(ln(N) / n * min(1/4, var + sqrt(2 ln(N) / n)))

        where N is the parent's visit count, n this node's visit count and
        mean/var are taken for `player_num`. Unvisited nodes score +inf, so
        every sibling is tried once before any is exploited.
        """
        if self.visit_count == 0:
            return math.inf

        mean = float(self.score_sums[player_num]) / self.visit_count
        log_ratio = math.log(parent_visits) / self.visit_count

        if config.selection == 'ucb1-tuned':
            variance = float(self.score_variance[player_num])
            bound = min(0.25, variance + math.sqrt(2 * log_ratio))
            return mean + math.sqrt(log_ratio * bound)

        return mean + config.exploration_weight * math.sqrt(log_ratio)

    def select_child_in_search(self, iteration: int, config: MCTSConfig) -> Node:
        """
        Select the child to descend into during a simulation.

        The player choosing is the one this node's state reports, so each
        level maximizes its own mover's score. Ties go to the earliest child.
        """
        if not self.children:
            raise NoChildrenError(self.depth, repr(self.state), iteration)

        parent_visits = self.visit_count
        player_num = self.state.get_my_player_num()
        return max(
            self.children,
            key=lambda child: child.evaluate(parent_visits, player_num, config),
        )

    def select_child_after_search(self) -> Node:
        """
        Select the final decision: the child with the greatest score sum
        for the root player. Ties go to the earliest child.
        """
        if not self.children:
            raise NoChildrenError(self.depth, repr(self.state))

        player_num = self.state.get_my_player_num()
        return max(self.children, key=lambda child: child.score_sums[player_num])

    def expand(self, iteration: Optional[int] = None) -> None:
        """Add one child per legal action."""
        if self.is_expanded:
            return

        actions = self.state.legal_actions()
        if not actions:
            if self.state.is_finished():
                return
            # A non-terminal state must at least offer a pass
            raise NoActionsAllowedError(self.depth, repr(self.state), iteration)

        self.children = [
            Node(
                state=self.state.next(action),
                num_players=self.num_players,
                depth=self.depth + 1,
            )
            for action in actions
        ]

    def playout(self) -> np.ndarray:
        """Play the game out with the state's default policy and score it."""
        state = self.state.clone()
        while not state.is_finished():
            state = state.next()
        return self._read_scores(state)

    def search_child(self, iteration: int, config: MCTSConfig) -> np.ndarray:
        """
        Run one simulation from this node down to a leaf.

        Walks down selecting children, expanding leaves that passed the
        threshold, until it hits a finished state or an unexpanded leaf
        (which is played out). The resulting per-player score vector is then
        recorded on every node of the path, this one included, and returned.
        Iterative, so tree depth is not bounded by the recursion limit.
        """
        path = []
        node = self

        while True:
            node.visit_count += 1
            path.append(node)

            if node.state.is_finished():
                result = node._read_scores(node.state)
                break

            if not node.children and node.visit_count > config.expansion_threshold:
                node.expand(iteration)

            if not node.children:
                result = node.playout()
                break

            node = node.select_child_in_search(iteration, config)

        # Backpropagate
        for visited in path:
            visited._record(result)
        return result

    def tree_size(self) -> int:
        """Number of nodes in the subtree rooted here."""
        size = 0
        stack = [self]
        while stack:
            node = stack.pop()
            size += 1
            stack.extend(node.children)
        return size

    def max_depth(self) -> int:
        """Depth of the deepest node in the subtree rooted here."""
        deepest = self.depth
        stack = [self]
        while stack:
            node = stack.pop()
            deepest = max(deepest, node.depth)
            stack.extend(node.children)
        return deepest

    def _read_scores(self, state: GameState) -> np.ndarray:
        return np.array(
            [state.get_score(player) for player in range(self.num_players)],
            dtype=np.float64,
        )

    def _record(self, result: np.ndarray) -> None:
        self.score_sums += result
        self.score_squares += result * result


class MCTS:
    """
    Monte Carlo Tree Search with UCB1 selection and random playouts.

    Each search builds a fresh tree rooted at a clone of the given state.
    """

    def __init__(self, config: Optional[MCTSConfig] = None):
        self.config = config or MCTSConfig()

    def search(self, state: GameState, num_players: int) -> Any:
        """Search from `state` and return the best action."""
        root, _ = self.search_tree(state, num_players)
        return self.select_move(root)

    def search_tree(
        self,
        state: GameState,
        num_players: int,
        time_manager: Optional['TimeManager'] = None,
    ) -> tuple[Node, dict]:
        """
        Build the search tree for `state`.

        Runs the configured number of simulations, or fewer when the time
        manager's deadline passes first. The deadline is only checked
        between simulations, and at least one simulation always runs.

        Returns (root_node, info_dict).
        """
        if num_players < 1:
            raise ValueError(f"num_players must be >= 1, got {num_players}")

        start_time = time.monotonic()
        deadline = time_manager.move_deadline(start_time) if time_manager is not None else None

        root = Node(state=state.clone(), num_players=num_players)
        root.expand()

        if not root.children:
            raise NoChildrenError(root.depth, repr(root.state))

        sims_done = 0
        deadline_stopped = False

        if len(root.children) == 1:
            logger.debug("Single legal action, skipping search")
        else:
            for iteration in range(self.config.num_simulations):
                if deadline is not None and iteration > 0 and time.monotonic() >= deadline:
                    deadline_stopped = True
                    break
                root.search_child(iteration, self.config)
                sims_done += 1

        elapsed = time.monotonic() - start_time
        info = {
            'simulations_done': sims_done,
            'elapsed_time': elapsed,
            'sims_per_second': sims_done / elapsed if elapsed > 0 else 0,
            'nodes': root.tree_size(),
            'max_depth': root.max_depth(),
            'deadline_stopped': deadline_stopped,
        }

        if deadline_stopped:
            logger.info(
                f"Deadline reached after {sims_done}/{self.config.num_simulations} simulations"
            )
        logger.debug(
            f"Search done: {sims_done} simulations, {info['nodes']} nodes, "
            f"depth {info['max_depth']}, {elapsed:.3f}s"
        )

        return root, info

    def search_timed(
        self,
        state: GameState,
        num_players: int,
        time_manager: 'TimeManager',
    ) -> tuple[Node, dict]:
        """
        Run MCTS within the time manager's per-move budget.

        The elapsed time and simulation count are charged to the time
        manager afterwards.

        Returns (root_node, info_dict).
        """
        root, info = self.search_tree(state, num_players, time_manager=time_manager)
        time_manager.update(info['elapsed_time'], info['simulations_done'])
        return root, info

    def select_move(self, root: Node) -> Any:
        """Action of the root child with the best score sum for the root player."""
        return root.select_child_after_search().action

    def get_policy(self, root: Node) -> np.ndarray:
        """
        Visit distribution over the root's children, in child order.

        When no simulation ran (single legal action), the chosen child gets
        all the mass.
        """
        visits = np.array([c.visit_count for c in root.children], dtype=np.float64)
        total_visits = visits.sum()

        if total_visits > 0:
            return visits / total_visits

        policy = np.zeros(len(root.children), dtype=np.float64)
        best = root.select_child_after_search()
        policy[root.children.index(best)] = 1.0
        return policy

    def analyze(self, root: Node, top_k: int = 5) -> list[dict]:
        """
        Analyze search results.

        Returns the top moves ordered like the final decision.
        """
        player_num = root.state.get_my_player_num()
        moves = []
        for child in root.children:
            moves.append({
                'move': child.action,
                'visits': child.visit_count,
                'score_sum': float(child.score_sums[player_num]),
                'mean_score': float(child.mean_scores[player_num]),
            })

        # Stable sort keeps the earliest child first on ties
        moves.sort(key=lambda m: m['score_sum'], reverse=True)
        return moves[:top_k]


def play_move(
    state: GameState,
    num_players: int,
    num_simulations: int = 1000,
    expansion_threshold: int = 3,
    exploration_weight: float = math.sqrt(2),
) -> tuple[Any, Node]:
    """
    Play a single move using MCTS.

    Args:
        state: Current game state
        num_players: Number of players in the game
        num_simulations: Number of MCTS simulations
        expansion_threshold: Leaf visits before a node is expanded
        exploration_weight: UCB1 exploration constant

    Returns (move, root_node).
    """
    config = MCTSConfig(
        num_simulations=num_simulations,
        expansion_threshold=expansion_threshold,
        exploration_weight=exploration_weight,
    )
    mcts = MCTS(config)

    root, _ = mcts.search_tree(state, num_players)
    move = mcts.select_move(root)
    return move, root


def play_move_timed(
    state: GameState,
    num_players: int,
    time_manager: 'TimeManager',
    config: Optional[MCTSConfig] = None,
) -> tuple[Any, Node, dict]:
    """
    Play a single move using MCTS with time management.

    The config's simulation count is an upper bound; the time manager's
    per-move deadline usually stops the search first.

    Returns (move, root_node, info_dict).
    """
    mcts = MCTS(config)

    root, info = mcts.search_timed(state, num_players, time_manager)
    move = mcts.select_move(root)

    return move, root, info
