"""Tests for the GameState contract and search errors."""

import pytest
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from treesearch.core.state import GameState
from treesearch.core.errors import NoActionsAllowedError, NoChildrenError, SearchError

from toy_games import CountUpGame, MutableCounterGame


class TestGameStateContract:
    def test_cannot_instantiate_abstract_state(self):
        with pytest.raises(TypeError):
            GameState()

    def test_default_clone_is_independent(self):
        state = MutableCounterGame(count=2)
        state.history = [1, 2]

        copy = state.clone()
        copy.next()

        assert copy is not state
        assert state.count == 2
        assert state.history == [1, 2]
        assert copy.count == 3

    def test_next_with_action_leaves_receiver_alone(self):
        state = CountUpGame(count=1)
        child = state.next('increment')
        assert state.count == 1
        assert child.count == 2
        assert child.get_last_action() == 'increment'


class TestSearchErrors:
    def test_errors_share_base(self):
        assert issubclass(NoChildrenError, SearchError)
        assert issubclass(NoActionsAllowedError, SearchError)

    def test_no_children_payload(self):
        err = NoChildrenError(depth=2, state_description='Board(x)', iteration=17)
        assert err.depth == 2
        assert err.state_description == 'Board(x)'
        assert err.iteration == 17
        assert 'depth=2' in str(err)
        assert 'iteration=17' in str(err)
        assert 'Board(x)' in str(err)

    def test_no_actions_without_iteration(self):
        err = NoActionsAllowedError(depth=0, state_description='StuckGame()')
        assert err.iteration is None
        assert 'iteration' not in str(err)
        assert 'no legal actions' in str(err)
