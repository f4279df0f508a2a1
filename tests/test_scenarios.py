"""
End-to-end searches on small games with known answers.

Each game here is small enough that the default search budget settles on
the correct move every time.
"""

import pytest
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from treesearch.ai.mcts import MCTS, MCTSConfig, play_move

from toy_games import CountUpGame, NimGame, OnePlyGame


class TestCountUp:
    """Single legal action at every step: the search never simulates."""

    def test_search_returns_increment(self):
        assert MCTS().search(CountUpGame(count=0, target=3), num_players=1) == 'increment'

    def test_whole_line_short_circuits(self):
        mcts = MCTS()
        state = CountUpGame(count=0, target=3)
        moves = []

        while not state.is_finished():
            root, info = mcts.search_tree(state, num_players=1)
            assert info['simulations_done'] == 0
            assert root.visit_count == 0

            move = mcts.select_move(root)
            moves.append(move)
            state = state.next(move)

        assert moves == ['increment'] * 3
        assert state.get_score(0) == 3.0


class TestOnePly:
    def test_high_scoring_action_wins(self):
        state = OnePlyGame({'A': [10.0], 'B': [1.0]})
        assert MCTS().search(state, num_players=1) == 'A'

    def test_order_does_not_matter(self):
        state = OnePlyGame({'B': [1.0], 'A': [10.0]})
        assert MCTS().search(state, num_players=1) == 'A'

    def test_best_action_gets_most_visits(self):
        mcts = MCTS()
        root, _ = mcts.search_tree(OnePlyGame({'A': [10.0], 'B': [1.0]}), 1)
        a, b = root.children
        assert a.visit_count > b.visit_count

    @pytest.mark.parametrize('mover,expected', [(0, 'A'), (1, 'B'), (2, 'C')])
    def test_three_players_pick_their_own_best(self, mover, expected):
        payoffs = {
            'A': [10.0, 0.0, 0.0],
            'B': [0.0, 10.0, 0.0],
            'C': [0.0, 0.0, 10.0],
        }
        state = OnePlyGame(payoffs, mover=mover)
        assert MCTS().search(state, num_players=3) == expected


class TestNim:
    """Take 1 or 2; leaving a multiple of three stones wins."""

    @pytest.mark.parametrize('stones,expected', [(4, 1), (5, 2), (7, 1)])
    def test_finds_winning_move(self, stones, expected):
        assert MCTS().search(NimGame(stones), num_players=2) == expected

    def test_winning_move_with_ucb1_tuned(self):
        mcts = MCTS(MCTSConfig(selection='ucb1-tuned'))
        assert mcts.search(NimGame(4), num_players=2) == 1

    def test_play_move_helper(self):
        move, root = play_move(NimGame(4), num_players=2, num_simulations=1000)
        assert move == 1
        assert root.visit_count == 1000
