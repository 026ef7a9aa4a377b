"""Tests for rollout policies."""

import pytest

from tictactoe_mcts.games import Outcome
from tictactoe_mcts.games.tictactoe import TicTacToeGame
from tictactoe_mcts.games.connect4 import Connect4Game
from tictactoe_mcts.mcts import (
    FirstMoveRollout,
    GreedyRollout,
    IllegalMoveError,
    RandomRollout,
    RolloutPolicy,
    get_rollout_policy,
    list_rollout_policies,
)


class OutOfRangeRollout(RolloutPolicy):
    name = "broken"

    def choose(self, game, state, actions):
        return 99


@pytest.fixture
def game():
    return TicTacToeGame()


class TestRandomRollout:
    def test_returns_outcome(self, game):
        policy = RandomRollout(seed=0)
        outcome = policy.rollout(game, game.initial_state())
        assert isinstance(outcome, Outcome)

    def test_seeded_sequences_match(self, game):
        a = RandomRollout(seed=123)
        b = RandomRollout(seed=123)
        state = game.initial_state()
        first = [a.rollout(game, state) for _ in range(20)]
        second = [b.rollout(game, state) for _ in range(20)]
        assert first == second

    def test_terminal_state_returns_immediately(self, game):
        state = game.from_moves([0, 3, 1, 4, 2])
        assert RandomRollout(seed=0).rollout(game, state) is Outcome.WIN_A

    def test_one_move_left(self, game):
        # Only cell 8 is free; X fills it and the game is drawn
        state = game.from_moves([0, 1, 2, 4, 3, 5, 7, 6])
        assert game.legal_actions(state) == [8]
        assert RandomRollout(seed=0).rollout(game, state) is Outcome.DRAW

    def test_works_for_connect4(self):
        game = Connect4Game()
        outcome = RandomRollout(seed=1).rollout(game, game.initial_state())
        assert isinstance(outcome, Outcome)


class TestGreedyRollout:
    def test_takes_immediate_win(self, game):
        # X: 0, 1   O: 3, 4   X to move
        state = game.from_moves([0, 3, 1, 4])
        policy = GreedyRollout(seed=0)
        assert policy.choose(game, state, game.legal_actions(state)) == 2

    def test_blocks_opponent_win(self, game):
        # X: 0, 1   O: 4   O to move, must block 2
        state = game.from_moves([0, 4, 1])
        policy = GreedyRollout(seed=0)
        assert policy.choose(game, state, game.legal_actions(state)) == 2

    def test_win_beats_block(self, game):
        # X: 0, 1, 8   O: 3, 4   O to move, can win at 5
        state = game.from_moves([0, 3, 1, 4, 8])
        policy = GreedyRollout(seed=0)
        assert policy.choose(game, state, game.legal_actions(state)) == 5

    def test_full_rollout(self, game):
        # X to move with a win available: greedy always takes it
        state = game.from_moves([0, 3, 1, 4])
        policy = GreedyRollout(seed=5)
        assert all(policy.rollout(game, state) is Outcome.WIN_A for _ in range(10))


class TestFirstMoveRollout:
    def test_deterministic(self, game):
        # X0 O1 X2 O3 X4 O5 X6 -> X wins on the 2-4-6 diagonal
        policy = FirstMoveRollout()
        assert policy.rollout(game, game.initial_state()) is Outcome.WIN_A
        assert policy.rollout(game, game.initial_state()) is Outcome.WIN_A


class TestPolicyContract:
    def test_illegal_choice_fails_loudly(self, game):
        with pytest.raises(IllegalMoveError):
            OutOfRangeRollout().rollout(game, game.initial_state())

    def test_factory(self):
        assert set(list_rollout_policies()) == {"random", "greedy", "first"}
        assert isinstance(get_rollout_policy("random", seed=1), RandomRollout)
        assert isinstance(get_rollout_policy("greedy", seed=1), GreedyRollout)
        assert isinstance(get_rollout_policy("first"), FirstMoveRollout)

    def test_factory_unknown(self):
        with pytest.raises(ValueError, match="Available"):
            get_rollout_policy("minimax")
