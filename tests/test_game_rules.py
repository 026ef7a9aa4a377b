"""Tests for Tic-Tac-Toe and Connect 4 rules."""

import numpy as np
import pytest

from tictactoe_mcts.games import Outcome, Player, get_game, list_games, register_game
from tictactoe_mcts.games.tictactoe import (
    TicTacToeGame,
    TicTacToeState,
    cell_to_action,
    action_to_cell,
)
from tictactoe_mcts.games.connect4 import Connect4Game, ROWS, COLS, completes_line


@pytest.fixture
def game():
    return TicTacToeGame()


class TestOutcome:
    def test_reward_for(self):
        assert Outcome.WIN_A.reward_for(Player.A) == 1.0
        assert Outcome.WIN_A.reward_for(Player.B) == -1.0
        assert Outcome.WIN_B.reward_for(Player.B) == 1.0
        assert Outcome.DRAW.reward_for(Player.A) == 0.0
        assert Outcome.DRAW.reward_for(Player.B) == 0.0

    def test_opponent(self):
        assert Player.A.opponent is Player.B
        assert Player.B.opponent is Player.A


class TestRegistry:
    def test_games_registered(self):
        assert "tictactoe" in list_games()
        assert "connect4" in list_games()

    def test_unknown_game(self):
        with pytest.raises(ValueError, match="Available"):
            get_game("chess")

    def test_case_insensitive(self):
        assert isinstance(get_game("TicTacToe"), TicTacToeGame)

    def test_name_clash(self):
        with pytest.raises(ValueError, match="already taken"):
            register_game("tictactoe")(type("OtherGame", (TicTacToeGame,), {}))


class TestInitialState:
    def test_empty_board(self, game):
        state = game.initial_state()
        assert state.board.shape == (3, 3)
        assert np.all(state.board == 0)
        assert game.current_player(state) is Player.A

    def test_all_moves_legal(self, game):
        state = game.initial_state()
        assert game.legal_actions(state) == list(range(9))
        assert not game.is_terminal(state)

    def test_bad_board_shape(self):
        with pytest.raises(ValueError):
            TicTacToeState(board=np.zeros((4, 4), dtype=np.int8))


class TestApplyMove:
    def test_marks_cell_and_switches_turn(self, game):
        state = game.apply_action(game.initial_state(), 4)
        assert state.board[1, 1] == 1
        assert game.current_player(state) is Player.B
        assert 4 not in game.legal_actions(state)

    def test_does_not_mutate(self, game):
        state = game.initial_state()
        game.apply_action(state, 0)
        assert np.all(state.board == 0)

    def test_occupied_cell_raises(self, game):
        state = game.apply_action(game.initial_state(), 0)
        with pytest.raises(ValueError, match="occupied"):
            game.apply_action(state, 0)

    def test_invalid_index_raises(self, game):
        state = game.initial_state()
        with pytest.raises(ValueError):
            game.apply_action(state, -1)
        with pytest.raises(ValueError):
            game.apply_action(state, 9)

    def test_cannot_play_finished_game(self, game):
        state = game.from_moves([0, 3, 1, 4, 2])
        with pytest.raises(ValueError):
            game.apply_action(state, 8)

    def test_cell_conversion(self):
        assert cell_to_action(2, 1) == 7
        assert action_to_cell(7) == (2, 1)
        with pytest.raises(ValueError):
            cell_to_action(5, 1)


class TestWinDetection:
    def test_x_won_horizontal(self, game):
        state = game.from_moves([0, 3, 1, 4])
        assert not game.is_terminal(state)

        state = game.apply_action(state, 2)
        assert game.is_terminal(state)
        assert game.outcome(state) is Outcome.WIN_A
        assert game.legal_actions(state) == []

    def test_o_won_vertical(self, game):
        state = game.from_moves([0, 1, 2, 4, 3])
        assert not game.is_terminal(state)

        state = game.apply_action(state, 7)
        assert game.outcome(state) is Outcome.WIN_B

    def test_x_won_first_diagonal(self, game):
        state = game.from_moves([0, 1, 4, 2, 8])
        assert game.outcome(state) is Outcome.WIN_A

    def test_x_won_second_diagonal(self, game):
        state = game.from_moves([2, 0, 4, 1, 6])
        assert game.outcome(state) is Outcome.WIN_A

    def test_tie(self, game):
        state = game.from_moves([6, 4, 8, 7, 5, 3, 1, 2])
        assert not game.is_terminal(state)

        state = game.apply_action(state, 0)
        assert game.is_terminal(state)
        assert game.outcome(state) is Outcome.DRAW

    def test_outcome_of_live_game_raises(self, game):
        with pytest.raises(ValueError):
            game.outcome(game.initial_state())


class TestParseAndRender:
    def test_parse_row_col(self, game):
        assert game.parse_action("1, 2") == 5
        assert game.parse_action(" 0,0 ") == 0

    def test_parse_bare_index(self, game):
        assert game.parse_action("4") == 4

    def test_parse_errors(self, game):
        with pytest.raises(ValueError, match="must be 2"):
            game.parse_action("1,2,3")
        with pytest.raises(ValueError, match="separated by a comma"):
            game.parse_action("a, b")
        with pytest.raises(ValueError, match="out of bound"):
            game.parse_action("5, 1")

    def test_format_action(self, game):
        assert game.format_action(5) == "1, 2"

    def test_render_empty(self, game):
        output = game.render(game.initial_state())
        assert "X" not in output
        assert "O" not in output
        assert "-----------" in output

    def test_render_with_pieces(self, game):
        state = game.from_moves([0, 4])
        lines = game.render(state).splitlines()
        assert lines[0] == " X |   |   "
        assert lines[2] == "   | O |   "

    def test_state_key(self, game):
        a = game.from_moves([0, 4])
        b = game.from_moves([4, 0])
        c = game.from_moves([4, 8])
        assert game.state_key(a) != game.state_key(b)
        assert game.state_key(game.from_moves([0, 4])) == game.state_key(a)
        assert game.state_key(a) != game.state_key(c)


class TestConnect4:
    def test_piece_drops_to_bottom(self):
        game = Connect4Game()
        state = game.apply_action(game.initial_state(), 3)
        assert state.board[ROWS - 1, 3] == 1
        assert game.current_player(state) is Player.B

    def test_pieces_stack(self):
        game = Connect4Game()
        state = game.initial_state()
        state = game.apply_action(state, 3)
        state = game.apply_action(state, 3)
        assert state.board[ROWS - 1, 3] == 1
        assert state.board[ROWS - 2, 3] == -1

    def test_column_full_raises(self):
        game = Connect4Game()
        state = game.initial_state()
        for _ in range(ROWS):
            state = game.apply_action(state, 0)

        assert 0 not in game.legal_actions(state)
        with pytest.raises(ValueError):
            game.apply_action(state, 0)

    def test_horizontal_win(self):
        game = Connect4Game()
        state = game.initial_state()
        for action in [0, 0, 1, 1, 2, 2, 3]:
            state = game.apply_action(state, action)

        assert game.is_terminal(state)
        assert game.outcome(state) is Outcome.WIN_A

    def test_vertical_win_for_second_player(self):
        game = Connect4Game()
        state = game.initial_state()
        for action in [0, 6, 1, 6, 0, 6, 1, 6]:
            state = game.apply_action(state, action)

        assert game.outcome(state) is Outcome.WIN_B

    def test_diagonal_win(self):
        game = Connect4Game()
        # X climbs from (5, 0) to (2, 3)
        state = game.from_moves([0, 1, 1, 2, 2, 3, 2, 3, 3, 6])
        assert not game.is_terminal(state)

        state = game.apply_action(state, 3)
        assert state.last_drop == (ROWS - 4, 3)
        assert game.is_terminal(state)
        assert game.outcome(state) is Outcome.WIN_A
        assert game.legal_actions(state) == []

    def test_completes_line_through_middle(self):
        board = np.zeros((ROWS, COLS), dtype=np.int8)
        board[ROWS - 1, [0, 1, 3]] = -1
        assert not completes_line(board, ROWS - 1, 1)

        board[ROWS - 1, 2] = -1
        assert completes_line(board, ROWS - 1, 2)
        assert completes_line(board, ROWS - 1, 0)

    def test_parse_action(self):
        game = Connect4Game()
        assert game.parse_action(" 6 ") == 6
        with pytest.raises(ValueError):
            game.parse_action(str(COLS))
        with pytest.raises(ValueError):
            game.parse_action("left")
