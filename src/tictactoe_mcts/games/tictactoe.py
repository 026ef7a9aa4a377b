"""
Tic-Tac-Toe.

Cells are numbered row by row, and a move is the index of the cell:

     0 | 1 | 2
    -----------
     3 | 4 | 5
    -----------
     6 | 7 | 8

X (Player.A) always opens. The board stores +1 for X, -1 for O and 0 for
an empty cell, so a line summing to +3 or -3 is a win.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Hashable, Optional
import numpy as np

from .base import Game, GameSpec, Outcome, Player, register_game


BOARD_SIZE = 3
NUM_CELLS = BOARD_SIZE * BOARD_SIZE

# Rows, columns, then the two diagonals; cell indices into the flat board
WINNING_LINES = np.array([
    [0, 1, 2], [3, 4, 5], [6, 7, 8],
    [0, 3, 6], [1, 4, 7], [2, 5, 8],
    [0, 4, 8], [2, 4, 6],
])

_MARKS = {0: " ", 1: "X", -1: "O"}


@dataclass
class TicTacToeState:
    board: np.ndarray  # (3, 3) int8
    to_play: Player = Player.A

    def __post_init__(self):
        if self.board.shape != (BOARD_SIZE, BOARD_SIZE):
            raise ValueError(f"Board must be {BOARD_SIZE}x{BOARD_SIZE}")
        self.board = self.board.astype(np.int8, copy=False)


def cell_to_action(row: int, col: int) -> int:
    if not (0 <= row < BOARD_SIZE and 0 <= col < BOARD_SIZE):
        raise ValueError("Index out of bound.")
    return row * BOARD_SIZE + col


def action_to_cell(action: int) -> tuple[int, int]:
    return divmod(action, BOARD_SIZE)


def winner(board: np.ndarray) -> Optional[Player]:
    """Owner of a completed line, if any."""
    sums = board.ravel()[WINNING_LINES].sum(axis=1)
    if np.any(sums == 3):
        return Player.A
    if np.any(sums == -3):
        return Player.B
    return None


@register_game("tictactoe")
class TicTacToeGame(Game[TicTacToeState, int]):
    """Tic-Tac-Toe on cell indices 0-8; legal moves are listed in index order."""

    _spec = GameSpec(name="tictactoe", board_shape=(BOARD_SIZE, BOARD_SIZE), num_actions=NUM_CELLS)

    @property
    def spec(self) -> GameSpec:
        return self._spec

    def initial_state(self) -> TicTacToeState:
        return TicTacToeState(board=np.zeros((BOARD_SIZE, BOARD_SIZE), dtype=np.int8))

    def from_moves(self, moves: list[int]) -> TicTacToeState:
        """Position reached by playing `moves` (cell indices) from the empty board."""
        state = self.initial_state()
        for action in moves:
            state = self.apply_action(state, action)
        return state

    def current_player(self, state: TicTacToeState) -> Player:
        return state.to_play

    def legal_actions(self, state: TicTacToeState) -> list[int]:
        if winner(state.board) is not None:
            return []
        return np.flatnonzero(state.board.ravel() == 0).tolist()

    def apply_action(self, state: TicTacToeState, action: int) -> TicTacToeState:
        if not 0 <= action < NUM_CELLS:
            raise ValueError(f"Invalid action {action}, must be 0-{NUM_CELLS - 1}")
        if winner(state.board) is not None:
            raise ValueError("Cannot play a terminated game.")

        row, col = action_to_cell(action)
        if state.board[row, col] != 0:
            raise ValueError(f"Cell {action} is already occupied")

        board = state.board.copy()
        board[row, col] = state.to_play.value
        return TicTacToeState(board=board, to_play=state.to_play.opponent)

    def is_terminal(self, state: TicTacToeState) -> bool:
        return winner(state.board) is not None or bool(np.all(state.board != 0))

    def outcome(self, state: TicTacToeState) -> Outcome:
        owner = winner(state.board)
        if owner is not None:
            return Outcome.win_for(owner)
        if np.any(state.board == 0):
            raise ValueError("Game is not over")
        return Outcome.DRAW

    def state_key(self, state: TicTacToeState) -> Hashable:
        return (state.board.tobytes(), state.to_play.value)

    def parse_action(self, text: str) -> int:
        """
        Parse "row, col" (or a bare cell index).

        Raises ValueError with a message suitable for the player.
        """
        parts = text.split(",")
        if len(parts) == 1:
            return super().parse_action(text)
        if len(parts) != 2:
            raise ValueError("Number of comma separated non-negative numbers must be 2.")

        try:
            row, col = (int(part.strip()) for part in parts)
        except ValueError:
            row = col = -1
        if row < 0 or col < 0:
            raise ValueError("Must enter valid non-negative numbers separated by a comma.")
        return cell_to_action(row, col)

    def format_action(self, action: int) -> str:
        return "{}, {}".format(*action_to_cell(action))

    def render(self, state: TicTacToeState) -> str:
        rows = ["|".join(f" {_MARKS[int(v)]} " for v in row) for row in state.board]
        return "\n-----------\n".join(rows)
