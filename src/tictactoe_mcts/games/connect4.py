"""
Connect 4, a second game for the engine.

Players drop pieces into one of 7 columns on a 6-row board; four in a
line in any direction wins. Rollouts call the rules thousands of times
per move, so the state remembers where the last piece landed and the
win check only scans lines through that cell.

Board values: +1 = X (Player.A), -1 = O (Player.B), 0 = empty.
Row 0 is the top of the board.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Hashable, Optional
import numpy as np

from .base import Game, GameSpec, Outcome, Player, register_game


ROWS = 6
COLS = 7
WIN_LENGTH = 4

# One direction per line through a cell; the opposite is scanned too
_LINE_DIRECTIONS = ((0, 1), (1, 0), (1, 1), (1, -1))


@dataclass
class Connect4State:
    board: np.ndarray  # (ROWS, COLS) int8
    to_play: Player = Player.A
    last_drop: Optional[tuple[int, int]] = None  # (row, col) of the previous move

    def __post_init__(self):
        if self.board.shape != (ROWS, COLS):
            raise ValueError(f"Board must be {ROWS}x{COLS}")
        self.board = self.board.astype(np.int8, copy=False)


def _run_length(board: np.ndarray, row: int, col: int, dr: int, dc: int) -> int:
    """Pieces matching board[row, col] walking from it in (dr, dc), excluding it."""
    piece = board[row, col]
    count = 0
    r, c = row + dr, col + dc
    while 0 <= r < ROWS and 0 <= c < COLS and board[r, c] == piece:
        count += 1
        r, c = r + dr, c + dc
    return count


def completes_line(board: np.ndarray, row: int, col: int) -> bool:
    """True if the piece at (row, col) is part of four in a row."""
    if board[row, col] == 0:
        return False
    for dr, dc in _LINE_DIRECTIONS:
        length = 1 + _run_length(board, row, col, dr, dc) + _run_length(board, row, col, -dr, -dc)
        if length >= WIN_LENGTH:
            return True
    return False


@register_game("connect4")
class Connect4Game(Game[Connect4State, int]):
    """Connect 4; actions are column indices 0-6, listed left to right."""

    _spec = GameSpec(name="connect4", board_shape=(ROWS, COLS), num_actions=COLS)

    @property
    def spec(self) -> GameSpec:
        return self._spec

    def initial_state(self) -> Connect4State:
        return Connect4State(board=np.zeros((ROWS, COLS), dtype=np.int8))

    def from_moves(self, moves: list[int]) -> Connect4State:
        """Build a position by dropping into the given columns in turn."""
        state = self.initial_state()
        for col in moves:
            state = self.apply_action(state, col)
        return state

    def current_player(self, state: Connect4State) -> Player:
        return state.to_play

    def winner(self, state: Connect4State) -> Optional[Player]:
        """Player who completed a line with the last drop, if any."""
        if state.last_drop is None:
            return None
        row, col = state.last_drop
        if completes_line(state.board, row, col):
            return Player(int(state.board[row, col]))
        return None

    def legal_actions(self, state: Connect4State) -> list[int]:
        if self.winner(state) is not None:
            return []
        return [col for col in range(COLS) if state.board[0, col] == 0]

    def apply_action(self, state: Connect4State, action: int) -> Connect4State:
        if not 0 <= action < COLS:
            raise ValueError(f"Invalid column {action}, must be 0-{COLS - 1}")
        if self.winner(state) is not None:
            raise ValueError("Cannot play a terminated game.")

        filled = int(np.count_nonzero(state.board[:, action]))
        if filled == ROWS:
            raise ValueError(f"Column {action} is full")

        row = ROWS - 1 - filled
        board = state.board.copy()
        board[row, action] = state.to_play.value
        return Connect4State(board=board, to_play=state.to_play.opponent, last_drop=(row, action))

    def is_terminal(self, state: Connect4State) -> bool:
        return self.winner(state) is not None or not np.any(state.board[0] == 0)

    def outcome(self, state: Connect4State) -> Outcome:
        winner = self.winner(state)
        if winner is not None:
            return Outcome.win_for(winner)
        if np.any(state.board[0] == 0):
            raise ValueError("Game is not over")
        return Outcome.DRAW

    def state_key(self, state: Connect4State) -> Hashable:
        return (state.board.tobytes(), state.to_play.value)

    def parse_action(self, text: str) -> int:
        try:
            col = int(text.strip())
        except ValueError:
            raise ValueError(f"Enter a column number 0-{COLS - 1}.") from None
        if not 0 <= col < COLS:
            raise ValueError(f"Column must be 0-{COLS - 1}.")
        return col

    def render(self, state: Connect4State) -> str:
        marks = {0: ".", 1: "X", -1: "O"}
        header = " ".join(str(col) for col in range(COLS))
        rows = [" ".join(marks[int(v)] for v in state.board[r]) for r in range(ROWS)]
        return "\n".join([header, *rows])
