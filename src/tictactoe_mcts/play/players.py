"""
Players and the game loop.

- RandomPlayer: uniformly random legal moves
- MCTSPlayer: moves chosen by an MCTSEngine
- HumanPlayer: moves typed in the terminal
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Callable, Optional

import numpy as np

from ..games.base import Game, Outcome, Player as Side
from ..mcts import IllegalMoveError, MCTSEngine, SearchResult


class Player(ABC):
    """Base class for anything that can pick a move."""

    def __init__(self, name: str):
        self.name = name

    @abstractmethod
    def select_action(self, game: Game, state: Any) -> Any:
        """Pick a legal action for `state` (which is not terminal)."""
        pass

    def reset(self) -> None:
        """Called at the start of each game."""
        pass

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"


class RandomPlayer(Player):
    """Picks uniformly among legal moves."""

    def __init__(self, name: str = "Random", seed: Optional[int] = None):
        super().__init__(name)
        self.rng = np.random.default_rng(seed)

    def select_action(self, game: Game, state: Any) -> Any:
        actions = game.legal_actions(state)
        return actions[int(self.rng.integers(len(actions)))]


class MCTSPlayer(Player):
    """
    Plays the engine's choice after a fixed budget.

    Args:
        engine: MCTSEngine to search with
        iterations: Iterations per move
        time_limit: Optional seconds per move
        on_search: Callback receiving each SearchResult
    """

    def __init__(
        self,
        engine: MCTSEngine,
        iterations: Optional[int] = 1000,
        time_limit: Optional[float] = None,
        name: str = "MCTS",
        on_search: Optional[Callable[[SearchResult], None]] = None,
    ):
        super().__init__(name)
        self.engine = engine
        self.iterations = iterations
        self.time_limit = time_limit
        self.on_search = on_search
        self.last_result: Optional[SearchResult] = None

    def select_action(self, game: Game, state: Any) -> Any:
        result = self.engine.search(
            state,
            iterations=self.iterations,
            time_limit=self.time_limit,
        )
        self.last_result = result
        if self.on_search is not None:
            self.on_search(result)
        return result.move

    def reset(self) -> None:
        self.engine.reset()
        self.last_result = None


class HumanPlayer(Player):
    """
    Reads moves from a prompt function until a legal one is entered.

    Args:
        prompt: Callable returning the raw text the human typed
        report: Callable used to show error messages
    """

    def __init__(
        self,
        prompt: Callable[[str], str],
        report: Callable[[str], None] = print,
        name: str = "You",
    ):
        super().__init__(name)
        self.prompt = prompt
        self.report = report

    def select_action(self, game: Game, state: Any) -> Any:
        symbol = "X" if game.current_player(state) is Side.A else "O"
        legal = game.legal_actions(state)

        while True:
            text = self.prompt(
                f"Select cell for player {symbol} in format row_index, col_index"
            )
            try:
                action = game.parse_action(text)
            except ValueError as e:
                self.report(f"{e} Try again.")
                continue

            if action in legal:
                return action
            self.report(self._rejection(game, action))

    @staticmethod
    def _rejection(game: Game, action: Any) -> str:
        if not isinstance(action, int):
            return "Illegal move. Try again."
        if 0 <= action < game.spec.num_actions:
            return "Cannot mark a non empty cell. Try again."
        return "Index out of bound. Try again."


@dataclass
class GameRecord:
    """Record of a complete game."""

    outcome: Outcome
    moves: list[Any] = field(default_factory=list)
    final_state: Any = None

    @property
    def num_moves(self) -> int:
        return len(self.moves)


def play_game(
    game: Game,
    player_a: Player,
    player_b: Player,
    state: Any = None,
    on_move: Optional[Callable[[Any, Any, Player], None]] = None,
) -> GameRecord:
    """
    Play a game to the end.

    Args:
        game: Game instance
        player_a: Player moving first (X)
        player_b: Player moving second (O)
        state: Optional starting position (default: initial state)
        on_move: Callback(state_after, action, player) after every move

    Returns:
        GameRecord with the absolute outcome
    """
    state = game.initial_state() if state is None else state
    players = {Side.A: player_a, Side.B: player_b}
    for player in players.values():
        player.reset()

    moves = []
    while not game.is_terminal(state):
        player = players[game.current_player(state)]
        action = player.select_action(game, state)
        if action not in game.legal_actions(state):
            raise IllegalMoveError(f"{player.name} chose illegal move {action!r}")

        state = game.apply_action(state, action)
        moves.append(action)

        if on_move is not None:
            on_move(state, action, player)

    return GameRecord(outcome=game.outcome(state), moves=moves, final_state=state)
