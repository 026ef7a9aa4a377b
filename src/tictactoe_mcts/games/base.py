"""
Abstract base classes for games searched by MCTS.

Any game that implements the Game interface can be played by the engine.
The search doesn't need to know anything about the game rules - it just
needs these methods to:
1. Know whose turn it is
2. Know what moves are legal
3. Apply moves and get new states
4. Know when the game is over and who won
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import TypeVar, Generic, Hashable


@dataclass(frozen=True)
class GameSpec:
    """Static facts about a game, shown by `list-games`."""
    name: str
    board_shape: tuple[int, ...]
    num_actions: int  # Upper bound on legal actions in any state


class Player(Enum):
    """The two sides of a game. A always moves first."""
    A = 1
    B = -1

    @property
    def opponent(self) -> Player:
        return Player.B if self is Player.A else Player.A


class Outcome(Enum):
    """Result of a finished game."""
    WIN_A = "win_a"
    WIN_B = "win_b"
    DRAW = "draw"

    @property
    def winner(self) -> Player | None:
        if self is Outcome.WIN_A:
            return Player.A
        if self is Outcome.WIN_B:
            return Player.B
        return None

    def reward_for(self, player: Player) -> float:
        """
        Reward of this outcome from the given player's perspective.

        +1.0 for a win, -1.0 for a loss, 0.0 for a draw.
        """
        winner = self.winner
        if winner is None:
            return 0.0
        return 1.0 if winner is player else -1.0

    @classmethod
    def win_for(cls, player: Player) -> Outcome:
        return cls.WIN_A if player is Player.A else cls.WIN_B


# Type variables for game state and action
State = TypeVar('State')
Action = TypeVar('Action', bound=Hashable)


class Game(ABC, Generic[State, Action]):
    """
    Abstract base class for any two-player zero-sum perfect-information game.

    Key concepts:
    - State: The full game state (board position, whose turn, etc.).
      States are never mutated; apply_action returns a new one.
    - Action: A legal move in the game. Must be hashable, since the
      search tree keys children by action.
    - Outcome: Absolute result of a finished game (A wins, B wins, draw).
    """

    @property
    @abstractmethod
    def spec(self) -> GameSpec:
        """Static facts about the game (name, board shape, action count)."""
        pass

    @abstractmethod
    def initial_state(self) -> State:
        """Return the starting state of the game."""
        pass

    @abstractmethod
    def current_player(self, state: State) -> Player:
        """Return the player to move in this state."""
        pass

    @abstractmethod
    def legal_actions(self, state: State) -> list[Action]:
        """
        Return list of legal actions from this state.

        The order must be deterministic: it is the order in which the
        search creates and tie-breaks children. Terminal states have no
        legal actions.
        """
        pass

    @abstractmethod
    def apply_action(self, state: State, action: Action) -> State:
        """
        Apply action and return new state.

        Raises:
            ValueError: if the action is not legal in this state
        """
        pass

    @abstractmethod
    def is_terminal(self, state: State) -> bool:
        """Check if the game is over."""
        pass

    @abstractmethod
    def outcome(self, state: State) -> Outcome:
        """
        Return the result of a finished game.

        Raises:
            ValueError: if the state is not terminal
        """
        pass

    @abstractmethod
    def state_key(self, state: State) -> Hashable:
        """Return a hashable identity for the state (board + player to move)."""
        pass

    def render(self, state: State) -> str:
        """
        Render state as string for display.

        Optional - default returns empty string.
        """
        return ""

    def parse_action(self, text: str) -> Action:
        """
        Parse a human-entered action.

        Default accepts a bare integer. Raises ValueError on bad input.
        """
        try:
            return int(text.strip())
        except ValueError:
            raise ValueError("Must enter a valid non-negative number.") from None

    def format_action(self, action: Action) -> str:
        """Human-readable form of an action."""
        return str(action)


# name -> Game subclass, filled by @register_game
_GAMES: dict[str, type[Game]] = {}


def register_game(name: str):
    """Class decorator making a game available to `get_game` and the CLI."""
    def decorator(cls: type[Game]):
        existing = _GAMES.get(name)
        if existing is not None and existing is not cls:
            raise ValueError(f"Game name '{name}' is already taken by {existing.__name__}")
        _GAMES[name] = cls
        return cls
    return decorator


def get_game(name: str) -> Game:
    """Instantiate a registered game (names are case-insensitive)."""
    cls = _GAMES.get(name.lower())
    if cls is None:
        raise ValueError(f"Unknown game '{name}'. Available: {', '.join(list_games())}")
    return cls()


def list_games() -> list[str]:
    return sorted(_GAMES)
