"""
Rollout (playout) policies.

A rollout plays a game from a state to the end and reports the outcome.
The engine only depends on the RolloutPolicy interface, so random,
heuristic and deterministic test policies are interchangeable.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Optional, Sequence

import numpy as np

from ..games.base import Game, Outcome
from .errors import IllegalMoveError


class RolloutPolicy(ABC):
    """
    Plays a state out to a terminal position.

    Subclasses only decide which legal action to take at each step;
    the loop itself guarantees that every applied action came from
    `game.legal_actions`.
    """

    name: str = "base"

    @abstractmethod
    def choose(self, game: Game, state: Any, actions: Sequence[Any]) -> Any:
        """Pick one of `actions` (the legal actions of `state`)."""
        pass

    def rollout(self, game: Game, state: Any) -> Outcome:
        """
        Play from `state` until the game ends.

        Raises:
            IllegalMoveError: the policy picked an action outside the
                legal set, or the game reported no actions for a
                non-terminal state
        """
        while not game.is_terminal(state):
            actions = game.legal_actions(state)
            if not actions:
                raise IllegalMoveError("Game returned no legal actions for a live state")

            action = self.choose(game, state, actions)
            if action not in actions:
                raise IllegalMoveError(
                    f"Rollout policy '{self.name}' chose illegal action {action!r}"
                )
            state = game.apply_action(state, action)

        return game.outcome(state)

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class RandomRollout(RolloutPolicy):
    """
    Uniformly random playouts.

    Args:
        seed: Seed for the policy's own numpy Generator
        rng: Existing Generator to share (takes precedence over seed)
    """

    name = "random"

    def __init__(
        self,
        seed: Optional[int] = None,
        rng: Optional[np.random.Generator] = None,
    ):
        self.rng = rng if rng is not None else np.random.default_rng(seed)

    def choose(self, game: Game, state: Any, actions: Sequence[Any]) -> Any:
        return actions[int(self.rng.integers(len(actions)))]


class GreedyRollout(RandomRollout):
    """
    Random playouts that never miss a one-move win or block.

    At each step:
    1. Play an action that wins immediately, if any
    2. Otherwise block an action that would win immediately for the opponent
    3. Otherwise play uniformly at random
    """

    name = "greedy"

    def choose(self, game: Game, state: Any, actions: Sequence[Any]) -> Any:
        player = game.current_player(state)

        for action in actions:
            next_state = game.apply_action(state, action)
            if game.is_terminal(next_state) and game.outcome(next_state).winner is player:
                return action

        threats = self._opponent_wins(game, state, actions)
        if threats:
            return threats[0]

        return super().choose(game, state, actions)

    @staticmethod
    def _opponent_wins(game: Game, state: Any, actions: Sequence[Any]) -> list:
        """Actions the opponent could win with if it were their turn."""
        # An action is a threat if the opponent wins by playing it right
        # after some other move of ours.
        player = game.current_player(state)
        opponent = player.opponent
        threats = []
        for action in actions:
            for filler in actions:
                if filler == action:
                    continue
                after_filler = game.apply_action(state, filler)
                if game.is_terminal(after_filler):
                    continue
                if action not in game.legal_actions(after_filler):
                    continue
                reply = game.apply_action(after_filler, action)
                if game.is_terminal(reply) and game.outcome(reply).winner is opponent:
                    threats.append(action)
                    break
        return threats


class FirstMoveRollout(RolloutPolicy):
    """Deterministic playouts: always the first legal action."""

    name = "first"

    def choose(self, game: Game, state: Any, actions: Sequence[Any]) -> Any:
        return actions[0]


_ROLLOUT_POLICIES = {
    "random": RandomRollout,
    "greedy": GreedyRollout,
    "first": FirstMoveRollout,
}


def get_rollout_policy(name: str, seed: Optional[int] = None) -> RolloutPolicy:
    """Create a rollout policy by name."""
    if name not in _ROLLOUT_POLICIES:
        available = ", ".join(_ROLLOUT_POLICIES.keys())
        raise ValueError(f"Unknown rollout policy '{name}'. Available: {available}")
    cls = _ROLLOUT_POLICIES[name]
    if issubclass(cls, RandomRollout):
        return cls(seed=seed)
    return cls()


def list_rollout_policies() -> list[str]:
    return list(_ROLLOUT_POLICIES.keys())
