"""
Engine strength settings for play against humans.

A difficulty level is a set of overrides for MCTSConfig:
- iterations: search budget per move
- temperature: 0 plays the most visited move, higher values sample
  from the visit counts and so make occasional mistakes
- rollout: playout policy ("greedy" playouts see one-move wins and blocks)

Levels can be picked from presets, from a 0-100 slider, or adjusted
between games by AdaptiveDifficulty.
"""

from __future__ import annotations

import math
from collections import deque
from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional

from ..utils.config import MCTSConfig


class Difficulty(Enum):
    """Preset difficulty levels."""
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"
    IMPOSSIBLE = "impossible"


@dataclass(frozen=True)
class DifficultyConfig:
    """
    Engine overrides for one difficulty level.

    Attributes:
        iterations: MCTS iterations per move
        temperature: Final move selection temperature
        rollout: Rollout policy name
        name: Label shown to the player
        description: One-line description
    """
    iterations: int
    temperature: float
    rollout: str = "random"
    name: str = ""
    description: str = ""

    def __post_init__(self):
        if self.iterations < 1:
            raise ValueError("Iterations must be at least 1")
        if self.temperature < 0:
            raise ValueError("Temperature must be non-negative")

    def apply(self, config: MCTSConfig) -> MCTSConfig:
        """Return a copy of `config` with this level's settings."""
        return replace(
            config,
            iterations=self.iterations,
            temperature=self.temperature,
            rollout=self.rollout,
        )


# game -> level -> (iterations, temperature, rollout, description)
# "default" covers any game without its own row.
_PRESET_TABLE: dict[str, dict[Difficulty, tuple]] = {
    "default": {
        Difficulty.EASY: (100, 1.0, "random", "Plays loosely, misses threats"),
        Difficulty.MEDIUM: (1000, 0.5, "random", "Sees short tactics"),
        Difficulty.HARD: (5000, 0.1, "greedy", "Rarely blunders"),
        Difficulty.IMPOSSIBLE: (20000, 0.0, "greedy", "Full strength"),
    },
    "tictactoe": {
        Difficulty.EASY: (20, 1.0, "random", "Makes random moves sometimes"),
        Difficulty.MEDIUM: (200, 0.5, "random", "Decent but beatable"),
        Difficulty.HARD: (1000, 0.1, "random", "Strong play"),
        Difficulty.IMPOSSIBLE: (5000, 0.0, "greedy", "Never loses"),
    },
}


def _preset(difficulty: Difficulty, row: tuple) -> DifficultyConfig:
    iterations, temperature, rollout, description = row
    return DifficultyConfig(
        iterations=iterations,
        temperature=temperature,
        rollout=rollout,
        name=difficulty.value.capitalize(),
        description=description,
    )


DIFFICULTY_PRESETS: dict[str, dict[Difficulty, DifficultyConfig]] = {
    game: {level: _preset(level, row) for level, row in rows.items()}
    for game, rows in _PRESET_TABLE.items()
}


def get_difficulty_config(
    difficulty: Difficulty,
    game_name: Optional[str] = None,
) -> DifficultyConfig:
    """Preset for `difficulty`, tuned for `game_name` when a row exists."""
    presets = DIFFICULTY_PRESETS.get(game_name or "default", DIFFICULTY_PRESETS["default"])
    return presets[difficulty]


def parse_difficulty(name: str) -> Difficulty:
    """Parse a difficulty name, case-insensitively."""
    try:
        return Difficulty(name.strip().lower())
    except ValueError:
        choices = ", ".join(d.value for d in Difficulty)
        raise ValueError(f"Invalid difficulty '{name}'. Choose: {choices}") from None


def _log_interpolate(t: float, low: int, high: int) -> int:
    """Geometric interpolation between low (t=0) and high (t=1)."""
    return int(round(low * (high / low) ** t))


def _log_position(value: int, low: int, high: int) -> float:
    """Inverse of _log_interpolate, clamped to [0, 1]."""
    t = math.log(value / low) / math.log(high / low)
    return min(1.0, max(0.0, t))


def difficulty_from_slider(
    value: float,
    min_iterations: int = 10,
    max_iterations: int = 10000,
) -> DifficultyConfig:
    """
    Map a 0-100 slider to a difficulty.

    Iterations grow geometrically, so each step of the slider multiplies
    the budget by the same factor. Temperature falls linearly to 0, and
    the top quarter of the range switches to greedy playouts.
    """
    t = min(100.0, max(0.0, value)) / 100.0
    iterations = _log_interpolate(t, min_iterations, max_iterations)
    temperature = round(1.0 - t, 3)

    return DifficultyConfig(
        iterations=iterations,
        temperature=temperature,
        rollout="greedy" if t >= 0.75 else "random",
        name=f"Level {int(round(t * 100))}",
        description=f"{iterations} iterations, temperature {temperature:.2f}",
    )


class AdaptiveDifficulty:
    """
    Tunes the engine between games so the human wins about
    `target_score` of the time (draws count half).

    After each game the iteration budget is multiplied by
    `step ** (score - target)` over the recent window, so a human on a
    winning streak faces a stronger engine and vice versa.
    """

    def __init__(
        self,
        target_score: float = 0.5,
        min_iterations: int = 10,
        max_iterations: int = 10000,
        initial_iterations: int = 200,
        step: float = 4.0,
        window_size: int = 10,
        min_games: int = 3,
    ):
        if not min_iterations <= initial_iterations <= max_iterations:
            raise ValueError("initial_iterations must lie between min and max")
        self.target_score = target_score
        self.min_iterations = min_iterations
        self.max_iterations = max_iterations
        self.initial_iterations = initial_iterations
        self.current_iterations = initial_iterations
        self.step = step
        self.min_games = min_games

        # 1.0 = human win, 0.5 = draw, 0.0 = human loss
        self.results: deque[float] = deque(maxlen=window_size)

    def record_result(self, player_won: bool, draw: bool = False) -> None:
        """Record a finished game from the human's side and retune."""
        self.results.append(0.5 if draw else float(player_won))
        if len(self.results) >= self.min_games:
            error = self.current_win_rate - self.target_score
            scaled = self.current_iterations * self.step ** error
            self.current_iterations = int(
                round(min(self.max_iterations, max(self.min_iterations, scaled)))
            )

    def get_config(self) -> DifficultyConfig:
        """Current level; temperature eases off as the budget grows."""
        t = _log_position(self.current_iterations, self.min_iterations, self.max_iterations)
        return DifficultyConfig(
            iterations=self.current_iterations,
            temperature=round(0.5 * (1.0 - t), 3),
            name="Adaptive",
            description=f"{self.current_iterations} iterations",
        )

    @property
    def current_win_rate(self) -> Optional[float]:
        """Human's mean score over the recent window."""
        if not self.results:
            return None
        return sum(self.results) / len(self.results)

    def reset(self) -> None:
        self.results.clear()
        self.current_iterations = self.initial_iterations
