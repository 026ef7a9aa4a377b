"""
Play module for AI game playing with difficulty control.
"""

from .difficulty import (
    Difficulty,
    DifficultyConfig,
    DIFFICULTY_PRESETS,
    AdaptiveDifficulty,
    get_difficulty_config,
    parse_difficulty,
    difficulty_from_slider,
)
from .players import (
    Player,
    RandomPlayer,
    MCTSPlayer,
    HumanPlayer,
    GameRecord,
    play_game,
)

__all__ = [
    "Difficulty",
    "DifficultyConfig",
    "DIFFICULTY_PRESETS",
    "AdaptiveDifficulty",
    "get_difficulty_config",
    "parse_difficulty",
    "difficulty_from_slider",
    "Player",
    "RandomPlayer",
    "MCTSPlayer",
    "HumanPlayer",
    "GameRecord",
    "play_game",
]
