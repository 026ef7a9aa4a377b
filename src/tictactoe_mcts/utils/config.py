"""
Configuration management for the MCTS player.

Uses dataclasses for clean configuration with sensible defaults.
Supports loading from YAML files.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field, asdict, fields
from pathlib import Path
from typing import Optional, TYPE_CHECKING
import yaml

if TYPE_CHECKING:
    from ..games.base import Game
    from ..mcts import MCTSEngine


@dataclass
class MCTSConfig:
    """MCTS configuration."""

    iterations: int = 1000
    time_limit: Optional[float] = None  # Seconds per move, checked between iterations
    exploration_constant: float = math.sqrt(2)
    rollout: str = "random"  # random, greedy, first
    reuse_tree: bool = False
    validate: bool = False  # Check tree invariants after every iteration
    temperature: float = 0.0  # 0 = always the most visited move

    def __post_init__(self):
        if self.iterations < 1:
            raise ValueError("Iterations must be at least 1")
        if self.exploration_constant < 0:
            raise ValueError("Exploration constant must be non-negative")


@dataclass
class PlayConfig:
    """Interactive play configuration."""

    game: str = "tictactoe"
    human_first: bool = True
    difficulty: Optional[str] = None  # Overrides mcts.iterations/temperature


@dataclass
class ArenaConfig:
    """Arena (engine vs engine) configuration."""

    games: int = 20
    opponent: str = "random"  # random, mcts
    opponent_iterations: int = 100


@dataclass
class Config:
    """Full configuration."""

    # Component configs
    mcts: MCTSConfig = field(default_factory=MCTSConfig)
    play: PlayConfig = field(default_factory=PlayConfig)
    arena: ArenaConfig = field(default_factory=ArenaConfig)

    # Global settings
    log_dir: str = "runs"

    # Random seed
    seed: Optional[int] = 42

    def save(self, path: str) -> None:
        """Save config to YAML file."""
        with open(path, "w") as f:
            yaml.dump(asdict(self), f, default_flow_style=False)

    @classmethod
    def load(cls, path: str) -> Config:
        """Load config from YAML file."""
        with open(path) as f:
            data = yaml.safe_load(f) or {}

        return cls.from_dict(data)

    @classmethod
    def from_dict(cls, data: dict) -> Config:
        """Build a config from nested dicts, rejecting unknown keys."""
        _check_keys(cls, data, "config")

        # Parse nested configs
        return cls(
            mcts=_build(MCTSConfig, data.get("mcts", {}), "mcts"),
            play=_build(PlayConfig, data.get("play", {}), "play"),
            arena=_build(ArenaConfig, data.get("arena", {}), "arena"),
            log_dir=data.get("log_dir", "runs"),
            seed=data.get("seed", 42),
        )

    def ensure_dirs(self) -> None:
        """Create output directories if they don't exist."""
        Path(self.log_dir).mkdir(parents=True, exist_ok=True)

    def build_engine(self, game: Game, seed: Optional[int] = None) -> MCTSEngine:
        """Create an MCTSEngine configured from `self.mcts`."""
        from ..mcts import MCTSEngine, get_rollout_policy

        seed = self.seed if seed is None else seed
        return MCTSEngine(
            game,
            rollout=get_rollout_policy(self.mcts.rollout, seed=seed),
            exploration_constant=self.mcts.exploration_constant,
            seed=seed,
            reuse_tree=self.mcts.reuse_tree,
            validate=self.mcts.validate,
            temperature=self.mcts.temperature,
        )


def _check_keys(cls, data: dict, section: str) -> None:
    known = {f.name for f in fields(cls)}
    unknown = set(data) - known
    if unknown:
        raise ValueError(f"Unknown {section} keys: {', '.join(sorted(unknown))}")


def _build(cls, data: Optional[dict], section: str):
    data = data or {}
    _check_keys(cls, data, section)
    return cls(**data)


def get_default_config() -> Config:
    """Get default configuration."""
    return Config()
