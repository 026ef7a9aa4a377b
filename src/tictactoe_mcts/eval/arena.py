"""
Arena for evaluating players through head-to-head matches.

Used to check that the engine beats a random player, or to compare two
engine settings (budget, exploration constant, rollout policy).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional

from ..games.base import Game, Player as Side
from ..play.players import Player, play_game


@dataclass
class ArenaResult:
    """Results from arena evaluation, from the candidate's perspective."""

    wins: int
    losses: int
    draws: int
    total_games: int
    win_rate: float

    @property
    def score(self) -> float:
        """Win rate counting draws as half."""
        return (self.wins + 0.5 * self.draws) / self.total_games if self.total_games > 0 else 0.0


class Arena:
    """
    Arena for head-to-head matches.

    Args:
        game: Game to play
    """

    def __init__(self, game: Game):
        self.game = game

    def evaluate(
        self,
        candidate: Player,
        opponent: Player,
        num_games: int = 20,
        progress_callback: Optional[Callable[[int, str], None]] = None,
    ) -> ArenaResult:
        """
        Play num_games matches, alternating who goes first.

        Args:
            candidate: Player being evaluated
            opponent: Reference player
            num_games: Number of games to play
            progress_callback: Optional callback(games_completed, "W"/"L"/"D")

        Returns:
            ArenaResult from candidate's perspective
        """
        wins = 0
        losses = 0
        draws = 0

        for i in range(num_games):
            # Candidate plays first on even games
            if i % 2 == 0:
                record = play_game(self.game, candidate, opponent)
                candidate_side = Side.A
            else:
                record = play_game(self.game, opponent, candidate)
                candidate_side = Side.B

            reward = record.outcome.reward_for(candidate_side)
            if reward > 0:
                wins += 1
                result = "W"
            elif reward < 0:
                losses += 1
                result = "L"
            else:
                draws += 1
                result = "D"

            if progress_callback:
                progress_callback(i + 1, result)

        total = wins + losses + draws
        win_rate = wins / total if total > 0 else 0.0

        return ArenaResult(
            wins=wins,
            losses=losses,
            draws=draws,
            total_games=total,
            win_rate=win_rate,
        )


def should_accept(result: ArenaResult, threshold: float = 0.55) -> bool:
    """
    Check whether a candidate clearly outperforms its opponent.

    Args:
        result: Arena evaluation result
        threshold: Minimum score (draws count half)
    """
    return result.score >= threshold
