"""
tictactoe-mcts - Monte Carlo Tree Search for two-player games.

Picks moves for Tic-Tac-Toe (or any game implementing the Game interface)
with UCB1 tree search and random rollouts.

Supported games:
- Tic-Tac-Toe
- Connect 4

Usage:
    from tictactoe_mcts.games import get_game
    from tictactoe_mcts.mcts import MCTSEngine

    game = get_game('tictactoe')
    engine = MCTSEngine(game, seed=0)

    state = game.initial_state()
    move = engine.choose_move(state, iteration_budget=1000)
    state = game.apply_action(state, move)
"""

__version__ = "0.1.0"

from . import games
from . import mcts
from . import play
from . import eval

__all__ = [
    "games",
    "mcts",
    "play",
    "eval",
    "__version__",
]
