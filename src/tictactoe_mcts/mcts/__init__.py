"""
Monte Carlo Tree Search module.
"""

from .errors import MCTSError, ContractViolation, IllegalMoveError, TreeCorruptionError
from .node import SearchNode
from .tree import SearchTree, ucb_score
from .rollout import (
    RolloutPolicy,
    RandomRollout,
    GreedyRollout,
    FirstMoveRollout,
    get_rollout_policy,
    list_rollout_policies,
)
from .search import (
    DEFAULT_EXPLORATION,
    MCTSEngine,
    SearchResult,
    SearchStatus,
    ChildStats,
    choose_move,
)

__all__ = [
    "MCTSError",
    "ContractViolation",
    "IllegalMoveError",
    "TreeCorruptionError",
    "SearchNode",
    "SearchTree",
    "ucb_score",
    "RolloutPolicy",
    "RandomRollout",
    "GreedyRollout",
    "FirstMoveRollout",
    "get_rollout_policy",
    "list_rollout_policies",
    "DEFAULT_EXPLORATION",
    "MCTSEngine",
    "SearchResult",
    "SearchStatus",
    "ChildStats",
    "choose_move",
]
