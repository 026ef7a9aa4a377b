"""
MCTS Node data structure.

Each node represents one visited game state and stores:
- visit_count: number of backpropagation passes through this node
- total_reward: sum of rollout rewards, from the perspective of the
  player who moved INTO this node (`mover`)
- simulations: rollouts started directly from this node

Nodes live in a SearchTree arena and refer to each other by index:
the parent link is a plain index (no ownership), children map
action -> index.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Hashable, Optional

from ..games.base import Player


@dataclass
class SearchNode:
    """
    MCTS tree node.

    `total_reward` is always accumulated from `mover`'s point of view.
    The player choosing among a node's children is the children's
    `mover`, so selection simply maximises the child's own statistics.
    """

    index: int
    state: Any
    mover: Player  # Player who made the move leading to this node
    parent: Optional[int] = None
    action: Optional[Hashable] = None  # Action that led to this node

    children: Dict[Hashable, int] = field(default_factory=dict)

    visit_count: int = 0
    total_reward: float = 0.0
    simulations: int = 0

    # Cached terminal status
    terminal: bool = False

    @property
    def mean_reward(self) -> float:
        """Average reward W / N (0 when unvisited)."""
        if self.visit_count == 0:
            return 0.0
        return self.total_reward / self.visit_count

    @property
    def is_root(self) -> bool:
        return self.parent is None

    def is_leaf(self) -> bool:
        """Check if this is a leaf node (not yet expanded)."""
        return not self.children

    @property
    def is_expanded(self) -> bool:
        return bool(self.children)

    def __repr__(self) -> str:
        return (
            f"SearchNode(index={self.index}, action={self.action!r}, "
            f"N={self.visit_count}, W={self.total_reward:.1f}, "
            f"children={len(self.children)})"
        )
