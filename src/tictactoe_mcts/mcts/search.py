"""
MCTS search implementation with UCB1 and random rollouts.

UCB1 selection formula:
UCB(a) = W(a) / N(a) + c * sqrt(ln N(parent) / N(a))

Each iteration:
1. Select: traverse tree using UCB1 until reaching a terminal or unexpanded node
2. Expand: create all children of the node, pick the first unvisited one
3. Simulate: roll the chosen node's state out to the end of the game
4. Backup: record the outcome on every node up to the root, each from
   the perspective of the player who moved into that node
"""

from __future__ import annotations

import math
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

import numpy as np

from ..games.base import Game, Outcome
from .errors import ContractViolation, IllegalMoveError, TreeCorruptionError
from .node import SearchNode
from .rollout import RandomRollout, RolloutPolicy
from .tree import SearchTree, ucb_score


DEFAULT_EXPLORATION = math.sqrt(2)


class SearchStatus(Enum):
    OK = "ok"
    NO_MOVE = "no_move"  # Root state is terminal


@dataclass
class ChildStats:
    """Statistics of one root child after a search."""
    action: Any
    visits: int
    total_reward: float
    mean_reward: float
    ucb: float


@dataclass
class SearchResult:
    """Outcome of one move decision."""

    move: Optional[Any]
    status: SearchStatus
    iterations: int = 0
    elapsed: float = 0.0
    root_visits: int = 0
    reused_visits: int = 0  # Root visits carried over from a previous tree
    children: list[ChildStats] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.status is SearchStatus.OK

    @property
    def value(self) -> float:
        """Mean reward of the chosen move for the player making it."""
        for child in self.children:
            if child.action == self.move:
                return child.mean_reward
        return 0.0

    @property
    def iterations_per_second(self) -> float:
        return self.iterations / self.elapsed if self.elapsed > 0 else 0.0


class MCTSEngine:
    """
    Monte Carlo Tree Search engine.

    Single-threaded: one iteration always runs all four phases before the
    next starts, and the budget is only checked between iterations.

    Args:
        game: Game instance
        rollout: Rollout policy (default: uniform random, seeded from `seed`)
        exploration_constant: UCB1 constant c (default sqrt(2))
        seed: Seed for the engine's numpy Generator
        reuse_tree: Keep the tree between decisions and re-root it at the
            new position when it is found among the old root's descendants
        validate: Check tree invariants after every iteration
        temperature: Final move selection temperature
            - 0: most visited child (ties: first in legal action order)
            - >0: sample proportional to visits^(1/temperature)
    """

    def __init__(
        self,
        game: Game,
        rollout: Optional[RolloutPolicy] = None,
        exploration_constant: float = DEFAULT_EXPLORATION,
        seed: Optional[int] = None,
        reuse_tree: bool = False,
        validate: bool = False,
        temperature: float = 0.0,
    ):
        if exploration_constant < 0:
            raise ValueError("Exploration constant must be non-negative")
        if temperature < 0:
            raise ValueError("Temperature must be non-negative")

        self.game = game
        self.rng = np.random.default_rng(seed)
        self.rollout_policy = rollout if rollout is not None else RandomRollout(rng=self.rng)
        self.exploration_constant = exploration_constant
        self.reuse_tree = reuse_tree
        self.validate = validate
        self.temperature = temperature

        # Tree from the last search (kept for inspection and reuse)
        self.tree: Optional[SearchTree] = None

    def choose_move(
        self,
        state: Any,
        iteration_budget: int,
        exploration_constant: Optional[float] = None,
    ) -> Optional[Any]:
        """
        Pick a move for `state`.

        Returns:
            A legal action, or None when `state` is already terminal
        """
        result = self.search(
            state,
            iterations=iteration_budget,
            exploration_constant=exploration_constant,
        )
        return result.move

    def search(
        self,
        state: Any,
        iterations: Optional[int] = None,
        time_limit: Optional[float] = None,
        exploration_constant: Optional[float] = None,
    ) -> SearchResult:
        """
        Run MCTS from the given state.

        Args:
            state: Starting game state
            iterations: Maximum number of iterations
            time_limit: Maximum wall-clock seconds (checked between iterations)
            exploration_constant: Override the engine's c for this search

        Returns:
            SearchResult; status NO_MOVE (and move None) for terminal states
        """
        if iterations is None and time_limit is None:
            raise ContractViolation("Search needs an iteration count or a time limit")
        if iterations is not None and iterations < 1:
            raise ContractViolation("Iterations must be at least 1")
        if time_limit is not None and time_limit <= 0:
            raise ContractViolation("Time limit must be positive")

        if self.game.is_terminal(state):
            return SearchResult(move=None, status=SearchStatus.NO_MOVE)

        c = self.exploration_constant if exploration_constant is None else exploration_constant
        tree = self._prepare_tree(state)
        self.tree = tree
        reused_visits = tree.root.visit_count

        start = time.perf_counter()
        deadline = None if time_limit is None else start + time_limit
        done = 0

        while True:
            if iterations is not None and done >= iterations:
                break
            if deadline is not None and done > 0 and time.perf_counter() >= deadline:
                break

            before = tree.root.visit_count
            self.run_iteration(tree, c)
            done += 1

            if self.validate:
                if tree.root.visit_count != before + 1:
                    raise TreeCorruptionError(
                        f"Root visits went from {before} to {tree.root.visit_count}"
                    )
                tree.validate()

        elapsed = time.perf_counter() - start
        chosen = self._select_move(tree)

        if chosen.action not in self.game.legal_actions(state):
            raise IllegalMoveError(f"Search produced illegal move {chosen.action!r}")

        return SearchResult(
            move=chosen.action,
            status=SearchStatus.OK,
            iterations=done,
            elapsed=elapsed,
            root_visits=tree.root.visit_count,
            reused_visits=reused_visits,
            children=self.root_stats(tree, c),
        )

    def run_iteration(self, tree: SearchTree, c: Optional[float] = None) -> SearchNode:
        """
        Run one select -> expand -> simulate -> backup pass.

        Returns:
            The node the rollout started from
        """
        c = self.exploration_constant if c is None else c

        node = self._select(tree, c)
        node = self._expand(tree, node)
        outcome = self._simulate(node)
        tree.backpropagate(node, outcome)

        return node

    def _select(self, tree: SearchTree, c: float) -> SearchNode:
        """Descend by UCB1 while the node is live and expanded."""
        node = tree.root
        while not node.terminal and node.is_expanded:
            node = tree.select_child(node, c)
        return node

    def _expand(self, tree: SearchTree, node: SearchNode) -> SearchNode:
        """Expand a live leaf and return the child to simulate from."""
        if node.terminal:
            return node

        children = tree.expand(node)
        for child in children:
            if child.visit_count == 0:
                return child
        return children[0]

    def _simulate(self, node: SearchNode) -> Outcome:
        return self.rollout_policy.rollout(self.game, node.state)

    def _select_move(self, tree: SearchTree) -> SearchNode:
        """Pick the final move among the root's children."""
        if self.temperature == 0:
            return tree.most_visited_child(tree.root)

        children = tree.children_of(tree.root)
        probs = self._visit_distribution(children, self.temperature)
        return children[int(self.rng.choice(len(children), p=probs))]

    @staticmethod
    def _visit_distribution(children: list[SearchNode], temperature: float) -> np.ndarray:
        counts = np.array([child.visit_count for child in children], dtype=np.float64)
        if temperature == 0:
            policy = np.zeros_like(counts)
            policy[int(np.argmax(counts))] = 1.0
            return policy

        peak = counts.max()
        if peak <= 0:
            return np.full(len(children), 1.0 / len(children))
        # Scale to [0, 1] first so small temperatures cannot overflow
        counts = (counts / peak) ** (1.0 / temperature)
        return counts / counts.sum()

    def policy(self, temperature: float = 1.0) -> dict[Any, float]:
        """
        Visit-count distribution over the last root's moves.

        Args:
            temperature: 0 = argmax, 1 = proportional to visits

        Returns:
            {action: probability}
        """
        if self.tree is None or self.tree.root.is_leaf():
            return {}
        children = self.tree.children_of(self.tree.root)
        probs = self._visit_distribution(children, temperature)
        return {child.action: float(p) for child, p in zip(children, probs)}

    def root_stats(self, tree: Optional[SearchTree] = None, c: Optional[float] = None) -> list[ChildStats]:
        """Per-move statistics at the root, in legal action order."""
        tree = self.tree if tree is None else tree
        c = self.exploration_constant if c is None else c
        if tree is None:
            return []

        parent_visits = tree.root.visit_count
        return [
            ChildStats(
                action=child.action,
                visits=child.visit_count,
                total_reward=child.total_reward,
                mean_reward=child.mean_reward,
                ucb=ucb_score(child, parent_visits, c),
            )
            for child in tree.children_of(tree.root)
        ]

    def _prepare_tree(self, state: Any) -> SearchTree:
        """Fresh tree, or the retained tree re-rooted at `state`."""
        if self.reuse_tree and self.tree is not None:
            node = self.tree.find_descendant(self.game.state_key(state), max_depth=2)
            if node is not None:
                if node.is_root:
                    return self.tree
                return self.tree.subtree(node)
        return SearchTree.create_root(self.game, state)

    def reset(self) -> None:
        """Drop any retained tree."""
        self.tree = None


def choose_move(
    game: Game,
    state: Any,
    iteration_budget: int,
    exploration_constant: float = DEFAULT_EXPLORATION,
    seed: Optional[int] = None,
    rollout: Optional[RolloutPolicy] = None,
) -> Optional[Any]:
    """One-shot move decision with a fresh engine."""
    engine = MCTSEngine(
        game,
        rollout=rollout,
        exploration_constant=exploration_constant,
        seed=seed,
    )
    return engine.choose_move(state, iteration_budget)
