"""
Search tree stored as an arena of SearchNodes.

Nodes are addressed by stable integer indices into a single list owned
by the tree. A node's parent is an index, and its children map each
legal action to an index, so there are no ownership cycles and the
structure can be copied or dumped to plain dicts for inspection.

UCB1 selection score:
UCB(child) = W(child) / N(child) + c * sqrt(ln N(parent) / N(child))
with unvisited children scoring +inf.
"""

from __future__ import annotations

import math
from typing import Any, Callable, Hashable, Iterator, Optional

from ..games.base import Game, Outcome
from .errors import ContractViolation, IllegalMoveError, TreeCorruptionError
from .node import SearchNode


def ucb_score(child: SearchNode, parent_visits: int, c: float) -> float:
    """
    UCB1 score of a child.

    Unvisited children get +inf so every child is tried once before
    any is revisited; this also keeps N(child) = 0 out of the division.
    """
    if child.visit_count == 0:
        return math.inf
    exploit = child.total_reward / child.visit_count
    explore = c * math.sqrt(math.log(parent_visits) / child.visit_count)
    return exploit + explore


class SearchTree:
    """
    Arena-backed MCTS tree.

    The tree is mutated only by `expand` (adding children) and `record`
    (backpropagating statistics). Selection and simulation only read it.

    Args:
        game: Game the states belong to
    """

    def __init__(self, game: Game):
        self.game = game
        self._nodes: list[SearchNode] = []

    @classmethod
    def create_root(cls, game: Game, state: Any) -> SearchTree:
        """Create a tree with a single unexpanded root for `state`."""
        tree = cls(game)
        tree._add_node(
            state=state,
            mover=game.current_player(state).opponent,
            parent=None,
            action=None,
        )
        return tree

    def _add_node(
        self,
        state: Any,
        mover,
        parent: Optional[int],
        action: Optional[Hashable],
    ) -> SearchNode:
        node = SearchNode(
            index=len(self._nodes),
            state=state,
            mover=mover,
            parent=parent,
            action=action,
            terminal=self.game.is_terminal(state),
        )
        self._nodes.append(node)
        return node

    # --- Structure ---

    @property
    def root(self) -> SearchNode:
        return self._nodes[0]

    def node(self, index: int) -> SearchNode:
        return self._nodes[index]

    def __len__(self) -> int:
        return len(self._nodes)

    def __iter__(self) -> Iterator[SearchNode]:
        return iter(self._nodes)

    def parent_of(self, node: SearchNode) -> Optional[SearchNode]:
        if node.parent is None:
            return None
        return self._nodes[node.parent]

    def children_of(self, node: SearchNode) -> list[SearchNode]:
        """Children in insertion (legal action) order."""
        return [self._nodes[i] for i in node.children.values()]

    def path_to_root(self, node: SearchNode) -> list[SearchNode]:
        """Nodes from `node` up to and including the root."""
        path = [node]
        while node.parent is not None:
            node = self._nodes[node.parent]
            path.append(node)
        return path

    def depth(self, node: SearchNode) -> int:
        return len(self.path_to_root(node)) - 1

    def is_leaf(self, node: SearchNode) -> bool:
        return node.is_leaf()

    def is_terminal(self, node: SearchNode) -> bool:
        return node.terminal

    # --- Mutation ---

    def expand(self, node: SearchNode) -> list[SearchNode]:
        """
        Create one child per legal action of a non-terminal leaf.

        Raises:
            ContractViolation: node is terminal or already expanded
            IllegalMoveError: the game reported duplicate or no actions
                for a live state, or rejected one of its own actions
        """
        if node.terminal:
            raise ContractViolation(f"Cannot expand terminal node {node.index}")
        if node.is_expanded:
            raise ContractViolation(f"Node {node.index} is already expanded")

        actions = self.game.legal_actions(node.state)
        if not actions:
            raise IllegalMoveError(
                f"Game returned no legal actions for non-terminal node {node.index}"
            )
        if len(set(actions)) != len(actions):
            raise IllegalMoveError(f"Game returned duplicate actions: {actions}")

        mover = self.game.current_player(node.state)
        children = []
        for action in actions:
            try:
                child_state = self.game.apply_action(node.state, action)
            except ValueError as e:
                raise IllegalMoveError(
                    f"Game rejected its own legal action {action!r}: {e}"
                ) from e
            child = self._add_node(
                state=child_state,
                mover=mover,
                parent=node.index,
                action=action,
            )
            node.children[action] = child.index
            children.append(child)

        return children

    def record(self, node: SearchNode, outcome: Outcome) -> None:
        """Add one visit and the outcome's reward for `node.mover`."""
        node.visit_count += 1
        node.total_reward += outcome.reward_for(node.mover)

    def backpropagate(self, node: SearchNode, outcome: Outcome) -> None:
        """Record `outcome` on every node from `node` up to the root."""
        node.simulations += 1
        for ancestor in self.path_to_root(node):
            self.record(ancestor, outcome)

    # --- Queries ---

    def best_child(
        self,
        node: SearchNode,
        key: Callable[[SearchNode], float],
    ) -> SearchNode:
        """
        Return the child maximising `key`.

        Ties go to the first child in legal action order.
        """
        if node.is_leaf():
            raise ContractViolation(f"Node {node.index} has no children")

        best = None
        best_value = -math.inf
        for child in self.children_of(node):
            value = key(child)
            if best is None or value > best_value:
                best = child
                best_value = value
        return best

    def select_child(self, node: SearchNode, c: float) -> SearchNode:
        """Child with the highest UCB1 score."""
        parent_visits = node.visit_count
        return self.best_child(node, lambda child: ucb_score(child, parent_visits, c))

    def most_visited_child(self, node: SearchNode) -> SearchNode:
        return self.best_child(node, lambda child: child.visit_count)

    def find_descendant(
        self,
        state_key: Hashable,
        max_depth: int = 2,
    ) -> Optional[SearchNode]:
        """Breadth-first search for a node whose state matches `state_key`."""
        frontier = [self.root]
        for _ in range(max_depth + 1):
            next_frontier = []
            for node in frontier:
                if self.game.state_key(node.state) == state_key:
                    return node
                next_frontier.extend(self.children_of(node))
            frontier = next_frontier
        return None

    def subtree(self, node: SearchNode) -> SearchTree:
        """
        Copy the subtree under `node` into a fresh, compact arena.

        Statistics are preserved; the new root has no parent.
        """
        tree = SearchTree(self.game)
        remap: dict[int, int] = {}
        stack: list[tuple[SearchNode, Optional[int]]] = [(node, None)]
        order: list[tuple[SearchNode, Optional[int]]] = []

        # Pre-order walk so children keep their relative order
        while stack:
            current, parent = stack.pop()
            order.append((current, parent))
            for child_index in reversed(list(current.children.values())):
                stack.append((self._nodes[child_index], current.index))

        for current, parent in order:
            copied = SearchNode(
                index=len(tree._nodes),
                state=current.state,
                mover=current.mover,
                parent=None if parent is None else remap[parent],
                action=None if parent is None else current.action,
                visit_count=current.visit_count,
                total_reward=current.total_reward,
                simulations=current.simulations,
                terminal=current.terminal,
            )
            remap[current.index] = copied.index
            tree._nodes.append(copied)
            if copied.parent is not None:
                tree._nodes[copied.parent].children[current.action] = copied.index

        return tree

    def validate(self) -> None:
        """
        Check tree statistics and structure.

        Raises:
            TreeCorruptionError: on the first inconsistency found
        """
        for node in self._nodes:
            if node.visit_count < 0 or node.simulations < 0:
                raise TreeCorruptionError(f"Negative counts at {node!r}")
            if abs(node.total_reward) > node.visit_count:
                raise TreeCorruptionError(f"Reward exceeds visits at {node!r}")

            children = self.children_of(node)
            child_visits = sum(child.visit_count for child in children)
            if node.visit_count != child_visits + node.simulations:
                raise TreeCorruptionError(
                    f"Visit accounting broken at {node!r}: "
                    f"{child_visits} child visits + {node.simulations} simulations"
                )

            if children:
                to_move = self.game.current_player(node.state)
            for child in children:
                if child.parent != node.index:
                    raise TreeCorruptionError(f"Bad parent link at {child!r}")
                if child.mover is not to_move:
                    raise TreeCorruptionError(f"Mover mismatch at {child!r}")

    def to_dict(self, node: Optional[SearchNode] = None, max_depth: int = 1) -> dict:
        """Plain-dict snapshot of a subtree, for debugging and tests."""
        node = self.root if node is None else node
        data = {
            "index": node.index,
            "action": node.action,
            "mover": node.mover.name,
            "visits": node.visit_count,
            "reward": node.total_reward,
            "terminal": node.terminal,
        }
        if max_depth > 0 and node.children:
            data["children"] = [
                self.to_dict(child, max_depth - 1) for child in self.children_of(node)
            ]
        return data
