"""
Errors raised by the search engine.

A terminal root is not an error: the engine reports it as a value
(SearchStatus.NO_MOVE / None). These exceptions are for states that
indicate a bug, in the engine or in the game implementation, and are
never recovered from.
"""

from __future__ import annotations


class MCTSError(Exception):
    """Base class for search errors."""


class ContractViolation(MCTSError):
    """The engine or tree was used outside its contract (programmer error)."""


class IllegalMoveError(MCTSError):
    """The game produced or accepted a move that is not legal."""


class TreeCorruptionError(MCTSError):
    """Search statistics are inconsistent."""
