"""Evaluation module."""

from .arena import Arena, ArenaResult, should_accept

__all__ = [
    "Arena",
    "ArenaResult",
    "should_accept",
]
