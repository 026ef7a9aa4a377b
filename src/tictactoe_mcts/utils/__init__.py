"""Utilities module."""

from .config import (
    Config,
    MCTSConfig,
    PlayConfig,
    ArenaConfig,
    get_default_config,
)
from .seed import set_seed
from .logging import (
    Logger,
    SearchMetrics,
    console,
    create_progress,
    print_config,
    print_board,
    print_search_stats,
)

__all__ = [
    "Config",
    "MCTSConfig",
    "PlayConfig",
    "ArenaConfig",
    "get_default_config",
    "set_seed",
    "Logger",
    "SearchMetrics",
    "console",
    "create_progress",
    "print_config",
    "print_board",
    "print_search_stats",
]
