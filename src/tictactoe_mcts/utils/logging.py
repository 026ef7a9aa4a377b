"""
Console output and search metrics, rendered with rich.

One shared `console` is used everywhere so output can be captured or
redirected in one place.
"""

from __future__ import annotations

import json
import math
from dataclasses import dataclass, asdict, is_dataclass
from datetime import datetime
from pathlib import Path
from typing import Optional, Any, Callable, Iterator

from rich.console import Console
from rich.table import Table
from rich.progress import (
    Progress,
    SpinnerColumn,
    TextColumn,
    BarColumn,
    TimeElapsedColumn,
    TimeRemainingColumn,
    MofNCompleteColumn,
)
from rich.panel import Panel


console = Console()


@dataclass
class SearchMetrics:
    """One move decision, as written to the JSONL log."""

    game: str
    move_number: int
    move: Optional[str]
    iterations: int
    root_visits: int
    reused_visits: int
    elapsed: float
    iterations_per_second: float
    value: float
    timestamp: str = ""

    def __post_init__(self):
        self.timestamp = self.timestamp or datetime.now().isoformat()

    @classmethod
    def from_result(
        cls,
        result: Any,
        game: str,
        move_number: int,
        format_action: Callable[[Any], str] = str,
    ) -> SearchMetrics:
        """Build metrics from a SearchResult."""
        return cls(
            game=game,
            move_number=move_number,
            move=None if result.move is None else format_action(result.move),
            iterations=result.iterations,
            root_visits=result.root_visits,
            reused_visits=result.reused_visits,
            elapsed=result.elapsed,
            iterations_per_second=result.iterations_per_second,
            value=result.value,
        )


class Logger:
    """
    Collects SearchMetrics, appends them to a JSONL file and optionally
    echoes a one-line summary per decision.

    Args:
        log_dir: Directory for the JSONL file (None keeps metrics in memory only)
        verbose: Echo each decision to the console
    """

    def __init__(self, log_dir: Optional[str] = "runs", verbose: bool = True):
        self.verbose = verbose
        self.log_file: Optional[Path] = None
        self.metrics_history: list[SearchMetrics] = []

        if log_dir is not None:
            log_path = Path(log_dir)
            log_path.mkdir(parents=True, exist_ok=True)
            self.log_file = log_path / f"search_{datetime.now():%Y%m%d_%H%M%S}.jsonl"

    def log_search(self, metrics: SearchMetrics) -> None:
        self.metrics_history.append(metrics)

        if self.log_file is not None:
            with open(self.log_file, "a") as f:
                f.write(json.dumps(asdict(metrics)) + "\n")

        if self.verbose:
            reused = f" (+{metrics.reused_visits} reused)" if metrics.reused_visits else ""
            console.print(
                f"[dim]move {metrics.move_number}: {metrics.iterations} iterations{reused} "
                f"in {metrics.elapsed:.2f}s ({metrics.iterations_per_second:.0f}/s), "
                f"value {metrics.value:+.3f}[/]"
            )

    def print_summary(self, title: str = "Search summary") -> None:
        """Totals over every logged decision, grouped by game."""
        table = Table(title=title)
        table.add_column("Game", style="cyan")
        table.add_column("Decisions", justify="right")
        table.add_column("Iterations", justify="right")
        table.add_column("Seconds", justify="right")
        table.add_column("Iter/s", justify="right")

        games = sorted({m.game for m in self.metrics_history})
        for game in games:
            rows = [m for m in self.metrics_history if m.game == game]
            iterations = sum(m.iterations for m in rows)
            elapsed = sum(m.elapsed for m in rows)
            rate = f"{iterations / elapsed:.0f}" if elapsed > 0 else "-"
            table.add_row(game, str(len(rows)), str(iterations), f"{elapsed:.2f}", rate)

        console.print(table)


def create_progress() -> Progress:
    """Progress bar for multi-game runs (arena, benchmark)."""
    return Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        MofNCompleteColumn(),
        TimeElapsedColumn(),
        TimeRemainingColumn(),
        console=console,
    )


def _flatten(data: dict, prefix: str = "") -> Iterator[tuple[str, Any]]:
    for key, value in data.items():
        name = f"{prefix}.{key}" if prefix else key
        if isinstance(value, dict):
            yield from _flatten(value, name)
        else:
            yield name, value


def print_config(config: Any) -> None:
    """Print a (nested) config dataclass as dotted key/value rows."""
    data = asdict(config) if is_dataclass(config) else dict(config)
    table = Table(title="Configuration")
    table.add_column("Key", style="cyan")
    table.add_column("Value")
    for key, value in _flatten(data):
        table.add_row(key, "-" if value is None else str(value))
    console.print(table)


def print_board(board_str: str, title: str = "Board") -> None:
    console.print(Panel(board_str, title=title, border_style="blue", expand=False))


def print_search_stats(
    children: list,
    chosen: Any = None,
    format_action: Callable[[Any], str] = str,
    title: str = "Root moves",
) -> None:
    """Print per-move root statistics (list of ChildStats), most visited first."""
    table = Table(title=title)
    table.add_column("Move", style="cyan")
    table.add_column("Visits", justify="right")
    table.add_column("Mean reward", justify="right")
    table.add_column("UCB", justify="right")

    for child in sorted(children, key=lambda c: -c.visits):
        ucb = "inf" if math.isinf(child.ucb) else f"{child.ucb:.3f}"
        table.add_row(
            format_action(child.action),
            str(child.visits),
            f"{child.mean_reward:+.3f}",
            ucb,
            style="bold green" if child.action == chosen else None,
        )

    console.print(table)
