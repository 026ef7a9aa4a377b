"""
Command-line interface for the MCTS player.

Commands:
- list-games: Show available games
- play: Play against the engine in the terminal
- move: Ask the engine for a move in a given position
- arena: Pit the engine against a random player or another engine
- benchmark: Measure iterations per second
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional
import typer
from rich.table import Table

from .utils.logging import console, create_progress

app = typer.Typer(
    name="tictactoe-mcts",
    help="Monte Carlo Tree Search player for Tic-Tac-Toe and friends",
    no_args_is_help=True,
)


def _load_config(config_path: Optional[Path], seed: Optional[int]):
    from .utils import Config, get_default_config

    if config_path is not None:
        try:
            config = Config.load(str(config_path))
        except (OSError, ValueError, TypeError) as e:
            console.print(f"[red]Error loading config: {e}[/]")
            raise typer.Exit(1)
    else:
        config = get_default_config()

    if seed is not None:
        config.seed = seed
    return config


def _get_game(game_name: str):
    from .games import get_game

    try:
        return get_game(game_name)
    except ValueError as e:
        console.print(f"[red]Error: {e}[/]")
        raise typer.Exit(1)


@app.command("list-games")
def list_games_cmd() -> None:
    """List all available games."""
    from .games import list_games, get_game

    table = Table(title="Available Games")
    table.add_column("Name", style="cyan")
    table.add_column("Board", style="green")
    table.add_column("Actions", style="yellow")

    for name in list_games():
        game = get_game(name)
        spec = game.spec
        board_str = "x".join(str(d) for d in spec.board_shape)
        table.add_row(name, board_str, str(spec.num_actions))

    console.print(table)


@app.command()
def play(
    game_name: str = typer.Argument("tictactoe", help="Game to play"),
    iterations: Optional[int] = typer.Option(None, "--iterations", "-n", help="MCTS iterations per move"),
    time_limit: Optional[float] = typer.Option(None, "--time", "-t", help="Seconds per move"),
    difficulty: Optional[str] = typer.Option(None, "--difficulty", "-d", help="easy/medium/hard/impossible"),
    human_first: Optional[bool] = typer.Option(None, "--first/--second", help="Human plays first"),
    seed: Optional[int] = typer.Option(None, "--seed", help="Random seed"),
    config_path: Optional[Path] = typer.Option(None, "--config", "-c", help="YAML config file"),
    show_stats: bool = typer.Option(False, "--stats", help="Show root statistics after each engine move"),
) -> None:
    """Play against the engine."""
    from .games import Player as Side
    from .play import HumanPlayer, MCTSPlayer, play_game, get_difficulty_config, parse_difficulty
    from .utils import Logger, SearchMetrics, print_board, print_search_stats, set_seed

    config = _load_config(config_path, seed)
    game = _get_game(game_name)
    set_seed(config.seed)

    iters = config.mcts.iterations if iterations is None else iterations
    difficulty = difficulty or config.play.difficulty
    if difficulty:
        try:
            diff_config = get_difficulty_config(parse_difficulty(difficulty), game.spec.name)
        except ValueError as e:
            console.print(f"[red]{e}[/]")
            raise typer.Exit(1)
        config.mcts = diff_config.apply(config.mcts)
        iters = config.mcts.iterations
        console.print(f"[blue]Difficulty: {diff_config.name} ({diff_config.description})[/]")

    human_first = config.play.human_first if human_first is None else human_first
    logger = Logger(log_dir=None, verbose=show_stats)
    engine = config.build_engine(game)
    move_number = 0

    def on_search(result) -> None:
        logger.log_search(
            SearchMetrics.from_result(result, game_name, move_number, game.format_action)
        )
        if show_stats:
            print_search_stats(result.children, result.move, game.format_action)

    time_limit = config.mcts.time_limit if time_limit is None else time_limit
    ai = MCTSPlayer(engine, iterations=iters, time_limit=time_limit, name="AI", on_search=on_search)
    human = HumanPlayer(
        prompt=typer.prompt,
        report=lambda message: console.print(f"[red]{message}[/]"),
    )

    def on_move(state, action, player) -> None:
        nonlocal move_number
        move_number += 1
        console.print(f"{player.name} played: {game.format_action(action)}\n")
        print_board(game.render(state), title=f"Move {move_number}")

    console.print(f"\n[bold]Playing {game_name}[/]")
    console.print("You are X, AI is O\n" if human_first else "AI is X, you are O\n")
    print_board(game.render(game.initial_state()))

    player_a, player_b = (human, ai) if human_first else (ai, human)
    record = play_game(game, player_a, player_b, on_move=on_move)

    human_side = Side.A if human_first else Side.B
    reward = record.outcome.reward_for(human_side)
    console.print("Game Over!")
    if reward > 0:
        console.print("[green]You win![/]")
    elif reward < 0:
        console.print("[red]AI wins![/]")
    else:
        console.print("[yellow]Draw![/]")


@app.command()
def move(
    game_name: str = typer.Argument("tictactoe", help="Game"),
    moves: str = typer.Option("", "--moves", "-m", help="Moves played so far, separated by ';' (e.g. '0,0;1,1')"),
    iterations: Optional[int] = typer.Option(None, "--iterations", "-n", help="MCTS iterations"),
    exploration: Optional[float] = typer.Option(None, "--exploration", "-e", help="UCB1 exploration constant"),
    seed: Optional[int] = typer.Option(None, "--seed", help="Random seed"),
    config_path: Optional[Path] = typer.Option(None, "--config", "-c", help="YAML config file"),
) -> None:
    """Print the engine's move for a position."""
    from .utils import print_board, print_search_stats

    config = _load_config(config_path, seed)
    game = _get_game(game_name)

    state = game.initial_state()
    for text in filter(None, (part.strip() for part in moves.split(";"))):
        try:
            state = game.apply_action(state, game.parse_action(text))
        except ValueError as e:
            console.print(f"[red]Bad move '{text}': {e}[/]")
            raise typer.Exit(1)

    print_board(game.render(state), title="Position")

    engine = config.build_engine(game)
    result = engine.search(
        state,
        iterations=config.mcts.iterations if iterations is None else iterations,
        time_limit=config.mcts.time_limit,
        exploration_constant=exploration,
    )

    if not result.ok:
        console.print("[yellow]No move available: the game is over.[/]")
        return

    print_search_stats(result.children, result.move, game.format_action)
    console.print(f"[bold green]Best move: {game.format_action(result.move)}[/]")


@app.command()
def arena(
    game_name: str = typer.Argument("tictactoe", help="Game"),
    games: Optional[int] = typer.Option(None, "--games", "-g", help="Number of games"),
    iterations: Optional[int] = typer.Option(None, "--iterations", "-n", help="Candidate iterations per move"),
    opponent: Optional[str] = typer.Option(None, "--opponent", "-o", help="random or mcts"),
    opponent_iterations: Optional[int] = typer.Option(None, "--opponent-iterations", help="Opponent iterations per move"),
    seed: Optional[int] = typer.Option(None, "--seed", help="Random seed"),
    config_path: Optional[Path] = typer.Option(None, "--config", "-c", help="YAML config file"),
    log: bool = typer.Option(False, "--log", help="Write candidate search metrics to log_dir"),
) -> None:
    """Play the engine against a reference player."""
    from .eval import Arena
    from .play import MCTSPlayer, RandomPlayer
    from .utils import Logger, SearchMetrics, print_config, set_seed

    config = _load_config(config_path, seed)
    game = _get_game(game_name)
    set_seed(config.seed)
    print_config(config)

    logger = None
    if log:
        config.ensure_dirs()
        logger = Logger(log_dir=config.log_dir, verbose=False)
        console.print(f"[blue]Logging to {logger.log_file}[/]")

    num_games = config.arena.games if games is None else games
    opponent = config.arena.opponent if opponent is None else opponent
    opp_iters = config.arena.opponent_iterations if opponent_iterations is None else opponent_iterations
    iters = config.mcts.iterations if iterations is None else iterations

    base_seed = config.seed or 0
    move_number = 0

    def on_search(result) -> None:
        nonlocal move_number
        move_number += 1
        if logger is not None:
            logger.log_search(
                SearchMetrics.from_result(result, game_name, move_number, game.format_action)
            )

    candidate = MCTSPlayer(
        config.build_engine(game, seed=base_seed),
        iterations=iters,
        time_limit=config.mcts.time_limit,
        name="Candidate",
        on_search=on_search,
    )
    if opponent == "random":
        reference = RandomPlayer(seed=base_seed + 1)
    elif opponent == "mcts":
        reference = MCTSPlayer(config.build_engine(game, seed=base_seed + 1), iterations=opp_iters, name="Reference")
    else:
        console.print(f"[red]Unknown opponent '{opponent}'. Choose: random, mcts[/]")
        raise typer.Exit(1)

    console.print(f"[blue]{game_name}: MCTS ({iters} iterations) vs {reference.name}[/]")

    with create_progress() as progress:
        task = progress.add_task("Arena", total=num_games)
        result = Arena(game).evaluate(
            candidate,
            reference,
            num_games=num_games,
            progress_callback=lambda done, _: progress.update(task, completed=done),
        )

    table = Table(title="Arena Results", show_header=False)
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="white")
    table.add_row("Wins", str(result.wins))
    table.add_row("Losses", str(result.losses))
    table.add_row("Draws", str(result.draws))
    table.add_row("Score", f"{result.score * 100:.1f}%")
    console.print(table)


@app.command()
def benchmark(
    game_name: str = typer.Argument("tictactoe", help="Game to benchmark"),
    iterations: int = typer.Option(1000, "--iterations", "-n"),
    games: int = typer.Option(3, "--games", "-g"),
    seed: Optional[int] = typer.Option(0, "--seed"),
) -> None:
    """Benchmark MCTS self-play speed."""
    from .mcts import MCTSEngine
    from .play import MCTSPlayer, play_game
    from .utils import Logger, SearchMetrics

    game = _get_game(game_name)
    logger = Logger(log_dir=None, verbose=False)

    console.print(f"[blue]Benchmarking {game_name}, {iterations} iterations per move[/]")

    for i in range(games):
        move_number = 0

        def on_search(result) -> None:
            nonlocal move_number
            move_number += 1
            logger.log_search(
                SearchMetrics.from_result(result, game_name, move_number, game.format_action)
            )

        # One engine plays both sides
        player = MCTSPlayer(
            MCTSEngine(game, seed=None if seed is None else seed + i),
            iterations=iterations,
            on_search=on_search,
        )
        record = play_game(game, player, player)
        console.print(f"  Game {i + 1}: {record.num_moves} moves, {record.outcome.value}")

    logger.print_summary(title="Benchmark")

    total_iterations = sum(m.iterations for m in logger.metrics_history)
    total_time = sum(m.elapsed for m in logger.metrics_history)
    if total_time > 0:
        console.print(f"[green]Iterations/sec: {total_iterations / total_time:.0f}[/]")


if __name__ == "__main__":
    app()
