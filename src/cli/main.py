"""
Typer CLI for the learnrank recommendation service.

Commands:
    learnrank db init               - Initialize database tables
    learnrank db seed FILE          - Load users, items and progress from JSON
    learnrank recommend USER_ID     - Show ranked recommendations
    learnrank refresh USER_ID       - Recompute recommendations (manual trigger)
    learnrank mastery USER_ID       - Show per-tag mastery
    learnrank history USER_ID       - Show recent recommendation runs

Usage:
    learnrank --help
    learnrank db seed data/fixtures/demo.json
    learnrank recommend u1 --limit 5
    learnrank recommend u1 --json
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import NoReturn

import typer
from loguru import logger
from rich import print as rprint
from rich.console import Console
from rich.table import Table
from sqlalchemy.exc import SQLAlchemyError

from config import configure_logging, get_settings
from src.core.exceptions import RecommendationError, UserNotFoundError
from src.core.mastery import MasteryLevel
from src.core.models import RecommendationResult

app = typer.Typer(
    help="learnrank CLI: rank learning items by estimated learning value",
    no_args_is_help=True,
)

console = Console()


# ========================================
# Context Builder (Dependency Injection)
# ========================================


class CLIContext:
    """
    Dependency injection container for CLI commands.

    Lazily wires the SQL stores so `--help` works without a database.
    """

    def __init__(self, session_factory=None):
        self.settings = get_settings()
        self._session_factory = session_factory
        self._engine = None
        self._users = None
        self._log = None

    @property
    def session_factory(self):
        if self._session_factory is None:
            from src.db.database import SessionLocal

            self._session_factory = SessionLocal
        return self._session_factory

    @property
    def engine(self):
        """Lazy load RecommendationEngine."""
        if self._engine is None:
            from src.db.stores import build_engine_from_db

            self._engine = build_engine_from_db(
                self.session_factory, config=self.settings.get_ranking_config()
            )
        return self._engine

    @property
    def users(self):
        if self._users is None:
            from src.db.stores import SqlUserStore

            self._users = SqlUserStore(self.session_factory)
        return self._users

    @property
    def log(self):
        if self._log is None:
            from src.db.stores import SqlRecommendationLog

            self._log = SqlRecommendationLog(self.session_factory)
        return self._log


def _build_context() -> CLIContext:
    return CLIContext()


def _fail(message: str) -> NoReturn:
    rprint(f"[red]✗[/red] {message}")
    raise typer.Exit(code=1)


def _render_results(user_id: str, results: list[RecommendationResult], title: str) -> None:
    if not results:
        rprint(f"[yellow]No recommendations for {user_id}[/yellow]")
        return

    table = Table(title=title)
    table.add_column("#", justify="right", style="dim")
    table.add_column("Item", style="cyan")
    table.add_column("Title")
    table.add_column("Difficulty")
    table.add_column("Score", justify="right", style="green")
    table.add_column("Reason")

    for rank, result in enumerate(results, start=1):
        table.add_row(
            str(rank),
            result.item_id,
            result.item.title,
            result.item.difficulty.value,
            f"{result.score:.2f}",
            result.reason,
        )
    console.print(table)


def _run_recommendations(user_id: str, limit: int | None, as_json: bool, manual: bool) -> None:
    ctx = _build_context()
    limit = ctx.settings.clamp_limit(limit)
    try:
        profile = ctx.users.get_profile(user_id)
        if manual:
            results = ctx.engine.refresh(profile, limit)
        else:
            results = ctx.engine.recommend(profile, limit)
    except UserNotFoundError as e:
        _fail(str(e))
    except RecommendationError as e:
        logger.error(f"Recommendation failed for {user_id}: {e}")
        _fail(f"Recommendation failed: {e}")

    if as_json:
        typer.echo(json.dumps([r.to_dict() for r in results], indent=2))
        return

    title = "Refreshed recommendations" if manual else "Recommendations"
    _render_results(user_id, results, f"{title} for {user_id}")


# ========================================
# Recommendation Commands
# ========================================


@app.command("recommend")
def recommend(
    user_id: str = typer.Argument(..., help="User to recommend for"),
    limit: int | None = typer.Option(None, "--limit", "-n", help="Maximum number of recommendations"),
    as_json: bool = typer.Option(False, "--json", help="Print results as JSON"),
) -> None:
    """Show ranked recommendations for a user."""
    _run_recommendations(user_id, limit, as_json, manual=False)


@app.command("refresh")
def refresh(
    user_id: str = typer.Argument(..., help="User to recommend for"),
    limit: int | None = typer.Option(None, "--limit", "-n", help="Maximum number of recommendations"),
    as_json: bool = typer.Option(False, "--json", help="Print results as JSON"),
) -> None:
    """Recompute recommendations, logged as a manual refresh."""
    _run_recommendations(user_id, limit, as_json, manual=True)


@app.command("mastery")
def mastery(
    user_id: str = typer.Argument(..., help="User to inspect"),
) -> None:
    """Show per-tag mastery derived from completed items."""
    ctx = _build_context()
    try:
        profile = ctx.users.get_profile(user_id)
        mastery_map = ctx.engine.explain_mastery(profile)
    except RecommendationError as e:
        _fail(str(e))

    if not mastery_map:
        rprint(f"[yellow]No tags in the catalog for {user_id}[/yellow]")
        return

    table = Table(title=f"Mastery for {user_id}")
    table.add_column("Tag", style="cyan")
    table.add_column("Mastery", justify="right")
    table.add_column("Level")

    for tag, value in sorted(mastery_map.items(), key=lambda kv: (-kv[1], kv[0])):
        level = MasteryLevel.from_score(value)
        table.add_row(tag, f"{value:.2f}", f"[{level.color}]{level.display_name}[/{level.color}]")
    console.print(table)


@app.command("history")
def history(
    user_id: str = typer.Argument(..., help="User to inspect"),
    last: int = typer.Option(5, "--last", help="Number of runs to show"),
) -> None:
    """Show the most recent recommendation runs for a user."""
    ctx = _build_context()
    try:
        entries = ctx.log.recent(user_id, last)
    except RecommendationError as e:
        _fail(str(e))

    if not entries:
        rprint(f"[yellow]No recommendation history for {user_id}[/yellow]")
        return

    for entry in entries:
        items = ", ".join(f"{r.item_id} ({r.score:.2f})" for r in entry.recommendations) or "-"
        rprint(f"[dim]{entry.timestamp.isoformat()}[/dim] [bold]{entry.trigger}[/bold]: {items}")


# ========================================
# Database Commands
# ========================================

db_app = typer.Typer(help="Database management (init, seed)")
app.add_typer(db_app, name="db")


@db_app.command("init")
def db_init() -> None:
    """
    Initialize database tables from SQLAlchemy models.

    Safe to run multiple times (idempotent).
    """
    from src.db.database import init_db

    init_db()
    rprint("[green]✓[/green] Database initialized!")


@db_app.command("seed")
def db_seed(
    fixture: Path = typer.Argument(..., help="JSON file with users, items and progress"),
) -> None:
    """Load users, learning items and progress from a JSON fixture."""
    from src.db.seed import load_fixture

    ctx = _build_context()
    try:
        result = load_fixture(fixture, ctx.session_factory)
    except FileNotFoundError as e:
        _fail(str(e))
    except ValueError as e:
        _fail(f"Invalid fixture: {e}")
    except SQLAlchemyError as e:
        logger.error(f"Seeding {fixture} failed: {e}")
        _fail("Database error while seeding; run `learnrank db init` first")

    rprint(
        f"[green]✓[/green] Seeded {result.users} users, {result.items} items, "
        f"{result.progress} progress records"
    )


def main() -> None:
    """CLI entry point."""
    configure_logging(level="WARNING")
    app()


if __name__ == "__main__":
    main()
