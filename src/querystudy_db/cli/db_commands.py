"""Database management commands."""

from __future__ import annotations

from typing import Annotated, Optional

import typer
from rich.console import Console

from querystudy_db.constants import DEFAULT_SEED_COUNT

console = Console()

db_app = typer.Typer(
    name="db",
    help="Database management operations",
    no_args_is_help=True,
)


@db_app.command(name="init")
def init_database(
    db_url: Annotated[
        Optional[str],
        typer.Option("--db", help="Database URL (default: $QUERYSTUDY_DB_URL or sqlite:///querystudy.db)"),
    ] = None,
) -> None:
    """
    Initialize database schema (idempotent).

    Safe to run multiple times - existing tables are left untouched.
    """
    from querystudy_db.db import Database

    with Database(db_url) as db:
        console.print(f"Database: {db.url}")
        existing = db.table_names()
        db.create_tables()
        created = sorted(set(db.table_names()) - set(existing))

    if created:
        console.print(f"[green]✓[/green] Tables created: {', '.join(created)}")
    else:
        console.print(f"[green]✓[/green] Database already initialized ({len(existing)} tables)")


@db_app.command(name="seed")
def seed_database(
    db_url: Annotated[
        Optional[str],
        typer.Option("--db", help="Database URL"),
    ] = None,
    count: Annotated[
        int,
        typer.Option("--count", "-n", min=0, help="Number of members to create"),
    ] = DEFAULT_SEED_COUNT,
) -> None:
    """
    Populate sample teams and members.

    Creates teamA/teamB and members member0..member{N-1} (age = index),
    alternating between the two teams. Skips members if any exist.
    """
    from querystudy_db.db import Database
    from querystudy_db.services import seed_members

    with Database(db_url) as db:
        db.create_tables()
        with db.session() as session:
            result = seed_members(session, count=count)

    if result.skipped:
        console.print("[yellow]Nothing to seed - data already present[/yellow]")
        return
    console.print(
        f"[green]✓[/green] Seeded {result.teams_created} teams, "
        f"{result.members_created} members"
    )
