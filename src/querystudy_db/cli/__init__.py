"""Console script for querystudy_db."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Annotated, Optional

import typer
from dotenv import load_dotenv
from loguru import logger
from rich.console import Console

app = typer.Typer(
    name="querystudy_db",
    help="Member/team database CLI - dynamic search, stats and export",
    no_args_is_help=True,
)
console = Console()


@app.callback()
def main(
    env_file: Annotated[
        Optional[Path],
        typer.Option("--env-file", "-e", help="Load environment variables from a .env file"),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Show debug logging"),
    ] = False,
) -> None:
    """Configure logging and environment before running a subcommand."""
    logger.remove()
    logger.add(sys.stderr, level="DEBUG" if verbose else "WARNING")

    if env_file:
        if not env_file.exists():
            console.print(f"[bold red]Error:[/bold red] Environment file not found: {env_file}")
            raise typer.Exit(code=1)
        # interpolate=True expands ${VAR} references inside the file
        load_dotenv(env_file, override=True, interpolate=True)
        logger.debug(f"Loaded environment from {env_file}")


# Import subcommand apps
from querystudy_db.cli.db_commands import db_app  # noqa: E402
from querystudy_db.cli.query_commands import query_app  # noqa: E402

# Register subcommands
app.add_typer(db_app, name="db", help="Database management operations")
app.add_typer(query_app, name="query", help="Search, statistics and export")


if __name__ == "__main__":
    app()
