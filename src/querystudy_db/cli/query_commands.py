"""Search, statistics and export commands."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated, Optional

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from querystudy_db.errors import QueryStudyError

console = Console()

query_app = typer.Typer(
    name="query",
    help="Search, statistics and export",
    no_args_is_help=True,
)

DbOption = Annotated[Optional[str], typer.Option("--db", help="Database URL")]
UsernameOption = Annotated[
    Optional[str], typer.Option("--username", "-u", help="Filter by exact username")
]
TeamOption = Annotated[
    Optional[str], typer.Option("--team", "-t", help="Filter by exact team name")
]
AgeGoeOption = Annotated[
    Optional[int], typer.Option("--age-goe", help="Minimum age (inclusive)")
]
AgeLoeOption = Annotated[
    Optional[int], typer.Option("--age-loe", help="Maximum age (inclusive)")
]
OrderOption = Annotated[
    Optional[list[str]],
    typer.Option(
        "--order",
        "-o",
        help="Sort key KEY[:asc|desc[:first|last]], repeatable (default: member_id)",
    ),
]


def _fail(message: str) -> None:
    console.print(f"[bold red]Error:[/bold red] {escape(message)}")
    raise typer.Exit(code=1)


def _build_criteria(username, team, age_goe, age_loe):
    from querystudy_db.models.schemas import MemberSearchCondition

    try:
        return MemberSearchCondition(
            username=username, team_name=team, age_goe=age_goe, age_loe=age_loe
        )
    except ValidationError as e:
        _fail(str(e))


def _parse_order(order: list[str] | None):
    from querystudy_db.query import OrderSpec

    if not order:
        return None
    try:
        return [OrderSpec.parse(text) for text in order]
    except ValueError as e:
        _fail(str(e))


@query_app.command(name="search")
def search_members(
    db_url: DbOption = None,
    username: UsernameOption = None,
    team: TeamOption = None,
    age_goe: AgeGoeOption = None,
    age_loe: AgeLoeOption = None,
    order: OrderOption = None,
    offset: Annotated[
        int,
        typer.Option("--offset", help="Zero-based index of the first row"),
    ] = 0,
    limit: Annotated[
        int,
        typer.Option("--limit", "-n", help="Maximum results"),
    ] = 20,
) -> None:
    """
    Search members with optional filters.

    All filters are combined with AND; omitted filters match everything.
    """
    from querystudy_db.db import Database
    from querystudy_db.query import MemberQuery, PageRequest

    criteria = _build_criteria(username, team, age_goe, age_loe)
    order_specs = _parse_order(order)

    with Database(db_url) as db:
        try:
            request = PageRequest(offset=offset, limit=limit, order=order_specs)
            with db.session() as session:
                page = MemberQuery(session).page(criteria, request)
        except (QueryStudyError, ValueError) as e:
            _fail(str(e))

    if not page.content:
        console.print("[yellow]No members found[/yellow]")
        return

    table = Table(title=f"Members ({len(page.content)} of {page.total})")
    table.add_column("Member ID", style="cyan", justify="right")
    table.add_column("Username", style="magenta")
    table.add_column("Age", style="green", justify="right")
    table.add_column("Team ID", style="blue", justify="right")
    table.add_column("Team", style="yellow")

    for row in page.content:
        table.add_row(
            str(row.member_id),
            row.username if row.username is not None else "-",
            str(row.age),
            str(row.team_id) if row.team_id is not None else "-",
            row.team_name if row.team_name is not None else "-",
        )

    console.print(table)
    if page.has_next:
        console.print(f"[dim]More results: --offset {offset + len(page.content)}[/dim]")


@query_app.command(name="stats")
def member_stats(
    db_url: DbOption = None,
    username: UsernameOption = None,
    team: TeamOption = None,
    age_goe: AgeGoeOption = None,
    age_loe: AgeLoeOption = None,
) -> None:
    """
    Display age statistics overall and per team.
    """
    from querystudy_db.db import Database
    from querystudy_db.query import MemberQuery

    criteria = _build_criteria(username, team, age_goe, age_loe)

    with Database(db_url) as db:
        try:
            with db.session() as session:
                query = MemberQuery(session)
                overall = query.age_stats(criteria)
                per_team = query.team_age_stats(criteria)
        except QueryStudyError as e:
            _fail(str(e))

    console.print("[bold blue]Member Statistics[/bold blue]\n")
    console.print(f"Total Members: {overall.count}")

    if overall.count == 0:
        console.print("[yellow]No members found[/yellow]")
        return

    console.print(f"Average Age: {overall.avg:.2f}")
    console.print(f"Age Range: {overall.min} - {overall.max}\n")

    if per_team:
        table = Table(title="Age by Team")
        table.add_column("Team", style="cyan")
        table.add_column("Members", style="magenta", justify="right")
        table.add_column("Sum", justify="right")
        table.add_column("Avg", style="green", justify="right")
        table.add_column("Min", justify="right")
        table.add_column("Max", justify="right")

        for stats in per_team:
            table.add_row(
                stats.team_name,
                str(stats.count),
                str(stats.sum),
                f"{stats.avg:.2f}",
                str(stats.min),
                str(stats.max),
            )

        console.print(table)


@query_app.command(name="export")
def export_members(
    output_file: Annotated[
        Path,
        typer.Argument(help="Output file (CSV or Parquet)"),
    ],
    db_url: DbOption = None,
    username: UsernameOption = None,
    team: TeamOption = None,
    age_goe: AgeGoeOption = None,
    age_loe: AgeLoeOption = None,
    order: OrderOption = None,
) -> None:
    """
    Export search results to CSV or Parquet.

    Output format is chosen from the file extension.
    """
    import pandas as pd

    from querystudy_db.db import Database
    from querystudy_db.query import MemberQuery

    suffix = output_file.suffix.lower()
    if suffix not in (".csv", ".parquet"):
        console.print(f"[red]Error:[/red] Unsupported format: {output_file.suffix}")
        console.print("Use .csv or .parquet extension")
        raise typer.Exit(code=1)

    criteria = _build_criteria(username, team, age_goe, age_loe)
    order_specs = _parse_order(order)

    with Database(db_url) as db:
        try:
            with db.session() as session:
                rows = MemberQuery(session).search(criteria, order_specs)
        except QueryStudyError as e:
            _fail(str(e))

    df = pd.DataFrame(
        [row.model_dump() for row in rows],
        columns=["member_id", "username", "age", "team_id", "team_name"],
    )
    console.print(f"Loaded {len(df)} rows")

    if suffix == ".csv":
        df.to_csv(output_file, index=False)
        console.print(f"[green]✓[/green] Exported to CSV: {output_file}")
    else:
        df.to_parquet(output_file, index=False)
        console.print(f"[green]✓[/green] Exported to Parquet: {output_file}")
