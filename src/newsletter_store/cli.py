"""Command line maintenance tools for the newsletter store."""

from __future__ import annotations

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from newsletter_store.application.engine_selector import EngineUnavailableError
from newsletter_store.domain.entities import EntryDraft
from newsletter_store.domain.value_objects import EntryCategory
from newsletter_store.infrastructure.container import get_container, reset_container

app = typer.Typer(help="Newsletter store maintenance commands")
console = Console()

SAMPLE_MONTH = "January"
SAMPLE_YEAR = "2026"

SAMPLE_DRAFTS = (
    EntryDraft(
        EntryCategory.NEW_HIRES,
        {
            "name": "Alice Example",
            "position": "Software Engineer",
            "department": "Engineering",
            "date": "2026-01-05",
            "achievement": "Joined the backend team",
            "photo_url": "https://images.example.com/alice.jpg",
        },
    ),
    EntryDraft(
        EntryCategory.PROMOTIONS,
        {
            "name": "Bob Example",
            "position": "Senior PM",
            "previous_position": "PM",
            "department": "Products",
            "date": "2026-01-15",
            "achievement": "Promoted from PM to Senior PM",
            "photo_url": "/assets/bob.png",
        },
    ),
    EntryDraft(
        EntryCategory.TRANSFERS,
        {
            "name": "Chris Example",
            "position": "Analyst",
            "from_department": "Operations",
            "to_department": "Finance",
            "date": "2026-01-20",
        },
    ),
)


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log at DEBUG level"),
) -> None:
    """Configure observability for every command."""
    container = get_container()
    container.setup_observability()
    if verbose:
        from newsletter_store.infrastructure.logging import setup_logging

        setup_logging("DEBUG", container.config.observability.log_format)


def _connect():
    try:
        return get_container().connection()
    except EngineUnavailableError as e:
        console.print(f"[red]✗[/red] {escape(str(e))}")
        raise typer.Exit(code=1) from e


@app.command("init-db")
def init_db() -> None:
    """Create the newsletter tables if they do not exist"""
    connection = _connect()
    try:
        console.print(
            f"[green]✓[/green] Schema ready on the {connection.engine_kind.value} engine"
        )
    finally:
        reset_container()


@app.command()
def seed() -> None:
    """Write the January 2026 sample issue (replaces its entries)"""
    _connect()
    try:
        repository = get_container().repository()
        period_id = repository.save_entries(SAMPLE_MONTH, SAMPLE_YEAR, SAMPLE_DRAFTS)
        issue = repository.load_issue(SAMPLE_MONTH, SAMPLE_YEAR)
        hire = next(
            (e for e in issue.entries if e["category"] == EntryCategory.NEW_HIRES.value), None
        )
        if hire is not None:
            first_name = (hire["name"] or "").split(" ")[0]
            repository.add_comment(hire["id"], "Admin", f"Welcome to the team, {first_name}!")
        console.print(
            f"[green]✓[/green] Seeded {SAMPLE_MONTH} {SAMPLE_YEAR} "
            f"(newsletter {period_id}, {len(SAMPLE_DRAFTS)} entries)"
        )
    finally:
        reset_container()


@app.command()
def show(month: str, year: str) -> None:
    """Print the entries of one issue"""
    _connect()
    try:
        issue = get_container().repository().load_issue(month, year)
        if not issue.entries:
            console.print(f"[yellow]No entries for {month} {year}[/yellow]")
            return

        table = Table(title=f"{month} {year}")
        table.add_column("ID", justify="right")
        table.add_column("Category")
        table.add_column("Name")
        table.add_column("Position")
        table.add_column("Department")
        table.add_column("Order", justify="right")
        table.add_column("Comments", justify="right")
        for entry in issue.entries:
            table.add_row(
                str(entry["id"]),
                str(entry["category"]),
                entry.get("name") or entry.get("title") or "",
                entry.get("position") or "",
                entry.get("department") or entry.get("to_department") or "",
                str(entry["entry_order"]),
                str(len(entry.get("comments", []))),
            )
        console.print(table)
    finally:
        reset_container()


if __name__ == "__main__":
    app()
