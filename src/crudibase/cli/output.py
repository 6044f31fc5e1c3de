"""
Rich terminal output helpers for CLI.

Provides functions for printing search results, entity details and cache
statistics using the Rich library.
"""

from typing import Any

from rich import box
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from crudibase.core.models import Entity, SearchResult

# Console instance for all output
console = Console()


def print_search_results(query: str, results: list[SearchResult]) -> None:
    """Print a table of search results.

    Args:
        query: The query that produced the results.
        results: List of SearchResult objects.
    """
    table = Table(
        title=f"Results for '{escape(query)}'",
        box=box.ROUNDED,
        show_header=True,
        header_style="bold cyan",
    )

    table.add_column("ID", style="cyan", no_wrap=True)
    table.add_column("Label")
    table.add_column("Description", style="dim")
    table.add_column("Aliases")

    for result in results:
        aliases = ", ".join(result.aliases[:3])
        if len(result.aliases) > 3:
            aliases += f" (+{len(result.aliases) - 3})"
        table.add_row(
            result.id,
            escape(result.label),
            escape(result.description or ""),
            escape(aliases),
        )

    console.print()
    console.print(table)
    console.print(f"[bold]{len(results)}[/] result(s)")


def print_entity(entity: Entity, language: str = "en") -> None:
    """Print the details of a single entity."""
    label = entity.label(language) or entity.id
    console.print()
    console.print(Panel(f"[bold]{escape(label)}[/] ({entity.id})", subtitle=entity.type))

    description = entity.description(language)
    if description:
        console.print(f"  {escape(description)}")

    aliases = [a.get("value", "") for a in (entity.aliases or {}).get(language, [])]
    if aliases:
        joined = escape(", ".join(aliases))
        console.print(f"\n[bold cyan]Aliases:[/] {joined}")

    if entity.statements:
        console.print(f"[bold cyan]Statements:[/] {len(entity.statements)} properties")

    if entity.sitelinks:
        console.print(f"[bold cyan]Sitelinks:[/] {len(entity.sitelinks)}")


def print_cache_stats(stats: dict[str, Any]) -> None:
    """Print search cache statistics."""
    console.print("\n[bold]Cache Statistics:[/]")
    console.print(f"  Database: {stats['db_path']}")
    console.print(f"  Size: {stats['db_size_bytes'] / 1024:.1f} KB")
    console.print(f"  Total entries: {stats['total_entries']}")
    console.print(f"  Valid entries: {stats['valid_entries']}")
    console.print(f"  Expired entries: {stats['expired_entries']}")
    console.print(f"  Searches: {stats['search_entries']}, entities: {stats['entity_entries']}")


def print_error(message: str) -> None:
    """Print an error message."""
    console.print(f"[bold red]Error:[/] {escape(message)}")


def print_success(message: str) -> None:
    """Print a success message."""
    console.print(f"[bold green]Success:[/] {escape(message)}")


def print_info(message: str) -> None:
    """Print an info message."""
    console.print(f"[cyan]Info:[/] {escape(message)}")
