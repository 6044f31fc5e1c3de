"""
Main CLI entry point for Crudibase.

Provides commands for searching Wikibase, fetching entities, and managing
the local search cache.
"""

import asyncio
import json
import sys
from pathlib import Path
from typing import Optional

import click

from crudibase import __version__
from crudibase.cli.output import (
    print_cache_stats,
    print_entity,
    print_error,
    print_info,
    print_search_results,
    print_success,
)
from crudibase.core.config import Settings
from crudibase.core.exceptions import CrudibaseError, InvalidEntityIdError, ValidationError
from crudibase.core.validation import validate_search_limit
from crudibase.log import set_level


def _check_limit(ctx: click.Context, param: click.Parameter, value: int) -> int:
    try:
        return validate_search_limit(value)
    except ValidationError as e:
        raise click.BadParameter(e.reason)


@click.group()
@click.version_option(version=__version__, prog_name="crudibase")
@click.option(
    "--db",
    "db_path",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Path to the cache database (overrides DATABASE_PATH).",
)
@click.option(
    "--verbose",
    is_flag=True,
    help="Log cache hits, misses and API calls.",
)
@click.pass_context
def cli(ctx: click.Context, db_path: Optional[Path], verbose: bool) -> None:
    """Crudibase - cached Wikidata search and entity lookup.

    Lookups are served from a local SQLite cache and only go to the
    Wikibase API on a miss or after the cached row expires.
    """
    try:
        settings = Settings.from_env()
    except CrudibaseError as e:
        raise click.UsageError(str(e))

    if db_path is not None:
        settings.database_path = db_path

    set_level("DEBUG" if verbose else settings.log_level)

    ctx.ensure_object(dict)
    ctx.obj["settings"] = settings


@cli.command()
@click.argument("query")
@click.option(
    "--limit", "-n",
    type=int,
    callback=_check_limit,
    default=10,
    show_default=True,
    help="Maximum number of results to request.",
)
@click.option(
    "--json", "as_json",
    is_flag=True,
    help="Print results as JSON.",
)
@click.pass_context
def search(ctx: click.Context, query: str, limit: int, as_json: bool) -> None:
    """Search Wikibase entities matching QUERY.

    \b
    Examples:
        crudibase search Einstein
        crudibase search "United States" -n 5
    """
    settings: Settings = ctx.obj["settings"]

    async def run():
        async with settings.build_service() as service:
            return await service.search(query, limit)

    try:
        results = asyncio.run(run())
    except CrudibaseError as e:
        print_error(f"Search failed: {e}")
        sys.exit(1)

    if as_json:
        click.echo(json.dumps([r.to_dict() for r in results], indent=2))
        return

    if not results:
        print_info(f"No results for '{query}'.")
        return

    print_search_results(query, results)


@cli.command()
@click.argument("entity_id")
@click.option(
    "--json", "as_json",
    is_flag=True,
    help="Print the raw entity as JSON.",
)
@click.pass_context
def entity(ctx: click.Context, entity_id: str, as_json: bool) -> None:
    """Show details of the entity ENTITY_ID (e.g. Q937).

    Exits with status 2 for a malformed id and 1 if the entity is not found.
    """
    settings: Settings = ctx.obj["settings"]

    async def run():
        async with settings.build_service() as service:
            return await service.get_entity(entity_id)

    try:
        result = asyncio.run(run())
    except InvalidEntityIdError as e:
        print_error(str(e))
        sys.exit(2)
    except CrudibaseError as e:
        print_error(f"Lookup failed: {e}")
        sys.exit(1)

    if result is None:
        print_error(f"Entity {entity_id} not found")
        sys.exit(1)

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        return

    print_entity(result, settings.language)


@cli.command()
@click.option("--clear", is_flag=True, help="Clear all cached data.")
@click.option("--stats", is_flag=True, help="Show cache statistics.")
@click.option("--cleanup", is_flag=True, help="Remove expired entries.")
@click.pass_context
def cache(ctx: click.Context, clear: bool, stats: bool, cleanup: bool) -> None:
    """Manage the local search cache.

    Search results and entities are cached for CACHE_TTL_HOURS (default
    24 hours). Expired rows are ignored on lookup but stay on disk until
    removed with --cleanup.

    \b
    Examples:
        crudibase cache --stats     # Show cache statistics
        crudibase cache --cleanup   # Remove only expired entries
        crudibase cache --clear     # Clear all cached data
    """
    from crudibase.cache.sqlite import SearchCache

    settings: Settings = ctx.obj["settings"]

    try:
        search_cache = SearchCache(
            settings.database_path,
            default_ttl=settings.cache_ttl_seconds,
        )

        if clear:
            count = search_cache.clear()
            print_success(f"Cache cleared. Removed {count} entries.")
        elif cleanup:
            count = search_cache.sweep_expired()
            print_success(f"Cleanup complete. Removed {count} expired entries.")
        elif stats:
            print_cache_stats(search_cache.stats())
        else:
            click.echo(ctx.get_help())
    except CrudibaseError as e:
        print_error(str(e))
        sys.exit(1)


if __name__ == "__main__":
    cli()
