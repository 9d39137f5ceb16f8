"""
Command-line interface for catbreeds.

This module implements the CLI using Click, providing commands to sync,
browse and search the breed catalog and to manage local favorites.
rich-click is used for the help colors, rich for the output tables.

Commands:
    catbreeds init                      Sync the full catalog (with images)
    catbreeds list [--page N]           Show one page of breeds (1-based)
    catbreeds search <query>            Search breeds by name
    catbreeds show <breed-id>           Show one cached breed
    catbreeds favorite <breed-id>       Toggle a breed's favorite flag
    catbreeds favorites                 List favorite breeds
    catbreeds status                    Cache and connectivity summary
    catbreeds clear-cache [--yes]       Delete every cached breed

Options:
    --config <path>                     Path to config.yaml
    --verbose                           Show DEBUG output on the console

Reads (list, search) go to The Cat API first and fall back to the local
cache when it is unreachable. show, favorite, favorites and status only
use the cache.

Exit codes:
    0   success
    1   configuration error or unexpected error
    2   cache error
    3   remote error with nothing cached to fall back on
    4   breed not found
    130 interrupted
"""

import sys
from datetime import datetime
from pathlib import Path
from typing import Optional

import rich_click as click
from rich.console import Console
from rich.table import Table

# Configure rich-click for better help formatting
click.rich_click.USE_RICH_MARKUP = True
click.rich_click.SHOW_ARGUMENTS = True
click.rich_click.GROUP_ARGUMENTS_OPTIONS = True
click.rich_click.STYLE_ERRORS_SUGGESTION = "magenta italic"
click.rich_click.ERRORS_SUGGESTION = ""
click.rich_click.MAX_WIDTH = 100
click.rich_click.COMMAND_GROUPS = {
    "catbreeds": [
        {
            "name": "Catalog",
            "commands": ["init", "list", "search", "show"],
        },
        {
            "name": "Favorites",
            "commands": ["favorite", "favorites"],
        },
        {
            "name": "Cache",
            "commands": ["status", "clear-cache"],
        },
    ],
}

from catbreeds import __version__
from catbreeds.api import CatApiClient, CatBreed
from catbreeds.core import (
    CatalogError,
    Config,
    ConfigError,
    Database,
    ErrorKind,
    Failure,
    get_logger,
    load_config,
    setup_logging,
    shutdown_logging,
)
from catbreeds.core.progress import EnrichmentProgressBar
from catbreeds.sync import CatalogSyncEngine, PageWindow

logger = get_logger(__name__)

console = Console()

_EXIT_CODES = {
    ErrorKind.CONFIG: 1,
    ErrorKind.CACHE: 2,
    ErrorKind.TRANSPORT: 3,
    ErrorKind.NOT_FOUND: 4,
    ErrorKind.UNKNOWN: 1,
}


class AppContext:
    """Objects shared by all commands of one invocation."""

    def __init__(self, config: Config, client: CatApiClient, database: Database) -> None:
        self.config = config
        self.client = client
        self.database = database
        self.engine = CatalogSyncEngine(client, database, config.sync)

    def close(self) -> None:
        self.client.close()
        self.database.close()
        shutdown_logging()


@click.group()
@click.option(
    "--config", "config_path",
    type=click.Path(path_type=Path),
    default=None,
    metavar="<config.yaml>",
    help="Configuration file (default: ./config.yaml)"
)
@click.option(
    "--verbose", "-v",
    is_flag=True,
    help="Show debug output on the console"
)
@click.version_option(__version__, prog_name="catbreeds")
@click.pass_context
def cli(ctx: click.Context, config_path: Optional[Path], verbose: bool) -> None:
    """
    catbreeds: Browse The Cat API breed catalog, online or offline.

    Every listing is cached locally, so the catalog stays browsable without
    a connection. Favorites are stored locally and survive every refresh.

    \b
    BASIC USAGE:
        catbreeds init                  # Sync the full catalog
        catbreeds list --page 2         # Browse page 2
        catbreeds search siam           # Search by name
        catbreeds favorite abys         # Toggle a favorite
    """
    try:
        config = load_config(config_path)
    except ConfigError as e:
        click.echo(f"Configuration error: {e.message}", err=True)
        sys.exit(1)

    setup_logging(
        config.logging.directory,
        console_level="DEBUG" if verbose else config.logging.level
    )
    logger.debug(f"catbreeds {__version__} starting")

    try:
        config.cache.database.parent.mkdir(parents=True, exist_ok=True)
        database = Database(config.cache.database)
    except OSError as e:
        click.echo(f"Cache error: cannot create {config.cache.database.parent}: {e}", err=True)
        shutdown_logging()
        sys.exit(2)
    except CatalogError as e:
        click.echo(f"Cache error: {e.message}", err=True)
        shutdown_logging()
        sys.exit(2)

    app = AppContext(config, CatApiClient(config.api), database)
    ctx.obj = app
    ctx.call_on_close(app.close)


# =============================================================================
# Catalog
# =============================================================================

@cli.command()
@click.pass_obj
def init(app: AppContext) -> None:
    """Sync the full catalog from The Cat API, images included."""
    with EnrichmentProgressBar(total=app.config.sync.assumed_total) as progress:
        result = app.engine.initialize_app_data(progress=progress)

    _exit_on_failure(result)
    console.print(f"[green]Cached {result.value} breeds[/green]")


@cli.command("list")
@click.option(
    "--page", "-p",
    type=click.IntRange(min=1),
    default=1,
    show_default=True,
    help="Page number (1-based)"
)
@click.pass_obj
def list_breeds(app: AppContext, page: int) -> None:
    """Show one page of breeds ordered by name."""
    online = app.engine.is_online()
    total = app.engine.resolve_total_count(None, online)
    window = PageWindow(0, app.config.sync.page_size, total.value)
    index = window.clamp(page - 1)
    window = PageWindow(index, window.page_size, window.total_count)

    if index != page - 1:
        console.print(f"[yellow]Only {window.total_pages} pages, showing the last one[/yellow]")

    result = app.engine.get_breeds(limit=window.page_size, page=index)
    _exit_on_failure(result)

    _print_breeds(result.value, title=f"Page {index + 1} of {window.total_pages}")
    _print_offline_notice(online)

    hints = []
    if window.has_previous_page:
        hints.append(f"previous: --page {index}")
    if window.has_next_page:
        hints.append(f"next: --page {index + 2}")
    if hints:
        console.print(f"[dim]{'  '.join(hints)}[/dim]")


@cli.command()
@click.argument("query")
@click.pass_obj
def search(app: AppContext, query: str) -> None:
    """Search breeds whose name contains QUERY."""
    result = app.engine.search_breeds(query)
    _exit_on_failure(result)

    if not result.value:
        console.print(f"No breeds match '{query.strip()}'")
        return

    _print_breeds(result.value, title=f"Results for '{query.strip()}'")
    _print_offline_notice(app.engine.is_online())


@cli.command()
@click.argument("breed_id", metavar="BREED_ID")
@click.pass_obj
def show(app: AppContext, breed_id: str) -> None:
    """Show every cached field of one breed."""
    result = app.engine.get_breed_by_id(breed_id)
    _exit_on_failure(result)
    breed: CatBreed = result.value

    table = Table(title=f"{breed.name}{' ★' if breed.is_favorite else ''}", show_header=False)
    table.add_column("Field", style="bold")
    table.add_column("Value", overflow="fold")

    table.add_row("ID", breed.id)
    table.add_row("Origin", breed.origin or "-")
    table.add_row("Life span", f"{breed.life_span} years" if breed.life_span else "-")
    table.add_row("Temperament", ", ".join(breed.temperament_traits) or "-")
    table.add_row("Description", breed.description or "-")
    if breed.image is not None:
        table.add_row("Image", f"{breed.image.url} ({breed.image.width}x{breed.image.height})")
    else:
        table.add_row("Image", "-")
    table.add_row("Updated", _format_millis(breed.last_updated))

    console.print(table)


# =============================================================================
# Favorites
# =============================================================================

@cli.command()
@click.argument("breed_id", metavar="BREED_ID")
@click.pass_obj
def favorite(app: AppContext, breed_id: str) -> None:
    """Toggle the favorite flag of a cached breed."""
    result = app.engine.toggle_favorite(breed_id)
    _exit_on_failure(result)

    if result.value:
        console.print(f"[green]★ {breed_id} added to favorites[/green]")
    else:
        console.print(f"{breed_id} removed from favorites")


@cli.command()
@click.pass_obj
def favorites(app: AppContext) -> None:
    """List favorite breeds."""
    result = app.engine.get_favorite_breeds()
    _exit_on_failure(result)

    if not result.value:
        console.print("No favorites yet. Add one with [bold]catbreeds favorite <id>[/bold]")
        return

    _print_breeds(result.value, title=f"Favorites ({len(result.value)})")


# =============================================================================
# Cache
# =============================================================================

@cli.command()
@click.pass_obj
def status(app: AppContext) -> None:
    """Show cache contents and API connectivity."""
    cached = app.engine.get_cached_breeds_count()
    _exit_on_failure(cached)
    favorite_count = app.engine.get_favorite_breeds_count()
    _exit_on_failure(favorite_count)
    last_update = app.engine.get_last_update_time()
    _exit_on_failure(last_update)

    online = app.engine.is_online()

    table = Table(title="catbreeds status", show_header=False)
    table.add_column("Field", style="bold")
    table.add_column("Value")
    table.add_row("API", "[green]online[/green]" if online else "[red]offline[/red]")
    table.add_row("Cache", str(app.config.cache.database))
    table.add_row("Cached breeds", str(cached.value))
    table.add_row("Favorites", str(favorite_count.value))
    table.add_row("Last update", _format_millis(last_update.value))
    console.print(table)


@cli.command("clear-cache")
@click.option("--yes", "-y", is_flag=True, help="Do not ask for confirmation")
@click.pass_obj
def clear_cache(app: AppContext, yes: bool) -> None:
    """Delete every cached breed. Favorites are lost."""
    if not yes:
        click.confirm("This deletes all cached breeds and favorites. Continue?", abort=True)

    result = app.engine.clear_cache()
    _exit_on_failure(result)
    console.print("Cache cleared")


# =============================================================================
# Output helpers
# =============================================================================

def _exit_on_failure(result) -> None:
    """Print a Failure's message and exit with its kind's exit code."""
    if not isinstance(result, Failure):
        return
    click.echo(f"Error: {result.message}", err=True)
    sys.exit(_EXIT_CODES.get(result.kind, 1))


def _print_breeds(breeds: list[CatBreed], title: str) -> None:
    table = Table(title=title)
    table.add_column("", width=1)
    table.add_column("ID", style="cyan")
    table.add_column("Name", style="bold")
    table.add_column("Origin")
    table.add_column("Life span")
    table.add_column("Image", justify="center")

    for breed in breeds:
        table.add_row(
            "★" if breed.is_favorite else "",
            breed.id,
            breed.name,
            breed.origin or "-",
            breed.life_span or "-",
            "✓" if breed.image is not None else "✗",
        )

    console.print(table)


def _print_offline_notice(online: bool) -> None:
    if not online:
        console.print("[yellow]Offline: showing cached data[/yellow]")


def _format_millis(millis: Optional[int]) -> str:
    if millis is None:
        return "never"
    return datetime.fromtimestamp(millis / 1000).strftime("%Y-%m-%d %H:%M:%S")


def main() -> None:
    """
    Entry point for the CLI.

    This function is called when running `catbreeds` from the command line.
    """
    try:
        cli()
    except KeyboardInterrupt:
        click.echo("\nInterrupted by user", err=True)
        sys.exit(130)


if __name__ == "__main__":
    main()
