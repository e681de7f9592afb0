"""CLI entry point for podcatalog."""

import asyncio
import sys
from collections.abc import Awaitable, Callable
from pathlib import Path
from typing import Annotated, TypeVar

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from podcatalog.config.logging import setup_logging
from podcatalog.config.manager import ConfigManager
from podcatalog.config.schema import GlobalConfig
from podcatalog.episodes.models import Episode, OperationFailure, PaginationWindow
from podcatalog.episodes.search import SUPPORTED_FILTERS
from podcatalog.episodes.service import EpisodeService
from podcatalog.episodes.source import EpisodeSource
from podcatalog.episodes.spotify import SpotifyEpisodeSource
from podcatalog.utils.display import truncate_text
from podcatalog.utils.errors import ConfigError, PodcatalogError

T = TypeVar("T")

app = typer.Typer(
    name="podcatalog",
    help="Browse a podcast show's episode catalog",
    no_args_is_help=True,
)
config_app = typer.Typer(name="config", help="Show or change podcatalog configuration")
app.add_typer(config_app)

console = Console()

PageSizeOption = Annotated[
    str | None,
    typer.Option("--page-size", "-s", help="Episodes per page, or 'unlimited' (default: config)"),
]
PageOption = Annotated[int, typer.Option("--page", "-p", help="Page number (1-based)")]


def build_source(manager: ConfigManager, config: GlobalConfig) -> EpisodeSource:
    """Create the upstream episode source from stored credentials."""
    client_id, client_secret = manager.resolve_credentials(config)
    return SpotifyEpisodeSource(client_id, client_secret, config=config.spotify)


def _run_with_service(
    ctx: typer.Context, func: Callable[[EpisodeService, GlobalConfig], Awaitable[T]]
) -> T:
    """Build a service, run an async command body and close the source."""
    manager = ConfigManager()
    config = manager.load_config()

    options = ctx.obj or {}
    setup_logging(
        verbose=options.get("verbose", False),
        log_file=options.get("log_file"),
        level=config.log_level,
    )
    source = build_source(manager, config)
    service = EpisodeService(source, fetch_config=config.fetch, browse_config=config.browse)

    async def run() -> T:
        try:
            return await func(service, config)
        finally:
            service.log_performance_summary()
            close = getattr(source, "aclose", None)
            if close is not None:
                await close()

    return asyncio.run(run())


def _resolve_show_id(show_id: str | None, config: GlobalConfig) -> str:
    resolved = show_id or config.default_show_id
    if not resolved:
        raise ConfigError("No show id given and no default_show_id configured")
    return resolved


def _fail(message: str, suggestion: str | None = None) -> None:
    console.print(f"[red]✗[/red] {escape(message)}")
    if suggestion:
        console.print(f"[dim]  {escape(suggestion)}[/dim]")
    sys.exit(1)


def _render_episodes(episodes: list[Episode], pagination: PaginationWindow, title: str) -> None:
    if not episodes:
        console.print("[yellow]No episodes found.[/yellow]")
        return

    table = Table(title=f"[bold]{escape(title)}[/bold]")
    table.add_column("#", justify="right", style="cyan", no_wrap=True)
    table.add_column("Title")
    table.add_column("Released", style="green", no_wrap=True)
    table.add_column("Duration", justify="right")
    table.add_column("Explicit", justify="center")

    for episode in episodes:
        table.add_row(
            str(episode.episode_number or "-"),
            escape(truncate_text(episode.title, 60)),
            episode.release_date_raw or "Unknown",
            episode.duration,
            "Yes" if episode.explicit else "No",
            style="bold yellow" if episode.is_highlighted else None,
        )

    console.print(table)
    console.print(
        f"\n[dim]Page {pagination.current_page} of {pagination.total_pages} "
        f"(episodes {pagination.start_index}-{pagination.end_index} "
        f"of {pagination.total_items})[/dim]"
    )


@app.callback()
def main(
    ctx: typer.Context,
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose (DEBUG) logging"),
    log_file: Path | None = typer.Option(None, "--log-file", help="Write logs to file"),
) -> None:
    """podcatalog - browse a podcast show's episodes from the terminal."""
    ctx.obj = {"verbose": verbose, "log_file": log_file}
    setup_logging(verbose=verbose, log_file=log_file)


@app.command("version")
def show_version() -> None:
    """Show version information."""
    from podcatalog import __version__

    console.print(f"[bold cyan]podcatalog[/bold cyan] v{__version__}")


@app.command("episodes")
def list_episodes(
    ctx: typer.Context,
    show_id: Annotated[str | None, typer.Argument(help="Show id (default: config)")] = None,
    page: PageOption = 1,
    page_size: PageSizeOption = None,
) -> None:
    """List a show's episodes, newest first.

    Examples:
        podcatalog episodes 4rOoJ6Egrf8K2IrywzwOMk --page 2

        podcatalog episodes 4rOoJ6Egrf8K2IrywzwOMk --page-size unlimited
    """

    async def body(service: EpisodeService, config: GlobalConfig):
        return await service.get_episodes_window(
            _resolve_show_id(show_id, config), page, page_size or config.browse.default_page_size
        )

    try:
        result = _run_with_service(ctx, body)
    except PodcatalogError as e:
        _fail(f"Error: {e}")
        return

    if isinstance(result, OperationFailure):
        _fail(result.error, result.suggestion)
        return
    _render_episodes(result.episodes, result.pagination, "Episodes")


@app.command("search")
def search_episode(
    ctx: typer.Context,
    episode_number: Annotated[int, typer.Argument(help="Episode number (1 = newest)")],
    show_id: Annotated[str | None, typer.Argument(help="Show id (default: config)")] = None,
    page_size: PageSizeOption = None,
) -> None:
    """Jump to an episode by its number.

    Examples:
        podcatalog search 42 4rOoJ6Egrf8K2IrywzwOMk
    """

    async def body(service: EpisodeService, config: GlobalConfig):
        return await service.search_episode_by_number(
            _resolve_show_id(show_id, config),
            episode_number,
            page_size or config.browse.default_page_size,
        )

    try:
        result = _run_with_service(ctx, body)
    except PodcatalogError as e:
        _fail(f"Error: {e}")
        return

    if isinstance(result, OperationFailure):
        _fail(result.error, result.suggestion)
        return
    _render_episodes(result.episodes, result.pagination, f"Episode #{episode_number}")
    console.print(f"[dim]Found via {result.search_method}[/dim]")


@app.command("filter")
def filter_episodes(
    ctx: typer.Context,
    date_filter: Annotated[str, typer.Argument(help=f"One of: {', '.join(SUPPORTED_FILTERS)}")],
    show_id: Annotated[str | None, typer.Argument(help="Show id (default: config)")] = None,
    start: Annotated[str | None, typer.Option("--start", help="Start date (YYYY-MM-DD)")] = None,
    end: Annotated[str | None, typer.Option("--end", help="End date (YYYY-MM-DD)")] = None,
    page: PageOption = 1,
    page_size: PageSizeOption = None,
) -> None:
    """List episodes released in a date range.

    Examples:
        podcatalog filter 30days 4rOoJ6Egrf8K2IrywzwOMk

        podcatalog filter custom 4rOoJ6Egrf8K2IrywzwOMk --start 2024-01-01 --end 2024-03-31
    """

    async def body(service: EpisodeService, config: GlobalConfig):
        return await service.filter_episodes_by_date(
            _resolve_show_id(show_id, config),
            date_filter,
            start,
            end,
            page,
            page_size or config.browse.default_page_size,
        )

    try:
        result = _run_with_service(ctx, body)
    except PodcatalogError as e:
        _fail(f"Error: {e}")
        return

    if isinstance(result, OperationFailure):
        _fail(result.error, result.suggestion)
        return
    _render_episodes(
        result.episodes,
        result.pagination,
        f"Episodes {result.filter_start_date} to {result.filter_end_date}",
    )
    console.print(f"[dim]{result.total_matches} matching episode(s)[/dim]")


@app.command("find")
def find_episodes(
    ctx: typer.Context,
    query: Annotated[str, typer.Argument(help="Text to look for in titles, descriptions, dates")],
    show_id: Annotated[str | None, typer.Argument(help="Show id (default: config)")] = None,
    page: PageOption = 1,
    page_size: PageSizeOption = None,
) -> None:
    """Search a show's episodes by keyword.

    Examples:
        podcatalog find interview 4rOoJ6Egrf8K2IrywzwOMk

        podcatalog find 2024-03 --page-size unlimited
    """

    async def body(service: EpisodeService, config: GlobalConfig):
        return await service.search_episodes(
            _resolve_show_id(show_id, config),
            query,
            page,
            page_size or config.browse.default_page_size,
        )

    try:
        result = _run_with_service(ctx, body)
    except PodcatalogError as e:
        _fail(f"Error: {e}")
        return

    if isinstance(result, OperationFailure):
        _fail(result.error, result.suggestion)
        return
    _render_episodes(
        result.episodes, result.pagination, f'Episodes matching "{result.search_query}"'
    )
    console.print(f"[dim]{result.total_matches} matching episode(s)[/dim]")


@app.command("catalog")
def catalog_summary(
    ctx: typer.Context,
    show_id: Annotated[str | None, typer.Argument(help="Show id (default: config)")] = None,
) -> None:
    """Fetch a show's full catalog and report how complete it is."""

    async def body(service: EpisodeService, config: GlobalConfig):
        return await service.get_all_episodes(_resolve_show_id(show_id, config))

    try:
        catalog = _run_with_service(ctx, body)
    except PodcatalogError as e:
        _fail(f"Error: {e}")
        return

    status = "[green]complete[/green]" if catalog.is_complete else "[yellow]incomplete[/yellow]"
    console.print(
        f"Fetched [bold]{catalog.fetched_items}[/bold] of {catalog.total_items} episodes "
        f"({status}, {catalog.pages_requested} requests)"
    )
    if catalog.episodes:
        newest, oldest = catalog.episodes[0], catalog.episodes[-1]
        console.print(f"Newest: #1 {escape(newest.title)} ({newest.release_date_raw or 'Unknown'})")
        console.print(
            f"Oldest: #{oldest.episode_number} {escape(oldest.title)} "
            f"({oldest.release_date_raw or 'Unknown'})"
        )
    for warning in catalog.warnings:
        console.print(
            f"[yellow]⚠[/yellow] Page at offset {warning.offset} failed: {escape(warning.error)}"
        )


@config_app.command("show")
def config_show() -> None:
    """Display the current configuration."""
    try:
        manager = ConfigManager()
        config = manager.load_config()
    except PodcatalogError as e:
        _fail(f"Error: {e}")
        return

    table = Table(show_header=False, box=None)
    table.add_column("Key", style="cyan")
    table.add_column("Value")

    table.add_row("Config file", str(manager.config_file))
    table.add_row("Log level", config.log_level)
    table.add_row("Default show", config.default_show_id or "—")
    table.add_row("Client id", config.spotify.client_id or "—")
    table.add_row("Client secret", "✓ stored" if config.spotify.client_secret else "—")
    table.add_row("Market", config.spotify.market)
    table.add_row("Fetch page size", str(config.fetch.page_size))
    table.add_row("Concurrent requests", str(config.fetch.batch_size))
    table.add_row("Batch delay", f"{config.fetch.batch_delay_ms}ms")
    table.add_row("Default page size", str(config.browse.default_page_size))
    table.add_row("API search", "✓" if config.browse.api_search else "✗")

    console.print("\n[bold]podcatalog Configuration[/bold]\n")
    console.print(table)


@config_app.command("credentials")
def config_credentials(
    client_id: Annotated[str, typer.Option(prompt=True, help="API client id")],
    client_secret: Annotated[
        str, typer.Option(prompt=True, hide_input=True, help="API client secret")
    ],
) -> None:
    """Store API client credentials (the secret is encrypted)."""
    try:
        ConfigManager().set_credentials(client_id, client_secret)
    except PodcatalogError as e:
        _fail(f"Error: {e}")
        return

    console.print("[green]✓[/green] Credentials saved")
    console.print("[dim]  Client secret encrypted and stored securely[/dim]")


if __name__ == "__main__":
    app()
