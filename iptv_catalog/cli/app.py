"""
Defines the command-line interface for the application using Typer.
"""

import asyncio
import logging
import os
from collections.abc import Coroutine
from pathlib import Path
from typing import Any, TypeVar

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.logging import RichHandler

from iptv_catalog import __version__
from iptv_catalog.api.auth import AccountValidator
from iptv_catalog.api.client import XtreamClient
from iptv_catalog.core.refresh import RefreshOrchestrator
from iptv_catalog.exceptions import IptvCatalogError
from iptv_catalog.models.catalog import Credentials, Kind
from iptv_catalog.models.config import AppConfig
from iptv_catalog.models.progress import RefreshStatus
from iptv_catalog.models.stats import RefreshStats, Session
from iptv_catalog.playlist.downloader import PlaylistDownloader
from iptv_catalog.storage.account_store import AccountStore
from iptv_catalog.storage.config_manager import ConfigManager
from iptv_catalog.storage.database import CatalogDatabase
from iptv_catalog.storage.persister import CatalogPersister
from iptv_catalog.storage.reader import CatalogReader
from iptv_catalog.utils.structured_logger import create_refresh_logger

from .formatters import (
    format_error_with_suggestions,
    print_account_panel,
    print_categories_table,
    print_config,
    print_items_table,
    print_stats_table,
    print_summary_panel,
)
from .progress_manager import ProgressManager

T = TypeVar("T")

console = Console()

logging.basicConfig(
    level="WARNING",
    format="%(message)s",
    datefmt="[%X]",
    handlers=[
        RichHandler(
            console=console,
            rich_tracebacks=True,
            show_path=False,
            show_level=False,
            markup=True,
        )
    ],
)
log = logging.getLogger("iptv_catalog")

app = typer.Typer(
    name="iptv-catalog",
    help=(
        "Download an IPTV provider's playlist into a local catalog of live,"
        " series and movie categories."
    ),
    rich_markup_mode="rich",
    pretty_exceptions_show_locals=False,
    add_completion=False,
)


def get_config_dir() -> Path:
    if override := os.getenv("IPTV_CATALOG_HOME"):
        return Path(override).expanduser()
    if os.name == "nt":
        base_dir = Path(os.getenv("APPDATA", "~\\AppData\\Roaming"))
    else:
        base_dir = Path(os.getenv("XDG_CONFIG_HOME", "~/.config"))
    return base_dir.expanduser() / "iptv-catalog"


CONFIG_DIR = get_config_dir()
CONFIG_FILE = CONFIG_DIR / "config.ini"


def _load_config() -> AppConfig:
    return ConfigManager(CONFIG_FILE).load_config()


def _open_database(config: AppConfig) -> CatalogDatabase:
    """Opens the catalog and makes sure its schema exists before any command runs."""
    database = CatalogDatabase(config.resolve_database_path())
    database.migrate()
    database.check_schema()
    return database


def _build_client(config: AppConfig) -> XtreamClient:
    return XtreamClient(
        connect_timeout=config.connect_timeout,
        read_timeout=config.read_timeout,
        account_timeout=config.account_timeout,
        user_agent=config.user_agent,
    )


def _build_orchestrator(
    config: AppConfig,
    database: CatalogDatabase,
    client: XtreamClient,
    session: Session,
) -> RefreshOrchestrator:
    return RefreshOrchestrator(
        session,
        AccountValidator(client),
        PlaylistDownloader(client, chunk_size=config.chunk_size),
        CatalogPersister(database, batch_size=config.batch_size),
        AccountStore(database),
        create_refresh_logger(
            config.resolve_log_dir(), enable_json=config.structured_logs
        ),
    )


def _run(coro: Coroutine[Any, Any, T]) -> T:
    """Runs a command coroutine, rendering application errors as a panel."""
    try:
        return asyncio.run(coro)
    except IptvCatalogError as e:
        console.print(format_error_with_suggestions(e))
        raise typer.Exit(code=1) from e


def _report(status: RefreshStatus, stats: RefreshStats) -> None:
    if status.success:
        print_summary_panel(stats)
        return
    console.print(f"[bold red]✗ Refresh failed:[/bold red] {status.message}")
    raise typer.Exit(code=1)


@app.callback(invoke_without_command=True)
def main_callback(
    ctx: typer.Context,
    verbose: int = typer.Option(
        0,
        "--verbose",
        "-v",
        count=True,
        help="Increase logging verbosity (-vv for debug).",
    ),
    version: bool = typer.Option(
        False, "--version", help="Show version and exit.", is_eager=True
    ),
    show_config: bool = typer.Option(
        False, "--show-config", help="Display the current configuration."
    ),
):
    """IPTV catalog CLI"""
    if version:
        console.print(f"[bold]iptv-catalog[/bold] version [cyan]{__version__}[/cyan]")
        raise typer.Exit()

    log_level = "WARNING"
    if verbose == 1:
        log_level = "INFO"
    elif verbose >= 2:
        log_level = "DEBUG"
    logging.getLogger("iptv_catalog").setLevel(log_level)

    if show_config:
        print_config(CONFIG_FILE, ConfigManager(CONFIG_FILE).get_display_dict())
        raise typer.Exit()

    if ctx.invoked_subcommand is None:
        console.print(ctx.get_help())


@app.command()
def login(
    server: str = typer.Argument(..., help="Server base URL, e.g. http://host:8080"),
    username: str = typer.Argument(..., help="Account username."),
    password: str = typer.Option(
        ..., "--password", "-p", prompt=True, hide_input=True, help="Account password."
    ),
):
    """Verify an account, remember it and download its catalog."""
    try:
        credentials = Credentials(username=username, password=password, server=server)
    except ValidationError as e:
        console.print(f"[red]✗ Invalid credentials: {e.errors()[0]['msg']}[/red]")
        raise typer.Exit(code=1) from e

    async def _login() -> tuple[RefreshStatus, RefreshStats]:
        config = _load_config()
        with _open_database(config) as database:
            async with (
                _build_client(config) as client,
                ProgressManager(console) as progress_manager,
            ):
                orchestrator = _build_orchestrator(config, database, client, Session())
                try:
                    status = await orchestrator.authenticate(
                        credentials, progress_manager
                    )
                finally:
                    orchestrator.close()
            return status, orchestrator.stats

    status, stats = _run(_login())
    _report(status, stats)


@app.command()
def refresh():
    """Download the catalog again for the remembered account."""

    async def _refresh() -> tuple[RefreshStatus, RefreshStats] | None:
        config = _load_config()
        with _open_database(config) as database:
            credentials = await AccountStore(database).load()
            if credentials is None:
                return None
            async with (
                _build_client(config) as client,
                ProgressManager(console) as progress_manager,
            ):
                orchestrator = _build_orchestrator(
                    config, database, client, Session(credentials=credentials)
                )
                try:
                    status = await orchestrator.refresh(progress_manager)
                finally:
                    orchestrator.close()
            return status, orchestrator.stats

    result = _run(_refresh())
    if result is None:
        console.print(
            "[red]✗ Not logged in.[/red] Run [cyan]iptv-catalog login[/cyan] first."
        )
        raise typer.Exit(code=1)
    _report(*result)


@app.command()
def categories(
    kind: Kind = typer.Option(
        Kind.LIVE, "--kind", "-k", case_sensitive=False, help="Kind to list."
    ),
):
    """List stored categories of one kind."""

    async def _list():
        config = _load_config()
        with _open_database(config) as database:
            return await CatalogReader(database).list_by_kind(kind)

    print_categories_table(_run(_list()), kind)


@app.command()
def items(
    category_id: int = typer.Argument(..., help="Category id (see 'categories')."),
):
    """Show a category and all of its items."""

    async def _get():
        config = _load_config()
        with _open_database(config) as database:
            return await CatalogReader(database).get_with_items(category_id)

    print_items_table(_run(_get()))


@app.command()
def account():
    """Show account and server information for the remembered account."""

    async def _account():
        config = _load_config()
        with _open_database(config) as database:
            credentials = await AccountStore(database).load()
        if credentials is None:
            return None
        async with _build_client(config) as client:
            return await AccountValidator(client).fetch_account_info(credentials)

    info = _run(_account())
    if info is None:
        console.print(
            "[red]✗ Not logged in.[/red] Run [cyan]iptv-catalog login[/cyan] first."
        )
        raise typer.Exit(code=1)
    print_account_panel(info)


@app.command()
def logout(
    force: bool = typer.Option(
        False, "--force", "-f", help="Bypass the confirmation prompt."
    ),
):
    """Forget the remembered account. The stored catalog is kept."""
    if not force and not typer.confirm("Forget the stored account?"):
        console.print("[yellow]Operation cancelled.[/yellow]")
        raise typer.Abort()

    async def _logout():
        config = _load_config()
        with _open_database(config) as database:
            await AccountStore(database).clear()

    _run(_logout())
    console.print("[green]✓ Logged out.[/green]")


@app.command()
def stats():
    """Show how many categories and items are stored per kind."""

    async def _stats():
        config = _load_config()
        with _open_database(config) as database:
            return await CatalogReader(database).count_by_kind()

    print_stats_table(_run(_stats()))
