"""
Functions for formatting and displaying data in the console using Rich.
"""

from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from iptv_catalog.models.account import AccountInfo
from iptv_catalog.models.catalog import Category, Kind
from iptv_catalog.models.stats import RefreshStats
from iptv_catalog.utils.formatting import (
    format_duration,
    format_kind,
    format_size,
    truncate,
)


def format_error_with_suggestions(
    error: Exception, context: dict | None = None
) -> Panel:
    """Formats an error with actionable suggestions into a Rich Panel."""
    error_type = type(error).__name__
    error_msg = str(error)

    suggestions_map = {
        "AuthError": [
            "• Check the username and password with your provider.",
            "• Make sure the server URL includes the scheme and port.",
            "• Your subscription may have expired; see `iptv-catalog account`.",
        ],
        "DownloadError": [
            "• The server may be overloaded; try again in a few minutes.",
            "• Some providers block unknown clients; set `user_agent` in the config.",
        ],
        "ParseError": [
            "• The server did not return an M3U playlist.",
            "• Run with -vv to see what was received.",
        ],
        "PersistError": [
            "• The previous catalog was kept unchanged.",
            "• Check free disk space and permissions on the database file.",
        ],
        "NotFoundError": [
            "• List category ids with `iptv-catalog categories`.",
            "• Ids change on every refresh.",
        ],
        "SchemaError": [
            "• The database file was not created by iptv-catalog.",
            "• Point `database_path` at a new file in the config.",
        ],
        "ConfigurationError": [
            "• Check the values in your config file (`--show-config`).",
        ],
    }

    suggestions = suggestions_map.get(
        error_type, ["• Run the command with -vv for detailed logs."]
    )

    error_text = Text()
    error_text.append(f"{error_type}: ", style="bold red")
    error_text.append(error_msg)

    suggestion_text = Text("\n".join(suggestions))

    content = Table.grid(padding=(1, 0))
    content.add_row(error_text)
    content.add_row()
    content.add_row(Text("Suggestions", style="bold yellow"))
    content.add_row(suggestion_text)

    if context:
        content.add_row()
        content.add_row(Text(f"Context: {context}", style="dim"))

    return Panel(
        content,
        title="[bold red]An Error Occurred[/bold red]",
        border_style="red",
        expand=False,
    )


def print_config(config_path: Path, config_data: dict[str, Any]):
    """Displays the current configuration."""
    console = Console()
    if not config_data:
        content = "[dim]No configuration file; defaults are in use.[/dim]"
    else:
        content = "\n".join(f"{key} = {value}" for key, value in config_data.items())

    console.print(
        Panel(
            content,
            title=f"Configuration ([dim]{config_path}[/dim])",
            border_style="cyan",
        )
    )


def print_categories_table(categories: list[Category], kind: Kind):
    """Displays the categories of one kind."""
    console = Console()
    if not categories:
        console.print(
            f"[yellow]No {kind.value} categories stored.[/yellow] "
            "Run [cyan]iptv-catalog refresh[/cyan] first."
        )
        return

    table = Table(title=f"Categories ({format_kind(kind)})", box=box.ROUNDED)
    table.add_column("ID", justify="right", style="dim")
    table.add_column("Name", style="cyan")
    for category in categories:
        table.add_row(str(category.id), category.name)
    console.print(table)


def print_items_table(category: Category):
    """Displays one category and its items."""
    console = Console()
    table = Table(
        title=f"{category.name} ({format_kind(category.kind)})",
        box=box.ROUNDED,
        caption=f"{len(category.items)} items",
    )
    table.add_column("#", justify="right", style="dim")
    table.add_column("Name", style="cyan")
    table.add_column("URL", style="dim", overflow="fold")
    for position, item in enumerate(category.items, 1):
        table.add_row(str(position), truncate(item.name, 60), item.url)
    console.print(table)


def _format_timestamp(value: str | None) -> str:
    if not value or not value.isdigit():
        return value or "Never"
    return (
        datetime.fromtimestamp(int(value), tz=timezone.utc)
        .astimezone()
        .strftime("%Y-%m-%d %H:%M")
    )


def print_account_panel(info: AccountInfo):
    """Displays the account and server snapshot."""
    console = Console()
    user, server = info.user_info, info.server_info

    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column(style="bold cyan", justify="right")
    table.add_column()

    auth = "[green]✓ Authenticated[/green]" if user.is_authenticated else "[red]✗ No[/red]"
    table.add_row("Username:", user.username or "?")
    table.add_row("Auth:", auth)
    table.add_row("Status:", user.status or "?")
    table.add_row("Expires:", _format_timestamp(user.exp_date))
    table.add_row("Created:", _format_timestamp(user.created_at))
    table.add_row("Trial:", "Yes" if user.is_trial == "1" else "No")
    table.add_row("Connections:", f"{user.active_cons}/{user.max_connections}")
    table.add_row("", "")
    table.add_row("Server:", f"{server.server_protocol or 'http'}://{server.url}")
    table.add_row("Ports:", f"http {server.port or '-'} • https {server.https_port or '-'}")
    table.add_row("Timezone:", server.timezone or "?")
    table.add_row("Server Time:", server.time_now or "?")

    console.print(
        Panel(table, title="[bold]👤 Account[/bold]", border_style="cyan", expand=False)
    )


def print_stats_table(counts: dict[Kind, dict[str, int]]):
    """Displays category and item counts per kind."""
    console = Console()
    table = Table(title="Catalog", box=box.ROUNDED)
    table.add_column("Kind")
    table.add_column("Categories", justify="right", style="cyan")
    table.add_column("Items", justify="right", style="green")
    for kind, bucket in counts.items():
        table.add_row(
            format_kind(kind), str(bucket["categories"]), str(bucket["items"])
        )
    table.add_section()
    table.add_row(
        "[bold]Total[/bold]",
        str(sum(b["categories"] for b in counts.values())),
        str(sum(b["items"] for b in counts.values())),
    )
    console.print(table)


def print_summary_panel(stats: RefreshStats):
    """Displays the final summary of a successful refresh."""
    console = Console()

    stats_table = Table(show_header=False, box=None, padding=(0, 2))
    stats_table.add_column(style="bold cyan", justify="right", width=20)
    stats_table.add_column(style="white", justify="left")

    stats_table.add_row(
        "✓ Categories:", f"[bold green]{stats.categories_saved}[/bold green]"
    )
    stats_table.add_row("✓ Items:", f"[bold green]{stats.items_saved}[/bold green]")
    stats_table.add_row("Entries Parsed:", str(stats.entries_parsed))
    stats_table.add_row(
        "Playlist Size:", f"[cyan]{format_size(stats.bytes_downloaded)}[/cyan]"
    )
    stats_table.add_row("", "")

    for stage, duration in stats.stage_durations.items():
        stats_table.add_row(
            f"{stage.capitalize()}:", f"[blue]{duration:.1f}s[/blue]"
        )
    stats_table.add_row(
        "Time Elapsed:", f"[blue]{format_duration(stats.total_duration)}[/blue]"
    )

    if stats.items_saved > 0 and stats.total_duration > 0:
        per_second = stats.items_saved / stats.total_duration
        stats_table.add_row("Throughput:", f"[cyan]{per_second:.0f} items/s[/cyan]")

    console.print()
    console.print(
        Panel(
            stats_table,
            title="📺 [bold]Catalog Refreshed![/bold]",
            border_style="green",
            box=box.DOUBLE,
            expand=False,
            padding=(1, 2),
        )
    )
    console.print()
