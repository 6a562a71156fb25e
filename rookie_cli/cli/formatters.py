"""
Functions for formatting and displaying data in the console using Rich.
"""

from pathlib import Path
from typing import Any

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from rookie_cli.models.catalog import CatalogEntry
from rookie_cli.models.device import STATE_OFFLINE, STATE_READY, STATE_UNAUTHORIZED, Device
from rookie_cli.models.servers import ServersConfig

STATE_STYLES = {
    STATE_READY: "green",
    STATE_UNAUTHORIZED: "yellow",
    STATE_OFFLINE: "red",
}


def format_error_with_suggestions(
    error: Exception, context: dict | None = None
) -> Panel:
    """Formats an error with actionable suggestions into a Rich Panel."""
    error_type = type(error).__name__
    error_msg = str(error)

    suggestions_map = {
        "BridgeToolError": [
            "• Make sure adb (Android platform-tools) is installed and on PATH.",
            "• Or point `adb_path` in the config at the adb executable.",
            "• Run `adb devices` and accept the USB debugging prompt on the device.",
        ],
        "ConfigError": [
            "• Check config/servers.json: 'ActiveServer' must name an entry in 'Servers'.",
            "• Run `rookie init --force` to rewrite the settings file with defaults.",
        ],
        "NetworkError": [
            "• Check your internet connection.",
            "• Verify the catalog server's IndexUrl in config/servers.json.",
            "• The catalog server might be temporarily unavailable.",
        ],
        "ParseError": [
            "• The catalog index is not valid JSON or has an unexpected shape.",
            "• Expected: {\"Name\": ..., \"Apps\": [{\"Id\", \"Name\", \"Version\", \"Apk\"}]}.",
        ],
        "ValidationError": [
            "• Check the file path or package name you passed.",
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


def print_devices_table(console: Console, devices: list[Device]):
    """Displays every device adb reports, ready or not."""
    table = Table(title="Connected devices", box=box.SIMPLE_HEAVY)
    table.add_column("Serial", style="bold cyan", no_wrap=True)
    table.add_column("State")

    for device in devices:
        style = STATE_STYLES.get(device.state, "dim")
        table.add_row(device.id, Text(device.state, style=style))

    console.print(table)


def print_catalog_table(console: Console, server_name: str, entries: list[CatalogEntry]):
    """Displays the catalog apps in the order the server lists them."""
    table = Table(title=server_name, box=box.SIMPLE_HEAVY)
    table.add_column("Id", style="bold cyan", no_wrap=True)
    table.add_column("Name")
    table.add_column("Version", style="magenta")
    table.add_column("Installable", justify="center")

    for entry in entries:
        table.add_row(
            entry.id or "-",
            entry.name or "-",
            entry.version or "-",
            "[green]✓[/green]" if entry.is_installable else "[red]✗[/red]",
        )

    console.print(table)


def print_servers_table(console: Console, config_path: Path, config: ServersConfig):
    """Displays the configured catalog servers, marking the active one."""
    table = Table(title=f"Servers ([dim]{config_path}[/dim])", box=box.SIMPLE_HEAVY)
    table.add_column("", width=1)
    table.add_column("Key", style="bold cyan", no_wrap=True)
    table.add_column("Name")
    table.add_column("Index URL", overflow="fold")

    for key, entry in config.servers.items():
        table.add_row(
            "[green]●[/green]" if key == config.active_key else "",
            key,
            entry.name or "-",
            entry.index_url or "[red](not set)[/red]",
        )

    console.print(table)


def print_config(console: Console, config_path: Path, config_data: dict[str, Any]):
    """Displays the current settings file."""
    content = ""
    for key, value in config_data.items():
        content += f"{key} = {value}\n"

    console.print(
        Panel(
            content.strip() or "[dim](defaults)[/dim]",
            title=f"Configuration ([dim]{config_path}[/dim])",
            border_style="cyan",
        )
    )
