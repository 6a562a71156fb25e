"""
Defines the command-line interface for the application using Typer.
"""

import asyncio
import logging
import os
from pathlib import Path

import typer
from rich.console import Console
from rich.logging import RichHandler

from rookie_cli import __version__
from rookie_cli.catalog.client import CatalogClient
from rookie_cli.catalog.servers import load_server_config, resolve_server_config_path
from rookie_cli.core.orchestrator import Orchestrator
from rookie_cli.device.backend import SubprocessBackend
from rookie_cli.device.gateway import DeviceGateway, filter_packages
from rookie_cli.exceptions import ValidationError
from rookie_cli.models.settings import AppSettings
from rookie_cli.models.workflow import WorkflowOutcome
from rookie_cli.storage.config_manager import ConfigManager

from .formatters import (
    print_catalog_table,
    print_config,
    print_devices_table,
    print_servers_table,
)
from .progress_manager import ProgressManager

console = Console()

logging.basicConfig(
    level="INFO",
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

EXIT_OK = 0
EXIT_USAGE = 1
EXIT_NO_DEVICE = 2
EXIT_NO_MATCH = 3
EXIT_AMBIGUOUS = 4
EXIT_ERROR = 99

app = typer.Typer(
    name="rookie",
    help=(
        "Manage apps on Android devices over adb and install APKs from a catalog"
        " server. Use 'rookie <command> --help' for more info."
    ),
    rich_markup_mode="rich",
    pretty_exceptions_show_locals=False,
    add_completion=False,
)


def get_config_dir() -> Path:
    if os.name == "nt":
        base_dir = Path(os.getenv("APPDATA", "~\\AppData\\Roaming"))
    else:
        base_dir = Path(os.getenv("XDG_CONFIG_HOME", "~/.config"))
    return base_dir.expanduser() / "rookie-cli"


CONFIG_DIR = get_config_dir()
CONFIG_FILE = CONFIG_DIR / "config.ini"


def load_settings() -> AppSettings:
    return ConfigManager(CONFIG_FILE).load_config()


def build_gateway(settings: AppSettings) -> DeviceGateway:
    backend = SubprocessBackend(settings.adb_path, timeout=settings.bridge_timeout)
    return DeviceGateway(backend)


def build_orchestrator(settings: AppSettings) -> Orchestrator:
    return Orchestrator.from_settings(settings)


async def _pick_device(gateway: DeviceGateway) -> str:
    """Returns the first ready device, or exits when none is connected."""
    ready = await gateway.ready_devices()
    if not ready:
        console.print(
            "[red]✗ No authorized devices.[/red] Check the USB debugging prompt"
            " on the device."
        )
        raise typer.Exit(code=EXIT_NO_DEVICE)
    return ready[0].id


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
    """Rookie Android app manager"""
    if version:
        console.print(f"[bold]rookie-cli[/bold] version [cyan]{__version__}[/cyan]")
        raise typer.Exit()

    log_level = "INFO"
    if verbose >= 2:
        log_level = "DEBUG"
    logging.getLogger("rookie_cli").setLevel(log_level)

    if show_config:
        config_data = ConfigManager(CONFIG_FILE).get_config_as_dict()
        print_config(console, CONFIG_FILE, config_data)
        raise typer.Exit()

    if ctx.invoked_subcommand is None:
        console.print(ctx.get_help())
        raise typer.Exit(code=EXIT_USAGE)


@app.command()
def init(
    adb_path: str | None = typer.Option(
        None, "--adb-path", help="Path to the adb executable."
    ),
    downloads_dir: str | None = typer.Option(
        None, "--downloads-dir", help="Folder where downloaded APKs are staged."
    ),
    servers_config: str | None = typer.Option(
        None, "--servers-config", help="Path to a servers.json to use instead of the bundled one."
    ),
    force: bool = typer.Option(
        False, "--force", "-f", help="Overwrite an existing file without asking."
    ),
):
    """Write a settings file with default values."""
    if (
        CONFIG_FILE.exists()
        and not force
        and not typer.confirm("Configuration file already exists. Overwrite it?")
    ):
        raise typer.Abort()

    settings = {
        key: value
        for key, value in {
            "adb_path": adb_path,
            "downloads_dir": downloads_dir,
            "servers_config": servers_config,
        }.items()
        if value is not None
    }
    ConfigManager(CONFIG_FILE).save_new_config(settings)
    console.print(f"[bold green]✓ Configuration saved to '{CONFIG_FILE}'[/bold green]")


@app.command()
def devices():
    """List every device adb reports."""
    settings = load_settings()
    found = asyncio.run(build_gateway(settings).list_devices())
    if not found:
        console.print("[yellow]No devices found.[/yellow]")
        raise typer.Exit(code=EXIT_NO_DEVICE)
    print_devices_table(console, found)


@app.command()
def install(
    apk: Path = typer.Argument(..., help="Path to a local APK file."),  # noqa: B008
):
    """Install a local APK on the first ready device."""
    if not apk.is_file():
        raise ValidationError(f"APK not found: {apk}")
    settings = load_settings()

    async def _install():
        gateway = build_gateway(settings)
        device_id = await _pick_device(gateway)
        console.print(f"[cyan]Installing on {device_id}...[/cyan]")
        await gateway.install(device_id, str(apk))

    asyncio.run(_install())
    console.print("[green]✓ Done.[/green]")


@app.command()
def packages(
    filter_term: str | None = typer.Argument(
        None, metavar="[FILTER]", help="Only show packages containing this text."
    ),
):
    """List packages installed on the first ready device."""
    settings = load_settings()

    async def _packages() -> list[str]:
        gateway = build_gateway(settings)
        device_id = await _pick_device(gateway)
        return filter_packages(await gateway.list_packages(device_id), filter_term)

    for package in asyncio.run(_packages()):
        console.print(package, markup=False, highlight=False)


@app.command()
def uninstall(package: str = typer.Argument(..., help="Exact package name.")):
    """Uninstall a package from the first ready device."""
    settings = load_settings()

    async def _uninstall():
        gateway = build_gateway(settings)
        device_id = await _pick_device(gateway)
        console.print(f"[cyan]Uninstalling {package} from {device_id}...[/cyan]")
        await gateway.uninstall(device_id, package)

    asyncio.run(_uninstall())
    console.print("[green]✓ Done.[/green]")


@app.command(name="uninstall-find")
def uninstall_find(
    keyword: str = typer.Argument(..., help="Text contained in the package name."),
):
    """Uninstall the one package whose name contains KEYWORD."""
    settings = load_settings()

    async def _uninstall_find() -> str:
        gateway = build_gateway(settings)
        device_id = await _pick_device(gateway)
        matches = filter_packages(await gateway.list_packages(device_id), keyword)
        if not matches:
            console.print("[yellow]No matching packages.[/yellow]")
            raise typer.Exit(code=EXIT_NO_MATCH)
        if len(matches) > 1:
            console.print("[yellow]Multiple matches. Be specific:[/yellow]")
            for match in matches:
                console.print(f"  {match}", markup=False, highlight=False)
            raise typer.Exit(code=EXIT_AMBIGUOUS)

        console.print(f"[cyan]Uninstalling {matches[0]} from {device_id}...[/cyan]")
        await gateway.uninstall(device_id, matches[0])
        return matches[0]

    removed = asyncio.run(_uninstall_find())
    console.print(f"[green]✓ Removed {removed}.[/green]")


@app.command()
def servers():
    """Show the configured catalog servers."""
    settings = load_settings()
    path = resolve_server_config_path(settings.servers_config_path)
    config = load_server_config(path)
    key, entry = config.active_entry()
    print_servers_table(console, path, config)
    console.print(
        f"Active: [bold]{entry.name or key}[/bold] "
        f"[dim]{entry.index_url or '(no index URL)'}[/dim]"
    )


@app.command()
def catalog(
    filter_term: str | None = typer.Argument(
        None, metavar="[FILTER]", help="Only show apps whose id or name contains this text."
    ),
):
    """Fetch and list the active server's catalog."""
    settings = load_settings()
    path = resolve_server_config_path(settings.servers_config_path)
    key, entry = load_server_config(path).active_entry()
    if not entry.index_url or not entry.index_url.strip():
        raise ValidationError("Server URL is empty. Edit config/servers.json.")

    async def _fetch():
        async with CatalogClient(timeout=settings.http_timeout) as client:
            return await client.fetch_catalog(entry.index_url.strip())

    index = asyncio.run(_fetch())
    apps = index.apps
    if filter_term and filter_term.strip():
        needle = filter_term.strip().lower()
        apps = [
            a
            for a in apps
            if needle in (a.id or "").lower() or needle in (a.name or "").lower()
        ]
    server_name = index.name if index.name and index.name.strip() else entry.name or key
    print_catalog_table(console, server_name, apps)


@app.command()
def get(keyword: str = typer.Argument(..., help="Catalog app id or part of its name.")):
    """Download a catalog app and install it on the first ready device."""
    settings = load_settings()

    async def _get() -> str:
        orchestrator = build_orchestrator(settings)
        try:
            if await orchestrator.refresh_devices() is not WorkflowOutcome.SUCCEEDED:
                raise typer.Exit(code=EXIT_ERROR)
            if not orchestrator.state.devices:
                console.print(
                    "[red]✗ No authorized devices.[/red] Check the USB debugging"
                    " prompt on the device."
                )
                raise typer.Exit(code=EXIT_NO_DEVICE)

            if orchestrator.load_server_config() is not WorkflowOutcome.SUCCEEDED:
                raise typer.Exit(code=EXIT_ERROR)
            if await orchestrator.refresh_catalog() is not WorkflowOutcome.SUCCEEDED:
                raise typer.Exit(code=EXIT_ERROR)

            matches = orchestrator.find_entries(keyword)
            if not matches:
                console.print(f"[yellow]No catalog app matches '{keyword}'.[/yellow]")
                raise typer.Exit(code=EXIT_NO_MATCH)
            if len(matches) > 1:
                console.print("[yellow]Multiple matches. Be specific:[/yellow]")
                for match in matches:
                    console.print(f"  {match.id or '-'}  {match.label}", markup=False)
                raise typer.Exit(code=EXIT_AMBIGUOUS)

            orchestrator.select_entry(matches[0])
            async with ProgressManager(console, orchestrator):
                outcome = await orchestrator.install_from_catalog()
            if outcome is not WorkflowOutcome.SUCCEEDED:
                raise typer.Exit(code=EXIT_ERROR)
            return matches[0].label
        finally:
            await orchestrator.close()

    installed = asyncio.run(_get())
    console.print(f"[bold green]✓ Installed {installed}.[/bold green]")
