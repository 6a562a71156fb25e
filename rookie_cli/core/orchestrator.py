"""
The main orchestrator: sequences device and catalog operations into user
workflows and keeps the state that a UI or the CLI observes.
"""

import asyncio
import functools
import logging
from datetime import datetime
from pathlib import Path
from typing import Awaitable, Callable, Optional

from rich.markup import escape

from rookie_cli.catalog.client import CatalogClient
from rookie_cli.catalog.servers import resolve_server_config_path
from rookie_cli.device.backend import SubprocessBackend
from rookie_cli.device.gateway import DeviceGateway, filter_packages
from rookie_cli.exceptions import ValidationError
from rookie_cli.models.catalog import CatalogEntry
from rookie_cli.models.settings import AppSettings
from rookie_cli.models.workflow import WorkflowOutcome, WorkflowState

log = logging.getLogger(__name__)

StateListener = Callable[[WorkflowState], None]

# Progress checkpoints shared by the install and uninstall workflows.
PROGRESS_STARTED = 0.2
PROGRESS_DOWNLOADED = 0.6
PROGRESS_DONE = 1.0


def workflow(func):
    """
    Runs the decorated coroutine as a guarded workflow.

    Only one workflow runs at a time per orchestrator; a call made while
    another is in flight is rejected with BUSY rather than queued. Failures
    never propagate to the caller; they are logged and reported through the
    returned WorkflowOutcome.
    """

    @functools.wraps(func)
    async def wrapper(self: "Orchestrator", *args, **kwargs) -> WorkflowOutcome:
        if self.is_busy:
            self._log(f"Busy: {self._running} is still running.")
            return WorkflowOutcome.BUSY
        async with self._guard:
            self._running = func.__name__.replace("_", " ")
            try:
                return await self._run(functools.partial(func, self, *args, **kwargs))
            finally:
                self._running = None

    return wrapper


class Orchestrator:
    """Drives device, package and catalog workflows over a shared WorkflowState."""

    def __init__(
        self,
        gateway: DeviceGateway,
        catalog: CatalogClient,
        settings: AppSettings | None = None,
    ):
        self.gateway = gateway
        self.catalog = catalog
        self.settings = settings or AppSettings()
        self.state = WorkflowState()

        self._listeners: list[StateListener] = []
        self._running: Optional[str] = None
        self._guard = asyncio.Lock()

    @classmethod
    def from_settings(cls, settings: AppSettings) -> "Orchestrator":
        """Builds an orchestrator wired to the real adb binary and HTTP client."""
        backend = SubprocessBackend(settings.adb_path, timeout=settings.bridge_timeout)
        return cls(
            DeviceGateway(backend), CatalogClient(timeout=settings.http_timeout), settings
        )

    async def close(self) -> None:
        await self.catalog.close()

    @property
    def is_busy(self) -> bool:
        return self._guard.locked()

    # --- Observation ---

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """
        Registers a callback invoked with the state after every log line or
        progress change. Returns a function that removes it again.
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self.state)

    def _log(self, message: str) -> None:
        stamp = datetime.now().strftime("%H:%M:%S")
        self.state.log.append(f"[{stamp}] {message}")
        self.state.status = message
        if message.startswith("ERROR:"):
            log.error(f"[red]{escape(message)}[/red]")
        else:
            log.info(escape(message))
        self._notify()

    def _set_progress(self, value: float) -> None:
        value = max(0.0, min(1.0, value))
        if value != self.state.progress:
            self.state.progress = value
            self._notify()

    def _download_progress(self, fraction: float) -> None:
        span = PROGRESS_DOWNLOADED - PROGRESS_STARTED
        value = min(PROGRESS_DOWNLOADED, PROGRESS_STARTED + fraction * span)
        self._set_progress(max(self.state.progress, value))

    # --- Selection ---

    def select_device(self, device_id: Optional[str]) -> None:
        self.state.selected_device = device_id or None

    def select_package(self, package: Optional[str]) -> None:
        self.state.selected_package = package or None

    def select_entry(self, entry: Optional[CatalogEntry]) -> None:
        self.state.selected_entry = entry

    def set_package_filter(self, text: Optional[str]) -> None:
        self.state.package_filter = text or ""

    def find_entries(self, keyword: str) -> list[CatalogEntry]:
        """
        Looks up catalog entries by keyword. An exact (case-insensitive) id
        match wins; otherwise every entry whose id or name contains the keyword.
        """
        needle = keyword.strip().lower()
        if not needle:
            return []
        exact = [e for e in self.state.catalog if e.id and e.id.lower() == needle]
        if exact:
            return exact
        return [
            e
            for e in self.state.catalog
            if needle in (e.id or "").lower() or needle in (e.name or "").lower()
        ]

    # --- Workflow plumbing ---

    async def _run(self, step: Callable[[], Awaitable[None]]) -> WorkflowOutcome:
        """Runs one workflow body with progress reset around it and failures caught."""
        self._set_progress(0.0)
        try:
            await step()
            return WorkflowOutcome.SUCCEEDED
        except ValidationError as e:
            self._log(str(e))
            return WorkflowOutcome.ABORTED
        except Exception as e:
            self._log(f"ERROR: {str(e) or type(e).__name__}")
            log.debug("Full traceback:", exc_info=True)
            return WorkflowOutcome.FAILED
        finally:
            self._set_progress(0.0)

    def _require_device(self) -> str:
        if not self.state.selected_device:
            raise ValidationError("Select a device first.")
        return self.state.selected_device

    # --- Workflows ---

    def load_server_config(self, path: Path | None = None) -> WorkflowOutcome:
        """
        Loads the server selection file and resolves the active server's name
        and catalog URL. Runs synchronously; intended for startup.
        """
        if self.is_busy:
            self._log(f"Busy: {self._running} is still running.")
            return WorkflowOutcome.BUSY
        try:
            cfg_path = path or resolve_server_config_path(
                self.settings.servers_config_path
            )
            config = self.catalog.load_server_config(cfg_path)
            key, entry = config.active_entry()
        except Exception as e:
            self._log(f"ERROR: {str(e) or type(e).__name__}")
            return WorkflowOutcome.FAILED

        self.state.server_name = entry.name or key
        self.state.server_url = entry.index_url or ""
        self._log(f"Server set: {self.state.server_name}")
        return WorkflowOutcome.SUCCEEDED

    @workflow
    async def refresh_catalog(self) -> None:
        """Fetches the active server's catalog, replacing the in-memory list."""
        if not self.state.server_url.strip():
            raise ValidationError("Server URL is empty. Edit config/servers.json.")

        self._log("Loading server index...")
        self.state.catalog = []
        self.state.selected_entry = None

        index = await self.catalog.fetch_catalog(self.state.server_url.strip())
        if index.name and index.name.strip():
            self.state.server_name = index.name
        self.state.catalog = list(index.apps)
        self._log(f"Loaded {len(self.state.catalog)} server app(s).")

    @workflow
    async def refresh_devices(self) -> None:
        """Lists ready devices and selects the first one."""
        self._log("Refreshing devices...")
        self.state.devices = []
        self.state.selected_device = None

        devices = await self.gateway.list_devices()
        self.state.devices = [d.id for d in devices if d.is_ready]
        self.state.selected_device = (
            self.state.devices[0] if self.state.devices else None
        )

        count = len(self.state.devices)
        self._log(f"Found {count} device(s)." if count else "No authorized devices.")

    @workflow
    async def load_packages(self) -> None:
        """Lists packages on the selected device, applying the current filter."""
        await self._load_packages()

    async def _load_packages(self) -> None:
        device = self._require_device()

        self._log("Loading packages...")
        previous = self.state.selected_package
        self.state.packages = []
        self.state.selected_package = None

        packages = await self.gateway.list_packages(device)
        self.state.packages = filter_packages(packages, self.state.package_filter)
        if previous in self.state.packages:
            self.state.selected_package = previous
        self._log(f"Loaded {len(self.state.packages)} package(s).")

    @workflow
    async def install_from_catalog(self) -> None:
        """Downloads the selected catalog entry and installs it on the selected device."""
        entry = self.state.selected_entry
        if entry is None or not entry.apk or not entry.apk.strip():
            raise ValidationError("Select a server app first.")
        if not entry.is_installable:
            raise ValidationError(f"'{entry.label}' has no valid download URL: {entry.apk}")
        device = self._require_device()

        self._log(f"Downloading {entry.label}...")
        self._set_progress(PROGRESS_STARTED)
        apk_path = await self.catalog.download_artifact(
            entry.apk.strip(),
            self.settings.downloads_path,
            on_progress=self._download_progress,
        )

        self._log("Installing APK...")
        self._set_progress(PROGRESS_DOWNLOADED)
        await self.gateway.install(device, str(apk_path))

        self._set_progress(PROGRESS_DONE)
        self._log("Done.")
        self._set_progress(0.0)

        await self._run(self._load_packages)

    @workflow
    async def install_local(self, apk_path: str) -> None:
        """Installs a local APK file on the selected device."""
        device = self._require_device()
        path = Path(apk_path).expanduser() if apk_path else None
        if path is None or not path.is_file():
            raise ValidationError(f"APK not found: {apk_path}")

        self._log("Installing local APK...")
        self._set_progress(PROGRESS_STARTED)
        await self.gateway.install(device, str(path))

        self._set_progress(PROGRESS_DONE)
        self._log("Install complete.")
        self._set_progress(0.0)

        await self._run(self._load_packages)

    @workflow
    async def uninstall_selected(self) -> None:
        """Uninstalls the selected package; the list is only touched on success."""
        device = self._require_device()
        package = self.state.selected_package
        if not package:
            raise ValidationError("Select a package to uninstall.")

        self._log(f"Uninstalling {package}...")
        self._set_progress(PROGRESS_STARTED)
        await self.gateway.uninstall(device, package)

        self._set_progress(PROGRESS_DONE)
        packages = list(self.state.packages)
        if package in packages:
            packages.remove(package)
        self.state.packages = packages
        self.state.selected_package = None

        self._log("Uninstall complete.")
        self._set_progress(0.0)
