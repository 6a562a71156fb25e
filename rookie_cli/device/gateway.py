"""
Translates device and package operations into adb command lines and parses the
text adb prints back into structured results.
"""

import logging
from typing import Iterable

from rich.markup import escape

from rookie_cli.exceptions import BridgeToolError
from rookie_cli.models.device import STATE_UNKNOWN, Device

from .backend import BridgeResult, DeviceBackend

log = logging.getLogger(__name__)

DEVICES_HEADER = "List of devices"
PACKAGE_MARKER = "package:"


def parse_devices(output: str) -> list[Device]:
    """
    Parses `adb devices` output into devices, in the order listed.

    The header line and daemon notices ("* daemon started ...") are skipped
    wherever they appear. A line without a state gets the '?' placeholder.
    """
    devices = []
    for raw_line in output.splitlines():
        line = raw_line.strip()
        if not line or line.startswith(DEVICES_HEADER) or line.startswith("*"):
            continue
        parts = line.split(maxsplit=2)
        state = parts[1] if len(parts) > 1 else STATE_UNKNOWN
        devices.append(Device(id=parts[0], state=state))
    return devices


def parse_packages(output: str) -> list[str]:
    """Returns the `package:`-prefixed lines of `pm list packages`, marker stripped."""
    return [
        line[len(PACKAGE_MARKER) :]
        for line in (raw.strip() for raw in output.splitlines())
        if line.startswith(PACKAGE_MARKER)
    ]


def filter_packages(packages: Iterable[str], term: str | None) -> list[str]:
    """Case-insensitive substring filter. An empty term keeps everything."""
    needle = (term or "").strip().lower()
    if not needle:
        return list(packages)
    return [p for p in packages if needle in p.lower()]


class DeviceGateway:
    """Device and package operations backed by the adb command line."""

    def __init__(self, backend: DeviceBackend):
        self.backend = backend

    async def _run_checked(self, operation: str, *args: str) -> BridgeResult:
        result = await self.backend.run(*args)
        if not result.ok:
            detail = result.stderr.strip() or result.stdout.strip()
            raise BridgeToolError(
                f"{operation} failed: {detail}",
                args_used=result.args,
                returncode=result.returncode,
                stderr=result.stderr,
            )
        return result

    async def list_devices(self) -> list[Device]:
        result = await self._run_checked("adb devices", "devices")
        devices = parse_devices(result.stdout)
        log.debug(f"adb reported {len(devices)} device(s).")
        return devices

    async def ready_devices(self) -> list[Device]:
        """Only the devices that are authorized and ready for commands."""
        return [d for d in await self.list_devices() if d.is_ready]

    async def list_packages(self, device_id: str) -> list[str]:
        result = await self._run_checked(
            "List packages", "-s", device_id, "shell", "pm", "list", "packages"
        )
        return parse_packages(result.stdout)

    async def install(self, device_id: str, apk_path: str) -> None:
        """Installs over any existing version (`install -r`), keeping app data."""
        result = await self._run_checked(
            "Install", "-s", device_id, "install", "-r", str(apk_path)
        )
        if result.stdout.strip():
            log.info(f"[dim]{escape(result.stdout.strip())}[/dim]")

    async def uninstall(self, device_id: str, package: str) -> None:
        result = await self._run_checked(
            "Uninstall", "-s", device_id, "uninstall", package
        )
        if result.stdout.strip():
            log.info(f"[dim]{escape(result.stdout.strip())}[/dim]")
