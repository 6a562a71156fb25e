"""
Runs the adb bridge tool as a subprocess.

The gateway only depends on the `DeviceBackend` protocol, so tests can feed it
canned text instead of spawning adb.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Protocol

from rookie_cli.exceptions import BridgeToolError

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class BridgeResult:
    """The fully drained result of one bridge tool invocation."""

    args: list[str]
    returncode: int
    stdout: str
    stderr: str

    @property
    def ok(self) -> bool:
        return self.returncode == 0


class DeviceBackend(Protocol):
    """Anything that can run a bridge tool command line and return its output."""

    async def run(self, *args: str) -> BridgeResult: ...


class SubprocessBackend:
    """Spawns one adb process per call and waits for it to exit."""

    def __init__(self, adb_path: str = "adb", timeout: float | None = 300.0):
        """
        Args:
            adb_path: Executable name or path of the bridge tool.
            timeout: Seconds before a hung process is killed. None waits forever.
        """
        self.adb_path = adb_path
        self.timeout = timeout

    async def run(self, *args: str) -> BridgeResult:
        cmd = [self.adb_path, *args]
        log.debug(f"Running: {' '.join(cmd)}")
        try:
            proc = await asyncio.create_subprocess_exec(
                *cmd,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except FileNotFoundError as e:
            raise BridgeToolError(
                f"Bridge tool not found: '{self.adb_path}'. Install platform-tools "
                "or set adb_path in the config.",
                args_used=list(args),
            ) from e
        except OSError as e:
            raise BridgeToolError(
                f"Failed to start '{self.adb_path}': {e}", args_used=list(args)
            ) from e

        try:
            stdout, stderr = await asyncio.wait_for(
                proc.communicate(), timeout=self.timeout
            )
        except asyncio.TimeoutError as e:
            await self._kill(proc)
            raise BridgeToolError(
                f"'{self.adb_path} {' '.join(args)}' timed out after {self.timeout:g}s.",
                args_used=list(args),
            ) from e
        except asyncio.CancelledError:
            await self._kill(proc)
            raise

        return BridgeResult(
            args=list(args),
            returncode=proc.returncode if proc.returncode is not None else -1,
            stdout=stdout.decode("utf-8", errors="replace"),
            stderr=stderr.decode("utf-8", errors="replace"),
        )

    @staticmethod
    async def _kill(proc: asyncio.subprocess.Process) -> None:
        if proc.returncode is None:
            try:
                proc.kill()
            except ProcessLookupError:
                pass
            await proc.wait()
