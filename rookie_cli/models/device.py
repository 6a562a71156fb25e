"""
Device record parsed from the bridge tool's device listing.
"""

from dataclasses import dataclass

# Connection states reported by `adb devices`. Anything else is kept verbatim.
STATE_READY = "device"
STATE_UNAUTHORIZED = "unauthorized"
STATE_OFFLINE = "offline"
STATE_UNKNOWN = "?"


@dataclass(frozen=True)
class Device:
    """A device as seen by adb during a single listing."""

    id: str
    state: str = STATE_UNKNOWN

    @property
    def is_ready(self) -> bool:
        """True when the device is authorized and accepts commands."""
        return self.state == STATE_READY
