"""
Device Layer.

This package handles all communication with devices through the adb bridge
tool: running it as a subprocess and parsing its output.
"""

from .backend import BridgeResult, DeviceBackend, SubprocessBackend
from .gateway import DeviceGateway, filter_packages

__all__ = [
    "BridgeResult",
    "DeviceBackend",
    "DeviceGateway",
    "SubprocessBackend",
    "filter_packages",
]
