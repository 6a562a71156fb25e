"""
Data Models Layer.

This package contains the dataclasses and Pydantic models that define the core
data structures used throughout the application: devices, server selection,
the catalog, workflow state and settings.
"""

from .catalog import CatalogEntry, CatalogIndex
from .device import Device
from .servers import ServerEntry, ServersConfig
from .settings import AppSettings
from .workflow import WorkflowOutcome, WorkflowState

__all__ = [
    "AppSettings",
    "CatalogEntry",
    "CatalogIndex",
    "Device",
    "ServerEntry",
    "ServersConfig",
    "WorkflowOutcome",
    "WorkflowState",
]
