"""
In-memory state shared between the orchestrator and whatever presents it.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from .catalog import CatalogEntry


class WorkflowOutcome(str, Enum):
    """How a single workflow run ended."""

    SUCCEEDED = "succeeded"
    FAILED = "failed"
    ABORTED = "aborted"
    BUSY = "busy"


@dataclass
class WorkflowState:
    """Lists, selections, progress and the status log observed by the presentation layer."""

    devices: list[str] = field(default_factory=list)
    packages: list[str] = field(default_factory=list)
    catalog: list[CatalogEntry] = field(default_factory=list)

    selected_device: Optional[str] = None
    selected_package: Optional[str] = None
    selected_entry: Optional[CatalogEntry] = None
    package_filter: str = ""

    server_name: str = "Server"
    server_url: str = ""

    progress: float = 0.0
    status: str = "Ready."
    log: list[str] = field(default_factory=list)
