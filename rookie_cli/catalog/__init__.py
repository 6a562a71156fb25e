"""
Catalog Layer.

This package resolves the active catalog server, fetches the remote app
catalog and downloads the artifacts it lists.
"""

from .client import CatalogClient
from .downloader import Downloader
from .servers import load_server_config, resolve_server_config_path

__all__ = [
    "CatalogClient",
    "Downloader",
    "load_server_config",
    "resolve_server_config_path",
]
