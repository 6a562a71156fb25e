"""
Pydantic models for the server selection file (config/servers.json).
"""

from typing import Any, Optional

from pydantic import Field, field_validator

from rookie_cli.exceptions import ConfigError

from .base import CaseInsensitiveModel

DEFAULT_SERVER_KEY = "default"


class ServerEntry(CaseInsensitiveModel):
    """One selectable catalog server."""

    name: Optional[str] = None
    index_url: Optional[str] = None


class ServersConfig(CaseInsensitiveModel):
    """The set of known servers plus the key of the active one."""

    active_server: Optional[str] = None
    servers: dict[str, ServerEntry] = Field(default_factory=dict)

    @field_validator("servers", mode="before")
    @classmethod
    def null_servers_as_empty(cls, v: Any) -> Any:
        return {} if v is None else v

    @property
    def active_key(self) -> str:
        """The configured active key, or 'default' when none is set."""
        if self.active_server is None:
            return DEFAULT_SERVER_KEY
        return self.active_server

    def active_entry(self) -> tuple[str, ServerEntry]:
        """
        Resolves the active server.

        Returns:
            A (key, entry) tuple.

        Raises:
            ConfigError: If the active key has no entry in `servers`.
        """
        key = self.active_key
        entry = self.servers.get(key)
        if entry is None:
            raise ConfigError(f"Active server key not found in servers config: {key}")
        return key, entry
