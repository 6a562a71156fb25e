"""
Pydantic model for application settings.
Provides robust validation for all settings.
"""

from pathlib import Path

from pydantic import BaseModel, field_validator

# Upper bound for either timeout, in seconds.
MAX_TIMEOUT = 3600.0


class AppSettings(BaseModel):
    """A validated settings model for the application."""

    # Bridge tool
    adb_path: str = "adb"
    bridge_timeout: float = 300.0

    # Catalog and downloads
    downloads_dir: str = "downloads"
    servers_config: str = ""
    http_timeout: float = 60.0

    class Config:
        """Pydantic model configuration."""

        validate_assignment = True
        str_strip_whitespace = True

    @field_validator("adb_path", "downloads_dir")
    @classmethod
    def validate_not_empty(cls, v: str) -> str:
        if not v:
            raise ValueError("Value cannot be empty.")
        return v

    @field_validator("bridge_timeout", "http_timeout")
    @classmethod
    def validate_timeout(cls, v: float) -> float:
        """Ensures timeouts are positive and bounded."""
        if v <= 0 or v > MAX_TIMEOUT:
            raise ValueError(f"Timeouts must be between 0 and {MAX_TIMEOUT:.0f} seconds.")
        return v

    @property
    def downloads_path(self) -> Path:
        """The staging folder as an absolute path, relative to the working directory."""
        return Path(self.downloads_dir).expanduser().resolve()

    @property
    def servers_config_path(self) -> Path | None:
        """The explicit server config override, if one is set."""
        if not self.servers_config:
            return None
        return Path(self.servers_config).expanduser()

    @classmethod
    def get_ini_keys(cls) -> set[str]:
        """Returns a set of all keys that are expected in the INI file."""
        return set(cls.model_fields)
