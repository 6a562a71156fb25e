"""
Pydantic models for the remote catalog index document.
"""

from typing import Any, Optional
from urllib.parse import urlparse

from pydantic import Field, field_validator

from .base import CaseInsensitiveModel


class CatalogEntry(CaseInsensitiveModel):
    """An installable application listed by the catalog server."""

    id: Optional[str] = None
    name: Optional[str] = None
    version: Optional[str] = None
    apk: Optional[str] = None

    @property
    def label(self) -> str:
        """A human-readable name for display and log lines."""
        return self.name or self.id or self.apk or "Unnamed app"

    @property
    def is_installable(self) -> bool:
        """True when `apk` holds an absolute http(s) URL."""
        if not self.apk or not self.apk.strip():
            return False
        parsed = urlparse(self.apk.strip())
        return parsed.scheme in ("http", "https") and bool(parsed.netloc)


class CatalogIndex(CaseInsensitiveModel):
    """The catalog document: an optional display name and its apps, in order."""

    name: Optional[str] = None
    apps: list[CatalogEntry] = Field(default_factory=list)

    @field_validator("apps", mode="before")
    @classmethod
    def null_apps_as_empty(cls, v: Any) -> Any:
        return [] if v is None else v
