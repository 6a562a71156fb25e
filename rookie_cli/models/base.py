"""
Shared Pydantic base for the JSON documents read from disk and from the catalog
server, whose keys are matched case-insensitively.
"""

from typing import Any

from pydantic import BaseModel, model_validator


class CaseInsensitiveModel(BaseModel):
    """
    An immutable model that accepts ``IndexUrl``, ``indexUrl`` or ``index_url``
    for a field named ``index_url``. Unknown keys are ignored.
    """

    class Config:
        """Pydantic model configuration."""

        frozen = True
        extra = "ignore"

    @model_validator(mode="before")
    @classmethod
    def normalize_keys(cls, data: Any) -> Any:
        """Maps incoming keys onto field names, ignoring case and underscores."""
        if not isinstance(data, dict):
            return data

        lookup = {name.replace("_", "").lower(): name for name in cls.model_fields}
        normalized: dict[str, Any] = {}
        for key, value in data.items():
            field_name = lookup.get(str(key).replace("_", "").lower())
            if field_name is not None:
                normalized[field_name] = value
        return normalized
