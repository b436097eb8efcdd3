"""Change records.

A :class:`~pyattrstore.model.Model` describes each dirty attribute as an
:class:`AttributeChange`, which change handlers receive instead of raw
tuples.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class AttributeChange(BaseModel):
    """One attribute whose current value differs from its snapshot."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    name: str = Field(..., description="Attribute name")
    value: Any = Field(default=None, description="Current value (None when unset)")
    original: Any = Field(default=None, description="Snapshot value (None when never synced)")

    @field_validator("name")
    @classmethod
    def _non_empty_name(cls, value: str) -> str:
        if not value:
            raise ValueError("name must be non-empty")
        return value

    @property
    def is_unset(self) -> bool:
        """Whether the attribute was unset since the last sync."""
        return self.value is None

    @property
    def is_new(self) -> bool:
        """Whether the attribute had no snapshot value."""
        return self.original is None
