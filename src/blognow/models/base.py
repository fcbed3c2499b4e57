"""Base model shared by all BlogNow API types.

The API speaks camelCase; models use snake_case attributes with camelCase
aliases and accept either form on input.

Example:
    >>> from blognow.models.base import BlogNowModel
    >>> class Example(BlogNowModel):
    ...     created_at: str
    >>> Example.model_validate({"createdAt": "2024-01-01"}).created_at
    '2024-01-01'
    >>> Example(created_at="x").to_dict()
    {'createdAt': 'x'}
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class BlogNowModel(BaseModel):
    """Base model with standard configuration."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    def to_dict(self) -> dict[str, Any]:
        """Dump with wire (camelCase) names, omitting unset optionals."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
