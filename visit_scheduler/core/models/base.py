"""Pydantic base schema utilities for visit scheduler models.

Provides a common ``BaseSchema`` that enforces aliasing and extra-field policy
for all DTOs and domain models under ``visit_scheduler.core.models``.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


def _to_camel(s: str) -> str:
    """Convert snake_case to camelCase for JSON aliasing."""
    parts = s.split("_")
    return parts[0] + "".join(p.capitalize() or "_" for p in parts[1:])


class BaseSchema(BaseModel):
    """Shared base for all Pydantic models in the visit scheduler.

    - Sets strict handling for extra fields
    - Enables populate_by_name for using either snake_case or camelCase
    - Uses a snake->camel alias generator for JSON interop
    """

    model_config = ConfigDict(
        populate_by_name=True,
        extra="forbid",
        alias_generator=_to_camel,  # snake_case -> camelCase aliases
        from_attributes=True,
    )


class ExternalSchema(BaseSchema):
    """Base for payloads returned by downstream APIs; unknown fields are ignored."""

    model_config = ConfigDict(extra="ignore")
