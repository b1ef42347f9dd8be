"""Visit request approval I/O models."""

from __future__ import annotations

from ..base import BaseSchema


class VisitRequestDecision(BaseSchema):
    """Schema for approving or rejecting a requested visit."""

    visit_reference: str
    actioned_by: str
