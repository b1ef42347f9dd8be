"""
Base database models and utilities.

This module provides the foundational database components used across
all entities in the visit scheduler database layer using SQLModel.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import ConfigDict
from sqlmodel import SQLModel


class Base(SQLModel):
    """Base class for all SQLModel entities."""

    model_config = ConfigDict(arbitrary_types_allowed=True)


def now() -> datetime:
    """Current local time; visit times are stored as prison-local naive datetimes."""
    return datetime.now()
