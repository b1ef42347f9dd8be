"""Core models and schemas for visit scheduling."""

from __future__ import annotations

from .base import BaseSchema, ExternalSchema

__all__ = ["BaseSchema", "ExternalSchema"]
