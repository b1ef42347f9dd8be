"""
Core utilities and configuration for the visit scheduler.

This package provides core functionality including logging configuration,
database setup, domain models and shared utilities.
"""

from visit_scheduler.core.logging_config import get_logger, setup_logging

__all__ = ["get_logger", "setup_logging"]
