"""
Exception handlers for the visit scheduler server.

This package contains the handlers for domain errors, downstream API errors
and unhandled exceptions, plus a setup function to register them with the
FastAPI application.
"""

from .domain_handler import api_client_exception_handler, domain_exception_handler, error_body
from .global_handler import global_exception_handler, setup_exception_handlers

__all__ = [
    "api_client_exception_handler",
    "domain_exception_handler",
    "error_body",
    "global_exception_handler",
    "setup_exception_handlers",
]
