"""HTTP middleware for the visit scheduler server."""

from .logfire_middleware import LogfireMiddleware

__all__ = ["LogfireMiddleware"]
