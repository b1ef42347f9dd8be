"""Error types raised by the downstream API clients.

Purpose:
- Provide a typed exception for failed calls to prisoner search, the prison
  API and the non-associations API.
- Expose HTTP-oriented context (status code, response body) for diagnosis.

Usage:
- Catch ``ApiClientError`` and inspect ``status_code`` or ``details``. Not
  found responses are handled by the clients themselves and never raised.
"""

from __future__ import annotations

from typing import Any, Optional


class ApiClientError(Exception):
    """Base error for downstream API failures.

    Args:
        message: Human-readable error description.
        status_code: Optional HTTP status code associated with the failure.
        details: Optional payload returned by the server.
    """

    def __init__(self, message: str, *, status_code: Optional[int] = None, details: Optional[Any] = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.details = details
