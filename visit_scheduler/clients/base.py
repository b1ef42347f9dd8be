from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import httpx

from .errors import ApiClientError


class BaseApiClient:
    """
    Shared plumbing for the downstream JSON APIs.

    A 404 is reported as ``None`` so callers can decide whether a missing
    resource is an error. Every other non-2xx response raises ``ApiClientError``.
    """

    def __init__(
        self,
        base_url: str,
        *,
        auth_token: Optional[str] = None,
        timeout: float = 10.0,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.auth_token = auth_token
        self._client = client or httpx.AsyncClient(timeout=timeout, follow_redirects=True)
        self._logger = logging.getLogger(self.__class__.__module__)

    def _headers(self) -> Dict[str, str]:
        headers: Dict[str, str] = {"Accept": "application/json"}
        if self.auth_token:
            headers["Authorization"] = f"Bearer {self.auth_token}"
        return headers

    async def _get_json(self, path: str, *, params: Optional[Dict[str, str]] = None, operation: str) -> Optional[Any]:
        url = f"{self.base_url}{path}"
        try:
            self._logger.debug("%s.%s: GET %s params=%s", type(self).__name__, operation, url, params)
            r = await self._client.get(url, headers=self._headers(), params=params)
            if r.status_code == 404:
                self._logger.debug("%s.%s: not found GET %s", type(self).__name__, operation, url)
                return None
            r.raise_for_status()
        except httpx.HTTPStatusError as e:
            self._logger.error("%s.%s: failed GET %s status=%s", type(self).__name__, operation, url, e.response.status_code)
            raise ApiClientError(
                f"{operation} failed: {e.response.status_code}",
                status_code=e.response.status_code,
                details=e.response.text,
            ) from e
        except httpx.HTTPError as e:
            self._logger.error("%s.%s: failed GET %s: %s", type(self).__name__, operation, url, e)
            raise ApiClientError(f"{operation} failed: {e}") from e
        return r.json()

    async def aclose(self) -> None:
        await self._client.aclose()
