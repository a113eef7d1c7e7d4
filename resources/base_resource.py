"""
Base class for the API resource managers.
Holds the shared client and the request/response plumbing every manager uses.
"""
import logging
from typing import Any, Iterable, Optional, TYPE_CHECKING

import httpx

if TYPE_CHECKING:
    from client.itd_client import ITDClient

logger = logging.getLogger(__name__)


def parse_json(response: httpx.Response) -> Any:
    """Decode a JSON body, returning None for empty or non-JSON bodies"""
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return None


def unwrap(payload: Any) -> Any:
    """Return payload["data"] for {"data": ...} envelopes, else the payload itself"""
    if isinstance(payload, dict) and payload.get("data") is not None:
        return payload["data"]
    return payload


class BaseResource:
    """Base class for resource managers (posts, users, ...)"""

    def __init__(self, client: "ITDClient"):
        """
        Initialize the manager

        Args:
            client: The owning ITDClient
        """
        self.client = client

    @property
    def http(self) -> httpx.AsyncClient:
        return self.client.http

    def _url(self, path: str) -> str:
        return f"{self.client.base_url}{path}"

    def _require_auth(self, action: str) -> bool:
        """Local token check done before calls that need a session"""
        if self.client.check_auth():
            return True
        logger.error(f"{action}: must be logged in (no access token)")
        return False

    async def _send(
        self,
        method: str,
        path: str,
        action: str,
        ok: Iterable[int] = (200,),
        **kwargs: Any,
    ) -> Optional[httpx.Response]:
        """Send a request and return the response if its status is expected

        Transport errors and unexpected statuses are logged and turn into None.

        Args:
            method: HTTP method
            path: Path below the base URL
            action: Human readable name used in log messages
            ok: Accepted status codes
            **kwargs: Passed through to httpx (params, json, files, timeout)

        Returns:
            The response, or None
        """
        try:
            response = await self.http.request(method, self._url(path), **kwargs)
        except httpx.HTTPError as e:
            logger.error(f"{action} failed: {type(e).__name__}: {e}")
            return None

        if response.status_code not in tuple(ok):
            logger.error(f"{action} failed with status {response.status_code}: {response.text}")
            return None
        return response
