"""Access token refresh via the refresh_token cookie"""

import asyncio
import json
import logging
from typing import Optional

import httpx

from headers import build_origin_headers
from settings import REFRESH_PATH, REFRESH_TOKEN_MISSING_CODE
from utils.cookie_jar import CookieJar, format_cookie_header
from utils.storage import CredentialStore
from .errors import (
    RefreshError,
    RefreshMalformedResponse,
    RefreshRejected,
    RefreshTransportError,
    RefreshUnavailable,
)
from .session import SessionState

logger = logging.getLogger(__name__)

REMEDIATION_STEPS = (
    "To renew the refresh credential:\n"
    "  1. Open итд.com in the browser and log in\n"
    "  2. Open DevTools (F12) -> Network\n"
    "  3. Pick any request to итд.com and copy its Cookie header\n"
    "  4. Paste it into the .cookies file in the project root\n"
    "  5. Make sure the Cookie contains refresh_token"
)


def _error_code(response: httpx.Response) -> Optional[str]:
    """Extract error.code from a structured error body, if any"""
    try:
        payload = response.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        return None
    if isinstance(payload, dict) and isinstance(payload.get("error"), dict):
        return payload["error"].get("code")
    return None


class RefreshCoordinator:
    """Obtains new access tokens, with at most one refresh call in flight

    Concurrent callers of refresh() while a refresh is running all await the
    same task and receive its result.
    """

    def __init__(
        self,
        session: SessionState,
        storage: CredentialStore,
        cookie_jar: CookieJar,
        base_url: str,
        http: Optional[httpx.AsyncClient] = None,
    ):
        """Initialize the coordinator

        Args:
            session: Session state updated on success
            storage: Credential store the new token and cookies are saved to
            cookie_jar: Jar holding the refresh_token cookie; must wrap the
                cookies of http so rotated cookies land in it
            base_url: API base URL, without trailing slash
            http: Shared client; may be attached after construction
        """
        self.session = session
        self.storage = storage
        self.cookie_jar = cookie_jar
        self.base_url = base_url
        self.refresh_url = f"{base_url}{REFRESH_PATH}"
        self.http = http
        self.last_error: Optional[RefreshError] = None
        self._pending: Optional[asyncio.Task] = None

    @property
    def in_flight(self) -> bool:
        return self._pending is not None

    async def refresh(self) -> Optional[str]:
        """Refresh the access token, joining any refresh already running

        Returns:
            The new access token, or None if no token was obtained
            (see last_error for the reason)
        """
        # Check-then-create without an await in between
        if self._pending is None:
            self._pending = asyncio.ensure_future(self._run())
        # Shielded so a cancelled caller does not cancel the shared refresh
        return await asyncio.shield(self._pending)

    async def _run(self) -> Optional[str]:
        try:
            token = await self._request_new_token()
        except RefreshError as e:
            self.last_error = e
            self._log_failure(e)
            return None
        finally:
            self._pending = None

        self.last_error = None
        return token

    async def _request_new_token(self) -> str:
        if not self.session.has_refresh_credential():
            raise RefreshUnavailable()

        if self.http is None:
            raise RefreshTransportError("no HTTP client attached to the refresh coordinator")

        logger.info("Attempting to refresh access token...")
        try:
            response = await self.http.post(
                self.refresh_url,
                headers=build_origin_headers(self.base_url),
            )
        except httpx.HTTPError as e:
            raise RefreshTransportError(f"{type(e).__name__}: {e}") from e

        if response.status_code != 200:
            raise RefreshRejected(response.status_code, _error_code(response), response.text)

        try:
            payload = response.json()
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise RefreshMalformedResponse(f"refresh response is not JSON: {e}") from e

        token = payload.get("accessToken") if isinstance(payload, dict) else None
        if not isinstance(token, str) or not token:
            raise RefreshMalformedResponse("refresh response has no accessToken")

        self.session.set_token(token)
        self.storage.save_access_token(token)
        self._store_cookies(response)

        logger.info("Successfully refreshed access token")
        return token

    def _store_cookies(self, response: httpx.Response) -> None:
        """Settle the rotated cookies in the jar and persist the important ones

        The client already extracted the Set-Cookie headers into the shared
        jar; this only collapses duplicates and writes the .cookies file.
        """
        if not response.headers.get_list("set-cookie"):
            return

        try:
            self.cookie_jar.sync_from_response(response)
            important = self.cookie_jar.important_cookies()
            if important:
                self.storage.save_cookie_header(format_cookie_header(important))
        except Exception as e:
            logger.warning(f"Failed to save updated cookies: {e}")

    def _log_failure(self, error: RefreshError) -> None:
        if isinstance(error, RefreshUnavailable):
            logger.error("Failed to refresh token: refresh_token not found in cookies")
            logger.error(REMEDIATION_STEPS)
        elif isinstance(error, RefreshRejected) and error.error_code == REFRESH_TOKEN_MISSING_CODE:
            logger.error("Failed to refresh token: server reports refresh_token missing")
            logger.error(REMEDIATION_STEPS)
        elif isinstance(error, RefreshRejected):
            logger.error(f"Token refresh failed with status {error.status_code}: {error.detail}")
        else:
            logger.error(f"Token refresh failed: {error}")
