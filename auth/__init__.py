"""Authentication package for the itd.com API"""

import logging
from typing import Any, Dict, Optional

import httpx

from settings import CHANGE_PASSWORD_PATH, LOGOUT_PATH, PROFILE_PATH
from utils.cookie_jar import CookieJar
from .errors import (
    ITDError,
    RefreshError,
    RefreshMalformedResponse,
    RefreshRejected,
    RefreshTransportError,
    RefreshUnavailable,
)
from .interceptor import RefreshingBearerAuth, RequestContext
from .session import SessionState
from .token_refresh import RefreshCoordinator

logger = logging.getLogger(__name__)


class AuthManager:
    """Session-level operations on top of the refreshing transport

    Two checks with different costs are offered:
    - check_auth(): local, synchronous, only looks at token presence
    - validate_and_refresh_token(): remote round-trip to /api/users/me,
      refreshing the token through the auth flow if it expired
    """

    def __init__(
        self,
        http: httpx.AsyncClient,
        session: SessionState,
        coordinator: RefreshCoordinator,
        cookie_jar: CookieJar,
        base_url: str,
    ):
        self.http = http
        self.session = session
        self.coordinator = coordinator
        self.cookie_jar = cookie_jar
        self.base_url = base_url

    def has_refresh_token(self) -> bool:
        """Check for a refresh_token cookie

        Returns:
            True if a refresh is possible
        """
        return self.session.has_refresh_credential()

    async def refresh_access_token(self) -> Optional[str]:
        """Refresh the access token via /api/v1/auth/refresh

        Returns:
            New access token, or None (see last_refresh_error)
        """
        return await self.coordinator.refresh()

    @property
    def last_refresh_error(self) -> Optional[RefreshError]:
        """Why the most recent refresh attempt produced no token, if it failed"""
        return self.coordinator.last_error

    def check_auth(self) -> bool:
        """Cheap local check: is an access token held in memory"""
        return self.session.is_authenticated

    async def validate_and_refresh_token(self) -> bool:
        """Validate the token against the API

        An expired token is refreshed transparently by the auth flow, so a
        True result means the session works right now.

        Returns:
            True if the profile request succeeded
        """
        if not self.check_auth():
            return False

        try:
            response = await self.http.get(f"{self.base_url}{PROFILE_PATH}")
        except httpx.HTTPError as e:
            logger.error(f"Token validation request failed: {e}")
            return False

        if response.status_code == 200:
            return True

        logger.warning(f"Token validation failed with status {response.status_code}")
        return False

    async def change_password(self, old_password: str, new_password: str) -> Optional[Dict[str, Any]]:
        """Change password via /api/v1/auth/change-password

        Requires both an access token and the refresh_token cookie.

        Args:
            old_password: Current password
            new_password: New password

        Returns:
            API response body, or None on error
        """
        if not self.check_auth():
            logger.error("Access token required to change password")
            return None
        if not self.has_refresh_token():
            logger.error("refresh_token cookie required to change password")
            return None

        try:
            response = await self.http.post(
                f"{self.base_url}{CHANGE_PASSWORD_PATH}",
                json={"oldPassword": old_password, "newPassword": new_password},
            )
        except httpx.HTTPError as e:
            logger.error(f"Password change failed: {e}")
            return None

        if response.status_code != 200:
            logger.error(f"Password change failed with status {response.status_code}: {response.text}")
            return None

        try:
            return response.json()
        except ValueError:
            return {"success": True}

    async def logout(self) -> bool:
        """Log out via /api/v1/auth/logout

        On success the in-memory token and every cookie are cleared.

        Returns:
            True on success
        """
        try:
            response = await self.http.post(f"{self.base_url}{LOGOUT_PATH}")
        except httpx.HTTPError as e:
            logger.error(f"Logout failed: {e}")
            return False

        if response.status_code not in (200, 204):
            logger.error(f"Logout failed with status {response.status_code}")
            return False

        self.session.set_token(None)
        self.cookie_jar.clear()
        logger.info("Logged out")
        return True


__all__ = [
    "AuthManager",
    "CookieJar",
    "ITDError",
    "RefreshCoordinator",
    "RefreshError",
    "RefreshMalformedResponse",
    "RefreshRejected",
    "RefreshTransportError",
    "RefreshUnavailable",
    "RefreshingBearerAuth",
    "RequestContext",
    "SessionState",
]
