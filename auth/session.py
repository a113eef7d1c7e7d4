"""In-memory session state shared by every request"""

import logging
from typing import Optional

from settings import REFRESH_COOKIE_NAME
from utils.cookie_jar import CookieJar

logger = logging.getLogger(__name__)


class SessionState:
    """Holds the current access token

    Token presence is the only notion of "authenticated"; there is no
    separate flag to keep in sync.
    """

    def __init__(self, cookie_jar: CookieJar, token: Optional[str] = None):
        self.cookie_jar = cookie_jar
        self._token: Optional[str] = token or None

    def get_token(self) -> Optional[str]:
        return self._token

    def set_token(self, token: Optional[str]) -> None:
        """Replace the current token; None (or empty) logs the session out"""
        self._token = token or None

    @property
    def is_authenticated(self) -> bool:
        return self._token is not None

    def has_refresh_credential(self) -> bool:
        """Check for a refresh_token cookie scoped to the API host

        Any failure while reading the jar counts as "no credential".
        """
        try:
            return self.cookie_jar.has_cookie(REFRESH_COOKIE_NAME)
        except Exception as e:
            logger.debug(f"Cookie jar lookup failed: {e}")
            return False
