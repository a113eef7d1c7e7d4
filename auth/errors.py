"""Exception hierarchy for the itd.com client

Refresh errors are never raised out of RefreshCoordinator.refresh(); they are
recorded on ``last_error`` so callers and operators can tell why no token was
obtained.
"""

from typing import Optional


class ITDError(Exception):
    """Base class for client errors"""


class RefreshError(ITDError):
    """A new access token could not be obtained"""


class RefreshUnavailable(RefreshError):
    """No refresh_token cookie: the credential must be renewed manually"""

    def __init__(self, message: str = "refresh_token cookie not found"):
        super().__init__(message)


class RefreshRejected(RefreshError):
    """The refresh endpoint answered with something other than 200"""

    def __init__(self, status_code: int, error_code: Optional[str] = None, detail: str = ""):
        self.status_code = status_code
        self.error_code = error_code
        self.detail = detail
        message = f"refresh rejected with status {status_code}"
        if error_code:
            message += f" ({error_code})"
        super().__init__(message)


class RefreshTransportError(RefreshError):
    """Network failure or timeout while calling the refresh endpoint"""


class RefreshMalformedResponse(RefreshError):
    """HTTP 200 without a usable accessToken"""
