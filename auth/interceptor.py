"""httpx auth flow: bearer token injection plus refresh-and-retry on 401"""

import logging
from dataclasses import dataclass
from typing import AsyncGenerator, Generator

import httpx

from settings import REFRESH_PATH
from .session import SessionState
from .token_refresh import RefreshCoordinator

logger = logging.getLogger(__name__)


@dataclass
class RequestContext:
    """Per-request state carried through the auth flow

    Attributes:
        request: The outgoing request
        retried: Set once the request has been replayed after a refresh
    """
    request: httpx.Request
    retried: bool = False

    @property
    def is_refresh_request(self) -> bool:
        return self.request.url.path.endswith(REFRESH_PATH)


class RefreshingBearerAuth(httpx.Auth):
    """Attach the session's bearer token and recover once from a 401

    On a 401 the flow asks the RefreshCoordinator for a new token (joining any
    refresh already in flight) and replays the original request once with it.
    If no token can be obtained, the original 401 response is returned.
    """

    def __init__(self, session: SessionState, coordinator: RefreshCoordinator):
        self.session = session
        self.coordinator = coordinator

    def sync_auth_flow(self, request: httpx.Request) -> Generator[httpx.Request, httpx.Response, None]:
        raise RuntimeError("RefreshingBearerAuth requires httpx.AsyncClient")

    async def async_auth_flow(self, request: httpx.Request) -> AsyncGenerator[httpx.Request, httpx.Response]:
        # Buffer the body so the request can be sent a second time
        await request.aread()
        context = RequestContext(request=request)

        token = self.session.get_token()
        if token and "Authorization" not in request.headers:
            request.headers["Authorization"] = f"Bearer {token}"

        response = yield request

        while self._should_refresh(context, response):
            context.retried = True
            logger.debug(f"401 from {request.method} {request.url.path}, refreshing access token")

            # Reading the body hands the connection back to the pool, which
            # the refresh call itself may need
            await response.aread()
            new_token = await self.coordinator.refresh()
            if not new_token:
                logger.warning(f"Token refresh failed, returning 401 for {request.method} {request.url.path}")
                return

            request.headers["Authorization"] = f"Bearer {new_token}"
            response = yield request

    def _should_refresh(self, context: RequestContext, response: httpx.Response) -> bool:
        if response.status_code != 401:
            return False
        if context.retried:
            logger.debug(f"401 after retry for {context.request.url.path}, giving up")
            return False
        # The refresh endpoint never refreshes itself
        if context.is_refresh_request:
            return False
        return True
