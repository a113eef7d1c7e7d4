"""Main client for the unofficial itd.com API"""

import logging
from pathlib import Path
from typing import Optional, Union

import httpx

import settings
from auth import AuthManager, RefreshCoordinator, RefreshingBearerAuth, SessionState
from auth.errors import RefreshError
from headers import build_default_headers
from resources import (
    CommentsManager,
    FilesManager,
    HashtagsManager,
    NotificationsManager,
    PostsManager,
    ReportsManager,
    SearchManager,
    UsersManager,
    VerificationManager,
)
from utils.cookie_jar import CookieJar
from utils.storage import CredentialStore

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


class ITDClient:
    """Async client for итд.com

    One httpx.AsyncClient is shared by every manager. Its auth flow attaches
    the bearer token and transparently refreshes it on 401 using the
    refresh_token cookie.

    Usage:
        async with ITDClient() as client:
            profile = await client.users.get_my_profile()
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        user_agent: Optional[str] = None,
        access_token: Optional[str] = None,
        project_root: Optional[PathLike] = None,
        env_path: Optional[PathLike] = None,
        cookies_path: Optional[PathLike] = None,
        proxy: Optional[str] = None,
        request_timeout: Optional[float] = None,
        upload_timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize the client

        Args:
            base_url: Site base URL (default: ITD_BASE_URL or https://xn--d1ah4a.com)
            user_agent: User-Agent header (default: ITD_USER_AGENT or a desktop Chrome)
            access_token: Initial access token (default: read from the .env file,
                then the ITD_ACCESS_TOKEN environment variable when neither
                env_path nor project_root is given)
            project_root: Directory holding .env and .cookies (default: cwd)
            env_path: Full path to the .env file, overrides project_root
            cookies_path: Full path to the .cookies file, overrides project_root
            proxy: HTTP CONNECT proxy URL (default: ITD_PROXY / HTTPS_PROXY / HTTP_PROXY)
            request_timeout: Timeout for ordinary requests, seconds
            upload_timeout: Timeout for uploads, seconds
            transport: Custom httpx transport (tests use httpx.MockTransport)
        """
        self.base_url = (base_url or settings.BASE_URL).rstrip("/")
        self.user_agent = user_agent or settings.USER_AGENT
        self.proxy_url = proxy or settings.PROXY_URL
        self.request_timeout = request_timeout or settings.REQUEST_TIMEOUT
        self.upload_timeout = upload_timeout or settings.UPLOAD_TIMEOUT

        self.storage = CredentialStore(env_path=env_path, cookies_path=cookies_path, project_root=project_root)
        self.env_path = self.storage.env_path
        self.cookies_path = self.storage.cookies_path

        # .cookies is kept apart from .env because of the ";" separators
        self.cookie_jar = CookieJar(self.base_url)
        self._load_cookies_from_file()

        initial_token = access_token or self.storage.load_access_token()
        if not initial_token and env_path is None and project_root is None:
            # The process environment also carries whatever the cwd .env held
            # at import time, so it only stands in for the default location
            initial_token = settings.config.get(settings.ACCESS_TOKEN_KEY, None)
        self.session = SessionState(self.cookie_jar, initial_token)
        self.refresher = RefreshCoordinator(self.session, self.storage, self.cookie_jar, self.base_url)

        client_kwargs = {
            "base_url": self.base_url,
            "headers": build_default_headers(self.user_agent),
            "cookies": self.cookie_jar.cookies,
            "auth": RefreshingBearerAuth(self.session, self.refresher),
            "timeout": httpx.Timeout(self.request_timeout, connect=settings.CONNECT_TIMEOUT),
        }
        if transport is not None:
            client_kwargs["transport"] = transport
        elif self.proxy_url:
            client_kwargs["proxy"] = self.proxy_url

        self.http = httpx.AsyncClient(**client_kwargs)
        # httpx copies the cookies it is given; keep the jar bound to the live one
        self.cookie_jar.cookies = self.http.cookies
        self.refresher.http = self.http

        self.auth = AuthManager(self.http, self.session, self.refresher, self.cookie_jar, self.base_url)
        self.posts = PostsManager(self)
        self.comments = CommentsManager(self)
        self.users = UsersManager(self)
        self.notifications = NotificationsManager(self)
        self.hashtags = HashtagsManager(self)
        self.files = FilesManager(self)
        self.reports = ReportsManager(self)
        self.search = SearchManager(self)
        self.verification = VerificationManager(self)

    def _load_cookies_from_file(self) -> None:
        """Seed the jar from the .cookies file; a missing file is fine"""
        header = self.storage.load_cookie_header()
        if not header:
            return
        try:
            loaded = self.cookie_jar.load_header(header)
            logger.debug(f"Loaded {loaded} cookie(s) from {self.cookies_path}")
        except Exception as e:
            logger.warning(f"Failed to load cookies from {self.cookies_path}: {e}")

    @property
    def access_token(self) -> Optional[str]:
        return self.session.get_token()

    def set_access_token(self, token: Optional[str]) -> None:
        """Set the bearer token used for Authorization (None logs out locally)"""
        self.session.set_token(token)

    def check_auth(self) -> bool:
        """Local check: is an access token present"""
        return self.auth.check_auth()

    def has_refresh_token(self) -> bool:
        return self.auth.has_refresh_token()

    async def refresh_access_token(self) -> Optional[str]:
        """Refresh the access token now; None if it could not be refreshed"""
        return await self.auth.refresh_access_token()

    @property
    def last_refresh_error(self) -> Optional[RefreshError]:
        return self.auth.last_refresh_error

    async def validate_and_refresh_token(self) -> bool:
        """Remote check: the token works, after a refresh if it had expired"""
        return await self.auth.validate_and_refresh_token()

    async def logout(self) -> bool:
        return await self.auth.logout()

    async def aclose(self) -> None:
        await self.http.aclose()

    async def __aenter__(self) -> "ITDClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()
