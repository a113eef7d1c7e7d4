"""
Shared test fixtures for the itd-client test suite.

The remote API is replaced by FakeITD, an async handler plugged into
httpx.MockTransport, so no test touches the network.
"""

from __future__ import annotations

import asyncio
from typing import Callable, Dict, List, Optional, Tuple

import httpx
import pytest
import pytest_asyncio

from client import ITDClient

BASE_URL = "https://itd.test"
REFRESH_URL = f"{BASE_URL}/api/v1/auth/refresh"


class FakeITD:
    """Programmable stand-in for the itd.com API

    Routes other than the refresh endpoint answer 401 unless the request
    carries "Bearer <valid_token>" (or the route is public).
    """

    def __init__(self, valid_token: str = "fresh-token"):
        self.valid_token = valid_token
        self.refresh_calls = 0
        self.refresh_delay = 0.0
        self.refresh_handler: Optional[Callable[[httpx.Request], httpx.Response]] = None
        self.requests: List[httpx.Request] = []
        self.routes: Dict[Tuple[str, str], Tuple[bool, Callable[[httpx.Request], httpx.Response]]] = {}

    def add(self, method: str, path: str, status: int = 200, json=None, public: bool = False, handler=None):
        if handler is None:
            def handler(request, status=status, json=json):
                return httpx.Response(status, json=json)
        self.routes[(method.upper(), path)] = (public, handler)

    def hits(self, path: str) -> List[httpx.Request]:
        return [r for r in self.requests if r.url.path == path]

    async def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)

        if request.url.path == "/api/v1/auth/refresh":
            self.refresh_calls += 1
            if self.refresh_delay:
                await asyncio.sleep(self.refresh_delay)
            if self.refresh_handler is not None:
                return self.refresh_handler(request)
            return httpx.Response(200, json={"accessToken": self.valid_token})

        route = self.routes.get((request.method, request.url.path))
        if route is None:
            return httpx.Response(404, json={"error": {"code": "NOT_FOUND"}})

        public, handler = route
        if not public and request.headers.get("Authorization") != f"Bearer {self.valid_token}":
            return httpx.Response(401, json={"error": {"code": "UNAUTHORIZED"}})
        return handler(request)


@pytest.fixture(autouse=True)
def _isolate_environment(monkeypatch):
    """Keep a developer's real credentials out of the tests"""
    monkeypatch.delenv("ITD_ACCESS_TOKEN", raising=False)


@pytest.fixture
def fake_api() -> FakeITD:
    return FakeITD()


@pytest.fixture
def env_file(tmp_path):
    path = tmp_path / ".env"
    path.write_text("ITD_BASE_URL=https://itd.test\nITD_ACCESS_TOKEN=stale-token\n", encoding="utf-8")
    return path


@pytest.fixture
def cookies_file(tmp_path):
    path = tmp_path / ".cookies"
    path.write_text("refresh_token=r1; is_auth=1; theme=dark", encoding="utf-8")
    return path


@pytest_asyncio.fixture
async def make_client(tmp_path, fake_api):
    """Factory building ITDClient instances wired to fake_api"""
    created: List[ITDClient] = []

    def factory(**kwargs) -> ITDClient:
        kwargs.setdefault("base_url", BASE_URL)
        kwargs.setdefault("env_path", tmp_path / ".env")
        kwargs.setdefault("cookies_path", tmp_path / ".cookies")
        kwargs.setdefault("transport", httpx.MockTransport(fake_api))
        client = ITDClient(**kwargs)
        created.append(client)
        return client

    yield factory

    for client in created:
        await client.aclose()


@pytest.fixture
def client(make_client, env_file, cookies_file) -> ITDClient:
    """Client holding a stale token and a valid refresh cookie"""
    return make_client()
