"""Tests for RefreshCoordinator: refresh contract, persistence, de-duplication"""

import asyncio

import httpx
import pytest
import pytest_asyncio

from auth.errors import (
    RefreshMalformedResponse,
    RefreshRejected,
    RefreshTransportError,
    RefreshUnavailable,
)
from auth.session import SessionState
from auth.token_refresh import RefreshCoordinator
from utils.cookie_jar import CookieJar
from utils.storage import CredentialStore

from conftest import BASE_URL


@pytest.fixture
def jar():
    return CookieJar(BASE_URL)


@pytest.fixture
def storage(tmp_path):
    (tmp_path / ".env").write_text("ITD_ACCESS_TOKEN=stale-token\n", encoding="utf-8")
    return CredentialStore(env_path=tmp_path / ".env", cookies_path=tmp_path / ".cookies")


@pytest_asyncio.fixture
async def http(fake_api, jar):
    client = httpx.AsyncClient(transport=httpx.MockTransport(fake_api), cookies=jar.cookies)
    jar.cookies = client.cookies
    yield client
    await client.aclose()


@pytest.fixture
def session(jar):
    return SessionState(jar, "stale-token")


@pytest.fixture
def coordinator(session, storage, jar, http):
    return RefreshCoordinator(session, storage, jar, BASE_URL, http)


@pytest.mark.asyncio
async def test_no_refresh_cookie_makes_no_request(coordinator, fake_api):
    token = await coordinator.refresh()

    assert token is None
    assert fake_api.refresh_calls == 0
    assert isinstance(coordinator.last_error, RefreshUnavailable)


@pytest.mark.asyncio
async def test_successful_refresh_updates_session_and_env_file(coordinator, jar, session, storage, fake_api):
    jar.load_header("refresh_token=r1")

    token = await coordinator.refresh()

    assert token == "fresh-token"
    assert session.get_token() == "fresh-token"
    assert storage.env_path.read_text(encoding="utf-8") == "ITD_ACCESS_TOKEN=fresh-token\n"
    assert coordinator.last_error is None
    assert not coordinator.in_flight


@pytest.mark.asyncio
async def test_refresh_request_shape(coordinator, jar, fake_api):
    jar.load_header("refresh_token=r1")

    await coordinator.refresh()

    request = fake_api.hits("/api/v1/auth/refresh")[0]
    assert request.method == "POST"
    assert str(request.url) == f"{BASE_URL}/api/v1/auth/refresh"
    assert request.headers["Origin"] == BASE_URL
    assert request.headers["Referer"] == f"{BASE_URL}/"
    assert "refresh_token=r1" in request.headers["Cookie"]
    assert request.content == b""


@pytest.mark.asyncio
async def test_rotated_cookies_are_stored_and_important_ones_persisted(coordinator, jar, storage, fake_api):
    jar.load_header("refresh_token=r1")

    def rotate(request):
        return httpx.Response(
            200,
            json={"accessToken": "fresh-token"},
            headers=[
                ("set-cookie", "refresh_token=r2; Path=/; HttpOnly"),
                ("set-cookie", "__ddg1_=abc; Path=/"),
                ("set-cookie", "theme=dark; Path=/"),
                ("set-cookie", "_ga=GA1; Path=/"),
                ("set-cookie", "lang=ru; Path=/"),
            ],
        )

    fake_api.refresh_handler = rotate

    await coordinator.refresh()

    persisted = storage.cookies_path.read_text(encoding="utf-8")
    assert sorted(persisted.split("; ")) == ["__ddg1_=abc", "refresh_token=r2"]
    values = {cookie.name: cookie.value for cookie in jar.get_cookies()}
    assert values["refresh_token"] == "r2"
    assert values["theme"] == "dark"


@pytest.mark.asyncio
async def test_refresh_without_set_cookie_leaves_cookie_file_alone(coordinator, jar, storage):
    jar.load_header("refresh_token=r1")

    await coordinator.refresh()

    assert not storage.cookies_path.exists()


@pytest.mark.asyncio
async def test_missing_env_file_does_not_fail_refresh(coordinator, jar, session, storage):
    storage.env_path.unlink()
    jar.load_header("refresh_token=r1")

    assert await coordinator.refresh() == "fresh-token"
    assert session.get_token() == "fresh-token"
    assert not storage.env_path.exists()


@pytest.mark.asyncio
async def test_refresh_token_missing_rejection(coordinator, jar, session, storage, fake_api):
    jar.load_header("refresh_token=r1")
    fake_api.refresh_handler = lambda request: httpx.Response(
        401, json={"error": {"code": "REFRESH_TOKEN_MISSING", "message": "missing"}}
    )

    assert await coordinator.refresh() is None

    error = coordinator.last_error
    assert isinstance(error, RefreshRejected)
    assert error.status_code == 401
    assert error.error_code == "REFRESH_TOKEN_MISSING"
    assert session.get_token() == "stale-token"
    assert storage.load_access_token() == "stale-token"


@pytest.mark.asyncio
async def test_server_error_is_rejection(coordinator, jar, fake_api):
    jar.load_header("refresh_token=r1")
    fake_api.refresh_handler = lambda request: httpx.Response(500, text="boom")

    assert await coordinator.refresh() is None
    assert isinstance(coordinator.last_error, RefreshRejected)
    assert coordinator.last_error.status_code == 500
    assert coordinator.last_error.error_code is None


@pytest.mark.asyncio
async def test_transport_error(coordinator, jar, fake_api):
    jar.load_header("refresh_token=r1")

    def fail(request):
        raise httpx.ConnectError("connection refused", request=request)

    fake_api.refresh_handler = fail

    assert await coordinator.refresh() is None
    assert isinstance(coordinator.last_error, RefreshTransportError)


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(200, json={"token": "x"}),
        httpx.Response(200, json={"accessToken": ""}),
        httpx.Response(200, json={"accessToken": 42}),
        httpx.Response(200, json=["fresh-token"]),
        httpx.Response(200, text="<html>not json</html>"),
    ],
)
async def test_malformed_success_response(coordinator, jar, session, fake_api, response):
    jar.load_header("refresh_token=r1")
    fake_api.refresh_handler = lambda request: response

    assert await coordinator.refresh() is None
    assert isinstance(coordinator.last_error, RefreshMalformedResponse)
    assert session.get_token() == "stale-token"


@pytest.mark.asyncio
async def test_without_http_client(session, storage, jar):
    jar.load_header("refresh_token=r1")
    coordinator = RefreshCoordinator(session, storage, jar, BASE_URL)

    assert await coordinator.refresh() is None
    assert isinstance(coordinator.last_error, RefreshTransportError)


@pytest.mark.asyncio
async def test_success_clears_previous_error(coordinator, jar, fake_api):
    assert await coordinator.refresh() is None
    assert coordinator.last_error is not None

    jar.load_header("refresh_token=r1")

    assert await coordinator.refresh() == "fresh-token"
    assert coordinator.last_error is None


@pytest.mark.asyncio
async def test_concurrent_callers_share_one_refresh(coordinator, jar, fake_api):
    jar.load_header("refresh_token=r1")
    fake_api.refresh_delay = 0.05

    tokens = await asyncio.gather(*(coordinator.refresh() for _ in range(5)))

    assert tokens == ["fresh-token"] * 5
    assert fake_api.refresh_calls == 1
    assert not coordinator.in_flight


@pytest.mark.asyncio
async def test_marker_is_cleared_so_later_refreshes_run(coordinator, jar, fake_api):
    jar.load_header("refresh_token=r1")

    await coordinator.refresh()
    await coordinator.refresh()

    assert fake_api.refresh_calls == 2


@pytest.mark.asyncio
async def test_marker_is_cleared_after_failure(coordinator, jar, fake_api):
    jar.load_header("refresh_token=r1")
    fake_api.refresh_handler = lambda request: httpx.Response(500)

    await coordinator.refresh()
    fake_api.refresh_handler = None

    assert await coordinator.refresh() == "fresh-token"
    assert fake_api.refresh_calls == 2


@pytest.mark.asyncio
async def test_cancelled_caller_does_not_cancel_shared_refresh(coordinator, jar, fake_api):
    jar.load_header("refresh_token=r1")
    fake_api.refresh_delay = 0.05

    first = asyncio.ensure_future(coordinator.refresh())
    second = asyncio.ensure_future(coordinator.refresh())
    await asyncio.sleep(0.01)
    first.cancel()

    assert await second == "fresh-token"
    assert first.cancelled()
    assert fake_api.refresh_calls == 1


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "set_cookie",
    [
        "refresh_token=r2; Domain=itd.test; Path=/; HttpOnly",
        "refresh_token=r2; Domain=itd.test; Path=/; Secure; HttpOnly; SameSite=None; Partitioned",
    ],
)
async def test_rotated_refresh_cookie_replaces_seeded_one(coordinator, jar, storage, http, fake_api, set_cookie):
    jar.load_header("refresh_token=r1; is_auth=1")
    fake_api.refresh_handler = lambda request: httpx.Response(
        200, json={"accessToken": "fresh-token"}, headers=[("set-cookie", set_cookie)]
    )

    await coordinator.refresh()

    entries = [(cookie.name, cookie.value) for cookie in jar.cookies.jar if cookie.name == "refresh_token"]
    assert entries == [("refresh_token", "r2")]
    assert "refresh_token=r2" in storage.cookies_path.read_text(encoding="utf-8")

    await http.get(f"{BASE_URL}/api/posts")
    sent = fake_api.requests[-1].headers["Cookie"]
    assert sent.count("refresh_token=") == 1
    assert "refresh_token=r2" in sent
