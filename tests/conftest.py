"""Shared fakes: a scripted Skyeng backend behind ``httpx.MockTransport``."""

from __future__ import annotations

from typing import Any, Callable, Dict, List, Optional

import httpx
import pytest

from skyanki.auth import JWT_URL, LOGIN_SUBMIT_URL, LOGIN_URL, AuthSession
from skyanki.schema import Credentials, Token

NOW = 1_700_000_000_000
HOUR = 3_600_000

LOGIN_HTML = """
<html><body>
  <form action="/frame/login-submit" method="post">
    <input type="hidden" name="csrfToken" value="csrf-123">
    <input type="text" name="username">
    <input type="password" name="password">
  </form>
</body></html>
"""

Handler = Callable[[httpx.Request], httpx.Response]


def page_json(items: List[Dict[str, Any]], current: int, last: int, page_size: int = 100) -> Dict[str, Any]:
    return {
        "data": items,
        "meta": {"total": len(items), "currentPage": current, "lastPage": last, "pageSize": page_size},
    }


def url_of(request: httpx.Request) -> str:
    return f"{request.url.scheme}://{request.url.host}{request.url.path}"


class FakeClock:
    def __init__(self, now: int = NOW):
        self.now = now

    def __call__(self) -> int:
        return self.now


class FakeSkyeng:
    """Records every request; the login endpoints are scripted by attributes,
    everything else is looked up in ``routes`` by URL without query."""

    def __init__(self):
        self.requests: List[httpx.Request] = []
        self.login_page = LOGIN_HTML
        self.submit_status = 200
        self.jwt_cookies = ["token_global=jwt-1; Max-Age=3600; Path=/"]
        self.routes: Dict[str, Handler] = {}

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        url = url_of(request)
        if url == LOGIN_URL:
            return httpx.Response(200, text=self.login_page, headers={"set-cookie": "session_global=s1; Path=/"})
        if url == LOGIN_SUBMIT_URL:
            return httpx.Response(self.submit_status, json={"success": self.submit_status < 400})
        if url == JWT_URL:
            return httpx.Response(200, headers=[("set-cookie", c) for c in self.jwt_cookies])
        handler = self.routes.get(url)
        if handler is None:
            return httpx.Response(404, json={"error": f"no route for {url}"})
        return handler(request)

    def calls_to(self, url: str) -> List[httpx.Request]:
        return [r for r in self.requests if url_of(r) == url]

    @property
    def logins(self) -> int:
        return len(self.calls_to(LOGIN_URL))


@pytest.fixture
def fake() -> FakeSkyeng:
    return FakeSkyeng()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def make_session(fake: FakeSkyeng, clock: FakeClock):
    def _make(token: Optional[Token] = None, **kwargs: Any) -> AuthSession:
        client = httpx.AsyncClient(transport=httpx.MockTransport(fake))
        return AuthSession(
            Credentials(username="student@example.com", password="s3cret"),
            token,
            client=client,
            clock=clock,
            **kwargs,
        )

    return _make
