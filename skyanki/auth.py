# skyanki/auth.py
"""Skyeng login session.

Login is a two-hop handshake: the CSRF token scraped from the login page is
bound to the session cookie set by that same response, so the page fetch, the
form submit and the JWT request must all go through one cookie-bearing client.
The session therefore owns a single ``httpx.AsyncClient`` for its lifetime.
"""
from __future__ import annotations

import asyncio
import enum
import inspect
import logging
import time
from email.utils import parsedate_to_datetime
from typing import Any, Awaitable, Callable, Optional, Union

import httpx
from bs4 import BeautifulSoup

from .errors import ParsingError, ServerError, TransportError, raise_for_status
from .schema import Credentials, Token

LOGGER = logging.getLogger(__name__)

LOGIN_URL = "https://id.skyeng.ru/login"
LOGIN_SUBMIT_URL = "https://id.skyeng.ru/frame/login-submit"
JWT_URL = "https://id.skyeng.ru/user-api/v1/auth/jwt"
CSRF_FIELD = "csrfToken"

TokenCallback = Callable[[Token], Union[Awaitable[None], None]]


class TokenState(enum.Enum):
    UNSET = "unset"
    VALID = "valid"
    EXPIRED = "expired"


def now_ms() -> int:
    return int(time.time() * 1000)


def token_state(token: Optional[Token], now: int) -> TokenState:
    if token is None:
        return TokenState.UNSET
    if token.is_valid(now):
        return TokenState.VALID
    return TokenState.EXPIRED


def extract_csrf(html: str) -> str:
    doc = BeautifulSoup(html, "html.parser")
    field = doc.select_one(f"input[name={CSRF_FIELD}]")
    if field is None:
        raise ParsingError("Unable to find csrf element on the page")
    value = field.get("value")
    if value is None:
        raise ParsingError("Unable to find value of csrf token element")
    return str(value)


def parse_token_cookie(header: str, now: int) -> Token:
    """Build a token from a raw ``Set-Cookie`` header.

    The leading ``name=value`` pair is the token. Attributes are read as
    case-insensitive ``key[=value]`` and unknown ones are ignored. Expiry is
    taken from ``Max-Age`` (relative to ``now``) when present, otherwise from
    ``Expires``.
    """
    pair, _, rest = header.partition(";")
    name, sep, value = pair.partition("=")
    if not sep or not name.strip():
        raise ParsingError("Unable to parse token cookie")

    attrs = {}
    for part in rest.split(";"):
        key, _, attr = part.partition("=")
        key = key.strip().lower()
        if key:
            attrs.setdefault(key, attr.strip())

    try:
        if attrs.get("max-age"):
            expires_at = now + int(attrs["max-age"]) * 1000
        elif attrs.get("expires"):
            expires_at = int(parsedate_to_datetime(attrs["expires"]).timestamp() * 1000)
        else:
            raise ParsingError("Token cookie carries no expiry")
    except (TypeError, ValueError) as e:
        raise ParsingError(f"Unable to parse token cookie expiry: {e}") from e

    return Token(value=value.strip(), expires_at=expires_at)


class AuthSession:
    def __init__(
        self,
        credentials: Credentials,
        token: Optional[Token] = None,
        *,
        client: Optional[httpx.AsyncClient] = None,
        clock: Callable[[], int] = now_ms,
        on_token_change: Optional[TokenCallback] = None,
        timeout: float = 30,
    ):
        self._credentials = credentials
        self._token = token
        self._clock = clock
        self._on_token_change = on_token_change
        self._owns_client = client is None
        self.http = client or httpx.AsyncClient(timeout=timeout, follow_redirects=True)
        self._lock = asyncio.Lock()

    async def __aenter__(self) -> "AuthSession":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self.http.aclose()

    @property
    def token(self) -> Optional[Token]:
        return self._token

    @property
    def state(self) -> TokenState:
        return token_state(self._token, self._clock())

    def on_token_change(self, callback: Optional[TokenCallback]) -> None:
        """Register the token observer. Only one is kept; the last one wins."""
        self._on_token_change = callback

    async def ensure_valid(self) -> Token:
        # single-flight: concurrent callers wait for one login instead of racing
        async with self._lock:
            state = self.state
            if state is TokenState.VALID:
                return self._token  # type: ignore[return-value]

            LOGGER.info("Token %s, logging in", state.value)
            token = await self._login()
            self._token = token
            await self._notify(token)
            return token

    async def request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        try:
            return await self.http.request(method, url, **kwargs)
        except httpx.RequestError as e:
            raise TransportError(url) from e

    async def _login(self) -> Token:
        csrf = await self._fetch_csrf()

        res = await self.request(
            "POST",
            LOGIN_SUBMIT_URL,
            data={
                "username": self._credentials.username,
                "password": self._credentials.password,
                CSRF_FIELD: csrf,
            },
        )
        raise_for_status(res.status_code, "bad credentials")

        return await self._issue_jwt()

    async def _fetch_csrf(self) -> str:
        res = await self.request("GET", LOGIN_URL)
        raise_for_status(res.status_code, "unable to load the login page")
        return extract_csrf(res.text)

    async def _issue_jwt(self) -> Token:
        res = await self.request("POST", JWT_URL)
        raise_for_status(res.status_code, "unable to issue jwt")
        cookies = res.headers.get_list("set-cookie")
        if not cookies:
            raise ServerError("jwt response carries no token cookie", res.status_code)
        token = parse_token_cookie(cookies[0], self._clock())
        LOGGER.info("Logged in, token valid until %s", token.expires_at)
        return token

    async def _notify(self, token: Token) -> None:
        callback = self._on_token_change
        if callback is None:
            return
        try:
            result = callback(token)
            if inspect.isawaitable(result):
                await result
        except Exception:
            # the login itself succeeded; persistence trouble is the caller's
            LOGGER.exception("Token change callback failed")
