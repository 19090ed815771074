"""pytest fixtures."""

from collections.abc import AsyncGenerator, Callable
from http.cookies import SimpleCookie
from typing import Any

import httpx
import pytest
import pytest_asyncio
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from csrf_guard.codec import encode_token, generate_token
from csrf_guard.config import CookieOptions, CsrfConfig
from csrf_guard.middleware import CsrfMiddleware


class FakeExchange:
    """In-memory RequestExchange for guard unit tests."""

    def __init__(
        self,
        method: str = "GET",
        headers: dict[str, str] | None = None,
        cookies: dict[str, str] | None = None,
    ) -> None:
        self._method = method
        self._headers = {name.lower(): value for name, value in (headers or {}).items()}
        self._cookies = dict(cookies or {})
        self.vary: list[str] = []
        self.response_headers: dict[str, str] = {}
        self.response_cookies: dict[str, tuple[str, CookieOptions]] = {}
        self.set_cookie_calls = 0

    @property
    def method(self) -> str:
        return self._method

    def get_header(self, name: str) -> str | None:
        return self._headers.get(name.lower())

    def get_cookie(self, name: str) -> str | None:
        return self._cookies.get(name)

    def add_vary(self, field: str) -> None:
        self.vary.append(field)

    def set_header(self, name: str, value: str) -> None:
        self.response_headers[name] = value

    def set_cookie(self, name: str, value: str, options: CookieOptions) -> None:
        self.set_cookie_calls += 1
        self.response_cookies[name] = (value, options)


@pytest.fixture
def make_exchange() -> Callable[..., FakeExchange]:
    """Factory for in-memory exchanges."""

    def _make(
        method: str = "GET",
        headers: dict[str, str] | None = None,
        cookies: dict[str, str] | None = None,
    ) -> FakeExchange:
        return FakeExchange(method=method, headers=headers, cookies=cookies)

    return _make


@pytest.fixture
def real_token() -> bytes:
    """Fresh 32-byte real token."""
    return generate_token()


@pytest.fixture
def token_cookie(real_token: bytes) -> dict[str, str]:
    """Cookie mapping carrying the real token under the default name."""
    return {"csrf_token": encode_token(real_token)}


def create_app(config: CsrfConfig | None = None) -> FastAPI:
    """Minimal FastAPI app protected by CsrfMiddleware."""
    app = FastAPI()
    app.add_middleware(CsrfMiddleware, config=config or CsrfConfig())

    @app.get("/items")
    async def list_items() -> dict[str, Any]:
        return {"items": []}

    @app.post("/items")
    async def create_item() -> dict[str, Any]:
        return {"created": True}

    return app


@pytest_asyncio.fixture(scope="function")
async def client() -> AsyncGenerator[AsyncClient, None]:
    """Test HTTP client against an app with the default configuration."""
    async with AsyncClient(
        transport=ASGITransport(app=create_app()),
        base_url="http://test",
    ) as ac:
        yield ac


def response_cookie(response: httpx.Response, name: str) -> str | None:
    """Return the unquoted value of a Set-Cookie header, if present."""
    for header in response.headers.get_list("set-cookie"):
        parsed: SimpleCookie = SimpleCookie()
        parsed.load(header)
        if name in parsed:
            return parsed[name].value
    return None


@pytest.fixture
def make_client() -> Callable[[CsrfConfig | None], AsyncClient]:
    """Factory for clients against an app with a custom configuration.

    Example:
        >>> async with make_client(CsrfConfig(disable_without_origin=True)) as client:
        ...     await client.post("/items")
    """

    def _make(config: CsrfConfig | None = None) -> AsyncClient:
        return AsyncClient(transport=ASGITransport(app=create_app(config)), base_url="http://test")

    return _make


@pytest.fixture
def read_cookie() -> Callable[[httpx.Response, str], str | None]:
    """Set-Cookie parser."""
    return response_cookie
