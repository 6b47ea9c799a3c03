"""
Pytest configuration and fixtures for pkgstack tests
"""
import json
from typing import Any, Callable

import httpx
import pytest

from adapters.http_client import APIBase, build_async_client, build_query_string
from core.config import AppSettings

BASE_URL = "http://pkgstack.test"


class RecordingTransport:
    """Transport double: records every call and returns a canned result."""

    def __init__(self, result: Any = None, error: Exception | None = None):
        self.result = result
        self.error = error
        self.calls: list[dict[str, Any]] = []

    def query_string(self, request, fields):
        return build_query_string(request, fields)

    async def request(
        self,
        method,
        path,
        request=None,
        options=None,
        content_type=None,
        response_model=None,
    ):
        self.calls.append(
            {
                "method": method,
                "path": path,
                "request": request,
                "options": options,
                "content_type": content_type,
                "response_model": response_model,
            }
        )
        if self.error is not None:
            raise self.error
        return self.result


class MockServer:
    """Wraps httpx.MockTransport and keeps the requests it received."""

    def __init__(self, handler: Callable[[httpx.Request], httpx.Response]):
        self.requests: list[httpx.Request] = []
        self._handler = handler

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self._handler(request)

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]

    def last_json(self) -> Any:
        return json.loads(self.last.content)


@pytest.fixture
def settings(monkeypatch, tmp_path):
    """Settings isolated from the developer's environment and .env files"""
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    return AppSettings(_env_file=None, url=BASE_URL, token="secret-token")


@pytest.fixture
def recording_transport():
    return RecordingTransport()


@pytest.fixture
def make_api_base(settings):
    """Factory: APIBase over httpx.MockTransport using the given handler"""

    def _make(handler: Callable[[httpx.Request], httpx.Response]) -> tuple[APIBase, MockServer]:
        server = MockServer(handler)
        client = build_async_client(settings, transport=httpx.MockTransport(server))
        return APIBase(settings, client=client), server

    return _make
