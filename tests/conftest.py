"""Shared fixtures and an in-memory stand-in for aiohttp.ClientSession."""

from __future__ import annotations

import asyncio

import pytest

from fetchdocs.config import FetchDocsConfig, RemoteConfig

FETCH_BASE = "https://raw.example.com/"
EDIT_BASE = "https://git.example.com/"


class FakeResponse:
    """Async context manager mimicking aiohttp.ClientResponse."""

    def __init__(self, body: str | bytes = "", status: int = 200, *, error: Exception | None = None,
                 wait: asyncio.Event | None = None):
        self.status = status
        self._body = body
        self._error = error
        self._wait = wait

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        return False

    async def read(self) -> bytes:
        if self._wait is not None:
            await self._wait.wait()
        if self._error is not None:
            raise self._error
        if isinstance(self._body, bytes):
            return self._body
        return self._body.encode("utf-8")

    async def text(self, encoding="utf-8"):
        return (await self.read()).decode(encoding)


class FakeSession:
    """Serves canned responses keyed by URL and records every request."""

    def __init__(self, routes: dict[str, FakeResponse] | None = None):
        self.routes = routes or {}
        self.requested: list[str] = []
        self.closed = False

    def get(self, url, **kwargs):
        self.requested.append(url)
        if url not in self.routes:
            return FakeResponse(status=404)
        return self.routes[url]

    async def close(self):
        self.closed = True


@pytest.fixture
def config() -> FetchDocsConfig:
    return FetchDocsConfig(remote=RemoteConfig(fetch_base=FETCH_BASE, edit_base=EDIT_BASE))
