"""
Shared pytest fixtures for Scheduler Client tests.

Provides an in-process fake scheduler built on httpx.MockTransport so client
and redirect tests exercise real httpx request/response objects without
opening sockets.
"""

from typing import Any, Callable, Dict, List, Optional, Tuple, Union

import httpx
import pytest

Handler = Callable[[httpx.Request], httpx.Response]


class FakeSchedulerServer:
    """Routes requests by (method, absolute URL) and records every request seen."""

    def __init__(self):
        self.routes: Dict[Tuple[str, str], Union[httpx.Response, Handler]] = {}
        self.requests: List[httpx.Request] = []

    def add(
        self,
        method: str,
        url: str,
        status_code: int = 200,
        json: Optional[Any] = None,
        headers: Optional[Dict[str, str]] = None,
        content: Optional[bytes] = None,
    ) -> None:
        """Register a canned response."""
        self.routes[(method.upper(), url)] = lambda request: httpx.Response(
            status_code, json=json, headers=headers, content=content
        )

    def add_handler(self, method: str, url: str, handler: Handler) -> None:
        """Register a callable producing the response."""
        self.routes[(method.upper(), url)] = handler

    def redirect(
        self, method: str, url: str, location: str, status_code: int = 302
    ) -> None:
        """Register a redirect response."""
        self.add(method, url, status_code=status_code, headers={"Location": location})

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self.routes.get((request.method, str(request.url)))
        if route is None:
            return httpx.Response(404, json={"error": "no route"})
        return route(request)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)

    @property
    def urls(self) -> List[str]:
        return [str(request.url) for request in self.requests]


@pytest.fixture
def fake_server() -> FakeSchedulerServer:
    """Fresh fake scheduler per test."""
    return FakeSchedulerServer()


@pytest.fixture
def http_client(fake_server):
    """Plain httpx client bound to the fake scheduler."""
    client = httpx.Client(transport=fake_server.transport, follow_redirects=False)
    try:
        yield client
    finally:
        client.close()
