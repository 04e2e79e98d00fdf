"""Pytest configuration and fixtures."""

from typing import AsyncGenerator, Callable, List

import httpx
import pytest
from httpx import ASGITransport, AsyncClient

from flow_connectors.memory.flow_context import InMemoryFlowContext


class MockApi:
    """Records outgoing requests and answers them with a configurable responder."""

    def __init__(self) -> None:
        self.requests: List[httpx.Request] = []
        self._responder: Callable[[httpx.Request], httpx.Response] = (
            lambda request: httpx.Response(200, json={})
        )

    def respond(self, status_code: int = 200, **kwargs) -> None:
        """Answer every request with the same response."""
        self._responder = lambda request: httpx.Response(status_code, **kwargs)

    def respond_with(self, responder: Callable[[httpx.Request], httpx.Response]) -> None:
        self._responder = responder

    def fail(self, message: str = "All connection attempts failed") -> None:
        """Make every request fail at the transport level."""

        def raise_connect_error(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError(message, request=request)

        self._responder = raise_connect_error

    def _handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self._responder(request)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self._handle)

    @property
    def last_request(self) -> httpx.Request:
        return self.requests[-1]


@pytest.fixture
def api() -> MockApi:
    """A mock API standing in for the remote service."""
    return MockApi()


@pytest.fixture
def flow() -> InMemoryFlowContext:
    """An empty in-memory flow context."""
    return InMemoryFlowContext()


@pytest.fixture
async def client() -> AsyncGenerator[AsyncClient, None]:
    """Create an async test client for the HTTP service."""
    from flow_connectors.main import app

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as client:
        yield client
