"""Pytest fixtures shared across test modules."""

from __future__ import annotations

from typing import Callable, Dict, List, Optional

import httpx
import pytest

from linktitle.engine.types import HttpResponse
from linktitle.services import HttpxNetworkClient


class RecordingClient:
    """NetworkClient double that records calls and replays canned responses."""

    def __init__(self, responses: Optional[Dict[tuple, HttpResponse]] = None) -> None:
        self.responses = responses or {}
        self.calls: List[tuple] = []

    async def request(self, method: str, url: str, headers: Optional[Dict[str, str]] = None) -> HttpResponse:
        self.calls.append((method, url))
        return self.responses.get((method, url), HttpResponse(status=404))


@pytest.fixture()
def recording_client() -> RecordingClient:
    return RecordingClient()


@pytest.fixture()
def mock_network() -> Callable[[Callable[[httpx.Request], httpx.Response]], HttpxNetworkClient]:
    """Build an ``HttpxNetworkClient`` whose requests go to ``handler``."""

    def build(handler: Callable[[httpx.Request], httpx.Response]) -> HttpxNetworkClient:
        return HttpxNetworkClient(transport=httpx.MockTransport(handler))

    return build


@pytest.fixture()
def site() -> Callable[..., Callable[[httpx.Request], httpx.Response]]:
    """Return a handler factory serving pages keyed by URL."""

    def build(pages: Dict[str, str], *, content_type: str = "text/html; charset=utf-8"):
        def handler(request: httpx.Request) -> httpx.Response:
            url = str(request.url)
            body = pages.get(url, pages.get(url.rstrip("/")))
            if body is None:
                return httpx.Response(404)
            headers = {"content-type": content_type}
            if request.method == "HEAD":
                return httpx.Response(200, headers=headers)
            return httpx.Response(200, headers=headers, text=body)

        return handler

    return build


@pytest.fixture()
def anyio_backend() -> str:
    """The async tests drive ``asyncio`` primitives directly."""

    return "asyncio"
