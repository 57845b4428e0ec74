from typing import Callable, List

import httpx
import pytest

from gateway.models import RouteConfig, RouteKind
from gateway.proxy import Forwarder
from gateway.routing import RouteTable

UPSTREAM = "http://upstream.test"


class RecordingUpstream:
    """Upstream stand-in served through httpx.MockTransport; records every request."""

    def __init__(self):
        self.requests: List[httpx.Request] = []
        self.responder: Callable[[httpx.Request], httpx.Response] = (
            lambda request: httpx.Response(
                200, text="upstream says hi", headers={"content-type": "text/plain"}
            )
        )

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.responder(request)

    def fail_with(self, exc_type):
        def _raise(request: httpx.Request):
            raise exc_type("upstream unavailable", request=request)

        self.responder = _raise

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]


@pytest.fixture
def upstream() -> RecordingUpstream:
    return RecordingUpstream()


@pytest.fixture
def forwarder(upstream) -> Forwarder:
    return Forwarder(
        timeout=5.0,
        relay_status=False,
        error_status_policy="relay",
        follow_redirects=False,
        transport=upstream.transport,
    )


@pytest.fixture
def public_dir(tmp_path):
    root = tmp_path / "public"
    (root / "img").mkdir(parents=True)
    (root / "logo.png").write_bytes(b"\x89PNG fake")
    (root / "img" / "cat.txt").write_text("meow")
    (root / "index.html").write_text("<h1>home</h1>")
    return root


@pytest.fixture
def route_table(public_dir) -> RouteTable:
    return RouteTable(
        [
            RouteConfig("/api", f"{UPSTREAM}/v1", RouteKind.FORWARD),
            RouteConfig("/assets", str(public_dir), RouteKind.STATIC),
            RouteConfig("/account*", f"{UPSTREAM}/account", RouteKind.FORWARD, secure=True),
            RouteConfig("/vault", str(public_dir), RouteKind.STATIC, secure=True),
        ]
    )
