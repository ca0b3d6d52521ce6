import httpx
import pytest
from fastapi.testclient import TestClient

from flow_proxy.forwarder import Forwarder


class FakeUpstream:
    """Records outbound requests and answers them with a configurable handler."""

    def __init__(self):
        self.requests: list[httpx.Request] = []
        self._handler = lambda request: httpx.Response(200, json={"ok": True})

    def respond_with(self, status_code=200, **kwargs):
        self._handler = lambda request: httpx.Response(status_code, **kwargs)

    def fail_with(self, exc: Exception):
        def _raise(request):
            raise exc

        self._handler = _raise

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self._handler(request)

    @property
    def last(self) -> httpx.Request:
        assert self.requests, "upstream was never called"
        return self.requests[-1]


@pytest.fixture
def upstream():
    return FakeUpstream()


@pytest.fixture
def forwarder(upstream):
    return Forwarder(transport=httpx.MockTransport(upstream))


@pytest.fixture
def client(forwarder):
    from flow_proxy.routes import get_forwarder
    from flow_proxy.server import app

    app.dependency_overrides[get_forwarder] = lambda: forwarder
    try:
        with TestClient(app) as test_client:
            yield test_client
    finally:
        app.dependency_overrides.pop(get_forwarder, None)
