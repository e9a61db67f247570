"""Pytest configuration and shared fixtures for the STA client tests."""

# Ensure project root on sys.path for imports
import os
import sys
from collections.abc import Callable, Iterator

import httpx
import pytest

root = os.path.dirname(os.path.abspath(__file__))
proj = os.path.abspath(os.path.join(root, ".."))
if proj not in sys.path:
    sys.path.insert(0, proj)

from sta_client.config import STAConfig, set_global_config  # noqa: E402
from sta_client.service import SensorThingsService  # noqa: E402

ENDPOINT = "http://sta.example.org/FROST-Server/v1.1/"

_STA_ENV = ("STA_ENDPOINT", "STA_TIMEOUT", "STA_VERIFY_SSL", "STA_LOG_LEVEL", "STA_LOG_REQUESTS", "STA_LOG_RESPONSES")


class CountingStream(httpx.SyncByteStream):
    """Response body that records how often it was closed."""

    def __init__(self, body: bytes) -> None:
        self.body = body
        self.close_calls = 0

    def __iter__(self) -> Iterator[bytes]:
        yield self.body

    def close(self) -> None:
        self.close_calls += 1


class RecordingServer:
    """MockTransport handler returning one canned response and recording requests."""

    def __init__(
        self,
        status_code: int = 201,
        body: bytes | str = b"[]",
        headers: list[tuple[str, str]] | None = None,
        error: Exception | None = None,
    ) -> None:
        self.status_code = status_code
        self.body = body.encode("utf-8") if isinstance(body, str) else body
        self.headers = headers or []
        self.error = error
        self.requests: list[httpx.Request] = []
        self.streams: list[CountingStream] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        request.read()
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        stream = CountingStream(self.body)
        self.streams.append(stream)
        return httpx.Response(self.status_code, headers=self.headers, stream=stream)


@pytest.fixture(autouse=True)
def clean_sta_env(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    for name in _STA_ENV:
        monkeypatch.delenv(name, raising=False)
    yield
    set_global_config(None)


@pytest.fixture
def make_service() -> Iterator[Callable[..., SensorThingsService]]:
    services: list[SensorThingsService] = []

    def factory(server: RecordingServer, endpoint: str = ENDPOINT, **config_kwargs) -> SensorThingsService:
        config = STAConfig(endpoint=endpoint, **config_kwargs)
        service = SensorThingsService(config=config, transport=httpx.MockTransport(server))
        services.append(service)
        return service

    yield factory
    for service in services:
        service.close()
