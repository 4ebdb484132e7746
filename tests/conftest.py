from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Any, Callable

import pytest

from core.config import AppSettings
from core.domain.models import RequestDescriptor
from core.services.scheduler import RequestScheduler


@dataclass
class SentRequest:
    at: float
    method: str
    url: str
    headers: dict[str, str]
    json: Any


Responder = Callable[[str, str, dict[str, str], Any], Any]


class FakeTransport:
    """Transporte en memoria: registra cada llamada con la hora del loop.

    `responder` devuelve el cuerpo, o una excepción que se lanza.
    """

    def __init__(self, responder: Responder | None = None, *, delay: float = 0.0) -> None:
        self.calls: list[SentRequest] = []
        self.responder = responder or (lambda method, url, headers, json: {"url": url})
        self.delay = delay
        self.closed = False

    async def send(self, method: str, url: str, *, headers, json: Any = None) -> Any:
        loop = asyncio.get_running_loop()
        self.calls.append(SentRequest(loop.time(), method, url, dict(headers), json))
        await asyncio.sleep(self.delay)
        result = self.responder(method, url, dict(headers), json)
        if isinstance(result, BaseException):
            raise result
        return result

    async def aclose(self) -> None:
        self.closed = True


def make_settings(**overrides: Any) -> AppSettings:
    values: dict[str, Any] = {"base_url": "https://api.example.org"}
    values.update(overrides)
    return AppSettings(_env_file=None, **values)


def noop(*_args: Any) -> None:
    return None


def make_descriptor(endpoint: str = "observations", **overrides: Any) -> RequestDescriptor:
    values: dict[str, Any] = {
        "method": "GET",
        "api_version": "v1",
        "endpoint": endpoint,
        "on_success": noop,
        "on_error": noop,
    }
    values.update(overrides)
    return RequestDescriptor(**values)


@pytest.fixture
def settings() -> AppSettings:
    return make_settings()


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def scheduler(transport: FakeTransport, settings: AppSettings) -> RequestScheduler:
    return RequestScheduler(transport, settings)
