"""Fachada pública del cliente.

Por qué una fachada:
- Cablea settings, transporte, scheduler, auth y sondeo en un solo objeto.
- Cada `ApiClient` tiene su propia cola: varios clientes (p.ej. en tests)
  no comparten rate-limiting ni credenciales.

Uso típico::

    async with ApiClient() as client:
        client.verify_authentication(token, on_auth)
        client.queue_request(RequestDescriptor(...))
        await client.scheduler.wait_until_drained()
"""

from __future__ import annotations

import asyncio
from collections.abc import Mapping
from typing import Any

from adapters.http_client import HttpxTransport
from adapters.rison import encode_structured_params
from adapters.url_params import parse_url_params
from core.config import AppSettings
from core.domain.errors import TransportError
from core.domain.models import (
    ApiVersion,
    FieldsSpec,
    HttpMethod,
    RequestDescriptor,
    RequestOutcome,
)
from core.interfaces.transport import ApiTransport
from core.services.auth import AuthManager, VerifyCallback
from core.services.queue_status import QueueStatusPoller, StatusCallback
from core.services.scheduler import RequestScheduler


def _ignore(*_args: Any) -> None:
    return None


class ApiClient:
    encode_structured_params = staticmethod(encode_structured_params)
    parse_url_params = staticmethod(parse_url_params)

    def __init__(
        self,
        settings: AppSettings | None = None,
        *,
        transport: ApiTransport | None = None,
    ) -> None:
        self.settings = settings or AppSettings()
        self.transport: ApiTransport = transport or HttpxTransport(self.settings)
        self.scheduler = RequestScheduler(self.transport, self.settings)
        self.auth = AuthManager(self.scheduler)
        self._poller = QueueStatusPoller(self.scheduler)

    @property
    def headers(self) -> dict[str, str]:
        """Headers compartidos (incluye `Authorization` tras un `verify` correcto)."""

        return self.scheduler.auth_headers

    def queue_request(self, descriptor: RequestDescriptor | Mapping[str, Any]) -> asyncio.Future[RequestOutcome]:
        return self.scheduler.enqueue(descriptor)

    def check_queue_active(self, interval_ms: float, callback: StatusCallback) -> asyncio.Task[None] | None:
        return self._poller.check(interval_ms, callback)

    def verify_authentication(
        self, token: str | None, callback: VerifyCallback
    ) -> asyncio.Future[RequestOutcome] | None:
        return self.auth.verify(token, callback)

    async def verify(self, token: str | None) -> tuple[bool, Any]:
        """Variante awaitable de `verify_authentication`: devuelve `(ok, info)`."""

        loop = asyncio.get_running_loop()
        result: asyncio.Future[tuple[bool, Any]] = loop.create_future()

        def _done(ok: bool, info: Any = None) -> None:
            if not result.done():
                result.set_result((ok, info))

        self.auth.verify(token, _done)
        return await result

    async def request(
        self,
        method: HttpMethod | str,
        api_version: ApiVersion | str,
        endpoint: str,
        *,
        params: Mapping[str, Any] | None = None,
        fields: FieldsSpec | None = None,
        data: Any = None,
        authenticated: bool = True,
    ) -> Any:
        """Encola una petición y espera su resultado.

        Devuelve el cuerpo decodificado; lanza `TransportError` si falla.
        """

        outcome = await self.queue_request(
            RequestDescriptor(
                method=method,
                api_version=api_version,
                endpoint=endpoint,
                params=params,
                fields=fields,
                data=data,
                headers=self.headers if authenticated else None,
                on_success=_ignore,
                on_error=_ignore,
            )
        )
        if outcome.ok:
            return outcome.data

        failure = outcome.failure
        if failure is None:
            raise TransportError("error", "request failed")
        raise TransportError(
            failure.status,
            failure.detail,
            response=failure.response,
            status_code=failure.status_code,
        )

    async def aclose(self) -> None:
        await self.scheduler.aclose()

    async def __aenter__(self) -> "ApiClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

