"""Scheduler de peticiones con rate-limiting.

Todas las peticiones pasan por una única cola y se despachan de una en una:
la siguiente solo sale cuando la anterior ha terminado (éxito o error).

Política de rate-limiting:
- Mientras la cola sea poco profunda, los despachos van seguidos.
- En cuanto, al sacar una petición, quedan más de `requests_per_minute`
  en cola, se activa el rate-limiting y cada despacho siguiente espera
  `api_cooldown_ms` tras completar el anterior.
- El flag no se reevalúa a la baja: solo se limpia cuando la cola se vacía.

Ningún fallo cruza la frontera de la cola: los errores de transporte van al
`on_error` del propio descriptor y las excepciones de los callbacks se
registran en el log. La cola avanza siempre.
"""

from __future__ import annotations

import asyncio
import contextlib
import inspect
import logging
from collections.abc import Mapping
from typing import Any, Callable

from adapters.query_string import FieldsEncodingError, build_request_url
from core.config import AppSettings
from core.domain.errors import DescriptorValidationError, TransportError
from core.domain.models import RequestDescriptor, RequestFailure, RequestOutcome
from core.interfaces.transport import ApiTransport
from core.services.request_queue import QueuedRequest, RequestQueue

logger = logging.getLogger(__name__)


class RequestScheduler:
    """Dueño de la cola, los flags de actividad/rate-limiting y los headers compartidos.

    Una instancia por cliente: dos schedulers no comparten estado.
    """

    def __init__(self, transport: ApiTransport, settings: AppSettings | None = None) -> None:
        self._settings = settings or AppSettings()
        self._transport = transport
        self._queue = RequestQueue()
        self._active = False
        self._rate_limiting = False
        self._closed = False
        self._idle = asyncio.Event()
        self._idle.set()
        self._in_flight: asyncio.Task[None] | None = None
        self._current: QueuedRequest | None = None
        self._timer: asyncio.TimerHandle | None = None

        # Mapping compartido por referencia: quien lo pase como `headers`
        # verá la credencial vigente en el momento del despacho.
        self.auth_headers: dict[str, str] = {
            "Authorization": "",
            "Accept": "application/json",
        }

        self.dispatched_count = 0
        self.last_dispatch_at: float | None = None

    @property
    def settings(self) -> AppSettings:
        return self._settings

    @property
    def is_active(self) -> bool:
        return self._active

    @property
    def is_rate_limiting(self) -> bool:
        return self._rate_limiting

    @property
    def pending(self) -> int:
        return len(self._queue)

    @property
    def idle_event(self) -> asyncio.Event:
        return self._idle

    def enqueue(self, descriptor: RequestDescriptor | Mapping[str, Any]) -> asyncio.Future[RequestOutcome]:
        """Añade una petición al final de la cola.

        Si la cola estaba inactiva, la cabeza se despacha ya (sin esperar a
        la siguiente vuelta del loop). Debe llamarse con un event loop en
        marcha. Devuelve un future que se resuelve con `RequestOutcome`
        cuando ya se ha llamado al callback correspondiente.
        """

        if self._closed:
            raise RuntimeError("scheduler is closed")
        if isinstance(descriptor, Mapping):
            descriptor = RequestDescriptor.from_mapping(descriptor)
        elif not isinstance(descriptor, RequestDescriptor):
            raise DescriptorValidationError(
                f"expected RequestDescriptor or mapping, got {type(descriptor).__name__}"
            )

        loop = asyncio.get_running_loop()
        entry = QueuedRequest(descriptor=descriptor, future=loop.create_future())
        self._queue.push(entry)

        if not self._active:
            self._active = True
            self._idle.clear()
            self._dispatch_next()
        return entry.future

    async def wait_until_drained(self) -> None:
        await self._idle.wait()

    def _dispatch_next(self) -> None:
        self._timer = None
        if self._closed:
            return

        if not self._queue:
            if self._rate_limiting:
                logger.info("Request queue drained; rate-limiting released")
            self._active = False
            self._rate_limiting = False
            self._idle.set()
            return

        entry = self._queue.pop()

        if not self._rate_limiting and len(self._queue) > self._settings.requests_per_minute:
            self._rate_limiting = True
            logger.info(
                "Queue depth %d exceeds %d/min; throttling to one request every %d ms",
                len(self._queue),
                self._settings.requests_per_minute,
                self._settings.api_cooldown_ms,
            )

        self._current = entry
        self._in_flight = asyncio.get_running_loop().create_task(self._run(entry))

    async def _run(self, entry: QueuedRequest) -> None:
        descriptor = entry.descriptor

        try:
            url = build_request_url(self._settings.base_url, descriptor)
        except FieldsEncodingError as exc:
            await self._fail(entry, RequestFailure(response=None, status="encodingerror", detail=str(exc)))
        else:
            self.dispatched_count += 1
            self.last_dispatch_at = asyncio.get_running_loop().time()
            logger.debug("Dispatching %s %s (%d queued)", descriptor.method.value, url, len(self._queue))
            try:
                data = await self._transport.send(
                    descriptor.method.value,
                    url,
                    headers=self._outbound_headers(descriptor),
                    json=descriptor.data,
                )
            except TransportError as exc:
                await self._fail(
                    entry,
                    RequestFailure(
                        response=exc.response,
                        status=exc.status,
                        detail=exc.detail,
                        status_code=exc.status_code,
                    ),
                )
            except Exception as exc:
                logger.warning("Transport raised %s for %s", type(exc).__name__, url, exc_info=True)
                await self._fail(entry, RequestFailure(response=None, status="error", detail=str(exc)))
            else:
                await self._succeed(entry, data)

        self._in_flight = None
        self._current = None
        if self._rate_limiting:
            loop = asyncio.get_running_loop()
            self._timer = loop.call_later(self._settings.api_cooldown_seconds, self._dispatch_next)
        else:
            self._dispatch_next()

    @staticmethod
    def _outbound_headers(descriptor: RequestDescriptor) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        if descriptor.headers:
            headers.update(descriptor.headers)
        if not headers.get("Authorization"):
            headers.pop("Authorization", None)
        return headers

    async def _succeed(self, entry: QueuedRequest, data: Any) -> None:
        entry.claim()
        await self._invoke(entry.descriptor.on_success, data)
        entry.resolve(RequestOutcome(ok=True, data=data))

    async def _fail(self, entry: QueuedRequest, failure: RequestFailure) -> None:
        entry.claim()
        await self._invoke(entry.descriptor.on_error, failure.response, failure.status, failure.detail)
        entry.resolve(RequestOutcome(ok=False, failure=failure))

    @staticmethod
    async def _invoke(callback: Callable[..., Any], *args: Any) -> None:
        try:
            result = callback(*args)
            if inspect.isawaitable(result):
                await result
        except Exception:
            logger.exception("Request callback %r raised; the queue continues", callback)

    async def aclose(self) -> None:
        """Detiene el despacho y cierra el transporte.

        La petición en curso se interrumpe y las que siguen en cola no se
        despachan; los futures de ambas se cancelan.
        """

        self._closed = True
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        if self._in_flight is not None and not self._in_flight.done():
            self._in_flight.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._in_flight
        self._in_flight = None
        if self._current is not None:
            self._current.future.cancel()
            self._current = None
        for entry in self._queue:
            entry.future.cancel()
        self._active = False
        self._rate_limiting = False
        self._idle.set()
        await self._transport.aclose()
