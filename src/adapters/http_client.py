"""Wrapper de httpx.

Por qué un wrapper:
- Estandariza timeouts, headers (User-Agent, Accept JSON) y el mapeo de
  fallos a `TransportError`.
- Facilita testeo: se puede sustituir por un `httpx.MockTransport` o por
  cualquier objeto que cumpla `ApiTransport`.
"""

from __future__ import annotations

import json as jsonlib
from typing import Any, Mapping

import httpx

from core.config import AppSettings
from core.domain.errors import TransportError


def build_async_client(
    settings: AppSettings | None = None,
    *,
    extra_headers: dict[str, str] | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncClient:
    """Crea un `httpx.AsyncClient` con defaults seguros.

    Por qué un builder:
    - Centraliza timeouts/headers para que todas las peticiones se comporten igual.
    - Permite inyectar un transporte de httpx en tests.
    """

    settings = settings or AppSettings()
    headers: dict[str, str] = {
        "User-Agent": settings.user_agent,
        "Accept": "application/json",
    }
    if extra_headers:
        headers.update(extra_headers)
    return httpx.AsyncClient(
        timeout=httpx.Timeout(settings.http_timeout_seconds),
        follow_redirects=True,
        headers=headers,
        transport=transport,
    )


class HttpxTransport:
    """Implementación de `ApiTransport` sobre `httpx.AsyncClient`.

    Estados de error (mismos textos que jQuery):
    - `timeout`: `httpx.TimeoutException`
    - `error`: status no-2xx (detalle = reason phrase) u otro fallo de red
    - `parsererror`: respuesta 2xx cuyo cuerpo no es JSON
    """

    def __init__(
        self,
        settings: AppSettings | None = None,
        *,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._settings = settings or AppSettings()
        self._client = client or build_async_client(self._settings)

    @property
    def client(self) -> httpx.AsyncClient:
        return self._client

    async def send(
        self,
        method: str,
        url: str,
        *,
        headers: Mapping[str, str],
        json: Any = None,
    ) -> Any:
        request_headers = dict(headers)
        if json is not None:
            request_headers.setdefault("Content-Type", "application/json")

        try:
            response = await self._client.request(
                method,
                url,
                headers=request_headers,
                content=jsonlib.dumps(json) if json is not None else None,
            )
        except httpx.TimeoutException as exc:
            raise TransportError("timeout", str(exc) or "timeout") from exc
        except httpx.HTTPError as exc:
            raise TransportError("error", str(exc) or type(exc).__name__) from exc

        if not response.is_success:
            raise TransportError(
                "error",
                response.reason_phrase,
                response=response,
                status_code=response.status_code,
            )

        try:
            return response.json()
        except ValueError as exc:
            raise TransportError(
                "parsererror",
                str(exc),
                response=response,
                status_code=response.status_code,
            ) from exc

    async def aclose(self) -> None:
        await self._client.aclose()
