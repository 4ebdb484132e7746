"""Contrato del transporte HTTP.

Por qué Protocol:
- El scheduler solo necesita "una llamada asíncrona que devuelve JSON o
  falla"; el cliente httpx real y los transportes falsos de los tests
  cumplen el mismo contrato estructural.
"""

from __future__ import annotations

from typing import Any, Mapping, Protocol, runtime_checkable


@runtime_checkable
class ApiTransport(Protocol):
    """Contrato mínimo de una llamada saliente.

    Reglas de diseño:
    - `send` devuelve el cuerpo ya decodificado desde JSON.
    - Cualquier fallo se reporta como `TransportError` (estado + detalle +
      handle de la respuesta si existe).
    - El timeout es responsabilidad del transporte.
    """

    async def send(
        self,
        method: str,
        url: str,
        *,
        headers: Mapping[str, str],
        json: Any = None,
    ) -> Any:
        """Ejecuta la petición y devuelve el cuerpo decodificado."""

        ...

    async def aclose(self) -> None:
        """Libera conexiones."""

        ...
